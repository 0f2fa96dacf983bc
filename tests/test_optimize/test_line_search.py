import math

import numpy as np
import pytest

from localopt.optimize import (
    Backtracking,
    Bisection,
    Capabilities,
    CapabilityMismatchError,
    EvaluationType,
    IterationType,
    Linesearch,
    LinesearchError,
    Location,
    armijo_condition_met,
    strong_wolfe_conditions_met,
)

GRADIENT_CAPS = Capabilities(function_gradient=True)


def phi(step: float) -> float:
    return (step - 1.0) ** 2


def dphi(step: float) -> float:
    return 2.0 * (step - 1.0)


class SteepestDirection:
    def __init__(self, sign: float = -1.0):
        self.sign = sign
        self.calls = []

    def init_direction(self, location, direction):
        self.calls.append("init")
        direction[:] = self.sign * location.gradient
        return 1.0

    def next_direction(self, location, direction):
        self.calls.append("next")
        direction[:] = self.sign * location.gradient
        return 1.0


def test_armijo_condition():
    assert armijo_condition_met(0.5, 1.0, -2.0, 1.0, 1e-4)
    assert not armijo_condition_met(1.0, 1.0, -2.0, 1.0, 1e-4)


def test_strong_wolfe_conditions():
    assert strong_wolfe_conditions_met(0.0, 0.0, 1.0, -2.0, 1.0, 1e-4, 0.9)
    # Sufficient decrease but the slope is still too steep.
    assert not strong_wolfe_conditions_met(0.5, -1.9, 1.0, -2.0, 0.1, 1e-4, 0.9)
    # Flat slope but no decrease.
    assert not strong_wolfe_conditions_met(2.0, 0.0, 1.0, -2.0, 1.0, 1e-4, 0.9)


def test_backtracking_shrinks_until_armijo():
    search = Backtracking(rho=0.5)
    assert search.init(phi(0.0), dphi(0.0), 4.0) is EvaluationType.JUST_FUNCTION
    assert not search.finished(phi(4.0), math.nan)

    step, eval_type = search.iterate(phi(4.0), math.nan)
    assert step == 2.0
    assert eval_type is EvaluationType.JUST_FUNCTION
    assert not search.finished(phi(2.0), math.nan)

    step, _ = search.iterate(phi(2.0), math.nan)
    assert step == 1.0
    assert search.finished(phi(1.0), math.nan)


def test_backtracking_gives_up_below_min_step():
    search = Backtracking(min_step=0.3)
    search.init(1.0, -1.0, 1.0)
    search.iterate(2.0, math.nan)
    with pytest.raises(LinesearchError):
        search.iterate(2.0, math.nan)


def test_backtracking_rejects_ascent_direction():
    with pytest.raises(LinesearchError):
        Backtracking().init(1.0, 0.5, 1.0)


def test_backtracking_raises_on_invalid_params():
    with pytest.raises(ValueError):
        Backtracking(c=1.5)
    with pytest.raises(ValueError):
        Backtracking(rho=1.1)
    with pytest.raises(ValueError):
        Backtracking(min_step=0.0)
    with pytest.raises(ValueError):
        Backtracking().init(1.0, -1.0, 0.0)


def test_bisection_expands_then_accepts():
    search = Bisection(c2=0.1)
    assert search.init(phi(0.0), dphi(0.0), 0.25) is EvaluationType.FUNCTION_AND_GRADIENT
    steps = [0.25]
    while not search.finished(phi(steps[-1]), dphi(steps[-1])):
        step, eval_type = search.iterate(phi(steps[-1]), dphi(steps[-1]))
        assert eval_type is EvaluationType.FUNCTION_AND_GRADIENT
        steps.append(step)
    assert steps == [0.25, 0.5, 1.0]


def test_bisection_brackets_overshoot():
    search = Bisection()
    search.init(phi(0.0), dphi(0.0), 4.0)
    steps = [4.0]
    while not search.finished(phi(steps[-1]), dphi(steps[-1])):
        step, _ = search.iterate(phi(steps[-1]), dphi(steps[-1]))
        steps.append(step)
    assert steps == [4.0, 2.0, 1.0]


def test_bisection_wolfe_on_rosenbrock_direction():
    def rosen(x):
        return (1 - x[0]) ** 2 + 100 * (x[1] - x[0] ** 2) ** 2

    def rosen_grad(x):
        return np.array(
            [
                -2 * (1 - x[0]) - 400 * x[0] * (x[1] - x[0] ** 2),
                200 * (x[1] - x[0] ** 2),
            ]
        )

    x = np.array([-1.2, 1.0])
    direction = -rosen_grad(x)
    pg0 = float(rosen_grad(x) @ direction)
    search = Bisection()
    step = 5.0
    search.init(rosen(x), pg0, step)
    for _ in range(100):
        trial = x + step * direction
        f, pg = rosen(trial), float(rosen_grad(trial) @ direction)
        if search.finished(f, pg):
            break
        step, _ = search.iterate(f, pg)
    else:
        pytest.fail("bisection did not terminate")
    assert step < 5.0
    assert strong_wolfe_conditions_met(f, pg, rosen(x), pg0, step, 1e-4, 0.9)


def test_bisection_invalid_constants():
    with pytest.raises(ValueError):
        Bisection(c1=0.5, c2=0.1)
    with pytest.raises(ValueError):
        Bisection(c1=0.0)


def test_linesearch_requires_gradient():
    search = Linesearch(Backtracking(), SteepestDirection())
    location = Location(x=np.array([1.0]), f=1.0)
    with pytest.raises(CapabilityMismatchError):
        search.init(location, Capabilities(), np.array([1.0]))


def test_linesearch_completes_incomplete_start():
    directioner = SteepestDirection()
    search = Linesearch(Backtracking(), directioner)
    location = Location(x=np.array([1.0]), f=1.0, gradient=np.array([math.nan]))
    x_next = np.array([1.0])

    request = search.init(location, GRADIENT_CAPS, x_next)
    assert request == (EvaluationType.FUNCTION_AND_GRADIENT, IterationType.MINOR)
    assert np.array_equal(x_next, [1.0])
    assert directioner.calls == []

    location.gradient[:] = 2.0
    request = search.iterate(location, x_next)
    assert request == (EvaluationType.JUST_FUNCTION, IterationType.MAJOR)
    assert np.array_equal(x_next, [-1.0])
    assert directioner.calls == ["init"]


def test_linesearch_reverse_communication_with_backtracking():
    # Minimizes x**2 from x = 1 along the negative gradient.
    directioner = SteepestDirection()
    search = Linesearch(Backtracking(), directioner)
    location = Location(x=np.array([1.0]), f=1.0, gradient=np.array([2.0]))
    x_next = np.empty(1)

    assert search.init(location, GRADIENT_CAPS, x_next) == (
        EvaluationType.JUST_FUNCTION,
        IterationType.MAJOR,
    )
    assert np.array_equal(x_next, [-1.0])

    # Trial at -1 gives no decrease: halve the step.
    location = Location(x=np.array([-1.0]), f=1.0, gradient=np.array([math.nan]))
    assert search.iterate(location, x_next) == (EvaluationType.JUST_FUNCTION, IterationType.MINOR)
    assert np.array_equal(x_next, [0.0])

    # Accepted without a gradient: complete the point before moving on.
    location = Location(x=np.array([0.0]), f=0.0, gradient=np.array([math.nan]))
    assert search.iterate(location, x_next) == (
        EvaluationType.FUNCTION_AND_GRADIENT,
        IterationType.MINOR,
    )
    assert np.array_equal(x_next, [0.0])

    # Zero gradient: the point is resubmitted as a major iteration.
    location = Location(x=np.array([0.0]), f=0.0, gradient=np.array([0.0]))
    assert search.iterate(location, x_next) == (
        EvaluationType.FUNCTION_AND_GRADIENT,
        IterationType.MAJOR,
    )
    assert np.array_equal(x_next, [0.0])
    assert directioner.calls == ["init", "next"]


def test_linesearch_rejects_ascent_direction():
    search = Linesearch(Backtracking(), SteepestDirection(sign=1.0))
    location = Location(x=np.array([1.0]), f=1.0, gradient=np.array([2.0]))
    with pytest.raises(LinesearchError):
        search.init(location, GRADIENT_CAPS, np.empty(1))
