"""Line-search machinery following Nocedal & Wright.

Line searches run in reverse-communication style: instead of calling the
objective they tell the driver which step to evaluate next and are handed
the outcome on the following call. :class:`Linesearch` turns a
:class:`NextDirectioner` (steepest descent, BFGS, ...) and a
:class:`LinesearchMethod` (:class:`Backtracking`, :class:`Bisection`) into a
complete optimization method.
"""

from __future__ import annotations

import math
from typing import Optional, Protocol, Tuple

import numpy as np

from ..logging import get_logger
from .core import Array, Capabilities, EvaluationType, IterationType, Location
from .errors import CapabilityMismatchError, LinesearchError

logger = get_logger(__name__)


def unit_step(gradient: Array) -> float:
    """Step length that moves a distance of one along ``-gradient``."""
    norm = float(np.linalg.norm(gradient))
    return 1.0 / norm if norm > 0 else 1.0


def armijo_condition_met(
    f: float, f0: float, projected_gradient0: float, step: float, c: float
) -> bool:
    """Sufficient decrease: ``f <= f0 + c * step * phi'(0)``."""
    return f <= f0 + c * step * projected_gradient0


def strong_wolfe_conditions_met(
    f: float,
    projected_gradient: float,
    f0: float,
    projected_gradient0: float,
    step: float,
    c1: float,
    c2: float,
) -> bool:
    """Sufficient decrease together with the strong curvature condition."""
    if not armijo_condition_met(f, f0, projected_gradient0, step, c1):
        return False
    return abs(projected_gradient) <= c2 * abs(projected_gradient0)


class LinesearchMethod(Protocol):
    """One-dimensional search along a fixed descent direction.

    ``projected_gradient`` is the directional derivative at the current
    trial step, NaN when the gradient was not evaluated.
    """

    def init(self, f: float, projected_gradient: float, step: float) -> EvaluationType:
        ...

    def iterate(self, f: float, projected_gradient: float) -> Tuple[float, EvaluationType]:
        ...

    def finished(self, f: float, projected_gradient: float) -> bool:
        ...


class NextDirectioner(Protocol):
    """Produces search directions and initial step sizes for :class:`Linesearch`.

    Both methods write the direction into ``direction`` and return the
    initial step size along it.
    """

    def init_direction(self, location: Location, direction: Array) -> float:
        ...

    def next_direction(self, location: Location, direction: Array) -> float:
        ...


class Backtracking:
    """Armijo backtracking using function values only.

    Args:
        rho: Contraction factor applied to the step after each rejection.
        c: Sufficient decrease constant.
        min_step: Smallest step tried before the search gives up.
    """

    def __init__(self, rho: float = 0.5, c: float = 1e-4, min_step: float = 1e-16) -> None:
        if not (0 < c < 1):
            raise ValueError("Armijo constant c must lie in (0, 1)")
        if not (0 < rho < 1):
            raise ValueError("rho must lie in (0, 1)")
        if min_step <= 0:
            raise ValueError("min_step must be positive")
        self.rho = rho
        self.c = c
        self.min_step = min_step
        self._step = math.nan
        self._f0 = math.nan
        self._projected_gradient0 = math.nan

    def init(self, f: float, projected_gradient: float, step: float) -> EvaluationType:
        if step <= 0:
            raise ValueError("initial step must be positive")
        if projected_gradient >= 0:
            raise LinesearchError("search direction must be a descent direction")
        self._step = step
        self._f0 = f
        self._projected_gradient0 = projected_gradient
        return EvaluationType.JUST_FUNCTION

    def finished(self, f: float, projected_gradient: float) -> bool:
        return armijo_condition_met(f, self._f0, self._projected_gradient0, self._step, self.c)

    def iterate(self, f: float, projected_gradient: float) -> Tuple[float, EvaluationType]:
        self._step *= self.rho
        if self._step < self.min_step:
            raise LinesearchError("backtracking step fell below min_step")
        return self._step, EvaluationType.JUST_FUNCTION


class Bisection:
    """Strong Wolfe line search by bracketing followed by bisection.

    The step is doubled until the minimum along the direction is bracketed,
    then the bracket is halved until the strong Wolfe conditions hold.
    """

    def __init__(self, c1: float = 1e-4, c2: float = 0.9) -> None:
        if not (0 < c1 < c2 < 1):
            raise ValueError("Require 0 < c1 < c2 < 1 for Wolfe conditions.")
        self.c1 = c1
        self.c2 = c2
        self._step = math.nan
        self._min_step = 0.0
        self._max_step = math.inf
        self._min_f = math.nan
        self._f0 = math.nan
        self._projected_gradient0 = math.nan

    def init(self, f: float, projected_gradient: float, step: float) -> EvaluationType:
        if step <= 0:
            raise ValueError("initial step must be positive")
        if projected_gradient >= 0:
            raise LinesearchError("search direction must be a descent direction")
        self._step = step
        self._min_step = 0.0
        self._max_step = math.inf
        self._f0 = f
        self._min_f = f
        self._projected_gradient0 = projected_gradient
        return EvaluationType.FUNCTION_AND_GRADIENT

    def finished(self, f: float, projected_gradient: float) -> bool:
        return strong_wolfe_conditions_met(
            f,
            projected_gradient,
            self._f0,
            self._projected_gradient0,
            self._step,
            self.c1,
            self.c2,
        )

    def iterate(self, f: float, projected_gradient: float) -> Tuple[float, EvaluationType]:
        if math.isinf(self._max_step):
            if projected_gradient < 0 and f <= self._min_f:
                # Still descending with no increase: keep expanding.
                self._min_step = self._step
                self._min_f = f
                return self._next(2.0 * self._step)
            self._max_step = self._step
        elif projected_gradient < 0 and f <= self._min_f:
            self._min_step = self._step
            self._min_f = f
        else:
            self._max_step = self._step
        return self._next(0.5 * (self._min_step + self._max_step))

    def _next(self, step: float) -> Tuple[float, EvaluationType]:
        if step == self._step:
            raise LinesearchError("bisection step no longer changes")
        self._step = step
        return step, EvaluationType.FUNCTION_AND_GRADIENT


def _is_complete(location: Location) -> bool:
    if math.isnan(location.f) or location.gradient is None:
        return False
    return not bool(np.isnan(location.gradient).any())


class Linesearch:
    """Optimization method combining a direction rule with a line search.

    Each accepted point starts a major iteration. Trial steps along the
    current direction are minor iterations. When the accepted trial lacks a
    function value or gradient, one more minor evaluation at the same point
    completes it before the next direction is computed.
    """

    def __init__(self, method: LinesearchMethod, next_directioner: NextDirectioner) -> None:
        self.method = method
        self.next_directioner = next_directioner
        self._x0: Optional[Array] = None
        self._direction: Optional[Array] = None
        self._eval_type = EvaluationType.FUNCTION_AND_GRADIENT
        self._completing = False
        self._started = False

    def init(
        self, location: Location, capabilities: Capabilities, x_next: Array
    ) -> Tuple[EvaluationType, IterationType]:
        if not capabilities.any_gradient:
            raise CapabilityMismatchError(
                "line search methods require a gradient",
                EvaluationType.FUNCTION_AND_GRADIENT,
            )
        self._x0 = np.empty(location.dim)
        self._direction = np.empty(location.dim)
        self._started = False
        self._completing = False
        if not _is_complete(location):
            return self._complete(location, x_next)
        return self._start(location, x_next)

    def iterate(self, location: Location, x_next: Array) -> Tuple[EvaluationType, IterationType]:
        if self._completing:
            self._completing = False
            return self._start(location, x_next)

        projected_gradient = math.nan
        if self._eval_type is not EvaluationType.JUST_FUNCTION:
            projected_gradient = float(np.dot(location.gradient, self._direction))

        if self.method.finished(location.f, projected_gradient):
            if self._eval_type is not EvaluationType.FUNCTION_AND_GRADIENT:
                return self._complete(location, x_next)
            return self._start(location, x_next)

        step, self._eval_type = self.method.iterate(location.f, projected_gradient)
        return self._trial(step, x_next), IterationType.MINOR

    def _complete(self, location: Location, x_next: Array) -> Tuple[EvaluationType, IterationType]:
        self._completing = True
        x_next[:] = location.x
        return EvaluationType.FUNCTION_AND_GRADIENT, IterationType.MINOR

    def _start(self, location: Location, x_next: Array) -> Tuple[EvaluationType, IterationType]:
        self._x0[:] = location.x
        if self._started:
            step = self.next_directioner.next_direction(location, self._direction)
        else:
            step = self.next_directioner.init_direction(location, self._direction)
            self._started = True

        projected_gradient = float(np.dot(location.gradient, self._direction))
        if projected_gradient >= 0:
            if not np.any(location.gradient):
                # Stationary point: ask for it again so the driver's
                # convergence check sees a major iteration here.
                self._completing = True
                x_next[:] = location.x
                return EvaluationType.FUNCTION_AND_GRADIENT, IterationType.MAJOR
            raise LinesearchError("search direction is not a descent direction")

        self._eval_type = self.method.init(location.f, projected_gradient, step)
        return self._trial(step, x_next), IterationType.MAJOR

    def _trial(self, step: float, x_next: Array) -> EvaluationType:
        np.add(self._x0, step * self._direction, out=x_next)
        if np.array_equal(x_next, self._x0):
            raise LinesearchError(f"step {step:g} does not move the current point")
        logger.debug("trial step %g along direction", step)
        return self._eval_type


__all__ = [
    "Backtracking",
    "Bisection",
    "Linesearch",
    "LinesearchMethod",
    "NextDirectioner",
    "armijo_condition_met",
    "strong_wolfe_conditions_met",
    "unit_step",
]
