import numpy as np
import pytest
import torch

from localopt.optimize import (
    AutogradObjective,
    Capabilities,
    Settings,
    Status,
    local,
    probe_capabilities,
)


def torch_rosenbrock(params: torch.Tensor) -> torch.Tensor:
    return (1 - params[0]) ** 2 + 100 * (params[1] - params[0] ** 2) ** 2


def test_autograd_objective_capabilities():
    objective = AutogradObjective(lambda p: (p**2).sum())
    assert probe_capabilities(objective) == Capabilities(function_gradient=True)


def test_autograd_objective_values_and_gradient():
    objective = AutogradObjective(lambda p: (p**2).sum())
    x = np.array([1.0, 2.0])
    assert objective.func(x) == 5.0

    out = np.empty(2)
    value = objective.func_gradient(x, out)
    assert value == 5.0
    assert np.allclose(out, [2.0, 4.0])


def test_autograd_objective_rejects_non_scalar():
    objective = AutogradObjective(lambda p: p * 2)
    with pytest.raises(ValueError):
        objective.func(np.array([1.0, 2.0]))
    with pytest.raises(ValueError):
        objective.func_gradient(np.array([1.0, 2.0]), np.empty(2))


def test_autograd_objective_rejects_integer_dtype():
    with pytest.raises(ValueError):
        AutogradObjective(lambda p: p.sum(), dtype=torch.int64)


def test_autograd_objective_random_quadratic(torch_rng):
    a = torch.randn(3, 3, generator=torch_rng, dtype=torch.float64)
    matrix = a @ a.T + torch.eye(3, dtype=torch.float64)
    objective = AutogradObjective(lambda p: p @ matrix @ p)

    x = np.array([0.3, -0.2, 0.5])
    out = np.empty(3)
    objective.func_gradient(x, out)
    expected = 2 * matrix.numpy() @ x
    assert np.allclose(out, expected)


def test_local_with_autograd_objective():
    objective = AutogradObjective(torch_rosenbrock)
    res = local(objective, np.array([-1.2, 1.0]), Settings(max_major_iterations=2000))
    assert res.status is Status.GRADIENT_ABSOLUTE_CONVERGENCE
    assert np.allclose(res.x, np.ones(2), atol=1e-4)
