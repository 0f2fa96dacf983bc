"""Numeric helpers: gradient norms and finite differences.

These utilities avoid any dependency on SciPy and provide deterministic,
pure NumPy implementations suitable for small to medium scale problems.
"""

from __future__ import annotations

import math
from typing import Callable, Optional

import numpy as np

Array = np.ndarray
Objective = Callable[[Array], float]


def normalized_norm(vec: Optional[Array]) -> float:
    """Return ``||vec||_2 / sqrt(len(vec))``, or NaN for a missing vector.

    The normalization makes a tolerance on the result independent of the
    problem dimension.
    """
    if vec is None or vec.size == 0:
        return math.nan
    return float(np.linalg.norm(vec)) / math.sqrt(vec.size)


def approx_grad(
    fun: Objective, x: Array, eps: float = 1e-6, out: Optional[Array] = None
) -> Array:
    """Compute a central-difference gradient approximation.

    Parameters
    ----------
    fun:
        Objective function returning a scalar given x.
    x:
        Point where the gradient is approximated.
    eps:
        Perturbation size for finite differences.
    out:
        Optional buffer receiving the gradient.
    """
    if eps <= 0:
        raise ValueError("eps must be positive")
    x = np.asarray(x, dtype=float)
    grad = np.zeros_like(x) if out is None else out
    point = x.copy()
    for i in range(x.size):
        point[i] = x[i] + eps
        fx_plus = fun(point)
        point[i] = x[i] - eps
        fx_minus = fun(point)
        point[i] = x[i]
        grad[i] = (fx_plus - fx_minus) / (2.0 * eps)
    return grad


def numerical_gradient(fun: Objective, eps: float = 1e-6) -> Callable[[Array, Array], None]:
    """Build a gradient capability ``gradient(x, out)`` from ``fun``.

    Each call costs ``2 * len(x)`` evaluations of ``fun`` that are not seen
    by the driver's evaluation counters.
    """
    if eps <= 0:
        raise ValueError("eps must be positive")

    def gradient(x: Array, out: Array) -> None:
        approx_grad(fun, x, eps=eps, out=out)

    return gradient


__all__ = ["approx_grad", "normalized_norm", "numerical_gradient"]
