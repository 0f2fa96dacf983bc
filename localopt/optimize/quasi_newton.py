"""Quasi-Newton optimization methods (BFGS and L-BFGS)."""

from __future__ import annotations

from collections import deque
from typing import Deque, Optional, Tuple

import numpy as np

from ..logging import get_logger
from .core import Array, Capabilities, EvaluationType, IterationType, Location
from .line_search import Bisection, Linesearch, LinesearchMethod, unit_step

logger = get_logger(__name__)

# Curvature pairs with s.y below this are not used to update the model.
_CURVATURE_EPS = 1e-12


class _QuasiNewton:
    def __init__(self, linesearch_method: Optional[LinesearchMethod] = None) -> None:
        self.linesearch_method = linesearch_method
        self._linesearch: Optional[Linesearch] = None
        self._x: Optional[Array] = None
        self._grad: Optional[Array] = None

    def init(
        self, location: Location, capabilities: Capabilities, x_next: Array
    ) -> Tuple[EvaluationType, IterationType]:
        if self.linesearch_method is None:
            self.linesearch_method = Bisection()
        self._linesearch = Linesearch(self.linesearch_method, self)
        return self._linesearch.init(location, capabilities, x_next)

    def iterate(self, location: Location, x_next: Array) -> Tuple[EvaluationType, IterationType]:
        return self._linesearch.iterate(location, x_next)

    def _step_pair(self, location: Location) -> Tuple[Array, Array]:
        s = location.x - self._x
        y = location.gradient - self._grad
        self._x[:] = location.x
        self._grad[:] = location.gradient
        return s, y


class BFGS(_QuasiNewton):
    """Full-memory BFGS.

    The inverse Hessian estimate starts as the identity and is rescaled by
    ``s.y / y.y`` after the first step (Nocedal & Wright, eq. 6.20). It costs
    ``O(n^2)`` memory in the problem dimension.

    Args:
        linesearch_method: Line search to use. It should enforce the Wolfe
            conditions. Defaults to :class:`Bisection`.
    """

    def __init__(self, linesearch_method: Optional[LinesearchMethod] = None) -> None:
        super().__init__(linesearch_method)
        self._inv_hessian: Optional[Array] = None
        self._first = True

    def init_direction(self, location: Location, direction: Array) -> float:
        n = location.dim
        self._x = location.x.copy()
        self._grad = location.gradient.copy()
        self._inv_hessian = np.eye(n)
        self._first = True
        np.negative(location.gradient, out=direction)
        return unit_step(location.gradient)

    def next_direction(self, location: Location, direction: Array) -> float:
        s, y = self._step_pair(location)
        ys = float(np.dot(y, s))
        if ys <= _CURVATURE_EPS:
            logger.debug("skipping BFGS update, s.y = %g", ys)
        else:
            n = s.size
            if self._first:
                self._inv_hessian = (ys / float(np.dot(y, y))) * np.eye(n)
                self._first = False
            rho = 1.0 / ys
            identity = np.eye(n)
            outer_sy = np.outer(s, y)
            self._inv_hessian = (
                (identity - rho * outer_sy)
                @ self._inv_hessian
                @ (identity - rho * outer_sy.T)
                + rho * np.outer(s, s)
            )
        np.negative(self._inv_hessian @ location.gradient, out=direction)
        return 1.0


class LBFGS(_QuasiNewton):
    """Limited-memory BFGS using two-loop recursion.

    Only the last ``store`` curvature pairs are kept, giving ``O(store * n)``
    cost per iteration.

    Args:
        linesearch_method: Line search to use. Defaults to :class:`Bisection`.
        store: Number of curvature pairs to keep.
    """

    def __init__(
        self, linesearch_method: Optional[LinesearchMethod] = None, store: int = 15
    ) -> None:
        if store <= 0:
            raise ValueError("Memory parameter store must be positive.")
        super().__init__(linesearch_method)
        self.store = store
        self._s_history: Deque[Array] = deque(maxlen=store)
        self._y_history: Deque[Array] = deque(maxlen=store)
        self._rho_history: Deque[float] = deque(maxlen=store)

    def init_direction(self, location: Location, direction: Array) -> float:
        self._x = location.x.copy()
        self._grad = location.gradient.copy()
        self._s_history = deque(maxlen=self.store)
        self._y_history = deque(maxlen=self.store)
        self._rho_history = deque(maxlen=self.store)
        np.negative(location.gradient, out=direction)
        return unit_step(location.gradient)

    def next_direction(self, location: Location, direction: Array) -> float:
        s, y = self._step_pair(location)
        ys = float(np.dot(y, s))
        if ys > _CURVATURE_EPS:
            self._s_history.append(s)
            self._y_history.append(y)
            self._rho_history.append(1.0 / ys)
        else:
            logger.debug("skipping L-BFGS update, s.y = %g", ys)
        direction[:] = self._two_loop(location.gradient)
        return 1.0

    def _two_loop(self, g: Array) -> Array:
        """Return ``-H g`` for the inverse Hessian implied by the stored pairs."""
        direction = np.array(g, dtype=float)
        n_pairs = len(self._rho_history)
        alphas = np.empty(n_pairs)
        for i in reversed(range(n_pairs)):
            alphas[i] = self._rho_history[i] * float(np.dot(self._s_history[i], direction))
            direction -= alphas[i] * self._y_history[i]

        if n_pairs:
            s, y = self._s_history[-1], self._y_history[-1]
            direction *= float(np.dot(s, y)) / float(np.dot(y, y))

        for i in range(n_pairs):
            beta = self._rho_history[i] * float(np.dot(self._y_history[i], direction))
            direction += (alphas[i] - beta) * self._s_history[i]
        np.negative(direction, out=direction)
        return direction


__all__ = ["BFGS", "LBFGS"]
