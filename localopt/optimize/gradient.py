"""Steepest descent."""

from __future__ import annotations

import math
from typing import Optional, Tuple

import numpy as np

from .core import Array, Capabilities, EvaluationType, IterationType, Location
from .line_search import Backtracking, Linesearch, LinesearchMethod, unit_step


class GradientDescent:
    """Steepest descent with a line search along ``-grad``.

    Between line searches the initial step is chosen by quadratic
    interpolation of the previous decrease (Nocedal & Wright, eq. 3.60),
    capped at 1.

    Args:
        linesearch_method: Line search to use. Defaults to :class:`Backtracking`.
    """

    def __init__(self, linesearch_method: Optional[LinesearchMethod] = None) -> None:
        self.linesearch_method = linesearch_method
        self._linesearch: Optional[Linesearch] = None
        self._f_prev = math.nan

    def init(
        self, location: Location, capabilities: Capabilities, x_next: Array
    ) -> Tuple[EvaluationType, IterationType]:
        if self.linesearch_method is None:
            self.linesearch_method = Backtracking()
        self._linesearch = Linesearch(self.linesearch_method, self)
        return self._linesearch.init(location, capabilities, x_next)

    def iterate(self, location: Location, x_next: Array) -> Tuple[EvaluationType, IterationType]:
        return self._linesearch.iterate(location, x_next)

    def init_direction(self, location: Location, direction: Array) -> float:
        np.negative(location.gradient, out=direction)
        self._f_prev = location.f
        return unit_step(location.gradient)

    def next_direction(self, location: Location, direction: Array) -> float:
        np.negative(location.gradient, out=direction)
        projected_gradient = float(np.dot(location.gradient, direction))
        step = math.nan
        if projected_gradient < 0:
            step = min(1.0, 1.01 * 2.0 * (location.f - self._f_prev) / projected_gradient)
        self._f_prev = location.f
        if not math.isfinite(step) or step <= 0:
            return unit_step(location.gradient)
        return step


__all__ = ["GradientDescent"]
