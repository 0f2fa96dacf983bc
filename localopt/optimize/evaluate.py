"""Dispatch of requested evaluations onto the objective's capabilities."""

from __future__ import annotations

import math
from typing import NamedTuple, Optional

from .core import Array, EvaluationType, Location, Stats
from .errors import CapabilityMismatchError
from .functions import FunctionInfo


class EvaluationCount(NamedTuple):
    """Number of calls made to each capability by one evaluation."""

    func: int = 0
    grad: int = 0
    func_grad: int = 0


def _tally(stats: Optional[Stats], count: EvaluationCount) -> EvaluationCount:
    if stats is not None:
        stats.func_evaluations += count.func
        stats.grad_evaluations += count.grad
        stats.func_grad_evaluations += count.func_grad
    return count


def evaluate(
    info: FunctionInfo,
    eval_type: EvaluationType,
    x_next: Array,
    location: Location,
    stats: Optional[Stats] = None,
) -> EvaluationCount:
    """Evaluate the objective at ``x_next`` and store the outcome in ``location``.

    ``location`` is updated in place. Quantities that are not computed are
    set to NaN so that they never describe a different point. When ``stats``
    is given, each capability call is counted as soon as it returns, so a
    failure in the second call of a two-call evaluation still counts the
    first one.

    Raises:
        CapabilityMismatchError: If no available capability can provide
            ``eval_type``.
    """
    location.x[:] = x_next
    if eval_type is EvaluationType.JUST_FUNCTION:
        location.f = float(info.func(location.x))
        if location.gradient is not None:
            location.gradient.fill(math.nan)
        return _tally(stats, EvaluationCount(func=1))

    if eval_type is EvaluationType.JUST_GRADIENT:
        location.f = math.nan
        if info.gradient is not None:
            info.gradient(location.x, location.gradient)
            return _tally(stats, EvaluationCount(grad=1))
        if info.func_gradient is not None:
            location.f = float(info.func_gradient(location.x, location.gradient))
            return _tally(stats, EvaluationCount(func_grad=1))
        raise CapabilityMismatchError(
            "objective does not support gradient evaluation", eval_type
        )

    if eval_type is EvaluationType.FUNCTION_AND_GRADIENT:
        if info.func_gradient is not None:
            location.f = float(info.func_gradient(location.x, location.gradient))
            return _tally(stats, EvaluationCount(func_grad=1))
        if info.gradient is not None and info.func is not None:
            location.f = float(info.func(location.x))
            _tally(stats, EvaluationCount(func=1))
            info.gradient(location.x, location.gradient)
            _tally(stats, EvaluationCount(grad=1))
            return EvaluationCount(func=1, grad=1)
        raise CapabilityMismatchError(
            "objective does not support function and gradient evaluation",
            eval_type,
        )

    raise ValueError(f"unknown evaluation type {eval_type!r}")


__all__ = ["EvaluationCount", "evaluate"]
