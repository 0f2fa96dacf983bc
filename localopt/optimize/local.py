"""Sequential local minimization driver."""

from __future__ import annotations

import math
import time
from dataclasses import replace
from typing import Any, Optional, Type

import numpy as np

from ..logging import get_logger
from .convergence import check_convergence
from .core import (
    Array,
    Capabilities,
    IterationType,
    Location,
    Method,
    Result,
    Settings,
    Stats,
    Status,
    default_settings,
)
from .errors import (
    DimensionMismatchError,
    EmptyInitialPointError,
    InvalidInitialValueError,
    MethodError,
    NoDefaultMethodError,
    ObjectiveError,
    OptimizeError,
    RecorderError,
)
from .evaluate import evaluate
from .functions import FunctionInfo, probe
from .quasi_newton import BFGS
from .utils import normalized_norm

logger = get_logger(__name__)


def local(
    objective: Any,
    x0: Array,
    settings: Optional[Settings] = None,
    method: Optional[Method] = None,
) -> Result:
    """Find a local minimum of ``objective`` starting from ``x0``.

    To maximize a function, minimize its negation.

    Args:
        objective: Object with a ``func(x)`` method and optionally
            ``gradient(x, out)``, ``func_gradient(x, out)`` and ``status()``.
            An integer ``dim`` attribute, when present, must match ``x0``.
            See :mod:`localopt.optimize.functions`.
        x0: Initial point. Must contain at least one parameter.
        settings: Tolerances, limits, initial data and recorder. Defaults to
            :func:`default_settings`.
        method: Optimization method. If None, :class:`BFGS` is used when the
            objective provides gradients.

    Returns:
        Result with the lowest-valued location seen during the run, the final
        statistics and the termination status.

    Raises:
        EmptyInitialPointError, InvalidInitialValueError,
        DimensionMismatchError, NoDefaultMethodError: If the run cannot be
            set up. No evaluation result is attached.
        RecorderError, ObjectiveError, MethodError, CapabilityMismatchError:
            If a collaborator fails during the run. The exception's
            ``result`` holds the best result obtained until then.

    Example:
        >>> import numpy as np
        >>> from localopt.optimize import Problem, local
        >>> def func_gradient(x, out):
        ...     out[:] = 2 * x
        ...     return float(x @ x)
        >>> problem = Problem(func=lambda x: float(x @ x), func_gradient=func_gradient)
        >>> res = local(problem, np.array([5.0, 5.0]))
        >>> res.status.name
        'GRADIENT_ABSOLUTE_CONVERGENCE'
    """
    start_time = time.perf_counter()

    x0 = np.array(x0, dtype=float).ravel()
    if x0.size == 0:
        raise EmptyInitialPointError("initial point has zero length")

    info = probe(objective)
    if info.func is None:
        raise TypeError("objective must provide a callable func(x)")
    dim = getattr(objective, "dim", None)
    if dim is not None and dim != x0.size:
        raise DimensionMismatchError(
            f"initial point has length {x0.size}, objective expects {dim}"
        )
    capabilities = info.capabilities

    if method is None:
        method = _default_method(capabilities)
    if settings is None:
        settings = default_settings()

    stats = Stats()
    location = _initial_location(info, capabilities, x0, settings, stats)
    stats.grad_norm = normalized_norm(location.gradient)
    stats.runtime = time.perf_counter() - start_time
    best = location.copy()

    logger.debug(
        "starting local minimization: dim=%d method=%s capabilities=%s",
        location.dim,
        type(method).__name__,
        capabilities,
    )

    def abort(
        exc: Exception,
        error_cls: Type[OptimizeError],
        message: str,
        status: Status = Status.FAILURE,
    ) -> OptimizeError:
        logger.warning("%s: %s (status=%s)", message, exc, status.name)
        result = _result(best, stats, status, start_time)
        if isinstance(exc, OptimizeError):
            exc.result = result
            return exc
        error = error_cls(f"{message}: {exc}", result=result)
        error.__cause__ = exc
        return error

    recorder = settings.recorder
    if recorder is not None:
        try:
            recorder.init(capabilities)
        except Exception as exc:
            raise abort(
                exc, RecorderError, "recorder failed to initialize", Status.RECORDER_ERROR
            )

    x_next = location.x.copy()
    try:
        eval_type, iter_type = method.init(location.view(), capabilities, x_next)
    except Exception as exc:
        raise abort(exc, MethodError, "method failed to initialize")

    statusers = []
    if info.status is not None:
        statusers.append((info.status, ObjectiveError, "objective status check failed"))
    method_status = getattr(method, "status", None)
    if callable(method_status):
        statusers.append((method_status, MethodError, "method status check failed"))

    while True:
        if recorder is not None:
            try:
                recorder.record(location.view(), eval_type, iter_type, stats)
            except Exception as exc:
                raise abort(
                    exc, RecorderError, "recorder failed to record", Status.RECORDER_ERROR
                )

        status = check_convergence(location, iter_type, stats, settings)
        if status.early_termination:
            break

        for status_fn, error_cls, message in statusers:
            try:
                status = status_fn()
            except Exception as exc:
                raise abort(exc, error_cls, message)
            if not isinstance(status, Status):
                raise abort(
                    TypeError(f"status() returned {status!r}, expected a Status"),
                    error_cls,
                    message,
                )
            if status.early_termination:
                break
        if status.early_termination:
            break

        try:
            evaluate(info, eval_type, x_next, location, stats)
        except Exception as exc:
            raise abort(exc, ObjectiveError, "objective evaluation failed")
        _update(location, best, stats, iter_type, start_time)

        # Methods write into a fresh buffer and never hold the driver's.
        x_next = location.x.copy()
        try:
            eval_type, iter_type = method.iterate(location.view(), x_next)
        except Exception as exc:
            raise abort(exc, MethodError, "method iteration failed")

    result = _result(best, stats, status, start_time)
    logger.info(
        "local minimization finished: status=%s f=%g major_iterations=%d "
        "func_evals=%d grad_evals=%d",
        status.name,
        result.f,
        result.stats.major_iterations,
        result.stats.total_function_evaluations,
        result.stats.total_gradient_evaluations,
    )
    return result


def _default_method(capabilities: Capabilities) -> Method:
    if capabilities.any_gradient:
        return BFGS()
    raise NoDefaultMethodError(
        "no method given and the objective provides no gradient; "
        "gradient-free methods must be supplied explicitly"
    )


def _check_initial_value(f: float) -> None:
    if math.isnan(f):
        raise InvalidInitialValueError("initial function value is NaN")
    if math.isinf(f) and f > 0:
        raise InvalidInitialValueError("initial function value is +inf")


def _initial_location(
    info: FunctionInfo,
    capabilities: Capabilities,
    x0: Array,
    settings: Settings,
    stats: Stats,
) -> Location:
    dim = x0.size
    location = Location(x=x0.copy())
    if capabilities.any_gradient:
        location.gradient = np.full(dim, math.nan)

    if settings.use_initial_data:
        f0 = float(settings.initial_function_value)
        _check_initial_value(f0)
        location.f = f0
        if location.gradient is not None:
            g0 = settings.initial_gradient
            if g0 is None or np.size(g0) != dim:
                size = 0 if g0 is None else np.size(g0)
                raise DimensionMismatchError(
                    f"initial gradient has length {size}, expected {dim}"
                )
            location.gradient[:] = np.asarray(g0, dtype=float).ravel()
        return location

    if info.func_gradient is not None:
        location.f = float(info.func_gradient(location.x, location.gradient))
        stats.func_grad_evaluations += 1
    else:
        location.f = float(info.func(location.x))
        stats.func_evaluations += 1
    _check_initial_value(location.f)
    return location


def _update(
    location: Location,
    best: Location,
    stats: Stats,
    iter_type: IterationType,
    start_time: float,
) -> None:
    if iter_type is IterationType.MAJOR:
        stats.major_iterations += 1
    stats.grad_norm = normalized_norm(location.gradient)
    stats.runtime = time.perf_counter() - start_time
    if location.f < best.f:
        best.copy_from(location)


def _result(best: Location, stats: Stats, status: Status, start_time: float) -> Result:
    stats.runtime = time.perf_counter() - start_time
    return Result(location=best.copy(), stats=replace(stats), status=status)


__all__ = ["local"]
