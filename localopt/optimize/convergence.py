"""Termination policy of the local optimization driver."""

from __future__ import annotations

from .core import IterationType, Location, Settings, Stats, Status


def check_convergence(
    location: Location,
    iter_type: IterationType,
    stats: Stats,
    settings: Settings,
) -> Status:
    """Return the termination status for the current state of a run.

    Tolerances and the iteration limit apply only to major iterations;
    evaluation and runtime limits apply to every iteration. The first
    matching criterion wins, in the order below.
    """
    major = iter_type is IterationType.MAJOR

    if major and location.gradient is not None:
        if stats.grad_norm <= settings.gradient_absolute_tolerance:
            return Status.GRADIENT_ABSOLUTE_CONVERGENCE

    # Compares the current value against the tolerance itself, not against
    # the best value found so far.
    if major and location.f < settings.function_absolute_tolerance:
        return Status.FUNCTION_ABSOLUTE_CONVERGENCE

    if settings.max_function_evaluations > 0:
        if stats.total_function_evaluations > settings.max_function_evaluations:
            return Status.FUNCTION_EVALUATION_LIMIT

    if settings.max_gradient_evaluations > 0:
        if stats.total_gradient_evaluations > settings.max_gradient_evaluations:
            return Status.GRADIENT_EVALUATION_LIMIT

    if settings.max_runtime > 0:
        if stats.runtime > settings.max_runtime:
            return Status.RUNTIME_LIMIT

    if major and settings.max_major_iterations > 0:
        if stats.major_iterations >= settings.max_major_iterations:
            return Status.ITERATION_LIMIT

    return Status.NOT_TERMINATED


__all__ = ["check_convergence"]
