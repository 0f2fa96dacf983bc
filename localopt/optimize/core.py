"""Core types shared by the local optimization driver and its methods."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Optional, Protocol, Tuple

import numpy as np

if TYPE_CHECKING:
    from .recorder import Recorder

Array = np.ndarray

DEFAULT_GRADIENT_ABSOLUTE_TOLERANCE = 1e-6


class EvaluationType(Enum):
    """Which quantities a Method asks the driver to compute next."""

    JUST_FUNCTION = "just_function"
    JUST_GRADIENT = "just_gradient"
    FUNCTION_AND_GRADIENT = "function_and_gradient"


class IterationType(Enum):
    """Whether a requested evaluation starts a major iteration."""

    MAJOR = "major"
    MINOR = "minor"


class Status(Enum):
    """Termination status of an optimization run."""

    NOT_TERMINATED = "not_terminated"
    GRADIENT_ABSOLUTE_CONVERGENCE = "gradient_absolute_convergence"
    FUNCTION_ABSOLUTE_CONVERGENCE = "function_absolute_convergence"
    METHOD_CONVERGE = "method_converge"
    FUNCTION_EVALUATION_LIMIT = "function_evaluation_limit"
    GRADIENT_EVALUATION_LIMIT = "gradient_evaluation_limit"
    RUNTIME_LIMIT = "runtime_limit"
    ITERATION_LIMIT = "iteration_limit"
    RECORDER_ERROR = "recorder_error"
    FAILURE = "failure"

    @property
    def early_termination(self) -> bool:
        return self is not Status.NOT_TERMINATED

    @property
    def converged(self) -> bool:
        return self in (
            Status.GRADIENT_ABSOLUTE_CONVERGENCE,
            Status.FUNCTION_ABSOLUTE_CONVERGENCE,
            Status.METHOD_CONVERGE,
        )


@dataclass(frozen=True)
class Capabilities:
    """Optional operations exposed by an objective besides ``func``."""

    gradient: bool = False
    function_gradient: bool = False
    status: bool = False

    @property
    def any_gradient(self) -> bool:
        return self.gradient or self.function_gradient


@dataclass(eq=False)
class Location:
    """A trial point together with what is known about it.

    ``gradient`` is ``None`` when the objective cannot produce gradients.
    Entries that do not correspond to ``x`` are NaN.
    """

    x: Array
    f: float = math.nan
    gradient: Optional[Array] = None

    def copy(self) -> "Location":
        return Location(
            x=self.x.copy(),
            f=self.f,
            gradient=None if self.gradient is None else self.gradient.copy(),
        )

    def copy_from(self, other: "Location") -> None:
        """Overwrite this location in place with the contents of ``other``."""
        self.x[:] = other.x
        self.f = other.f
        if other.gradient is None:
            self.gradient = None
        elif self.gradient is None or self.gradient.shape != other.gradient.shape:
            self.gradient = other.gradient.copy()
        else:
            self.gradient[:] = other.gradient

    def view(self) -> "Location":
        """Return a location sharing memory with this one but not writeable."""
        x = self.x.view()
        x.flags.writeable = False
        gradient = None
        if self.gradient is not None:
            gradient = self.gradient.view()
            gradient.flags.writeable = False
        return Location(x=x, f=self.f, gradient=gradient)

    @property
    def dim(self) -> int:
        return int(self.x.size)


@dataclass
class Stats:
    """Counters accumulated by the driver during a run.

    Attributes:
        func_evaluations: Calls to ``func``.
        grad_evaluations: Calls to ``gradient``.
        func_grad_evaluations: Calls to ``func_gradient``.
        major_iterations: Evaluations requested as major iterations.
        grad_norm: ``||g||_2 / sqrt(dim)`` of the last known gradient, NaN
            when no gradient is available.
        runtime: Wall-clock seconds since the run started.
    """

    func_evaluations: int = 0
    grad_evaluations: int = 0
    func_grad_evaluations: int = 0
    major_iterations: int = 0
    grad_norm: float = math.nan
    runtime: float = 0.0

    @property
    def total_function_evaluations(self) -> int:
        return self.func_evaluations + self.func_grad_evaluations

    @property
    def total_gradient_evaluations(self) -> int:
        return self.grad_evaluations + self.func_grad_evaluations


@dataclass(frozen=True)
class Settings:
    """
    Configuration of a single optimization run.

    Evaluation and runtime limits are checked at every iteration, the
    tolerances and the iteration limit only at major iterations. A limit of
    zero disables it.

    Args:
        gradient_absolute_tolerance: Converge when the normalized gradient
            norm is at most this value.
        function_absolute_tolerance: Converge when the function value is
            strictly below this value.
        max_function_evaluations: Limit on calls to ``func`` plus
            ``func_gradient``.
        max_gradient_evaluations: Limit on calls to ``gradient`` plus
            ``func_gradient``.
        max_runtime: Limit on wall-clock seconds.
        max_major_iterations: Limit on major iterations.
        use_initial_data: Use ``initial_function_value`` and
            ``initial_gradient`` instead of evaluating the starting point.
        initial_function_value: Objective value at the starting point.
        initial_gradient: Gradient at the starting point.
        recorder: Optional progress recorder.
    """

    gradient_absolute_tolerance: float = DEFAULT_GRADIENT_ABSOLUTE_TOLERANCE
    function_absolute_tolerance: float = -math.inf
    max_function_evaluations: int = 0
    max_gradient_evaluations: int = 0
    max_runtime: float = 0.0
    max_major_iterations: int = 0
    use_initial_data: bool = False
    initial_function_value: float = math.nan
    initial_gradient: Optional[Array] = field(default=None, compare=False)
    recorder: Optional["Recorder"] = field(default=None, compare=False)

    def __post_init__(self) -> None:
        for name in (
            "max_function_evaluations",
            "max_gradient_evaluations",
            "max_major_iterations",
        ):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative.")
        if self.max_runtime < 0:
            raise ValueError("max_runtime must be non-negative.")


def default_settings() -> Settings:
    """Return the default run configuration."""
    return Settings()


@dataclass
class Result:
    """Outcome of a run: best location found, final stats and status."""

    location: Location
    stats: Stats
    status: Status

    @property
    def x(self) -> Array:
        return self.location.x

    @property
    def f(self) -> float:
        return self.location.f

    @property
    def gradient(self) -> Optional[Array]:
        return self.location.gradient


class Method(Protocol):
    """Contract implemented by every optimization method.

    ``init`` and ``iterate`` write the next candidate point into ``x_next``
    and return the requested evaluation and iteration types. The location
    passed in is read-only and must not be retained across calls. Errors are
    reported by raising. A method may additionally define ``status()``.
    """

    def init(
        self, location: Location, capabilities: Capabilities, x_next: Array
    ) -> Tuple[EvaluationType, IterationType]:
        ...

    def iterate(
        self, location: Location, x_next: Array
    ) -> Tuple[EvaluationType, IterationType]:
        ...


__all__ = [
    "Array",
    "Capabilities",
    "DEFAULT_GRADIENT_ABSOLUTE_TOLERANCE",
    "EvaluationType",
    "IterationType",
    "Location",
    "Method",
    "Result",
    "Settings",
    "Stats",
    "Status",
    "default_settings",
]
