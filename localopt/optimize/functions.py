"""Objective contracts and capability probing.

An objective must provide ``func(x) -> float``. It may additionally provide

* ``gradient(x, out)``: write the gradient at ``x`` into ``out``,
* ``func_gradient(x, out) -> float``: write the gradient into ``out`` and
  return the function value,
* ``status() -> Status``: report whether the run should stop. Errors are
  reported by raising.

Capabilities are discovered once, by looking for callable attributes, and the
rest of the package works from the resulting :class:`FunctionInfo`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional, Protocol

from .core import Array, Capabilities, Status

FuncFn = Callable[[Array], float]
GradientFn = Callable[[Array, Array], None]
FuncGradientFn = Callable[[Array, Array], float]
StatusFn = Callable[[], Status]


class Function(Protocol):
    def func(self, x: Array) -> float:
        ...


class Gradient(Protocol):
    def gradient(self, x: Array, out: Array) -> None:
        ...


class FunctionGradient(Protocol):
    def func_gradient(self, x: Array, out: Array) -> float:
        ...


class Statuser(Protocol):
    def status(self) -> Status:
        ...


@dataclass(frozen=True)
class Problem:
    """Objective assembled from plain callables.

    Fields left as ``None`` are capabilities the objective does not have.
    When ``dim`` is set, :func:`~localopt.optimize.local.local` rejects
    initial points of a different length.
    """

    func: FuncFn
    gradient: Optional[GradientFn] = None
    func_gradient: Optional[FuncGradientFn] = None
    status: Optional[StatusFn] = None
    dim: Optional[int] = None


@dataclass(frozen=True)
class FunctionInfo:
    """Bound capabilities of an objective, computed once per run."""

    func: Optional[FuncFn]
    gradient: Optional[GradientFn]
    func_gradient: Optional[FuncGradientFn]
    status: Optional[StatusFn]

    @property
    def capabilities(self) -> Capabilities:
        return Capabilities(
            gradient=self.gradient is not None,
            function_gradient=self.func_gradient is not None,
            status=self.status is not None,
        )


def _capability(obj: Any, name: str) -> Optional[Callable[..., Any]]:
    attr = getattr(obj, name, None)
    return attr if callable(attr) else None


def probe(objective: Any) -> FunctionInfo:
    """Inspect ``objective`` and bind the operations it exposes."""
    return FunctionInfo(
        func=_capability(objective, "func"),
        gradient=_capability(objective, "gradient"),
        func_gradient=_capability(objective, "func_gradient"),
        status=_capability(objective, "status"),
    )


def probe_capabilities(objective: Any) -> Capabilities:
    """Return which optional operations ``objective`` exposes."""
    return probe(objective).capabilities


__all__ = [
    "Function",
    "FunctionGradient",
    "FunctionInfo",
    "Gradient",
    "Problem",
    "Statuser",
    "probe",
    "probe_capabilities",
]
