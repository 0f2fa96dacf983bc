"""Progress recorders for optimization runs."""

from __future__ import annotations

import math
import sys
from dataclasses import dataclass, field
from typing import IO, List, Optional, Protocol

from .core import Array, Capabilities, EvaluationType, IterationType, Location, Stats


class Recorder(Protocol):
    """
    Protocol for progress recorders.

    ``init`` is called once before the first evaluation of the run and
    ``record`` once per iteration, before anything else happens in that
    iteration. Raising from either aborts the run.
    """

    def init(self, capabilities: Capabilities) -> None:
        ...

    def record(
        self,
        location: Location,
        eval_type: EvaluationType,
        iter_type: IterationType,
        stats: Stats,
    ) -> None:
        ...


class Printer:
    """
    Recorder writing one table row per iteration to a text stream.

    Args:
        file: File-like object to write to. If None, writes to sys.stdout.
        heading_interval: Number of rows between repeated headers.
    """

    _columns = ("Iter", "Type", "Runtime", "FuncEvals", "GradEvals", "Func", "GradNorm")
    _widths = (6, 22, 10, 10, 10, 14, 12)

    def __init__(self, file: Optional[IO[str]] = None, heading_interval: int = 30) -> None:
        if heading_interval <= 0:
            raise ValueError("heading_interval must be positive.")
        self.file = file
        self.heading_interval = heading_interval
        self._rows = 0
        self._iteration = 0

    def _write(self, text: str) -> None:
        print(text, file=self.file if self.file is not None else sys.stdout)

    def _heading(self) -> str:
        return " ".join(name.rjust(width) for name, width in zip(self._columns, self._widths))

    def init(self, capabilities: Capabilities) -> None:
        self._rows = 0
        self._iteration = 0

    def record(
        self,
        location: Location,
        eval_type: EvaluationType,
        iter_type: IterationType,
        stats: Stats,
    ) -> None:
        if self._rows % self.heading_interval == 0:
            self._write(self._heading())
        if iter_type is IterationType.MAJOR:
            self._iteration += 1
        values = (
            str(self._iteration),
            f"{iter_type.value}/{eval_type.value}",
            f"{stats.runtime:.4g}",
            str(stats.total_function_evaluations),
            str(stats.total_gradient_evaluations),
            f"{location.f:.6e}",
            f"{stats.grad_norm:.4e}",
        )
        self._write(" ".join(value.rjust(width) for value, width in zip(values, self._widths)))
        self._rows += 1


@dataclass
class RecordEntry:
    """Snapshot of the driver state handed to :class:`HistoryRecorder`."""

    x: Array
    f: float
    grad_norm: float
    eval_type: EvaluationType
    iter_type: IterationType
    func_evaluations: int
    grad_evaluations: int
    func_grad_evaluations: int
    runtime: float


@dataclass
class HistoryRecorder:
    """
    Recorder keeping every recorded location in memory.

    Attributes:
        capabilities: Capabilities of the objective, set by ``init``.
        entries: One entry per ``record`` call, in call order.
    """

    capabilities: Optional[Capabilities] = None
    entries: List[RecordEntry] = field(default_factory=list)

    def init(self, capabilities: Capabilities) -> None:
        self.capabilities = capabilities
        self.entries.clear()

    def record(
        self,
        location: Location,
        eval_type: EvaluationType,
        iter_type: IterationType,
        stats: Stats,
    ) -> None:
        self.entries.append(
            RecordEntry(
                x=location.x.copy(),
                f=location.f,
                grad_norm=stats.grad_norm,
                eval_type=eval_type,
                iter_type=iter_type,
                func_evaluations=stats.func_evaluations,
                grad_evaluations=stats.grad_evaluations,
                func_grad_evaluations=stats.func_grad_evaluations,
                runtime=stats.runtime,
            )
        )

    def best_f(self) -> Optional[float]:
        """Lowest recorded function value, ignoring NaN entries."""
        values = [entry.f for entry in self.entries if not math.isnan(entry.f)]
        if not values:
            return None
        return min(values)

    def num_records(self) -> int:
        return len(self.entries)


__all__ = ["HistoryRecorder", "Printer", "RecordEntry", "Recorder"]
