"""localopt - sequential local minimization driver with pluggable methods."""

__version__ = "0.1.0"

from .logging import configure_logging, get_logger, set_log_level
from .optimize import (
    BFGS,
    LBFGS,
    AutogradObjective,
    Backtracking,
    Bisection,
    Capabilities,
    EvaluationType,
    GradientDescent,
    HistoryRecorder,
    IterationType,
    Location,
    OptimizeError,
    Printer,
    Problem,
    Result,
    Settings,
    Stats,
    Status,
    default_settings,
    local,
    numerical_gradient,
)

__all__ = [
    # Version
    "__version__",
    # Driver
    "local",
    "Settings",
    "default_settings",
    "Result",
    "Stats",
    "Location",
    "Status",
    "Capabilities",
    "EvaluationType",
    "IterationType",
    "OptimizeError",
    # Objectives
    "Problem",
    "AutogradObjective",
    "numerical_gradient",
    # Methods
    "BFGS",
    "LBFGS",
    "GradientDescent",
    "Backtracking",
    "Bisection",
    # Recorders
    "Printer",
    "HistoryRecorder",
    # Logging
    "get_logger",
    "set_log_level",
    "configure_logging",
]
