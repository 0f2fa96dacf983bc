"""Sequential local minimization with pluggable methods.

Example
-------
>>> import numpy as np
>>> from localopt.optimize import Problem, Settings, local
>>> def rosen(x):
...     return (1 - x[0])**2 + 100 * (x[1] - x[0]**2)**2
>>> def rosen_grad(x, out):
...     out[0] = -2 * (1 - x[0]) - 400 * x[0] * (x[1] - x[0] ** 2)
...     out[1] = 200 * (x[1] - x[0] ** 2)
>>> problem = Problem(func=rosen, gradient=rosen_grad, dim=2)
>>> res = local(problem, np.array([-1.2, 1.0]), Settings(gradient_absolute_tolerance=1e-8))
>>> bool(np.allclose(res.x, [1.0, 1.0], atol=1e-4))
True
"""

from .autograd import AutogradObjective
from .convergence import check_convergence
from .core import (
    Capabilities,
    EvaluationType,
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
    CapabilityMismatchError,
    DimensionMismatchError,
    EmptyInitialPointError,
    InvalidInitialValueError,
    LinesearchError,
    MethodError,
    NoDefaultMethodError,
    ObjectiveError,
    OptimizeError,
    RecorderError,
)
from .evaluate import EvaluationCount, evaluate
from .functions import FunctionInfo, Problem, probe, probe_capabilities
from .gradient import GradientDescent
from .line_search import (
    Backtracking,
    Bisection,
    Linesearch,
    armijo_condition_met,
    strong_wolfe_conditions_met,
)
from .local import local
from .quasi_newton import BFGS, LBFGS
from .recorder import HistoryRecorder, Printer, RecordEntry, Recorder
from .utils import approx_grad, normalized_norm, numerical_gradient

__all__ = [
    # Driver
    "local",
    "check_convergence",
    "evaluate",
    "EvaluationCount",
    # Data model
    "Capabilities",
    "EvaluationType",
    "IterationType",
    "Location",
    "Method",
    "Result",
    "Settings",
    "Stats",
    "Status",
    "default_settings",
    # Objectives
    "AutogradObjective",
    "FunctionInfo",
    "Problem",
    "probe",
    "probe_capabilities",
    # Methods
    "BFGS",
    "LBFGS",
    "GradientDescent",
    "Linesearch",
    "Backtracking",
    "Bisection",
    "armijo_condition_met",
    "strong_wolfe_conditions_met",
    # Recorders
    "Recorder",
    "Printer",
    "HistoryRecorder",
    "RecordEntry",
    # Utilities
    "approx_grad",
    "normalized_norm",
    "numerical_gradient",
    # Errors
    "OptimizeError",
    "EmptyInitialPointError",
    "InvalidInitialValueError",
    "DimensionMismatchError",
    "NoDefaultMethodError",
    "CapabilityMismatchError",
    "RecorderError",
    "ObjectiveError",
    "MethodError",
    "LinesearchError",
]
