"""Objectives backed by PyTorch autograd."""

from __future__ import annotations

from typing import Callable

import numpy as np
import torch

from .core import Array

TorchObjectiveFn = Callable[[torch.Tensor], torch.Tensor]


class AutogradObjective:
    """
    Objective exposing ``func`` and ``func_gradient`` for a PyTorch function.

    The wrapped function takes a 1D tensor of parameters and returns a scalar
    tensor. Gradients are obtained with a single backward pass, so the
    combined capability costs one forward and one backward evaluation.

    Args:
        fn: Differentiable scalar function of a 1D tensor.
        dtype: Floating dtype used for the parameter tensor.
    """

    def __init__(self, fn: TorchObjectiveFn, dtype: torch.dtype = torch.float64) -> None:
        if not dtype.is_floating_point:
            raise ValueError(f"dtype must be a floating point dtype, got {dtype}")
        self.fn = fn
        self.dtype = dtype

    def _value(self, params: torch.Tensor) -> torch.Tensor:
        value = self.fn(params)
        if value.ndim != 0:
            raise ValueError(
                f"objective must return a scalar tensor (0D), got shape {tuple(value.shape)}"
            )
        return value

    def func(self, x: Array) -> float:
        with torch.no_grad():
            params = torch.as_tensor(np.asarray(x), dtype=self.dtype)
            return float(self._value(params).item())

    def func_gradient(self, x: Array, out: Array) -> float:
        params = torch.as_tensor(np.asarray(x), dtype=self.dtype).clone().requires_grad_(True)
        value = self._value(params)
        value.backward()

        grad = params.grad
        if grad is None:
            raise RuntimeError("Autograd did not produce gradients for params.")
        out[:] = grad.detach().cpu().numpy()
        return float(value.detach().item())


__all__ = ["AutogradObjective"]
