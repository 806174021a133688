"""Log-domain primitives shared by nodes and edges."""

from __future__ import annotations

from typing import Sequence, Union

import torch

from .errors import InvalidArgument

LogValues = Union[torch.Tensor, Sequence[float]]


def _as_tensor(values: LogValues, dtype=torch.float64) -> torch.Tensor:
    if isinstance(values, torch.Tensor):
        return values
    return torch.tensor(list(values), dtype=dtype)


def log_sum_exp(values: LogValues) -> torch.Tensor:
    """
    Numerically stable log(sum(exp(x))).

    Computed as ``max + log(sum(exp(x - max)))`` so that neither very large
    nor very negative log values overflow or underflow.

    Args:
        values: Non-empty 1-D tensor or sequence of log values

    Returns:
        0-dim tensor holding the log of the sum
    """
    tensor = _as_tensor(values)
    if tensor.numel() == 0:
        raise InvalidArgument("log_sum_exp requires at least one value.")
    max_log = tensor.max()
    if not torch.isfinite(max_log):
        raise InvalidArgument(
            f"log_sum_exp requires a finite maximum, got {max_log.item()}."
        )
    return max_log + torch.log(torch.exp(tensor - max_log).sum())


def normalize_log(values: LogValues) -> torch.Tensor:
    """Return ``values - log_sum_exp(values)`` (sums to one in probability space)."""
    tensor = _as_tensor(values)
    return tensor - log_sum_exp(tensor)

