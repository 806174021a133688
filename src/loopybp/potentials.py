"""
Pairwise compatibility functions in the log domain.

A potential is any callable ``potential(label_a, label_b) -> float`` returning
a log-score. The message update only ever sees the dense table produced by
:func:`potential_table`, so any pairwise model can be substituted.
"""

from __future__ import annotations

import math
from typing import Callable, Hashable, Sequence

import torch

from .errors import InvalidArgument

Potential = Callable[[Hashable, Hashable], float]


def _check_epsilon(epsilon: float) -> float:
    if not 0.0 < epsilon <= 1.0:
        raise InvalidArgument(f"epsilon must be in (0, 1], got {epsilon}")
    return float(epsilon)


def not_equal_potential(epsilon: float = 1e-5) -> Potential:
    """
    Soft "adjacent nodes prefer different labels" constraint.

    Args:
        epsilon: Coupling strength; equal labels score ``log(epsilon)``

    Returns:
        Potential returning ``log(epsilon)`` for equal labels and ``0`` otherwise
    """
    log_eps = math.log(_check_epsilon(epsilon))

    def potential(label_a, label_b) -> float:
        return log_eps if label_a == label_b else 0.0

    return potential


def equal_potential(epsilon: float = 1e-5) -> Potential:
    """Soft agreement constraint: differing labels score ``log(epsilon)``."""
    log_eps = math.log(_check_epsilon(epsilon))

    def potential(label_a, label_b) -> float:
        return 0.0 if label_a == label_b else log_eps

    return potential


def potential_table(
    labels: Sequence[Hashable], potential: Potential, dtype=torch.float64
) -> torch.Tensor:
    """
    Tabulate a potential over a label set.

    Args:
        labels: Ordered label set
        potential: Pairwise log-score function
        dtype: Tensor dtype of the table

    Returns:
        Tensor ``table`` with ``table[i, j] = potential(labels[i], labels[j])``
    """
    rows = [[float(potential(a, b)) for b in labels] for a in labels]
    table = torch.tensor(rows, dtype=dtype).reshape(len(labels), len(labels))
    if torch.isnan(table).any() or torch.isposinf(table).any():
        raise InvalidArgument("potential must return finite values or -inf.")
    dead = [labels[i] for i in range(len(labels)) if not torch.isfinite(table[i]).any()]
    if dead:
        raise InvalidArgument(
            f"potential gives -inf against every label for recipient labels {dead!r}."
        )
    return table
