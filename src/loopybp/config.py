"""Configuration for graph construction and inference."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import torch

from .errors import InvalidArgument

PRIOR_POLICIES = ("random", "uniform")


@dataclass(frozen=True)
class BPConfig:
    """
    Tunable constants of the engine.

    Attributes:
        epsilon: Coupling constant of the default not-equal potential
        evidence_floor: Probability substituted for absent or zero evidence
        prior: Initial node prior, ``"random"`` (log of uniform draws, then
            normalized) or ``"uniform"``
        seed: Seed for the random prior generator (None = nondeterministic)
        dtype: Floating point dtype for every log-probability tensor
    """

    epsilon: float = 1e-5
    evidence_floor: float = 1e-6
    prior: str = "random"
    seed: Optional[int] = None
    dtype: torch.dtype = torch.float64

    def validate(self) -> "BPConfig":
        if not 0.0 < self.epsilon <= 1.0:
            raise InvalidArgument(f"epsilon must be in (0, 1], got {self.epsilon}")
        if not 0.0 < self.evidence_floor < 1.0:
            raise InvalidArgument(
                f"evidence_floor must be in (0, 1), got {self.evidence_floor}"
            )
        if self.prior not in PRIOR_POLICIES:
            raise InvalidArgument(
                f"Unknown prior policy: {self.prior!r}. Expected one of {PRIOR_POLICIES}."
            )
        if not self.dtype.is_floating_point:
            raise InvalidArgument(f"dtype must be a floating point type, got {self.dtype}")
        return self

    def make_generator(self) -> Optional[torch.Generator]:
        """Return a seeded generator, or None to use torch's global RNG."""
        if self.seed is None:
            return None
        generator = torch.Generator()
        generator.manual_seed(self.seed)
        return generator
