"""Noise models for measurement rows.

A noise model is an immutable vector of per-row standard deviations. A zero
entry marks the row as an exact equality constraint. DiagonalModel covers the
pure-measurement case; ConstrainedModel allows constraints, alone or mixed
with measurements. The factory functions choose between the two.
"""
from __future__ import annotations

from mixedqr.noise.model import ConstrainedModel, DiagonalModel, NoiseModel
from mixedqr.noise.factory import from_precisions, from_sigmas

__all__ = [
    "NoiseModel",
    "DiagonalModel",
    "ConstrainedModel",
    "from_sigmas",
    "from_precisions",
]
