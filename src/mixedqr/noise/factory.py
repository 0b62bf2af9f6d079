from __future__ import annotations

from typing import Any

from mixedqr.noise.model import ConstrainedModel, DiagonalModel
from mixedqr.sigmas import as_sigma_vector


def from_sigmas(sigmas: Any) -> DiagonalModel:
    """Pick the model class from the sigma vector.

    Any zero sigma gives a ConstrainedModel (pure-constraint or mixed),
    otherwise a DiagonalModel. An empty vector gives a zero-dimensional
    DiagonalModel.
    """
    s = as_sigma_vector(sigmas, mode="sigma", allow_zero=True, check=False)
    if bool((s == 0).any().item()):
        return ConstrainedModel(s)
    return DiagonalModel(s)


def from_precisions(precisions: Any) -> DiagonalModel:
    """Same as from_sigmas, with inf precision mapped to sigma 0."""
    s = as_sigma_vector(precisions, mode="precision", allow_zero=True, check=False)
    return from_sigmas(s)

