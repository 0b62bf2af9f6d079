# src/mixedqr/linalg/eliminate.py
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Sequence

import torch

from mixedqr.exceptions import (
    InfeasibleConstraintError,
    InvalidSigmasError,
    InvalidMatrixError,
    NotSupportedError,
    ShapeError,
)
from mixedqr.linalg.givens import rotate
from mixedqr.noise.factory import from_sigmas
from mixedqr.noise.model import DiagonalModel
from mixedqr.typing import as_augmented

DEFAULT_TOL = 1e-9


@dataclass(frozen=True)
class EliminationResult:
    """Outcome of one constrained elimination.

    pivots holds (column, original row) pairs in output row order.
    """

    model: DiagonalModel
    rank: int
    pivots: list[tuple[int, int]] = field(default_factory=list)
    infeasible_rows: list[int] = field(default_factory=list)


def _select_pivot(candidates: Sequence[int], mags: Sequence[float], constrained: Sequence[bool]) -> int:
    # constraints first, then largest magnitude
    pool = [i for i in candidates if constrained[i]] or list(candidates)
    return max(pool, key=lambda i: mags[i])


def eliminate(
    Ab: Any,
    model: DiagonalModel,
    *,
    tol: float = DEFAULT_TOL,
    raise_infeasible: bool = True,
) -> EliminationResult:
    """
    Constrained QR elimination of an augmented system, in place.

    Inputs
    - Ab: (m,n+1) torch.Tensor or numpy.ndarray, last column is the rhs.
          Mutated in place; the caller must hold exclusive access to it.
    - model: noise model of dimension m (sigma == 0 marks a constraint)
    - tol: entries with |x| <= tol are treated as zero

    On return the first `rank` rows of Ab are in row-echelon form with strictly
    increasing pivot columns. Measurement rows have a unit leading coefficient
    and carry the combined sigma of every row folded into them; constraint rows
    are kept exact. Remaining rows are zero, except the rhs of constraints that
    reduced to 0 = r, which are listed in `infeasible_rows` (and raise
    InfeasibleConstraintError unless raise_infeasible=False).
    """
    if not isinstance(model, DiagonalModel):
        raise NotSupportedError(f"model must be a DiagonalModel or ConstrainedModel. Got {type(model).__name__}")
    A = as_augmented(Ab)
    m, n1 = A.shape
    n = n1 - 1
    if model.dim != m:
        raise ShapeError(f"Noise model has dimension {model.dim} but Ab has {m} rows.")
    tol = float(tol)
    if not math.isfinite(tol) or tol < 0.0:
        raise ValueError(f"tol must be finite and non-negative. Got {tol}")
    if not torch.isfinite(A).all():
        raise InvalidMatrixError("Augmented matrix contains inf/nan")

    sigmas = model.sigmas.to(dtype=torch.float64)
    constrained = (sigmas == 0).tolist()
    # row magnitude = whitened magnitude * unit, so tol applies to unscaled entries
    unit = torch.where(sigmas == 0, torch.ones_like(sigmas), sigmas).tolist()

    # whiten measurements, constraints stay unscaled
    scale = torch.where(sigmas == 0, torch.ones_like(sigmas), 1.0 / sigmas)
    scale = scale.to(dtype=A.dtype, device=A.device)
    if not torch.isfinite(scale).all():
        raise InvalidSigmasError(f"1/sigma overflows {A.dtype}; use a wider dtype for Ab")
    A.mul_(scale.view(-1, 1))

    assigned = [False] * m
    pivots: list[tuple[int, int]] = []

    for j in range(n):
        if len(pivots) == m:
            break

        mags = A[:, j].abs().tolist()
        candidates = []
        for i in range(m):
            if assigned[i]:
                continue
            if mags[i] * unit[i] > tol:
                candidates.append(i)
            elif mags[i] != 0.0:
                A[i, j] = 0.0
        if not candidates:
            continue

        p = _select_pivot(candidates, mags, constrained)
        if constrained[p]:
            others = [i for i in candidates if i != p]
            others += [i for i in range(m) if assigned[i] and mags[i] * unit[i] > tol]
            for i in others:
                rotate(A, p, i, j, constrained=True)
        else:
            for i in candidates:
                if i != p:
                    rotate(A, p, i, j, constrained=False)

        assigned[p] = True
        pivots.append((j, p))

    rank = len(pivots)
    out = torch.zeros_like(A)
    out_sigmas: list[float] = []
    for k, (j, p) in enumerate(pivots):
        if constrained[p]:
            out[k] = A[p]
            out_sigmas.append(0.0)
        else:
            lead = float(A[p, j].item())
            out[k] = A[p] / lead
            out[k, j] = 1.0
            out_sigmas.append(1.0 / abs(lead))

    infeasible: list[int] = []
    residuals: list[float] = []
    for i in range(m):
        if assigned[i] or not constrained[i]:
            continue
        rhs = float(A[i, n].item())
        if abs(rhs) > tol:
            infeasible.append(i)
            residuals.append(rhs)
    for t, rhs in enumerate(residuals):
        out[rank + t, n] = rhs

    A.copy_(out)
    reduced = from_sigmas(torch.tensor(out_sigmas, dtype=torch.float64))

    if infeasible and raise_infeasible:
        raise InfeasibleConstraintError(infeasible, residuals, reduced)

    return EliminationResult(model=reduced, rank=rank, pivots=pivots, infeasible_rows=infeasible)


def QR(Ab: Any, model: DiagonalModel, tol: float = DEFAULT_TOL) -> DiagonalModel:
    """
    Reduce [A|b] in place and return the equivalent noise model.

    The returned model has dimension rank <= min(m, n), not m.
    """
    return eliminate(Ab, model, tol=tol).model
