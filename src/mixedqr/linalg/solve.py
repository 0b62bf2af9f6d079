from __future__ import annotations

from typing import Any, Tuple

import torch

from mixedqr.exceptions import ShapeError, SingularMatrixError
from mixedqr.typing import as_torch


def split_rd(Rd: Any, rank: int) -> Tuple[torch.Tensor, torch.Tensor]:
    """Split the first `rank` rows of a reduced [R|d] into R:(rank,n) and d:(rank,)."""
    t = as_torch(Rd)
    if t.ndim != 2:
        raise ShapeError(f"Rd must be (m,n+1). Got {tuple(t.shape)}")
    if rank < 0 or rank > t.shape[0]:
        raise ShapeError(f"rank={rank} out of range for {t.shape[0]} rows")
    return t[:rank, :-1], t[:rank, -1]


def back_substitute(Rd: Any, rank: int) -> torch.Tensor:
    """
    Solve R x = d for the reduced system left by elimination.

    Needs rank == n: the first n rows then form an upper-triangular R with
    pivots on the diagonal.
    """
    R, d = split_rd(Rd, rank)
    n = R.shape[1]
    if rank != n:
        raise SingularMatrixError(f"Reduced system has rank {rank} < n={n}; solution is not unique.")
    diag = torch.diagonal(R)
    if torch.any(diag == 0):
        raise SingularMatrixError("Zero pivot on the diagonal of R.")
    return torch.linalg.solve_triangular(R, d.unsqueeze(-1), upper=True).squeeze(-1)


def reduced_covariance(Rd: Any, rank: int, sigmas: Any) -> torch.Tensor:
    """
    Covariance of x = R^{-1} d when d carries independent noise with the given
    sigmas (zero for constraint rows):

      Cov(x) = R^{-1} diag(sigmas^2) R^{-T}
    """
    R, _ = split_rd(Rd, rank)
    n = R.shape[1]
    if rank != n:
        raise SingularMatrixError(f"Reduced system has rank {rank} < n={n}; covariance is undefined.")
    s = as_torch(sigmas, dtype=R.dtype, device=R.device)
    if s.shape != (rank,):
        raise ShapeError(f"sigmas must be ({rank},). Got {tuple(s.shape)}")
    eye = torch.eye(n, dtype=R.dtype, device=R.device)
    invR = torch.linalg.solve_triangular(R, eye, upper=True)
    scaled = invR * s.view(1, -1)
    return scaled @ scaled.transpose(-1, -2)
