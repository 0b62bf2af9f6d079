from __future__ import annotations

from typing import Any

import torch

from mixedqr.typing import as_torch


def equal_with_abs_tol(A: Any, B: Any, tol: float = 1e-9) -> bool:
    """True when A and B have the same shape and max |A - B| <= tol."""
    At = as_torch(A, dtype=torch.float64)
    Bt = as_torch(B, dtype=torch.float64)
    if At.shape != Bt.shape:
        return False
    if At.numel() == 0:
        return True
    return bool(torch.max(torch.abs(At - Bt)).item() <= tol)


def _rows_dependent(a: torch.Tensor, b: torch.Tensor, tol: float) -> bool:
    na = float(torch.linalg.vector_norm(a).item())
    nb = float(torch.linalg.vector_norm(b).item())
    if na <= tol or nb <= tol:
        return na <= tol and nb <= tol
    # |cos| == 1 for parallel rows
    cos = float(torch.dot(a, b).item()) / (na * nb)
    return abs(abs(cos) - 1.0) <= tol


def linear_dependent(A: Any, B: Any, tol: float = 1e-9) -> bool:
    """
    Row-wise check that every row of A is a scalar multiple of the same row of B.

    Rows that are zero must be zero in both matrices. Useful to compare a
    reduced system against an expected one when row scaling is free.
    """
    At = as_torch(A, dtype=torch.float64)
    Bt = as_torch(B, dtype=torch.float64)
    if At.ndim != 2 or At.shape != Bt.shape:
        return False
    return all(_rows_dependent(At[i], Bt[i], tol) for i in range(At.shape[0]))
