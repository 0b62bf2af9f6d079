from __future__ import annotations

import math
from typing import Tuple

import torch


def givens(a: float, b: float) -> Tuple[float, float, float]:
    """
    Coefficients of the rotation that maps (a, b) to (r, 0).

    Returns (c, s, r) with r = hypot(a, b), c = a/r, s = b/r.
    b == 0 gives the identity (1, 0, a).
    """
    if b == 0.0:
        return 1.0, 0.0, a
    r = math.hypot(a, b)
    return a / r, b / r, r


def apply_givens(Ab: torch.Tensor, pivot: int, other: int, c: float, s: float) -> None:
    """
    Rotate rows `pivot` and `other` of Ab in place (every column, rhs included):

      pivot <-  c * pivot + s * other
      other <- -s * pivot + c * other
    """
    p = Ab[pivot].clone()
    o = Ab[other]
    Ab[pivot] = c * p + s * o
    Ab[other] = c * o - s * p


def reduce_row(Ab: torch.Tensor, pivot: int, other: int, col: int) -> None:
    """Exact elimination of Ab[other, col] by a constraint row (no weighting)."""
    factor = Ab[other, col] / Ab[pivot, col]
    Ab[other] -= factor * Ab[pivot]
    Ab[other, col] = 0.0


def rotate(Ab: torch.Tensor, pivot: int, other: int, col: int, *, constrained: bool) -> None:
    """
    Zero Ab[other, col] using row `pivot`.

    constrained=True  : pivot is an exact constraint, plain row reduction.
    constrained=False : both rows are whitened measurements (row / sigma), so a
                        Givens rotation combines their precisions into the pivot
                        row. Its leading entry becomes r and the pivot's
                        effective sigma is 1/|r|.
    """
    if constrained:
        reduce_row(Ab, pivot, other, col)
        return

    a = float(Ab[pivot, col].item())
    b = float(Ab[other, col].item())
    c, s, _ = givens(a, b)
    if s == 0.0:
        return
    apply_givens(Ab, pivot, other, c, s)
    Ab[other, col] = 0.0
