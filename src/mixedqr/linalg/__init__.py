"""
mixedqr.linalg

Dense elimination primitives for mixed constraint/measurement systems.

Conventions
-----------
- Ab: augmented matrix (m, n+1), last column is the right-hand side
- Rows with sigma == 0 are exact constraints, others are measurements
- Elimination mutates Ab in place
"""
from .givens import apply_givens, givens, reduce_row, rotate
from .eliminate import DEFAULT_TOL, QR, EliminationResult, eliminate
from .solve import back_substitute, reduced_covariance, split_rd
from .compare import equal_with_abs_tol, linear_dependent

__all__ = [
    "givens",
    "apply_givens",
    "reduce_row",
    "rotate",
    "DEFAULT_TOL",
    "QR",
    "EliminationResult",
    "eliminate",
    "back_substitute",
    "reduced_covariance",
    "split_rd",
    "equal_with_abs_tol",
    "linear_dependent",
]
