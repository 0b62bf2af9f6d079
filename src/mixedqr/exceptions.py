from __future__ import annotations

from typing import Any, Sequence


class MixedQRError(Exception):
    """Base exception for mixedqr."""


class ShapeError(MixedQRError, ValueError):
    """Invalid shape or dimension mismatch."""


class InvalidSigmasError(MixedQRError, ValueError):
    """Invalid sigmas: negative, NaN/inf, or zero where a constraint is not allowed."""


class SingularMatrixError(MixedQRError, RuntimeError):
    """Reduced system is rank deficient and cannot be back-substituted."""


class NotSupportedError(MixedQRError, NotImplementedError):
    """Feature or input type is not supported."""


class InfeasibleConstraintError(MixedQRError, RuntimeError):
    """Constraint rows reduce to 0 = r with |r| above tolerance.

    Attributes
    ----------
    rows : original row indices of the conflicting constraints
    residuals : right-hand side left on each of those rows
    model : reduced noise model (dimension = rank) computed before raising
    """

    def __init__(
        self,
        rows: Sequence[int],
        residuals: Sequence[float],
        model: Any = None,
    ) -> None:
        self.rows = list(rows)
        self.residuals = list(residuals)
        self.model = model
        detail = ", ".join(f"row {i}: {r:.3g}" for i, r in zip(self.rows, self.residuals))
        super().__init__(f"Infeasible constraint system ({detail})")


class InvalidMatrixError(MixedQRError, ValueError):
    """Augmented matrix holds NaN/inf entries."""
