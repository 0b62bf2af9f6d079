from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Union

import torch

from mixedqr.exceptions import InvalidSigmasError, ShapeError
from mixedqr.sigmas import as_sigma_vector
from mixedqr.typing import as_torch


@dataclass(frozen=True, eq=False)
class DiagonalModel:
    """Independent Gaussian noise on each row, given by standard deviations.

    Instances are immutable: the sigma vector is copied on construction and
    every accessor returns a fresh tensor, so one model can be shared by any
    number of readers.

    Notes
    -----
    - All sigmas must be strictly positive. Use ConstrainedModel when some rows
      are exact equalities (sigma == 0).
    """

    _sigmas: torch.Tensor

    _allow_constrained = False

    def __post_init__(self) -> None:
        s = self._sigmas
        if not isinstance(s, torch.Tensor):
            s = as_torch(s, dtype=torch.float64)
        if s.ndim != 1:
            raise ShapeError(f"sigmas must be (n,). Got {tuple(s.shape)}")
        if not s.is_floating_point():
            s = s.to(dtype=torch.float64)
        if not torch.isfinite(s).all() or (s < 0).any():
            raise InvalidSigmasError("sigmas must be finite and non-negative")
        if not self._allow_constrained and (s == 0).any():
            raise InvalidSigmasError(
                "DiagonalModel needs strictly positive sigmas; use ConstrainedModel for sigma == 0"
            )
        object.__setattr__(self, "_sigmas", s.detach().clone())

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------
    @classmethod
    def Sigmas(
        cls,
        sigmas: Any,
        *,
        dtype: Optional[torch.dtype] = torch.float64,
        device: Optional[Union[str, torch.device]] = None,
    ) -> "DiagonalModel":
        s = as_sigma_vector(sigmas, mode="sigma", allow_zero=cls._allow_constrained, dtype=dtype, device=device)
        return cls(s)

    @classmethod
    def Variances(
        cls,
        variances: Any,
        *,
        dtype: Optional[torch.dtype] = torch.float64,
        device: Optional[Union[str, torch.device]] = None,
    ) -> "DiagonalModel":
        s = as_sigma_vector(variances, mode="variance", allow_zero=cls._allow_constrained, dtype=dtype, device=device)
        return cls(s)

    @classmethod
    def Precisions(
        cls,
        precisions: Any,
        *,
        dtype: Optional[torch.dtype] = torch.float64,
        device: Optional[Union[str, torch.device]] = None,
    ) -> "DiagonalModel":
        s = as_sigma_vector(precisions, mode="precision", allow_zero=cls._allow_constrained, dtype=dtype, device=device)
        return cls(s)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    @property
    def dim(self) -> int:
        return int(self._sigmas.shape[0])

    @property
    def sigmas(self) -> torch.Tensor:
        return self._sigmas.clone()

    @property
    def variances(self) -> torch.Tensor:
        return self._sigmas * self._sigmas

    @property
    def precisions(self) -> torch.Tensor:
        # sigma == 0 gives inf
        return 1.0 / (self._sigmas * self._sigmas)

    @property
    def invsigmas(self) -> torch.Tensor:
        return 1.0 / self._sigmas

    def sigma(self, i: int) -> float:
        return float(self._sigmas[i].item())

    @property
    def constrained_mask(self) -> torch.Tensor:
        return self._sigmas == 0

    @property
    def is_constrained(self) -> bool:
        return bool(self.constrained_mask.any().item())

    def constrained(self, i: int) -> bool:
        return bool(self._sigmas[i].item() == 0)

    # ------------------------------------------------------------------
    # Whitening
    # ------------------------------------------------------------------
    def _check_rows(self, v: torch.Tensor) -> None:
        if v.ndim < 1 or int(v.shape[0]) != self.dim:
            raise ShapeError(f"Expected leading dimension {self.dim}. Got {tuple(v.shape)}")

    def _col(self, v: torch.Tensor) -> torch.Tensor:
        # broadcast the sigma vector over trailing dims of v
        s = self._sigmas.to(dtype=v.dtype, device=v.device)
        return s.view(-1, *([1] * (v.ndim - 1)))

    def whiten(self, v: Any) -> torch.Tensor:
        """Scale each row by 1/sigma."""
        vt = as_torch(v, dtype=self._sigmas.dtype)
        self._check_rows(vt)
        return vt / self._col(vt)

    def unwhiten(self, v: Any) -> torch.Tensor:
        vt = as_torch(v, dtype=self._sigmas.dtype)
        self._check_rows(vt)
        return vt * self._col(vt)

    def whiten_matrix(self, A: Any) -> torch.Tensor:
        At = as_torch(A, dtype=self._sigmas.dtype)
        if At.ndim != 2:
            raise ShapeError(f"A must be (m,n). Got {tuple(At.shape)}")
        return self.whiten(At)

    def distance(self, v: Any) -> float:
        """Squared Mahalanobis distance of a residual vector."""
        w = self.whiten(v)
        return float((w * w).sum().item())

    def unit(self) -> "DiagonalModel":
        return DiagonalModel(torch.ones_like(self._sigmas))

    # ------------------------------------------------------------------
    # Elimination
    # ------------------------------------------------------------------
    def QR(self, Ab: Any, tol: Optional[float] = None) -> "DiagonalModel":
        """Reduce [A|b] in place to row-echelon form; return the rank-sized model."""
        from mixedqr.linalg.eliminate import DEFAULT_TOL, QR

        return QR(Ab, self, tol=DEFAULT_TOL if tol is None else tol)

    def equals(self, other: "DiagonalModel", tol: float = 1e-9) -> bool:
        if not isinstance(other, DiagonalModel) or other.dim != self.dim:
            return False
        a = self._sigmas
        b = other._sigmas.to(dtype=a.dtype, device=a.device)
        return bool(torch.all(torch.abs(a - b) <= tol).item())

    def __repr__(self) -> str:
        vals = ", ".join(f"{x:.6g}" for x in self._sigmas.tolist())
        return f"{type(self).__name__}(sigmas=[{vals}])"


@dataclass(frozen=True, eq=False)
class ConstrainedModel(DiagonalModel):
    """Diagonal model in which zero sigmas mark exact equality constraints.

    Constrained rows have infinite precision. Whitening passes them through
    unscaled, and `distance` charges them with the penalty weight `mu`
    (augmented Lagrangian style) instead of an infinite cost.
    """

    mu: float = 1000.0

    _allow_constrained = True

    @classmethod
    def MixedSigmas(cls, sigmas: Any, *, mu: float = 1000.0, **kwargs: Any) -> "ConstrainedModel":
        s = as_sigma_vector(sigmas, mode="sigma", allow_zero=True, **kwargs)
        return cls(s, mu=float(mu))

    @classmethod
    def MixedVariances(cls, variances: Any, *, mu: float = 1000.0, **kwargs: Any) -> "ConstrainedModel":
        s = as_sigma_vector(variances, mode="variance", allow_zero=True, **kwargs)
        return cls(s, mu=float(mu))

    @classmethod
    def MixedPrecisions(cls, precisions: Any, *, mu: float = 1000.0, **kwargs: Any) -> "ConstrainedModel":
        s = as_sigma_vector(precisions, mode="precision", allow_zero=True, **kwargs)
        return cls(s, mu=float(mu))

    @classmethod
    def All(cls, dim: int, *, mu: float = 1000.0, dtype: torch.dtype = torch.float64) -> "ConstrainedModel":
        """Every row is a hard constraint."""
        return cls(torch.zeros(int(dim), dtype=dtype), mu=float(mu))

    def whiten(self, v: Any) -> torch.Tensor:
        vt = as_torch(v, dtype=self._sigmas.dtype)
        self._check_rows(vt)
        s = self._col(vt)
        return torch.where(s == 0, vt, vt / torch.where(s == 0, torch.ones_like(s), s))

    def unwhiten(self, v: Any) -> torch.Tensor:
        vt = as_torch(v, dtype=self._sigmas.dtype)
        self._check_rows(vt)
        s = self._col(vt)
        return torch.where(s == 0, vt, vt * s)

    def distance(self, v: Any) -> float:
        w = self.whiten(v)
        mask = self._col(w) == 0
        weights = torch.where(mask, torch.full_like(w, self.mu), torch.ones_like(w))
        return float((weights * w * w).sum().item())

    def unit(self) -> "ConstrainedModel":
        """Keep the constrained rows, give every other row sigma 1."""
        s = torch.where(self.constrained_mask, self._sigmas, torch.ones_like(self._sigmas))
        return ConstrainedModel(s, mu=self.mu)

    def __repr__(self) -> str:
        vals = ", ".join(f"{x:.6g}" for x in self._sigmas.tolist())
        return f"ConstrainedModel(sigmas=[{vals}], mu={self.mu:g})"


NoiseModel = DiagonalModel
