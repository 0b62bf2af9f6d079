from __future__ import annotations

from typing import Literal, Optional, Union
import warnings
import torch

from mixedqr.exceptions import InvalidSigmasError, ShapeError
from mixedqr.typing import as_torch

SigmaMode = Literal["sigma", "variance", "precision", "invsigma"]


def as_sigma_vector(
    values,
    *,
    n: Optional[int] = None,
    mode: SigmaMode = "sigma",
    allow_zero: bool = True,
    dtype: Optional[torch.dtype] = torch.float64,
    device: Optional[Union[str, torch.device]] = None,
    check: bool = True,
) -> torch.Tensor:
    """
    Coerce per-row noise information to a (n,) vector of standard deviations.

    Accepted inputs:
      - scalar (requires n)
      - (n,)

    mode:
      - "sigma"     : s = standard deviation
      - "variance"  : v = s^2 (converted to s=sqrt(v))
      - "precision" : w = 1/s^2 (converted to s=1/sqrt(w), w=inf -> s=0)
      - "invsigma"  : 1/s (converted to s=1/x, x=inf -> s=0)

    A zero sigma marks an exact constraint; it is rejected unless allow_zero.
    The returned tensor never aliases the input.
    """
    s = as_torch(values, device=device)
    if dtype is not None:
        s = s.to(dtype=dtype)
    elif not s.is_floating_point():
        s = s.to(dtype=torch.float64)

    if s.ndim == 0:
        if n is None:
            raise ShapeError("A scalar sigma needs the dimension n.")
        s = s.view(1).expand(int(n))
    elif s.ndim == 1:
        if n is not None and int(s.shape[0]) != int(n):
            raise ShapeError(f"sigmas has shape {tuple(s.shape)} but n={n}")
    else:
        raise ShapeError(f"sigmas must be scalar or (n,). Got {tuple(s.shape)}")

    if check and torch.isnan(s).any():
        raise InvalidSigmasError("sigmas contain nan")

    if mode == "sigma":
        sig = s
    elif mode == "variance":
        sig = torch.sqrt(s)
    elif mode == "precision":
        sig = torch.where(torch.isinf(s), torch.zeros_like(s), 1.0 / torch.sqrt(s))
    elif mode == "invsigma":
        sig = torch.where(torch.isinf(s), torch.zeros_like(s), 1.0 / s)
    else:
        raise ShapeError("mode must be one of {'sigma','variance','precision','invsigma'}")

    if check:
        if not torch.isfinite(sig).all():
            raise InvalidSigmasError("sigmas contain inf/nan after coercion")
        if (sig < 0).any() or (mode in ("precision", "variance") and (s < 0).any()):
            raise InvalidSigmasError("sigmas must be non-negative")
        if not allow_zero and (sig == 0).any():
            raise InvalidSigmasError("sigmas must be strictly positive (zero marks a constraint)")

        pos = sig[sig > 0]
        if pos.numel() > 0:
            smin = float(pos.min().detach().cpu().item())
            smax = float(pos.max().detach().cpu().item())
            ratio = (smax / smin) ** 2
            if ratio > 1e8:
                warnings.warn(
                    f"Very large precision ratio max/min = {ratio:.2e}. This can cause numerical issues.",
                    RuntimeWarning,
                    stacklevel=2,
                )

    return sig.clone()
