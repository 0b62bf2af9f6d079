# src/mixedqr/models/cwls.py
from __future__ import annotations

from typing import Optional, Union

import torch

from mixedqr.exceptions import ShapeError
from mixedqr.linalg.eliminate import DEFAULT_TOL, eliminate
from mixedqr.linalg.solve import back_substitute, reduced_covariance
from mixedqr.noise.factory import from_sigmas
from mixedqr.results import CWLSResults
from mixedqr.sigmas import SigmaMode, as_sigma_vector
from mixedqr.typing import _is_pandas_df, as_torch


def CWLS(
    A,
    b,
    sigmas,
    *,
    sigma_mode: SigmaMode = "sigma",
    tol: float = DEFAULT_TOL,
    dtype: Optional[torch.dtype] = torch.float64,
    device: Optional[Union[str, torch.device]] = None,
    param_names: Optional[list[str]] = None,
) -> CWLSResults:
    """Constrained weighted least squares through constrained QR.

    The model is b = A x + e with Var(e_i) = sigma_i^2. Rows with sigma_i == 0
    are exact constraints A_i x = b_i.

    Inputs
    - A: (m,n)
    - b: (m,)
    - sigmas: scalar or (m,), interpreted through sigma_mode

    The caller's A and b are not modified; elimination runs on a fresh [A|b].
    Raises InfeasibleConstraintError for conflicting constraints and
    SingularMatrixError when the system does not determine every parameter.
    """
    if param_names is None and _is_pandas_df(A):
        param_names = [str(c) for c in A.columns]

    At = as_torch(A, dtype=dtype, device=device)
    bt = as_torch(b, dtype=dtype, device=device)
    if At.ndim != 2:
        raise ShapeError(f"A must be (m,n). Got {tuple(At.shape)}")
    if bt.ndim != 1 or bt.shape[0] != At.shape[0]:
        raise ShapeError(f"b must be ({At.shape[0]},). Got {tuple(bt.shape)}")

    m, n = At.shape
    s = as_sigma_vector(sigmas, n=m, mode=sigma_mode, allow_zero=True, dtype=At.dtype, device=At.device)
    noise = from_sigmas(s)

    Ab = torch.cat([At, bt.unsqueeze(-1)], dim=1)
    res = eliminate(Ab, noise, tol=tol)

    x = back_substitute(Ab, res.rank)
    vcov = reduced_covariance(Ab, res.rank, res.model.sigmas.to(dtype=Ab.dtype, device=Ab.device))

    resid = bt - At @ x
    meas = s > 0
    wres = resid[meas] / s[meas]
    ssr = float((wres * wres).sum().item())

    return CWLSResults(
        params=x,
        vcov=vcov,
        Rd=Ab,
        model=res.model,
        rank=res.rank,
        ssr=ssr,
        n_measurements=int(meas.sum().item()),
        n_constraints=int((~meas).sum().item()),
        constraint_resid=-resid[~meas],
        param_names=param_names,
    )
