# src/mixedqr/results.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

import scipy.stats as st
import torch

from mixedqr.noise.model import DiagonalModel


def _fmt(x: float, digits: int = 3) -> str:
    """Format a float with fixed decimals."""
    return f"{x:.{digits}f}"


@dataclass(frozen=True)
class CWLSResults:
    """
    Results of a constrained weighted least-squares solve.

    The reduced system [R|d] and its noise model are kept so the caller can
    chain further eliminations or inspect the pivot structure.
    """

    params: torch.Tensor          # (n,)
    vcov: torch.Tensor            # (n,n), zero along constrained directions
    Rd: torch.Tensor              # (m,n+1) reduced augmented matrix
    model: DiagonalModel          # reduced noise model, dim = rank
    rank: int
    ssr: float                    # weighted SSR over measurement rows
    n_measurements: int
    n_constraints: int
    constraint_resid: torch.Tensor  # (n_constraints,) C x - d

    # Metadata
    model_name: str = "CWLS"
    method_name: str = "Constrained Weighted Least Squares"
    backend: str = "torch"
    param_names: Optional[list[str]] = None

    @property
    def k(self) -> int:
        return int(self.params.shape[0])

    @property
    def df_resid(self) -> int:
        """Measurement rows minus the parameters they still have to determine."""
        n_con_pivots = int(self.model.constrained_mask.sum().item())
        return int(self.n_measurements - (self.rank - n_con_pivots))

    @property
    def stderr(self) -> torch.Tensor:
        return torch.sqrt(torch.clamp(torch.diagonal(self.vcov), min=0.0))

    @property
    def chi2_pvalue(self) -> float:
        """P(chi2(df_resid) >= ssr); nan when there are no residual degrees of freedom."""
        df = self.df_resid
        if df <= 0:
            return float("nan")
        return float(st.chi2.sf(self.ssr, df=df))

    def conf_int(self, alpha: float = 0.05) -> torch.Tensor:
        """
        Normal confidence intervals, shape (k, 2) with [:,0]=lower and [:,1]=upper.

        Sigmas are known, so z critical values are used.
        """
        crit = float(st.norm.ppf(1.0 - alpha / 2.0))
        half = crit * self.stderr
        return torch.stack([self.params - half, self.params + half], dim=-1)

    def summary(self, param_names: Optional[Sequence[str]] = None, digits: int = 4, alpha: float = 0.05) -> str:
        width = 78
        line = "=" * width
        dash = "-" * width

        if param_names is None:
            if self.param_names is not None:
                param_names = self.param_names
            else:
                param_names = [f"x[{j}]" for j in range(self.k)]

        now = datetime.now().strftime("%a, %d %b %Y  %H:%M:%S")
        col_left = width // 2

        def pair(l: str, r: str) -> str:
            return f"{l:<{col_left}}{r:<{width - col_left}}"

        out: list[str] = []
        out.append(f"{self.model_name} Results".center(width))
        out.append(line)
        out.append(pair(f"{'Model:':<20}{self.model_name}", f"{'Method:':<20}{self.method_name[:18]}"))
        out.append(pair(f"{'Measurements:':<20}{self.n_measurements}", f"{'Constraints:':<20}{self.n_constraints}"))
        out.append(pair(f"{'Rank:':<20}{self.rank}", f"{'Df Residuals:':<20}{self.df_resid}"))
        out.append(pair(f"{'Weighted SSR:':<20}{_fmt(self.ssr, digits)}", f"{'Prob(chi2):':<20}{_fmt(self.chi2_pvalue, digits)}"))
        out.append(pair(f"{'Date:':<20}{now[:16]}", f"{'Time:':<20}{now[-8:]}"))
        out.append(line)

        ci = self.conf_int(alpha=alpha)
        se = self.stderr
        q_low = alpha / 2.0
        q_high = 1.0 - alpha / 2.0
        name_w, num_w = 14, 12
        out.append(
            f"{'':<{name_w}}{'coef':>{num_w}}{'std err':>{num_w}}"
            f"{f'[{q_low:.3f}':>{num_w}}{f'{q_high:.3f}]':>{num_w}}"
        )
        out.append(dash)
        for j in range(self.k):
            name = str(param_names[j])[:name_w]
            out.append(
                f"{name:<{name_w}}"
                f"{self.params[j].item():>{num_w}.{digits}f}"
                f"{se[j].item():>{num_w}.{digits}f}"
                f"{ci[j, 0].item():>{num_w}.{digits}f}"
                f"{ci[j, 1].item():>{num_w}.{digits}f}"
            )
        out.append(line)
        if self.n_constraints > 0:
            worst = float(self.constraint_resid.abs().max().item())
            out.append(f"Max constraint residual: {worst:.3e}")
        return "\n".join(out)
