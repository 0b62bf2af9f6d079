"""
Constrained QR example (mixed constraints and measurements)

Goal
- Show how mixedqr.QR reduces an augmented system [A | b] in place.
- Two variables x, y are tied to z by exact constraints (x = z, y = z),
  and every variable gets three unit-sigma priors.

Result
- The two constraints survive as exact rows.
- The nine priors all end up measuring z and fold into one row with
  sigma 1/3 (precisions add up: 9 * 1 = 9).
"""

from __future__ import annotations

import torch

from mixedqr import CWLS, QR, ConstrainedModel


def main() -> None:
    dtype = torch.float64

    priors = torch.eye(3, dtype=dtype)
    rows = [priors, torch.tensor([[-1.0, 0.0, 1.0]], dtype=dtype),
            priors, torch.tensor([[0.0, -1.0, 1.0]], dtype=dtype),
            priors]
    A = torch.cat(rows, dim=0)                                              # (11,3)
    b = torch.zeros(A.shape[0], dtype=dtype)                                # (11,)

    sigmas = torch.ones(A.shape[0], dtype=dtype)
    sigmas[3] = 0.0
    sigmas[7] = 0.0
    model = ConstrainedModel.MixedSigmas(sigmas)

    # ----------------------------
    # In-place elimination
    # ----------------------------
    Ab = torch.cat([A, b.unsqueeze(-1)], dim=1)                             # (11,4)
    reduced = QR(Ab, model)

    print("Reduced model:", reduced)
    print("Reduced [R|d]:")
    print(Ab[: reduced.dim])

    # ----------------------------
    # Full solve with a non-zero right-hand side
    # ----------------------------
    b = b.clone()
    b[[0, 4, 8]] = 1.0                                                      # x priors
    b[[1, 5, 9]] = 2.0                                                      # y priors
    b[[2, 6, 10]] = 3.0                                                     # z priors
    res = CWLS(A, b, sigmas, param_names=["x", "y", "z"])
    print(res.summary())


if __name__ == "__main__":
    main()
