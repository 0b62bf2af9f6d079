import torch
import pytest

@pytest.fixture(scope="session")
def torch_dtype():
    # Use float64 in tests for numerical stability.
    return torch.float64

def make_system(m: int, n: int, *, seed: int = 123, dtype=torch.float64):
    """
    Random dense system with full column rank (almost surely).
    Returns:
      A : (m,n)
      x_true : (n,)
      b : (m,) = A x_true + small noise
    """
    g = torch.Generator().manual_seed(seed)
    A = torch.randn((m, n), generator=g, dtype=dtype)
    x_true = torch.linspace(-1.0, 1.0, n, dtype=dtype)
    b = A @ x_true + 0.05 * torch.randn(m, generator=g, dtype=dtype)
    return A, x_true, b


def kkt_solve(A, b, sigmas):
    """Reference constrained WLS via the KKT system (dense, for tests only)."""
    meas = sigmas > 0
    Am, bm = A[meas], b[meas]
    w = 1.0 / (sigmas[meas] ** 2)
    C, d = A[~meas], b[~meas]
    n = A.shape[1]
    p = C.shape[0]
    H = Am.T @ (w.unsqueeze(-1) * Am)
    K = torch.zeros((n + p, n + p), dtype=A.dtype)
    K[:n, :n] = H
    K[:n, n:] = C.T
    K[n:, :n] = C
    rhs = torch.cat([Am.T @ (w * bm), d])
    return torch.linalg.solve(K, rhs)[:n]
