import math

import torch
import pytest

from mixedqr.sigmas import as_sigma_vector


def test_as_sigma_vector_shapes_and_modes(torch_dtype):
    n = 6

    # Scalar -> (n,)
    s0 = as_sigma_vector(2.0, n=n, dtype=torch_dtype)
    assert s0.shape == (n,)
    assert torch.allclose(s0, torch.full((n,), 2.0, dtype=torch_dtype))

    # Mode conversions
    s = torch.linspace(0.5, 2.0, n, dtype=torch_dtype)
    assert torch.allclose(as_sigma_vector(s * s, mode="variance"), s)
    assert torch.allclose(as_sigma_vector(1.0 / (s * s), mode="precision"), s)
    assert torch.allclose(as_sigma_vector(1.0 / s, mode="invsigma"), s)


def test_as_sigma_vector_infinite_precision_is_constraint():
    s = as_sigma_vector([math.inf, 1.0], mode="precision")
    assert s.tolist() == [0.0, 1.0]
    s = as_sigma_vector([1.0, math.inf], mode="invsigma")
    assert s.tolist() == [1.0, 0.0]


def test_as_sigma_vector_does_not_alias_input(torch_dtype):
    src = torch.ones(3, dtype=torch_dtype)
    out = as_sigma_vector(src)
    out[0] = 5.0
    assert src[0].item() == 1.0


def test_as_sigma_vector_rejects_bad_shapes(torch_dtype):
    with pytest.raises(ValueError):
        as_sigma_vector(torch.ones(4, dtype=torch_dtype), n=5)

    with pytest.raises(ValueError):
        as_sigma_vector(torch.ones((2, 2), dtype=torch_dtype))

    with pytest.raises(ValueError):
        as_sigma_vector(1.0)


def test_as_sigma_vector_rejects_invalid_values(torch_dtype):
    with pytest.raises(ValueError):
        as_sigma_vector(torch.tensor([1.0, -1.0], dtype=torch_dtype))

    with pytest.raises(ValueError):
        as_sigma_vector(torch.tensor([1.0, float("nan")], dtype=torch_dtype))

    with pytest.raises(ValueError):
        as_sigma_vector(torch.tensor([1.0, 0.0], dtype=torch_dtype), allow_zero=False)

    with pytest.raises(ValueError):
        as_sigma_vector(torch.tensor([1.0, -4.0], dtype=torch_dtype), mode="precision")


def test_as_sigma_vector_warns_on_extreme_ratio(torch_dtype):
    with pytest.warns(RuntimeWarning):
        as_sigma_vector(torch.tensor([1e-5, 1.0, 0.0], dtype=torch_dtype))


def test_as_sigma_vector_accepts_pandas():
    pd = pytest.importorskip("pandas")
    s = as_sigma_vector(pd.Series([0.0, 1.5]))
    assert s.tolist() == [0.0, 1.5]
