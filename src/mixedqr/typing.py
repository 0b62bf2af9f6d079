# src/mixedqr/typing.py
from __future__ import annotations

from typing import Any, Optional, Union

import numpy as np
import torch

from mixedqr.exceptions import NotSupportedError, ShapeError


def _is_pandas_df(x: Any) -> bool:
    try:
        import pandas as pd  # type: ignore
        return isinstance(x, pd.DataFrame)
    except Exception:
        return False


def _is_pandas_series(x: Any) -> bool:
    try:
        import pandas as pd  # type: ignore
        return isinstance(x, pd.Series)
    except Exception:
        return False


def _require_pandas() -> None:
    try:
        import pandas as _  # noqa: F401
    except Exception as e:
        raise NotSupportedError(
            "pandas is required to pass DataFrame/Series inputs. "
            "Install with: pip install pandas"
        ) from e


def as_torch(
    x: Any,
    *,
    dtype: Optional[torch.dtype] = None,
    device: Optional[Union[str, torch.device]] = None,
) -> torch.Tensor:
    """
    Convert common array-likes to torch.Tensor.
    Supports torch, numpy, lists, and pandas (if installed).
    """
    if _is_pandas_df(x) or _is_pandas_series(x):
        _require_pandas()
        x = x.to_numpy()  # type: ignore[attr-defined]

    if isinstance(x, torch.Tensor):
        t = x
        if dtype is not None:
            t = t.to(dtype=dtype)
        if device is not None:
            t = t.to(device=device)
        return t

    t = torch.as_tensor(x)
    if dtype is not None:
        t = t.to(dtype=dtype)
    if device is not None:
        t = t.to(device=device)
    return t


def as_augmented(Ab: Any) -> torch.Tensor:
    """
    Return a tensor view of an augmented matrix [A | b] that shares storage
    with the caller's object, so that in-place updates are visible to it.

    Accepts
    - torch.Tensor (returned as-is)
    - numpy.ndarray (wrapped with torch.from_numpy, no copy)

    Anything that cannot be mutated in place (lists, pandas frames) is rejected.
    """
    if isinstance(Ab, torch.Tensor):
        t = Ab
    elif isinstance(Ab, np.ndarray):
        if not Ab.flags.writeable:
            raise NotSupportedError("Augmented matrix must be writeable; got a read-only ndarray.")
        t = torch.from_numpy(Ab)
    else:
        raise NotSupportedError(
            f"Augmented matrix must be a torch.Tensor or numpy.ndarray to be reduced in place. "
            f"Got {type(Ab).__name__}."
        )

    if t.ndim != 2:
        raise ShapeError(f"Augmented matrix must be (m,n+1). Got {tuple(t.shape)}")
    if t.shape[1] < 1:
        raise ShapeError("Augmented matrix needs at least the right-hand side column.")
    if not t.is_floating_point():
        raise NotSupportedError(f"Augmented matrix must have a floating dtype. Got {t.dtype}.")
    return t
