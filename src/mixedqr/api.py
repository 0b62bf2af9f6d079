# src/mixedqr/api.py
from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

from mixedqr.linalg.eliminate import QR
from mixedqr.models.cwls import CWLS

__all__ = ["QR", "CWLS", "__version__"]

try:
    __version__ = version("mixedqr")
except PackageNotFoundError:  # editable/local
    __version__ = "0.0.0"
