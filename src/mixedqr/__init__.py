from mixedqr.linalg.eliminate import DEFAULT_TOL, QR, EliminationResult, eliminate
from mixedqr.models.cwls import CWLS
from mixedqr.noise import ConstrainedModel, DiagonalModel, NoiseModel, from_precisions, from_sigmas
from mixedqr.results import CWLSResults

__all__ = [
    "QR",
    "eliminate",
    "EliminationResult",
    "DEFAULT_TOL",
    "NoiseModel",
    "DiagonalModel",
    "ConstrainedModel",
    "from_sigmas",
    "from_precisions",
    "CWLS",
    "CWLSResults",
]
