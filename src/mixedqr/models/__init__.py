from mixedqr.models.cwls import CWLS

__all__ = ["CWLS"]
