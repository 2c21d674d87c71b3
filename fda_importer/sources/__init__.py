"""
Remote record sources.
"""

from .openfda_source import FETCH_BATCH_SIZE, OpenFDASource

__all__ = [
    "FETCH_BATCH_SIZE",
    "OpenFDASource",
]
