"""
Domain core: device models, decision code normalization and record mapping.
"""

from .decision_codes import DECISION_STATUS_MAP, UNKNOWN_DECISION, normalize_decision
from .transformer import RecordTransformer, transform_records

__all__ = [
    "DECISION_STATUS_MAP",
    "UNKNOWN_DECISION",
    "normalize_decision",
    "RecordTransformer",
    "transform_records",
]
