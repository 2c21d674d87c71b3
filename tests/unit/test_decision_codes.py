"""
Unit tests for decision code normalization.
"""

import pytest

from fda_importer.core.decision_codes import DECISION_STATUS_MAP, normalize_decision


@pytest.mark.unit
@pytest.mark.parametrize(
    "code,expected",
    [
        ("SE", "Cleared"),
        ("NSE", "Rejected"),
        ("SGC", "Cleared"),
        ("AP", "Approved"),
        ("APPR", "Approved"),
        ("DE", "Denied"),
        ("WD", "Withdrawn"),
        ("CD", "Conditional Approval"),
    ],
)
def test_known_codes(code, expected):
    """Every mapped code returns its status"""
    assert normalize_decision(code) == expected


@pytest.mark.unit
@pytest.mark.parametrize("code", [None, "", "se", "Appr", "SESE", "XYZ", " SE", 42])
def test_unmapped_codes_are_unknown(code):
    """Lookup is exact; anything else is Unknown"""
    assert normalize_decision(code) == "Unknown"


@pytest.mark.unit
def test_map_has_eight_codes():
    assert len(DECISION_STATUS_MAP) == 8
