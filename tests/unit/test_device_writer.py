"""
Unit tests for DeviceWriter behaviour that needs no live database.
"""

from contextlib import contextmanager

import psycopg
import pytest

from fda_importer.core.models import K510Device
from fda_importer.warehouse.upsert import DeviceWriter


class UntouchablePool:
    """Pool stand-in that fails the test on any database access"""

    def get_connection(self):
        raise AssertionError("database must not be touched")


class FailingPool:
    """Pool stand-in whose connections cannot be obtained"""

    @contextmanager
    def get_connection(self):
        raise psycopg.OperationalError("could not connect to server")
        yield


@pytest.mark.unit
def test_store_empty_is_noop():
    result = DeviceWriter(UntouchablePool()).store([])

    assert result.added == 0
    assert result.skipped == 0
    assert result.error is None


@pytest.mark.unit
def test_store_failure_is_reported_not_raised():
    devices = [K510Device(submission_number="K1"), K510Device(submission_number="K2")]

    result = DeviceWriter(FailingPool()).store(devices)

    assert result.added == 0
    assert result.skipped == 0
    assert "could not connect" in result.error
