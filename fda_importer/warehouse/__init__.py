"""
PostgreSQL persistence for device records.
"""

from .connection import DatabaseConnectionPool
from .queries import DeviceQuery
from .schema_mgmt import SchemaManager
from .upsert import DeviceWriter

__all__ = [
    "DatabaseConnectionPool",
    "DeviceQuery",
    "DeviceWriter",
    "SchemaManager",
]
