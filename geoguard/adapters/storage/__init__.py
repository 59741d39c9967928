"""
Storage adapters for GeoGuard hexagonal architecture.

This module contains the SQLite-based stores for tourists,
zones and alerts. All stores may share one database file.
"""

from .sqlite_alerts import SQLiteAlertStore
from .sqlite_tourists import SQLiteTouristStore
from .sqlite_zones import SQLiteZoneStore

__all__ = ["SQLiteAlertStore", "SQLiteTouristStore", "SQLiteZoneStore"]
