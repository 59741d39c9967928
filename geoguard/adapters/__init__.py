"""
Adapters for GeoGuard hexagonal architecture.

This module contains the concrete implementations of port interfaces
that handle external I/O and infrastructure concerns.
"""

from .storage import SQLiteAlertStore, SQLiteTouristStore, SQLiteZoneStore

__all__ = ["SQLiteAlertStore", "SQLiteTouristStore", "SQLiteZoneStore"]
