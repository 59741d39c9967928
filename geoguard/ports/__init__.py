"""
Port interfaces for GeoGuard hexagonal architecture.

This module defines the port interfaces (Protocols) that define
the contracts between the breach sweep and its storage adapters.
"""

from .alerts import AlertStorePort
from .tourists import TouristStorePort
from .zones import ZoneStorePort

__all__ = ["AlertStorePort", "TouristStorePort", "ZoneStorePort"]
