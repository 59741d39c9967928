"""
Orchestrators for GeoGuard.

This module contains the breach detection sweep and its scheduler.
"""

from .sweep import BreachSweep, SweepScheduler

__all__ = ["BreachSweep", "SweepScheduler"]
