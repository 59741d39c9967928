"""
Core domain models and pure functions for GeoGuard.

This module contains the domain models and pure business logic
that are independent of external I/O and infrastructure concerns.
"""

from .models import Alert, BreachState, BreachTransition, SweepResult, Tourist, Zone, ZoneMatch
from .classifier import classify
from .breach import decide_transition

__all__ = ["Alert", "BreachState", "BreachTransition", "SweepResult", "Tourist", "Zone",
           "ZoneMatch", "classify", "decide_transition"]
