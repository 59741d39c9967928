"""
Metrics definitions for GeoGuard.

This module defines Prometheus metrics for monitoring
the breach detection sweep.
"""

from prometheus_client import Counter, Histogram, Gauge

# 카운터 메트릭
sweeps_total = Counter(
    "geoguard_sweeps_total",
    "Number of breach detection sweeps by outcome",
    ["outcome"]
)

tourists_evaluated = Counter(
    "geoguard_tourists_evaluated_total",
    "Number of tourists evaluated against active zones"
)

tourist_failures = Counter(
    "geoguard_tourist_failures_total",
    "Number of tourists skipped or failed during a sweep",
    ["reason"]
)

zones_skipped = Counter(
    "geoguard_zones_skipped_total",
    "Number of active zones skipped for invalid geometry"
)

geofence_alerts_opened = Counter(
    "geoguard_geofence_alerts_opened_total",
    "Number of GEOFENCE alerts opened by the sweep",
    ["severity"]
)

geofence_alerts_resolved = Counter(
    "geoguard_geofence_alerts_resolved_total",
    "Number of GEOFENCE alerts resolved by the sweep"
)

# 히스토그램 메트릭
sweep_seconds = Histogram(
    "geoguard_sweep_duration_seconds",
    "Time spent running one sweep",
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 10.0, 30.0]
)

# 게이지 메트릭
breached_tourists = Gauge(
    "geoguard_breached_tourists",
    "Tourists inside a caution or restricted zone after the last sweep"
)

active_zones = Gauge(
    "geoguard_active_zones",
    "Usable active zones in the last sweep"
)

uptime_seconds = Gauge(
    "geoguard_uptime_seconds",
    "Service uptime in seconds"
)
