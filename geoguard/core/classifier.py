"""
Zone classification for GeoGuard.

Picks the governing zone for a position. When zones overlap the first
zone in the given order wins; no "most specific" or "most severe"
resolution is attempted.
"""

from typing import Iterable, Optional, Tuple
from geoguard.core.models import AlertSeverity, Zone, ZoneMatch, ZoneType
from geoguard.common.geo import point_in_polygon

# 구역 유형 -> 경보 심각도 (safe 구역은 경보 없음)
ZONE_SEVERITY = {
    "green": None,
    "yellow": "MEDIUM",
    "red": "HIGH",
}

def is_breach_zone(zone_type: ZoneType) -> bool:
    """caution/restricted 구역이면 True"""
    return zone_type in ("yellow", "red")

def severity_for_zone(zone_type: ZoneType) -> Optional[AlertSeverity]:
    return ZONE_SEVERITY[zone_type]

def classify(point: Tuple[float, float], zones: Iterable[Zone]) -> Optional[ZoneMatch]:
    """
    점을 포함하는 첫 번째 구역을 찾습니다.

    Args:
        point: 관광객 위치 (경도, 위도)
        zones: 활성 구역들 (평가 순서대로)

    Returns:
        매칭 결과, 어떤 구역에도 속하지 않으면 None
    """
    for zone in zones:
        if point_in_polygon(point, zone.coordinates):
            return ZoneMatch(
                zone=zone,
                breach=is_breach_zone(zone.type),
                severity=severity_for_zone(zone.type),
            )
    return None
