"""
Geographic utilities for GeoGuard.

This module provides point-in-polygon testing and coordinate
validation. Rings are [(lng, lat), ...] in GeoJSON axis order.
"""

import math
from typing import Iterable, Sequence, Tuple

def point_in_polygon(point: Tuple[float, float], polygon: Sequence[Sequence[float]]) -> bool:
    """
    점이 폴리곤 내부에 있는지 Ray casting(짝홀 규칙)으로 확인합니다.

    폴리곤은 명시적으로 닫혀 있지 않아도 됩니다 (마지막-첫 꼭짓점 간선 포함).
    꼭짓점이 3개 미만이거나 중복/공선 꼭짓점이 있어도 별도 처리하지 않습니다.

    Args:
        point: 확인할 점 (경도, 위도)
        polygon: 폴리곤의 꼭짓점들 [(경도, 위도), ...]

    Returns:
        점이 폴리곤 내부에 있으면 True, 외부에 있으면 False
    """
    x, y = point
    inside = False
    n = len(polygon)
    j = n - 1
    for i in range(n):
        xi, yi = polygon[i][0], polygon[i][1]
        xj, yj = polygon[j][0], polygon[j][1]
        # 수평 간선은 앞의 조건에서 걸러지므로 0으로 나누지 않음
        if ((yi > y) != (yj > y)) and (x < (xj - xi) * (y - yi) / (yj - yi) + xi):
            inside = not inside
        j = i
    return inside

def validate_coordinates(lat: float, lon: float) -> bool:
    """
    좌표가 유효한지 확인합니다.

    Args:
        lat: 위도
        lon: 경도

    Returns:
        좌표가 유한하고 범위 안에 있으면 True
    """
    if not (is_finite(lat) and is_finite(lon)):
        return False
    return -90 <= lat <= 90 and -180 <= lon <= 180

def is_finite(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)

def is_usable_ring(ring: Iterable[Sequence[float]]) -> bool:
    """꼭짓점 3개 이상, 모든 좌표가 유한한 링인지 확인합니다."""
    points = list(ring)
    if len(points) < 3:
        return False
    return all(len(p) >= 2 and is_finite(p[0]) and is_finite(p[1]) for p in points)
