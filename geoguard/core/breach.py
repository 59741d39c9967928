"""
Breach state machine for GeoGuard.

Pure transition logic: given a tourist's previous breach state and the
current zone classification, decide the next state and whether a
GEOFENCE alert should be opened or resolved. I/O is left to the sweep.

    prev  | match              | next  | alert action
    ------+--------------------+-------+-------------
    False | none               | False | none
    False | green              | False | none
    False | yellow / red       | True  | open
    True  | none               | False | resolve
    True  | green              | False | resolve
    True  | yellow / red       | True  | none
"""

from datetime import datetime
from typing import Optional
from geoguard.core.models import BreachState, BreachTransition, ZoneMatch

def decide_transition(prev: BreachState, match: Optional[ZoneMatch], now: datetime) -> BreachTransition:
    """
    다음 경계 상태와 경보 조치를 결정합니다.

    Args:
        prev: 이전 상태
        match: 구역 분류 결과 (None이면 구역 밖)
        now: 스윕 시각

    Returns:
        상태 전이 결정
    """
    was_breached = prev.geo_fence_breached
    is_breached = bool(match and match.breach)

    if match is None:
        state = BreachState()
    else:
        state = BreachState(
            geo_fence_breached=is_breached,
            current_zone_id=match.zone.id,
            current_zone_type=match.zone.type,
            current_zone_name=match.zone.name,
        )

    action = "none"
    severity = None
    if is_breached and not was_breached:
        action = "open"
        severity = match.severity
        state.breach_time = now
    elif is_breached:
        # 이탈 지속: 최초 이탈 시각 유지
        state.breach_time = prev.breach_time or now
    elif was_breached:
        action = "resolve"

    return BreachTransition(
        state=state,
        action=action,
        severity=severity,
        changed=state != prev,
    )
