"""
Time helpers for GeoGuard.

All timestamps are timezone-aware UTC and stored as ISO-8601 text.
"""

from datetime import datetime, timezone
from typing import Optional

def utcnow() -> datetime:
    return datetime.now(timezone.utc)

def to_iso(value: Optional[datetime]) -> Optional[str]:
    """datetime을 ISO 문자열로 변환합니다 (None은 그대로)."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()
