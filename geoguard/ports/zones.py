"""
Zone store port interface.

This module defines the protocol for the active zone feed.
"""

from typing import List, Protocol
from geoguard.core.models import Zone

class ZoneStorePort(Protocol):
    """구역 저장소 포트 인터페이스"""

    async def list_active(self) -> List[Zone]:
        """
        활성 구역을 결정적 순서로 조회합니다.

        Returns:
            is_active=True 인 구역 목록
        """
        ...
