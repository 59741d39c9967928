"""
Tourist store port interface.

This module defines the protocol for the tourist position feed
and breach state persistence.
"""

from typing import List, Protocol
from geoguard.core.models import BreachState, Tourist

class TouristStorePort(Protocol):
    """관광객 저장소 포트 인터페이스"""

    async def list_positioned(self) -> List[Tourist]:
        """
        위치가 보고된 모든 관광객을 조회합니다.

        Returns:
            위도/경도가 모두 있는 관광객 목록
        """
        ...

    async def update_breach_state(self, tourist_id: str, state: BreachState) -> None:
        """
        관광객의 경계 이탈 상태를 저장합니다.

        Args:
            tourist_id: 관광객 ID
            state: 새 상태

        Raises:
            NotFoundError: 관광객이 없는 경우
        """
        ...
