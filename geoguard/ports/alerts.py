"""
Alert store port interface.

This module defines the protocol for the alert lifecycle store.
"""

from typing import List, Optional, Protocol
from geoguard.core.models import Alert, AlertSeverity, AlertType, Location

class AlertStorePort(Protocol):
    """경보 저장소 포트 인터페이스"""

    async def create_alert(self, user_id: str, alert_type: AlertType,
                           severity: AlertSeverity, location: Location) -> str:
        """
        미해결 경보를 새로 생성합니다.

        Args:
            user_id: 관광객 ID
            alert_type: 경보 유형
            severity: 심각도
            location: 생성 시점 위치

        Returns:
            생성된 경보 ID
        """
        ...

    async def find_unresolved_alert(self, user_id: str, alert_type: AlertType) -> Optional[Alert]:
        """관광객의 미해결 경보 하나를 조회합니다."""
        ...

    async def resolve_unresolved_alerts(self, user_id: str, alert_type: AlertType,
                                        resolved_by: Optional[str] = None) -> int:
        """
        관광객의 해당 유형 미해결 경보를 모두 해결 처리합니다.

        Returns:
            해결된 경보 수
        """
        ...

    async def resolve_alert(self, alert_id: str, resolved_by: Optional[str]) -> None:
        ...

    async def delete_alert(self, alert_id: str) -> None:
        ...

    async def list_active(self) -> List[Alert]:
        ...
