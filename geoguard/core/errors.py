"""
Error types for GeoGuard.
"""


class GeoGuardError(Exception):
    """GeoGuard 기본 예외"""


class SweepLoadError(GeoGuardError):
    """관광객/구역 피드를 불러오지 못한 경우 (스윕 중단)"""


class OpenAlertExistsError(GeoGuardError):
    """동일 (관광객, 유형)에 미해결 경보가 이미 있는 경우"""

    def __init__(self, user_id: str, alert_type: str):
        super().__init__(f"unresolved {alert_type} alert already exists for {user_id}")
        self.user_id = user_id
        self.alert_type = alert_type


class NotFoundError(GeoGuardError):
    """요청한 레코드가 없는 경우"""
