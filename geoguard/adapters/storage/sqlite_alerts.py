"""
SQLite-based alert lifecycle store for GeoGuard.

This module implements alert creation and resolution. At most one
unresolved GEOFENCE alert per tourist is enforced by a unique partial
index; other alert types are not constrained.
"""

import aiosqlite
import uuid
from typing import List, Optional
from geoguard.core.errors import NotFoundError, OpenAlertExistsError
from geoguard.core.models import Alert, AlertSeverity, AlertType, Location
from geoguard.common.clock import to_iso, utcnow
from geoguard.observability.logging_setup import get_logger

log = get_logger("geoguard.alerts")

# SQLite 스키마
SCHEMA = """
CREATE TABLE IF NOT EXISTS alerts (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    type TEXT NOT NULL,
    severity TEXT NOT NULL,
    lat REAL NOT NULL,
    lng REAL NOT NULL,
    timestamp TEXT NOT NULL,
    resolved INTEGER NOT NULL DEFAULT 0,
    resolved_by TEXT,
    resolved_at TEXT
);
CREATE INDEX IF NOT EXISTS idx_alerts_user_type ON alerts(user_id, type, resolved);
CREATE INDEX IF NOT EXISTS idx_alerts_timestamp ON alerts(timestamp);
CREATE UNIQUE INDEX IF NOT EXISTS ux_alerts_open_geofence
    ON alerts(user_id) WHERE type = 'GEOFENCE' AND resolved = 0;
"""

COLUMNS = "id, user_id, type, severity, lat, lng, timestamp, resolved, resolved_by, resolved_at"

def _row_to_alert(row) -> Alert:
    return Alert(
        id=row[0],
        user_id=row[1],
        type=row[2],
        severity=row[3],
        location=Location(lat=row[4], lng=row[5]),
        timestamp=row[6],
        resolved=bool(row[7]),
        resolved_by=row[8],
        resolved_at=row[9],
    )

class SQLiteAlertStore:
    """SQLite 기반 경보 저장소"""

    def __init__(self, path: str, busy_timeout_sec: float = 5.0):
        """
        초기화합니다.

        Args:
            path: SQLite 데이터베이스 파일 경로
            busy_timeout_sec: 잠금 대기 상한 (초)
        """
        self.path = path
        self.busy_timeout = busy_timeout_sec
        log.info(f"SQLiteAlertStore 초기화: {path}")

    def _connect(self):
        return aiosqlite.connect(self.path, timeout=self.busy_timeout)

    async def init(self) -> None:
        """데이터베이스를 초기화합니다."""
        async with self._connect() as db:
            await db.execute("PRAGMA journal_mode=WAL")
            await db.executescript(SCHEMA)
            await db.commit()
        log.info("SQLiteAlertStore 스키마 초기화 완료")

    async def create_alert(self, user_id: str, alert_type: AlertType,
                           severity: AlertSeverity, location: Location) -> str:
        """
        미해결 경보를 추가합니다. 중복 확인은 호출 측 책임입니다.

        Args:
            user_id: 관광객 ID
            alert_type: 경보 유형
            severity: 심각도
            location: 생성 시점 위치

        Returns:
            생성된 경보 ID

        Raises:
            OpenAlertExistsError: 미해결 GEOFENCE 경보가 이미 있는 경우
        """
        alert_id = uuid.uuid4().hex
        try:
            async with self._connect() as db:
                await db.execute(
                    f"INSERT INTO alerts ({COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, 0, NULL, NULL)",
                    (alert_id, user_id, alert_type, severity,
                     location.lat, location.lng, to_iso(utcnow()))
                )
                await db.commit()
        except aiosqlite.IntegrityError:
            raise OpenAlertExistsError(user_id, alert_type)
        log.info("경보 생성됨", alert_id=alert_id, user_id=user_id,
                 type=alert_type, severity=severity)
        return alert_id

    async def find_unresolved_alert(self, user_id: str, alert_type: AlertType) -> Optional[Alert]:
        """
        관광객의 미해결 경보 하나를 조회합니다.

        Returns:
            가장 오래된 미해결 경보 또는 None
        """
        async with self._connect() as db:
            cursor = await db.execute(
                f"SELECT {COLUMNS} FROM alerts WHERE user_id = ? AND type = ? AND resolved = 0 "
                "ORDER BY timestamp ASC LIMIT 1",
                (user_id, alert_type)
            )
            row = await cursor.fetchone()
            return _row_to_alert(row) if row else None

    async def resolve_unresolved_alerts(self, user_id: str, alert_type: AlertType,
                                        resolved_by: Optional[str] = None) -> int:
        """
        관광객의 해당 유형 미해결 경보를 모두 해결 처리합니다.

        Args:
            user_id: 관광객 ID
            alert_type: 경보 유형
            resolved_by: 해결 처리자 ID (자동 해결이면 None)

        Returns:
            해결된 경보 수
        """
        async with self._connect() as db:
            cursor = await db.execute(
                "UPDATE alerts SET resolved = 1, resolved_by = ?, resolved_at = ? "
                "WHERE user_id = ? AND type = ? AND resolved = 0",
                (resolved_by, to_iso(utcnow()), user_id, alert_type)
            )
            await db.commit()
            resolved = cursor.rowcount
        if resolved > 0:
            log.info("경보 일괄 해결됨", user_id=user_id, type=alert_type, count=resolved)
        return resolved

    async def resolve_alert(self, alert_id: str, resolved_by: Optional[str]) -> None:
        """
        경보 하나를 해결 처리합니다 (관리자 조치).

        Raises:
            NotFoundError: 경보가 없는 경우
        """
        async with self._connect() as db:
            cursor = await db.execute(
                "UPDATE alerts SET resolved = 1, resolved_by = ?, resolved_at = ? WHERE id = ?",
                (resolved_by, to_iso(utcnow()), alert_id)
            )
            await db.commit()
            if cursor.rowcount == 0:
                raise NotFoundError(f"alert {alert_id} not found")

    async def delete_alert(self, alert_id: str) -> None:
        """
        경보를 삭제합니다 (관리자 조치).

        Raises:
            NotFoundError: 경보가 없는 경우
        """
        async with self._connect() as db:
            cursor = await db.execute("DELETE FROM alerts WHERE id = ?", (alert_id,))
            await db.commit()
            if cursor.rowcount == 0:
                raise NotFoundError(f"alert {alert_id} not found")

    async def get(self, alert_id: str) -> Optional[Alert]:
        async with self._connect() as db:
            cursor = await db.execute(f"SELECT {COLUMNS} FROM alerts WHERE id = ?", (alert_id,))
            row = await cursor.fetchone()
            return _row_to_alert(row) if row else None

    async def list_active(self) -> List[Alert]:
        """미해결 경보를 최신순으로 조회합니다."""
        async with self._connect() as db:
            cursor = await db.execute(
                f"SELECT {COLUMNS} FROM alerts WHERE resolved = 0 ORDER BY timestamp DESC"
            )
            rows = await cursor.fetchall()
            return [_row_to_alert(row) for row in rows]

    async def count(self, *, resolved: Optional[bool] = None, alert_type: Optional[AlertType] = None) -> int:
        """
        조건에 맞는 경보 수를 반환합니다.

        Args:
            resolved: 해결 여부 필터 (None이면 전체)
            alert_type: 유형 필터 (None이면 전체)
        """
        clauses = []
        params = []
        if resolved is not None:
            clauses.append("resolved = ?")
            params.append(1 if resolved else 0)
        if alert_type is not None:
            clauses.append("type = ?")
            params.append(alert_type)
        where = f" WHERE {' AND '.join(clauses)}" if clauses else ""
        async with self._connect() as db:
            cursor = await db.execute(f"SELECT COUNT(*) FROM alerts{where}", params)
            result = await cursor.fetchone()
            return result[0] if result else 0
