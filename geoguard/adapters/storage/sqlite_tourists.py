"""
SQLite-based tourist store for GeoGuard.

This module holds tourist positions (the position feed) and the
breach state written back by the sweep.
"""

import aiosqlite
from datetime import datetime
from typing import List, Optional
from pydantic import ValidationError
from geoguard.core.errors import NotFoundError
from geoguard.core.models import BreachState, GeoPoint, LocationRecord, Tourist
from geoguard.common.clock import to_iso, utcnow
from geoguard.observability.logging_setup import get_logger

log = get_logger("geoguard.tourists")

# SQLite 스키마
SCHEMA = """
CREATE TABLE IF NOT EXISTS tourists (
    id TEXT PRIMARY KEY,
    name TEXT,
    lat REAL,
    lng REAL,
    sos INTEGER NOT NULL DEFAULT 0,
    timestamp TEXT,
    geo_fence_breached INTEGER NOT NULL DEFAULT 0,
    current_zone_id TEXT,
    current_zone_type TEXT,
    current_zone_name TEXT,
    breach_time TEXT,
    created_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_tourists_position ON tourists(lat, lng);
CREATE INDEX IF NOT EXISTS idx_tourists_timestamp ON tourists(timestamp);
CREATE TABLE IF NOT EXISTS locations (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    lat REAL NOT NULL,
    lng REAL NOT NULL,
    sos INTEGER NOT NULL DEFAULT 0,
    timestamp TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_locations_user_time ON locations(user_id, timestamp);
"""

COLUMNS = ("id, name, lat, lng, sos, timestamp, geo_fence_breached, "
           "current_zone_id, current_zone_type, current_zone_name, breach_time")

def _row_to_tourist(row) -> Tourist:
    return Tourist(
        id=row[0],
        name=row[1],
        lat=row[2],
        lng=row[3],
        sos=bool(row[4]),
        timestamp=row[5],
        geo_fence_breached=bool(row[6]),
        current_zone_id=row[7],
        current_zone_type=row[8],
        current_zone_name=row[9],
        breach_time=row[10],
    )

class SQLiteTouristStore:
    """SQLite 기반 관광객 저장소"""

    def __init__(self, path: str, busy_timeout_sec: float = 5.0):
        self.path = path
        self.busy_timeout = busy_timeout_sec
        log.info(f"SQLiteTouristStore 초기화: {path}")

    def _connect(self):
        return aiosqlite.connect(self.path, timeout=self.busy_timeout)

    async def init(self) -> None:
        """데이터베이스를 초기화합니다."""
        async with self._connect() as db:
            await db.execute("PRAGMA journal_mode=WAL")
            await db.executescript(SCHEMA)
            await db.commit()
        log.info("SQLiteTouristStore 스키마 초기화 완료")

    async def ping(self) -> bool:
        """데이터베이스 응답 여부"""
        try:
            async with self._connect() as db:
                await db.execute("SELECT 1 FROM tourists LIMIT 1")
            return True
        except Exception as e:
            log.error(f"SQLiteTouristStore ping 오류: {e}")
            return False

    async def list_positioned(self) -> List[Tourist]:
        """
        위도/경도가 모두 있는 관광객을 조회합니다.

        변환할 수 없는 레코드는 경고 후 건너뜁니다.

        Returns:
            관광객 목록
        """
        async with self._connect() as db:
            cursor = await db.execute(
                f"SELECT {COLUMNS} FROM tourists WHERE lat IS NOT NULL AND lng IS NOT NULL ORDER BY id"
            )
            rows = await cursor.fetchall()

        tourists = []
        for row in rows:
            try:
                tourists.append(_row_to_tourist(row))
            except ValidationError as e:
                log.warning("관광객 레코드 변환 실패, 건너뜀", tourist_id=row[0], error=str(e))
        return tourists

    async def list_all(self) -> List[Tourist]:
        async with self._connect() as db:
            cursor = await db.execute(f"SELECT {COLUMNS} FROM tourists ORDER BY id")
            rows = await cursor.fetchall()
            return [_row_to_tourist(row) for row in rows]

    async def get(self, tourist_id: str) -> Optional[Tourist]:
        async with self._connect() as db:
            cursor = await db.execute(f"SELECT {COLUMNS} FROM tourists WHERE id = ?", (tourist_id,))
            row = await cursor.fetchone()
            return _row_to_tourist(row) if row else None

    async def update_location(self, tourist_id: str, lat: float, lng: float,
                              sos: bool = False, name: Optional[str] = None) -> None:
        """
        관광객 위치를 갱신합니다 (없으면 생성).

        같은 트랜잭션에서 위치 이력에도 한 줄을 추가합니다.

        Args:
            tourist_id: 관광객 ID
            lat: 위도
            lng: 경도
            sos: SOS 상태
            name: 표시 이름 (None이면 기존 값 유지)
        """
        now = to_iso(utcnow())
        async with self._connect() as db:
            await db.execute(
                "INSERT INTO tourists (id, name, lat, lng, sos, timestamp, created_at) "
                "VALUES (?, ?, ?, ?, ?, ?, ?) "
                "ON CONFLICT(id) DO UPDATE SET lat = excluded.lat, lng = excluded.lng, "
                "sos = excluded.sos, timestamp = excluded.timestamp, "
                "name = COALESCE(excluded.name, tourists.name)",
                (tourist_id, name, lat, lng, 1 if sos else 0, now, now)
            )
            await db.execute(
                "INSERT INTO locations (user_id, lat, lng, sos, timestamp) VALUES (?, ?, ?, ?, ?)",
                (tourist_id, lat, lng, 1 if sos else 0, now)
            )
            await db.commit()

    async def location_history(self, tourist_id: str, limit: int = 100) -> List[LocationRecord]:
        """
        관광객의 위치 이력을 최신순으로 조회합니다.

        Args:
            tourist_id: 관광객 ID
            limit: 최대 레코드 수

        Returns:
            위치 이력 목록
        """
        async with self._connect() as db:
            cursor = await db.execute(
                "SELECT id, user_id, lat, lng, sos, timestamp FROM locations "
                "WHERE user_id = ? ORDER BY timestamp DESC, id DESC LIMIT ?",
                (tourist_id, max(0, limit))
            )
            rows = await cursor.fetchall()
        return [
            LocationRecord(
                id=str(row[0]),
                user_id=row[1],
                location=GeoPoint(coordinates=[row[3], row[2]]),
                sos=bool(row[4]),
                timestamp=row[5],
            )
            for row in rows
        ]

    async def set_sos(self, tourist_id: str, sos: bool) -> None:
        """
        SOS 상태를 설정합니다.

        Raises:
            NotFoundError: 관광객이 없는 경우
        """
        async with self._connect() as db:
            cursor = await db.execute(
                "UPDATE tourists SET sos = ?, timestamp = ? WHERE id = ?",
                (1 if sos else 0, to_iso(utcnow()), tourist_id)
            )
            await db.commit()
            if cursor.rowcount == 0:
                raise NotFoundError(f"tourist {tourist_id} not found")

    async def update_breach_state(self, tourist_id: str, state: BreachState) -> None:
        """
        경계 이탈 상태를 저장합니다.

        Args:
            tourist_id: 관광객 ID
            state: 새 상태

        Raises:
            NotFoundError: 관광객이 없는 경우
        """
        async with self._connect() as db:
            cursor = await db.execute(
                "UPDATE tourists SET geo_fence_breached = ?, current_zone_id = ?, "
                "current_zone_type = ?, current_zone_name = ?, breach_time = ? WHERE id = ?",
                (1 if state.geo_fence_breached else 0,
                 state.current_zone_id,
                 state.current_zone_type,
                 state.current_zone_name,
                 to_iso(state.breach_time),
                 tourist_id)
            )
            await db.commit()
            if cursor.rowcount == 0:
                raise NotFoundError(f"tourist {tourist_id} not found")

    async def count(self, *, breached: Optional[bool] = None) -> int:
        where = ""
        params = []
        if breached is not None:
            where = " WHERE geo_fence_breached = ?"
            params.append(1 if breached else 0)
        async with self._connect() as db:
            cursor = await db.execute(f"SELECT COUNT(*) FROM tourists{where}", params)
            result = await cursor.fetchone()
            return result[0] if result else 0

    async def count_active_since(self, since: datetime) -> int:
        """since 이후 위치를 보고한 관광객 수"""
        async with self._connect() as db:
            cursor = await db.execute(
                "SELECT COUNT(*) FROM tourists WHERE timestamp >= ?", (to_iso(since),)
            )
            result = await cursor.fetchone()
            return result[0] if result else 0
