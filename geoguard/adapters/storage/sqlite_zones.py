"""
SQLite-based zone store for GeoGuard.

Zones are authored by authorities and soft-deleted through the
is_active flag. Coordinates are stored as a JSON array of [lng, lat]
pairs.
"""

import aiosqlite
import json
import uuid
from typing import Any, Dict, List, Optional
from pydantic import ValidationError
from geoguard.core.errors import NotFoundError
from geoguard.core.models import Zone
from geoguard.common.clock import to_iso, utcnow
from geoguard.observability.logging_setup import get_logger

log = get_logger("geoguard.zones")

# SQLite 스키마
SCHEMA = """
CREATE TABLE IF NOT EXISTS zones (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    type TEXT NOT NULL,
    description TEXT NOT NULL DEFAULT '',
    coordinates TEXT NOT NULL,
    is_active INTEGER NOT NULL DEFAULT 1,
    created_at TEXT NOT NULL,
    created_by TEXT,
    updated_at TEXT,
    updated_by TEXT
);
CREATE INDEX IF NOT EXISTS idx_zones_active ON zones(is_active, created_at);
"""

COLUMNS = ("id, name, type, description, coordinates, is_active, "
           "created_at, created_by, updated_at, updated_by")

# 부분 갱신 허용 필드
UPDATABLE = ("name", "type", "description", "coordinates")

def _row_to_zone(row) -> Zone:
    return Zone(
        id=row[0],
        name=row[1],
        type=row[2],
        description=row[3],
        coordinates=json.loads(row[4]),
        is_active=bool(row[5]),
        created_at=row[6],
        created_by=row[7],
        updated_at=row[8],
        updated_by=row[9],
    )

class SQLiteZoneStore:
    """SQLite 기반 구역 저장소"""

    def __init__(self, path: str, busy_timeout_sec: float = 5.0):
        self.path = path
        self.busy_timeout = busy_timeout_sec
        log.info(f"SQLiteZoneStore 초기화: {path}")

    def _connect(self):
        return aiosqlite.connect(self.path, timeout=self.busy_timeout)

    async def init(self) -> None:
        """데이터베이스를 초기화합니다."""
        async with self._connect() as db:
            await db.execute("PRAGMA journal_mode=WAL")
            await db.executescript(SCHEMA)
            await db.commit()
        log.info("SQLiteZoneStore 스키마 초기화 완료")

    async def list_active(self) -> List[Zone]:
        """
        활성 구역을 생성 순서대로 조회합니다.

        파싱할 수 없는 레코드는 경고 후 건너뜁니다.

        Returns:
            활성 구역 목록
        """
        async with self._connect() as db:
            cursor = await db.execute(
                f"SELECT {COLUMNS} FROM zones WHERE is_active = 1 ORDER BY created_at ASC, id ASC"
            )
            rows = await cursor.fetchall()

        zones = []
        for row in rows:
            try:
                zones.append(_row_to_zone(row))
            except (ValidationError, ValueError) as e:
                log.warning("구역 레코드 변환 실패, 건너뜀", zone_id=row[0], error=str(e))
        return zones

    async def get(self, zone_id: str) -> Optional[Zone]:
        async with self._connect() as db:
            cursor = await db.execute(f"SELECT {COLUMNS} FROM zones WHERE id = ?", (zone_id,))
            row = await cursor.fetchone()
            return _row_to_zone(row) if row else None

    async def create(self, name: str, zone_type: str, description: str,
                     coordinates: List[List[float]], created_by: Optional[str] = None) -> Zone:
        """
        구역을 생성합니다.

        Args:
            name: 구역 이름
            zone_type: green | yellow | red
            description: 설명
            coordinates: [[경도, 위도], ...]
            created_by: 생성한 관리자 ID

        Returns:
            생성된 구역
        """
        zone = Zone(
            id=uuid.uuid4().hex,
            name=name.strip(),
            type=zone_type,
            description=description.strip(),
            coordinates=coordinates,
            is_active=True,
            created_at=utcnow(),
            created_by=created_by,
        )
        async with self._connect() as db:
            await db.execute(
                f"INSERT INTO zones ({COLUMNS}) VALUES (?, ?, ?, ?, ?, 1, ?, ?, NULL, NULL)",
                (zone.id, zone.name, zone.type, zone.description,
                 json.dumps(zone.coordinates), to_iso(zone.created_at), created_by)
            )
            await db.commit()
        log.info("구역 생성됨", zone_id=zone.id, name=zone.name, type=zone.type)
        return zone

    async def update(self, zone_id: str, changes: Dict[str, Any], updated_by: Optional[str] = None) -> None:
        """
        구역을 부분 갱신합니다.

        Args:
            zone_id: 구역 ID
            changes: 변경할 필드 (name, type, description, coordinates)
            updated_by: 갱신한 관리자 ID

        Raises:
            NotFoundError: 구역이 없는 경우
        """
        sets = ["updated_at = ?", "updated_by = ?"]
        params: List[Any] = [to_iso(utcnow()), updated_by]
        for field in UPDATABLE:
            value = changes.get(field)
            if value is None:
                continue
            if field == "coordinates":
                value = json.dumps(value)
            elif isinstance(value, str):
                value = value.strip()
            sets.append(f"{field} = ?")
            params.append(value)
        params.append(zone_id)

        async with self._connect() as db:
            cursor = await db.execute(f"UPDATE zones SET {', '.join(sets)} WHERE id = ?", params)
            await db.commit()
            if cursor.rowcount == 0:
                raise NotFoundError(f"zone {zone_id} not found")
        log.info("구역 갱신됨", zone_id=zone_id)

    async def deactivate(self, zone_id: str, updated_by: Optional[str] = None) -> None:
        """
        구역을 비활성화합니다 (소프트 삭제).

        Raises:
            NotFoundError: 구역이 없는 경우
        """
        async with self._connect() as db:
            cursor = await db.execute(
                "UPDATE zones SET is_active = 0, updated_at = ?, updated_by = ? WHERE id = ?",
                (to_iso(utcnow()), updated_by, zone_id)
            )
            await db.commit()
            if cursor.rowcount == 0:
                raise NotFoundError(f"zone {zone_id} not found")
        log.info("구역 비활성화됨", zone_id=zone_id)

    async def count(self) -> int:
        """전체 구역 수 (비활성 포함)"""
        async with self._connect() as db:
            cursor = await db.execute("SELECT COUNT(*) FROM zones")
            row = await cursor.fetchone()
            return row[0] if row else 0
