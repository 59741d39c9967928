"""
빈 데이터베이스에 예시 구역을 넣는 스크립트.

스키마를 초기화한 뒤 구역이 하나도 없을 때만 예시 구역을 생성합니다.
이미 구역이 있으면 아무것도 바꾸지 않습니다.
"""

import sys
import asyncio
from geoguard.adapters.storage import SQLiteAlertStore, SQLiteTouristStore, SQLiteZoneStore
from geoguard.observability.logging_setup import get_logger, setup_logging

log = get_logger("geoguard.seed")

# 예시 구역 ([경도, 위도] 링)
SAMPLE_ZONES = [
    {
        "name": "Caution Area",
        "type": "yellow",
        "description": "Area requiring extra caution - moderate risk zone",
        "coordinates": [
            [77.205, 28.61],
            [77.207, 28.61],
            [77.207, 28.612],
            [77.205, 28.612],
            [77.205, 28.61],
        ],
    },
]


async def seed(sqlite_path: str, samples=None) -> int:
    """
    스키마를 만들고 빈 구역 테이블에 예시 구역을 넣습니다.

    Args:
        sqlite_path: SQLite 데이터베이스 파일 경로
        samples: 넣을 구역 목록 (기본값: SAMPLE_ZONES)

    Returns:
        생성된 구역 수
    """
    zones = SQLiteZoneStore(sqlite_path)
    await zones.init()
    await SQLiteTouristStore(sqlite_path).init()
    await SQLiteAlertStore(sqlite_path).init()

    existing = await zones.count()
    if existing:
        log.info("구역이 이미 존재하여 예시 생성 건너뜀", existing=existing)
        return 0

    created = 0
    for sample in SAMPLE_ZONES if samples is None else samples:
        await zones.create(sample["name"], sample["type"], sample["description"], sample["coordinates"])
        created += 1
    log.info("예시 구역 생성 완료", created=created, db_path=sqlite_path)
    return created


async def main():
    """메인 함수"""
    if len(sys.argv) < 2:
        print("사용법: python -m migrations.seed_zones <sqlite_file>")
        print("예시: python -m migrations.seed_zones /data/geoguard.db")
        sys.exit(1)

    setup_logging("INFO")
    created = await seed(sys.argv[1])
    print(f"예시 구역 {created}개 생성")


if __name__ == "__main__":
    asyncio.run(main())
