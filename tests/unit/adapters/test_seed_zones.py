"""
예시 구역 시드 스크립트 테스트
"""

import pytest

from geoguard.adapters.storage import SQLiteTouristStore, SQLiteZoneStore
from migrations.seed_zones import SAMPLE_ZONES, seed


class TestSeedZones:
    """seed() 테스트"""

    @pytest.mark.asyncio
    async def test_seeds_empty_database(self, temp_db_path):
        created = await seed(temp_db_path)

        zones = await SQLiteZoneStore(temp_db_path).list_active()
        assert created == len(SAMPLE_ZONES)
        assert zones[0].name == "Caution Area"
        assert zones[0].type == "yellow"
        # 관광객 테이블도 함께 생성됨
        assert await SQLiteTouristStore(temp_db_path).count() == 0

    @pytest.mark.asyncio
    async def test_second_run_is_noop(self, temp_db_path):
        await seed(temp_db_path)

        assert await seed(temp_db_path) == 0
        assert await SQLiteZoneStore(temp_db_path).count() == len(SAMPLE_ZONES)

    @pytest.mark.asyncio
    async def test_deactivated_zones_still_block_seeding(self, stores, temp_db_path, square_ring):
        _, zones, _ = stores
        zone = await zones.create("Old", "red", "retired", [list(p) for p in square_ring])
        await zones.deactivate(zone.id)

        assert await seed(temp_db_path) == 0
