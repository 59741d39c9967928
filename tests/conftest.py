"""
테스트 설정 및 픽스처

이 모듈은 pytest 설정과 공통 픽스처를 제공합니다.
"""

import pytest
import tempfile
import os
from datetime import datetime, timezone
from geoguard.settings import Settings
from geoguard.core.models import Zone
from geoguard.adapters.storage import SQLiteAlertStore, SQLiteTouristStore, SQLiteZoneStore


@pytest.fixture
def temp_db_path():
    """임시 데이터베이스 파일 경로"""
    with tempfile.NamedTemporaryFile(suffix='.db', delete=False) as f:
        temp_path = f.name
    yield temp_path
    # 테스트 후 파일 정리 (WAL 부속 파일 포함)
    for suffix in ("", "-wal", "-shm"):
        if os.path.exists(temp_path + suffix):
            os.unlink(temp_path + suffix)


@pytest.fixture
async def stores(temp_db_path):
    """초기화된 SQLite 저장소 묶음 (tourists, zones, alerts)"""
    tourists = SQLiteTouristStore(temp_db_path)
    zones = SQLiteZoneStore(temp_db_path)
    alerts = SQLiteAlertStore(temp_db_path)
    await tourists.init()
    await zones.init()
    await alerts.init()
    return tourists, zones, alerts


@pytest.fixture
def sample_settings():
    """테스트용 설정"""
    settings = Settings()
    settings.observability.service_name = "test-service"
    settings.observability.build_version = "1.0.0"
    settings.observability.log_level = "INFO"
    settings.observability.http_port = 8080
    return settings


@pytest.fixture
def sweep_time():
    """고정 스윕 시각"""
    return datetime(2026, 10, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def make_zone():
    """테스트용 구역 팩토리"""
    def _make(zone_id, zone_type, ring, name=None):
        return Zone(id=zone_id, name=name or zone_id, type=zone_type, coordinates=[list(p) for p in ring])
    return _make


@pytest.fixture
def square_ring():
    """(0,0)-(10,10) 정사각형 링 [(경도, 위도), ...]"""
    return [(0.0, 0.0), (10.0, 0.0), (10.0, 10.0), (0.0, 10.0)]


@pytest.fixture
def red_fort_ring():
    """(26.90, 75.78) 을 감싸는 폴리곤 [(경도, 위도), ...]"""
    return [(75.70, 26.80), (75.90, 26.80), (75.90, 27.00), (75.70, 27.00)]


# pytest 설정
def pytest_configure(config):
    """pytest 설정"""
    config.addinivalue_line(
        "markers", "slow: 느린 테스트 마커"
    )
    config.addinivalue_line(
        "markers", "integration: 통합 테스트 마커"
    )


def pytest_collection_modifyitems(config, items):
    """테스트 아이템 수정"""
    for item in items:
        # 통합 테스트 마커 추가
        if "integration" in item.name or "scenario" in item.name:
            item.add_marker(pytest.mark.integration)
