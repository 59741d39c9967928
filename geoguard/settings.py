# geoguard/settings.py
from __future__ import annotations
from pydantic import BaseModel, Field

class Storage(BaseModel):
    db_path: str = "/data/geoguard.db"
    busy_timeout_sec: float = 5.0

class Sweep(BaseModel):
    enabled: bool = True
    interval_sec: float = 10.0                # 기존 폴링 주기
    max_concurrency: int = 16
    tourist_timeout_sec: float = 5.0          # 관광객 1명 처리 상한
    load_timeout_sec: float = 10.0            # 피드 로드 상한

class Observability(BaseModel):
    http_port: int = 8099
    metrics_enabled: bool = True
    service_name: str = "GeoGuard"
    build_version: str = "0.1.0"
    build_date: str = "2026-10-01"
    log_level: str = "INFO"

class Settings(BaseModel):
    # 하위 섹션 (기본값/팩토리로 누락 방지)
    storage: Storage = Field(default_factory=Storage)
    sweep: Sweep = Field(default_factory=Sweep)
    observability: Observability = Field(default_factory=Observability)

    def __init__(self, **data):
        super().__init__(**data)
        # 하위 객체들이 제대로 초기화되었는지 확인
        if not isinstance(self.storage, Storage):
            self.storage = Storage()
        if not isinstance(self.sweep, Sweep):
            self.sweep = Sweep()
        if not isinstance(self.observability, Observability):
            self.observability = Observability()
