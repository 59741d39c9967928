"""
Core domain models for GeoGuard.

This module defines the zone, tourist and alert models using Pydantic v2.
Field names are snake_case in Python and camelCase on the wire.
"""

from datetime import datetime
from typing import Annotated, List, Literal, Optional, Tuple
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

# 구역 유형 (safe / caution / restricted)
ZoneType = Literal["green", "yellow", "red"]
AlertType = Literal["SOS", "GEOFENCE", "ANOMALY"]
AlertSeverity = Literal["LOW", "MEDIUM", "HIGH"]
AlertAction = Literal["none", "open", "resolve"]

# (경도, 위도) - GeoJSON 순서
LngLat = Tuple[float, float]

class WireModel(BaseModel):
    """camelCase 별칭을 사용하는 기본 모델"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)

class Location(WireModel):
    """위치 스냅샷"""
    lat: float
    lng: float

class Zone(WireModel):
    """경계 구역 모델"""
    id: str
    name: str
    type: ZoneType
    description: str = ""
    coordinates: List[List[float]] = Field(default_factory=list)
    is_active: bool = True
    created_at: Optional[datetime] = None
    created_by: Optional[str] = None
    updated_at: Optional[datetime] = None
    updated_by: Optional[str] = None

class BreachState(WireModel):
    """관광객별 경계 이탈 상태"""
    geo_fence_breached: bool = False
    current_zone_id: Optional[str] = None
    current_zone_type: Optional[ZoneType] = None
    current_zone_name: Optional[str] = None
    breach_time: Optional[datetime] = None

class Tourist(BreachState):
    """관광객 모델 (경계 판정에 필요한 필드)"""
    id: str
    name: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    sos: bool = False
    timestamp: Optional[datetime] = None

    def breach_state(self) -> BreachState:
        return BreachState(
            geo_fence_breached=self.geo_fence_breached,
            current_zone_id=self.current_zone_id,
            current_zone_type=self.current_zone_type,
            current_zone_name=self.current_zone_name,
            breach_time=self.breach_time,
        )

class GeoPoint(WireModel):
    """GeoJSON Point ([경도, 위도])"""
    type: Literal["Point"] = "Point"
    coordinates: List[float]

class LocationRecord(WireModel):
    """위치 이력 레코드"""
    id: str
    user_id: str
    location: GeoPoint
    sos: bool = False
    timestamp: datetime

class Alert(WireModel):
    """경보 레코드"""
    id: str
    user_id: str
    type: AlertType
    severity: AlertSeverity
    location: Location
    timestamp: datetime
    resolved: bool = False
    resolved_by: Optional[str] = None
    resolved_at: Optional[datetime] = None

class ZoneMatch(BaseModel):
    """구역 분류 결과"""
    zone: Zone
    breach: bool
    severity: Optional[AlertSeverity] = None

class BreachTransition(BaseModel):
    """상태 전이 결정"""
    state: BreachState
    action: AlertAction = "none"
    severity: Optional[AlertSeverity] = None
    changed: bool = False

class SweepResult(WireModel):
    """스윕 집계 결과"""
    processed_tourists: int = 0
    updated_records: int = 0
    active_zones: int = 0
    created_alerts: int = 0
    resolved_alerts: int = 0

# ---- 요청 모델 (HTTP 경계 입력 검증) ----

def _check_lng_lat(points: List[LngLat]) -> List[LngLat]:
    for lng, lat in points:
        if not (-180 <= lng <= 180 and -90 <= lat <= 90):
            raise ValueError(f"coordinate out of range: [{lng}, {lat}]")
    return points

class ZoneCreate(WireModel):
    """구역 생성 요청"""
    name: str = Field(min_length=1)
    type: ZoneType
    description: str = Field(min_length=1)
    coordinates: List[LngLat] = Field(min_length=3)
    created_by: Optional[str] = None

    @field_validator("coordinates")
    @classmethod
    def _range(cls, v):
        return _check_lng_lat(v)

class ZoneUpdate(WireModel):
    """구역 부분 갱신 요청"""
    id: str = Field(validation_alias=AliasChoices("_id", "id"))
    name: Optional[str] = None
    type: Optional[ZoneType] = None
    description: Optional[str] = None
    coordinates: Optional[Annotated[List[LngLat], Field(min_length=3)]] = None
    updated_by: Optional[str] = None

    @field_validator("coordinates")
    @classmethod
    def _range(cls, v):
        return _check_lng_lat(v) if v is not None else v

class AlertCreate(WireModel):
    """관리자 경보 생성 요청"""
    user_id: str
    type: AlertType
    severity: AlertSeverity
    location: Location

    @field_validator("location")
    @classmethod
    def _range(cls, v: Location):
        _check_lng_lat([(v.lng, v.lat)])
        return v

class AlertRef(WireModel):
    """경보 해결/삭제 요청"""
    alert_id: str
    resolved_by: Optional[str] = None

class LocationUpdate(WireModel):
    """관광객 위치 보고"""
    user_id: str
    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)
    sos: bool = False
    name: Optional[str] = None

class SosRequest(WireModel):
    """SOS 발신 요청"""
    user_id: str
