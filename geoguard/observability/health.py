"""
HTTP endpoints for GeoGuard.

This module implements health, readiness, metrics and info endpoints
together with the sweep trigger and the zone, alert and position
routes used by the dashboards.
"""

from datetime import timedelta
from typing import Optional
from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import Response, JSONResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
import time
from geoguard.settings import Settings
from geoguard.adapters.storage import SQLiteAlertStore, SQLiteTouristStore, SQLiteZoneStore
from geoguard.core.errors import NotFoundError, OpenAlertExistsError, SweepLoadError
from geoguard.core.models import (
    AlertCreate, AlertRef, Location, LocationUpdate, SosRequest, ZoneCreate, ZoneUpdate
)
from geoguard.common.clock import to_iso, utcnow
from geoguard.orchestrators.sweep import BreachSweep
from geoguard.observability import metrics
from geoguard.observability.logging_setup import get_logger

log = get_logger("geoguard.http")

def _fail(status_code: int, error: str, details: Optional[str] = None) -> JSONResponse:
    body = {"success": False, "error": error}
    if details:
        body["details"] = details
    return JSONResponse(body, status_code=status_code)

def create_app(settings: Settings,
               *,
               sweep: BreachSweep,
               tourists: SQLiteTouristStore,
               zones: SQLiteZoneStore,
               alerts: SQLiteAlertStore) -> FastAPI:
    """FastAPI 애플리케이션을 생성합니다."""
    app = FastAPI(
        title=settings.observability.service_name,
        version=settings.observability.build_version,
        description="GeoGuard Geofence Breach Detection Service"
    )

    start_time = time.time()

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        return _fail(400, "Invalid request payload", str(exc.errors()))

    @app.exception_handler(NotFoundError)
    async def not_found(request: Request, exc: NotFoundError):
        return _fail(404, str(exc))

    @app.exception_handler(OpenAlertExistsError)
    async def open_alert_exists(request: Request, exc: OpenAlertExistsError):
        return _fail(409, str(exc))

    @app.get("/health")
    async def health():
        """헬스 체크 엔드포인트"""
        return JSONResponse({
            "status": "ok",
            "service": settings.observability.service_name,
            "timestamp": time.time()
        })

    @app.get("/ready")
    async def ready():
        """레디니스 체크 엔드포인트 (DB 응답 확인)"""
        if not await tourists.ping():
            return JSONResponse({
                "status": "not_ready",
                "service": settings.observability.service_name,
                "timestamp": time.time()
            }, status_code=503)
        return JSONResponse({
            "status": "ready",
            "service": settings.observability.service_name,
            "timestamp": time.time()
        })

    @app.get("/metrics")
    async def metrics_endpoint():
        """Prometheus 메트릭 엔드포인트"""
        if not settings.observability.metrics_enabled:
            raise HTTPException(status_code=503, detail="Metrics disabled")

        metrics.uptime_seconds.set(time.time() - start_time)
        return Response(
            generate_latest(),
            media_type=CONTENT_TYPE_LATEST
        )

    @app.get("/info")
    async def info():
        """서비스 정보 엔드포인트"""
        uptime = time.time() - start_time
        last = sweep.last_result.to_wire() if sweep.last_result else None
        return JSONResponse({
            "service": settings.observability.service_name,
            "version": settings.observability.build_version,
            "build_date": settings.observability.build_date,
            "uptime_seconds": int(uptime),
            "metrics_enabled": settings.observability.metrics_enabled,
            "log_level": settings.observability.log_level,
            "sweep_interval_sec": settings.sweep.interval_sec,
            "sweep_in_progress": sweep.in_progress,
            "sweep_runs": sweep.runs,
            "last_sweep": last
        })

    # ---- 경계 이탈 감지 ----

    @app.post("/run-sweep")
    async def run_sweep():
        """스윕을 즉시 실행합니다."""
        try:
            result = await sweep.run_sweep()
        except SweepLoadError as e:
            log.error("스윕 요청 처리 실패", error=str(e))
            return _fail(500, "Internal server error", str(e))

        if result is None:
            return _fail(409, "Sweep already in progress")

        return JSONResponse({
            "success": True,
            "message": f"Processed {result.processed_tourists} tourists, "
                       f"updated {result.updated_records} records",
            "data": result.to_wire()
        })

    # ---- 구역 ----

    @app.get("/zones")
    async def list_zones():
        """활성 구역 목록"""
        items = [z.to_wire() for z in await zones.list_active()]
        return {"success": True, "data": items, "count": len(items)}

    @app.post("/zones")
    async def create_zone(payload: ZoneCreate):
        """구역을 생성합니다."""
        zone = await zones.create(
            payload.name,
            payload.type,
            payload.description,
            [list(p) for p in payload.coordinates],
            created_by=payload.created_by,
        )
        return {"success": True, "data": zone.to_wire(), "message": "Zone created successfully"}

    @app.put("/zones")
    async def update_zone(payload: ZoneUpdate):
        """구역을 부분 갱신합니다."""
        changes = payload.model_dump(include={"name", "type", "description", "coordinates"}, exclude_none=True)
        if "coordinates" in changes:
            changes["coordinates"] = [list(p) for p in changes["coordinates"]]
        await zones.update(payload.id, changes, updated_by=payload.updated_by)
        return {"success": True, "message": "Zone updated successfully"}

    @app.delete("/zones")
    async def delete_zone(id: Optional[str] = None):
        """구역을 비활성화합니다 (소프트 삭제)."""
        if not id:
            return _fail(400, "Zone ID is required")
        await zones.deactivate(id)
        return {"success": True, "message": "Zone deleted successfully"}

    # ---- 경보 ----

    @app.get("/alerts")
    async def list_alerts():
        """미해결 경보 목록"""
        items = [a.to_wire() for a in await alerts.list_active()]
        return {"success": True, "data": items, "count": len(items)}

    @app.post("/alerts")
    async def resolve_alert(payload: AlertRef):
        """경보를 해결 처리합니다."""
        await alerts.resolve_alert(payload.alert_id, payload.resolved_by)
        log.info("경보 해결됨", alert_id=payload.alert_id)
        return {"success": True, "message": "Alert resolved successfully"}

    @app.put("/alerts")
    async def create_alert(payload: AlertCreate):
        """관리자가 경보를 생성합니다."""
        alert_id = await alerts.create_alert(
            payload.user_id, payload.type, payload.severity, payload.location
        )
        return {"success": True, "message": "Alert created successfully", "id": alert_id}

    @app.delete("/alerts")
    async def delete_alert(payload: AlertRef):
        """경보를 삭제합니다."""
        await alerts.delete_alert(payload.alert_id)
        log.info("경보 삭제됨", alert_id=payload.alert_id)
        return {"success": True, "message": "Alert deleted successfully"}

    # ---- 관광객 위치 ----

    @app.post("/location")
    async def update_location(payload: LocationUpdate):
        """관광객 위치를 갱신합니다."""
        await tourists.update_location(
            payload.user_id, payload.lat, payload.lng, sos=payload.sos, name=payload.name
        )
        return {
            "success": True,
            "message": "Location updated successfully",
            "data": {"lat": payload.lat, "lng": payload.lng, "sos": payload.sos,
                     "timestamp": to_iso(utcnow())}
        }

    @app.post("/sos")
    async def sos(payload: SosRequest):
        """SOS를 발신하고 HIGH 경보를 생성합니다."""
        tourist = await tourists.get(payload.user_id)
        if tourist is None:
            return _fail(404, "Tourist not found")
        if tourist.lat is None or tourist.lng is None:
            return _fail(400, "No known location for tourist")

        await tourists.set_sos(tourist.id, True)
        location = Location(lat=tourist.lat, lng=tourist.lng)
        alert_id = await alerts.create_alert(tourist.id, "SOS", "HIGH", location)
        log.warning("SOS 발신됨", tourist_id=tourist.id, lat=tourist.lat, lng=tourist.lng)
        return {
            "success": True,
            "sos": True,
            "message": "SOS activated - Emergency alert created",
            "location": location.to_wire(),
            "id": alert_id
        }

    @app.get("/tourists")
    async def list_tourists():
        """관광객 목록 (경계 상태 포함)"""
        items = [t.to_wire() for t in await tourists.list_all()]
        return {"success": True, "data": items, "count": len(items)}

    @app.get("/locations/{user_id}")
    async def location_history(user_id: str, limit: int = Query(100, ge=1, le=1000)):
        """관광객 위치 이력 (최신순)"""
        items = [r.to_wire() for r in await tourists.location_history(user_id, limit)]
        log.info("위치 이력 조회", tourist_id=user_id, count=len(items))
        return {"success": True, "data": items, "count": len(items), "userId": user_id}

    @app.get("/dashboard/stats")
    async def dashboard_stats():
        """대시보드 통계"""
        now = utcnow()
        return {
            "success": True,
            "data": {
                "totalTourists": await tourists.count(),
                "activeTourists": await tourists.count_active_since(now - timedelta(hours=24)),
                "breachedTourists": await tourists.count(breached=True),
                "sosAlerts": await alerts.count(resolved=False, alert_type="SOS"),
                "resolvedAlerts": await alerts.count(resolved=True),
                "lastUpdated": to_iso(now)
            }
        }

    @app.get("/")
    async def root():
        """루트 엔드포인트"""
        return JSONResponse({
            "service": settings.observability.service_name,
            "version": settings.observability.build_version,
            "endpoints": {
                "health": "/health",
                "ready": "/ready",
                "metrics": "/metrics",
                "info": "/info",
                "run_sweep": "/run-sweep",
                "zones": "/zones",
                "alerts": "/alerts",
                "location": "/location",
                "sos": "/sos",
                "tourists": "/tourists",
                "locations": "/locations/{user_id}",
                "stats": "/dashboard/stats"
            }
        })

    return app
