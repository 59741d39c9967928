"""
Breach detection sweep for GeoGuard.

This module implements the periodic sweep that evaluates every
positioned tourist against the active zones, persists breach state
and opens/resolves GEOFENCE alerts, plus the ticker that drives it.
"""

import asyncio
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional, Set
from geoguard.core.breach import decide_transition
from geoguard.core.classifier import classify
from geoguard.core.errors import OpenAlertExistsError, SweepLoadError
from geoguard.core.models import Location, SweepResult, Tourist, Zone
from geoguard.common.clock import utcnow
from geoguard.common.geo import is_finite, is_usable_ring
from geoguard.ports.alerts import AlertStorePort
from geoguard.ports.tourists import TouristStorePort
from geoguard.ports.zones import ZoneStorePort
from geoguard.observability import metrics
from geoguard.observability.logging_setup import get_logger, with_context

log = get_logger("geoguard.sweep")

GEOFENCE = "GEOFENCE"

@dataclass
class TouristOutcome:
    """관광객 1명 처리 결과"""
    updated: bool = False
    created_alerts: int = 0
    resolved_alerts: int = 0
    breached: bool = False

class BreachSweep:
    """경계 이탈 감지 스윕"""

    def __init__(self,
                 tourists: TouristStorePort,
                 zones: ZoneStorePort,
                 alerts: AlertStorePort,
                 *,
                 max_concurrency: int = 16,
                 tourist_timeout_sec: float = 5.0,
                 load_timeout_sec: float = 10.0,
                 clock: Callable[[], datetime] = utcnow):
        """
        초기화합니다.

        Args:
            tourists: 관광객 저장소 (위치 피드 + 상태 기록)
            zones: 구역 저장소 (활성 구역 피드)
            alerts: 경보 저장소
            max_concurrency: 동시에 처리할 관광객 수
            tourist_timeout_sec: 관광객 1명 처리 시간 상한 (초)
            load_timeout_sec: 피드 로드 시간 상한 (초)
            clock: 스윕 시각 공급자
        """
        self.tourists = tourists
        self.zones = zones
        self.alerts = alerts
        self.max_concurrency = max(1, max_concurrency)
        self.tourist_timeout = tourist_timeout_sec
        self.load_timeout = load_timeout_sec
        self.clock = clock
        self._lock = asyncio.Lock()
        self.last_result: Optional[SweepResult] = None
        self.runs = 0

    @property
    def in_progress(self) -> bool:
        return self._lock.locked()

    async def run_sweep(self) -> Optional[SweepResult]:
        """
        스윕을 한 번 실행합니다.

        이미 실행 중인 스윕이 있으면 대기하지 않고 건너뜁니다.

        Returns:
            집계 결과, 건너뛴 경우 None

        Raises:
            SweepLoadError: 관광객 또는 구역 피드를 불러오지 못한 경우
        """
        if self._lock.locked():
            metrics.sweeps_total.labels(outcome="skipped").inc()
            log.warning("이전 스윕이 진행 중이어서 이번 실행을 건너뜁니다")
            return None

        async with self._lock:
            self.runs += 1
            # 이번 스윕의 모든 로그에 회차 번호 부여
            with metrics.sweep_seconds.time(), with_context(sweep_run=self.runs):
                try:
                    result = await self._sweep()
                except SweepLoadError:
                    metrics.sweeps_total.labels(outcome="failed").inc()
                    raise
            metrics.sweeps_total.labels(outcome="completed").inc()
            self.last_result = result
            return result

    async def _sweep(self) -> SweepResult:
        t0 = time.perf_counter()
        now = self.clock()
        tourists, zones = await self._load()
        zones = self._usable_zones(zones)
        metrics.active_zones.set(len(zones))

        log.info("경계 이탈 감지 시작", tourists=len(tourists), zones=len(zones))

        sem = asyncio.Semaphore(self.max_concurrency)
        outcomes = await asyncio.gather(*(
            self._guarded(sem, tourist, zones, now) for tourist in tourists
        ))

        result = SweepResult(active_zones=len(zones))
        breached = 0
        for outcome in outcomes:
            if outcome is None:
                continue
            result.processed_tourists += 1
            result.updated_records += 1 if outcome.updated else 0
            result.created_alerts += outcome.created_alerts
            result.resolved_alerts += outcome.resolved_alerts
            breached += 1 if outcome.breached else 0
        metrics.breached_tourists.set(breached)

        log.info("경계 이탈 감지 완료",
                 processed=result.processed_tourists,
                 skipped=len(tourists) - result.processed_tourists,
                 updated=result.updated_records,
                 created_alerts=result.created_alerts,
                 resolved_alerts=result.resolved_alerts,
                 elapsed_ms=round((time.perf_counter() - t0) * 1000, 1))
        return result

    async def _load(self):
        """
        관광객/구역 스냅샷을 각각 독립적으로 불러옵니다.

        한쪽이 실패해도 다른 쪽 로드가 끝날 때까지 기다린 뒤 첫 오류를 올립니다.
        """
        results = await asyncio.gather(
            asyncio.wait_for(self.tourists.list_positioned(), timeout=self.load_timeout),
            asyncio.wait_for(self.zones.list_active(), timeout=self.load_timeout),
            return_exceptions=True
        )
        for feed, result in zip(("tourists", "zones"), results):
            if isinstance(result, asyncio.TimeoutError):
                log.error("피드 로드 시간 초과", feed=feed, timeout_sec=self.load_timeout)
                raise SweepLoadError(f"timed out loading {feed} feed") from result
            if isinstance(result, Exception):
                log.error("피드 로드 실패", feed=feed, error=str(result))
                raise SweepLoadError(f"failed to load {feed} feed: {result}") from result
            if isinstance(result, BaseException):
                raise result
        return results

    def _usable_zones(self, zones: List[Zone]) -> List[Zone]:
        usable = []
        for zone in zones:
            if is_usable_ring(zone.coordinates):
                usable.append(zone)
            else:
                metrics.zones_skipped.inc()
                log.warning("구역 좌표가 유효하지 않아 건너뜁니다",
                            zone_id=zone.id, points=len(zone.coordinates))
        return usable

    async def _guarded(self, sem: asyncio.Semaphore, tourist: Tourist,
                       zones: List[Zone], now: datetime) -> Optional[TouristOutcome]:
        """관광객 단위 실패를 격리합니다."""
        if not (is_finite(tourist.lat) and is_finite(tourist.lng)):
            metrics.tourist_failures.labels(reason="invalid_position").inc()
            log.warning("관광객 좌표가 유효하지 않아 건너뜁니다",
                        tourist_id=tourist.id, lat=tourist.lat, lng=tourist.lng)
            return None

        async with sem:
            try:
                outcome = await asyncio.wait_for(
                    self.evaluate_tourist(tourist, zones, now),
                    timeout=self.tourist_timeout
                )
            except asyncio.TimeoutError:
                metrics.tourist_failures.labels(reason="timeout").inc()
                log.error("관광객 처리 시간 초과", tourist_id=tourist.id,
                          timeout_sec=self.tourist_timeout)
                return None
            except Exception as e:
                metrics.tourist_failures.labels(reason="error").inc()
                log.error("관광객 처리 실패", tourist_id=tourist.id, error=str(e))
                return None

        metrics.tourists_evaluated.inc()
        return outcome

    async def evaluate_tourist(self, tourist: Tourist, zones: List[Zone], now: datetime) -> TouristOutcome:
        """
        관광객 1명에 대해 분류 -> 상태 전이 -> 경보 조치 -> 상태 저장을 수행합니다.

        Args:
            tourist: 위치가 있는 관광객
            zones: 이번 스윕의 활성 구역 스냅샷
            now: 스윕 시각

        Returns:
            처리 결과
        """
        match = classify((tourist.lng, tourist.lat), zones)
        transition = decide_transition(tourist.breach_state(), match, now)
        outcome = TouristOutcome(breached=transition.state.geo_fence_breached)

        opened_id = None
        if transition.action == "open":
            opened_id = await self._open_alert(tourist, transition.severity)
            outcome.created_alerts = 1 if opened_id else 0
        elif transition.action == "resolve":
            resolved = await self.alerts.resolve_unresolved_alerts(tourist.id, GEOFENCE)
            if resolved:
                metrics.geofence_alerts_resolved.inc(resolved)
            outcome.resolved_alerts = resolved

        if transition.changed:
            try:
                await self.tourists.update_breach_state(tourist.id, transition.state)
            except (Exception, asyncio.CancelledError):
                # 상태가 저장되지 않으면 다음 주기에 이탈 해제를 감지할 수 없음
                if opened_id is not None:
                    await self._withdraw_alert(tourist.id, opened_id)
                raise
            outcome.updated = True
        return outcome

    async def _open_alert(self, tourist: Tourist, severity) -> Optional[str]:
        """새 GEOFENCE 경보 ID, 이미 열린 경보가 있으면 None"""
        existing = await self.alerts.find_unresolved_alert(tourist.id, GEOFENCE)
        if existing is not None:
            log.debug("미해결 GEOFENCE 경보가 이미 있습니다", tourist_id=tourist.id, alert_id=existing.id)
            return None
        try:
            alert_id = await self.alerts.create_alert(
                tourist.id, GEOFENCE, severity,
                Location(lat=tourist.lat, lng=tourist.lng)
            )
        except OpenAlertExistsError:
            log.debug("동시 생성된 GEOFENCE 경보가 있습니다", tourist_id=tourist.id)
            return None
        metrics.geofence_alerts_opened.labels(severity=severity).inc()
        return alert_id

    async def _withdraw_alert(self, tourist_id: str, alert_id: str) -> None:
        """상태 저장 실패 시 이번 스윕이 연 경보를 되돌립니다."""
        try:
            await self.alerts.resolve_alert(alert_id, None)
        except Exception as e:
            log.error("경보 되돌리기 실패", tourist_id=tourist_id, alert_id=alert_id, error=str(e))
            return
        metrics.geofence_alerts_resolved.inc()
        log.warning("상태 저장 실패로 새 경보를 해결 처리했습니다", tourist_id=tourist_id, alert_id=alert_id)

class SweepScheduler:
    """주기적으로 스윕을 실행하는 티커"""

    def __init__(self, sweep: BreachSweep, interval_sec: float = 10.0):
        self.sweep = sweep
        self.interval = interval_sec
        self._stop = asyncio.Event()
        self._tasks: Set[asyncio.Task] = set()

    async def start(self) -> None:
        """
        stop()이 호출될 때까지 interval마다 스윕을 띄웁니다.

        틱은 이전 스윕을 기다리지 않으며, 겹치는 틱은 스윕 쪽에서 건너뜁니다.
        """
        self._stop.clear()
        log.info("스윕 스케줄러 시작", interval_sec=self.interval)
        while not self._stop.is_set():
            task = asyncio.create_task(self._tick())
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
            try:
                await asyncio.wait_for(self._stop.wait(), timeout=self.interval)
            except asyncio.TimeoutError:
                pass
        log.info("스윕 스케줄러 종료")

    async def stop(self) -> None:
        """진행 중인 스윕은 끝까지 실행하고 멈춥니다."""
        self._stop.set()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    async def _tick(self) -> None:
        try:
            await self.sweep.run_sweep()
        except SweepLoadError as e:
            log.error("스윕 실패, 다음 주기에 재시도합니다", error=str(e))
        except Exception as e:
            log.exception("스윕 처리 중 예기치 않은 오류", error=str(e))
