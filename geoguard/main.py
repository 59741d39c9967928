# geoguard/main.py
import os, asyncio, signal
import uvicorn
from geoguard.settings import Settings
from geoguard.observability.health import create_app
from geoguard.observability.logging_setup import setup_logging, get_logger
from geoguard.adapters.storage import SQLiteAlertStore, SQLiteTouristStore, SQLiteZoneStore
from geoguard.orchestrators.sweep import BreachSweep, SweepScheduler

def _b(name, default=False): return os.getenv(name, str(default)).lower() in ("1","true","yes","on")

def build_settings() -> Settings:
    s = Settings()

    # 저장소
    s.storage.db_path = os.getenv("DB_PATH", s.storage.db_path)
    s.storage.busy_timeout_sec = float(os.getenv("DB_BUSY_TIMEOUT_SEC", s.storage.busy_timeout_sec))

    # 스윕
    s.sweep.enabled = _b("SWEEP_ENABLED", s.sweep.enabled)
    s.sweep.interval_sec = float(os.getenv("SWEEP_INTERVAL_SEC", s.sweep.interval_sec))
    s.sweep.max_concurrency = int(os.getenv("SWEEP_MAX_CONCURRENCY", s.sweep.max_concurrency))
    s.sweep.tourist_timeout_sec = float(os.getenv("SWEEP_TOURIST_TIMEOUT_SEC", s.sweep.tourist_timeout_sec))
    s.sweep.load_timeout_sec = float(os.getenv("SWEEP_LOAD_TIMEOUT_SEC", s.sweep.load_timeout_sec))

    # 관측성
    s.observability.metrics_enabled = _b("METRICS_ENABLED", s.observability.metrics_enabled)
    s.observability.http_port = int(os.getenv("HTTP_PORT", s.observability.http_port))
    s.observability.log_level = os.getenv("LOG_LEVEL", s.observability.log_level)

    return s

async def main():
    s = build_settings()
    setup_logging(s.observability.log_level, json_logs=_b("LOG_JSON", False))
    log = get_logger()
    log.info("설정 로드 완료")

    tourists = SQLiteTouristStore(s.storage.db_path, s.storage.busy_timeout_sec); await tourists.init()
    zones = SQLiteZoneStore(s.storage.db_path, s.storage.busy_timeout_sec); await zones.init()
    alerts = SQLiteAlertStore(s.storage.db_path, s.storage.busy_timeout_sec); await alerts.init()

    sweep = BreachSweep(
        tourists, zones, alerts,
        max_concurrency=s.sweep.max_concurrency,
        tourist_timeout_sec=s.sweep.tourist_timeout_sec,
        load_timeout_sec=s.sweep.load_timeout_sec,
    )
    scheduler = SweepScheduler(sweep, s.sweep.interval_sec)

    app = create_app(s, sweep=sweep, tourists=tourists, zones=zones, alerts=alerts)
    server = uvicorn.Server(uvicorn.Config(
        app, host="0.0.0.0", port=s.observability.http_port,
        log_level=s.observability.log_level.lower()
    ))
    http_task = asyncio.create_task(server.serve())
    log.info("HTTP 서버 시작됨", port=s.observability.http_port)

    sched_task = None
    if s.sweep.enabled:
        sched_task = asyncio.create_task(scheduler.start())
    else:
        log.warning("스윕 스케줄러 비활성화됨, /run-sweep 호출로만 실행됩니다")

    stop = asyncio.Future()
    try:
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGTERM, signal.SIGINT):
            try: loop.add_signal_handler(sig, lambda: (not stop.done()) and stop.set_result(True))
            except NotImplementedError: pass
    except RuntimeError: pass

    # uvicorn이 신호를 먼저 처리하면 http_task가 먼저 끝남
    await asyncio.wait({http_task, stop}, return_when=asyncio.FIRST_COMPLETED)
    log.info("종료 신호 수신")
    await scheduler.stop()
    if sched_task: await sched_task
    server.should_exit = True
    await http_task

def run():
    asyncio.run(main())

if __name__ == "__main__":
    run()
