"""
로깅 설정 단위 테스트
"""

import json
import logging

import pytest
from loguru import logger

from geoguard.observability.logging_setup import get_logger, setup_logging, with_context


@pytest.fixture
def captured():
    """loguru 레코드를 모으는 sink"""
    records = []
    setup_logging("DEBUG")
    sink_id = logger.add(lambda m: records.append(m.record), level="DEBUG")
    yield records
    logger.remove(sink_id)


class TestLoggingSetup:
    """setup_logging / get_logger 테스트"""

    def test_get_logger_binds_name_and_context(self, captured):
        get_logger("geoguard.test", tourist_id="t1").info("hello")

        record = captured[-1]
        assert record["message"] == "hello"
        assert record["extra"]["name"] == "geoguard.test"
        assert record["extra"]["tourist_id"] == "t1"

    def test_with_context_adds_fields(self, captured):
        with with_context(sweep_run=3):
            get_logger().info("inside")

        assert captured[-1]["extra"]["sweep_run"] == 3
        assert captured[-1]["extra"]["name"] == "geoguard"

    def test_stdlib_logging_is_intercepted(self, captured):
        logging.getLogger("uvicorn").warning("from stdlib")

        assert any(r["message"] == "from stdlib" for r in captured)

    def test_json_logs(self, capsys):
        setup_logging("INFO", json_logs=True)
        get_logger("geoguard.json").info("structured", zone_id="z1")

        line = capsys.readouterr().out.strip().splitlines()[-1]
        payload = json.loads(line)
        assert payload["record"]["message"] == "structured"
        assert payload["record"]["extra"]["zone_id"] == "z1"
        setup_logging("INFO")
