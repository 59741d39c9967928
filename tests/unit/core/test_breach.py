"""
경계 이탈 상태 머신 단위 테스트

이 모듈은 전이표의 각 행과 hypothesis 기반 불변식을 테스트합니다.
"""

from datetime import datetime, timedelta, timezone

import pytest
from hypothesis import given, strategies as st

from geoguard.core.breach import decide_transition
from geoguard.core.models import BreachState, Zone, ZoneMatch
from geoguard.core.classifier import is_breach_zone, severity_for_zone


NOW = datetime(2026, 10, 1, 12, 0, 0, tzinfo=timezone.utc)
EARLIER = NOW - timedelta(minutes=5)


def _match(zone_type, zone_id="z1", name="Zone 1"):
    zone = Zone(id=zone_id, name=name, type=zone_type,
                coordinates=[[0, 0], [1, 0], [1, 1]])
    return ZoneMatch(zone=zone, breach=is_breach_zone(zone_type), severity=severity_for_zone(zone_type))


def _breached(zone_type="red", zone_id="z1", name="Zone 1", since=EARLIER):
    return BreachState(
        geo_fence_breached=True,
        current_zone_id=zone_id,
        current_zone_type=zone_type,
        current_zone_name=name,
        breach_time=since,
    )


class TestTransitionTable:
    """전이표 각 행 테스트"""

    def test_clear_and_no_match(self):
        t = decide_transition(BreachState(), None, NOW)
        assert t.state == BreachState()
        assert t.action == "none"
        assert t.changed is False

    def test_clear_and_safe_zone(self):
        t = decide_transition(BreachState(), _match("green", name="Park"), NOW)
        assert t.state.geo_fence_breached is False
        assert t.state.current_zone_type == "green"
        assert t.state.current_zone_name == "Park"
        assert t.state.breach_time is None
        assert t.action == "none"
        assert t.changed is True

    @pytest.mark.parametrize("zone_type,severity", [("yellow", "MEDIUM"), ("red", "HIGH")])
    def test_clear_and_breach_zone_opens(self, zone_type, severity):
        t = decide_transition(BreachState(), _match(zone_type), NOW)
        assert t.state.geo_fence_breached is True
        assert t.state.current_zone_id == "z1"
        assert t.state.breach_time == NOW
        assert t.action == "open"
        assert t.severity == severity

    def test_breached_and_no_match_resolves(self):
        t = decide_transition(_breached(), None, NOW)
        assert t.state == BreachState()
        assert t.state.breach_time is None
        assert t.action == "resolve"
        assert t.changed is True

    def test_breached_and_safe_zone_resolves(self):
        t = decide_transition(_breached(), _match("green", zone_id="park", name="Park"), NOW)
        assert t.state.geo_fence_breached is False
        assert t.state.current_zone_id == "park"
        assert t.state.breach_time is None
        assert t.action == "resolve"

    def test_breached_and_still_breaching_keeps_alert(self):
        t = decide_transition(_breached(), _match("red"), NOW)
        assert t.action == "none"
        assert t.state.breach_time == EARLIER
        assert t.changed is False

    def test_breached_moves_to_other_breach_zone(self):
        """다른 위험 구역으로 이동하면 현재 구역만 갱신"""
        t = decide_transition(_breached(), _match("yellow", zone_id="z2", name="Market"), NOW)
        assert t.action == "none"
        assert t.state.current_zone_id == "z2"
        assert t.state.current_zone_type == "yellow"
        assert t.state.current_zone_name == "Market"
        assert t.state.breach_time == EARLIER
        assert t.changed is True

    def test_breached_without_start_time_gets_one(self):
        prev = _breached(since=None)
        t = decide_transition(prev, _match("red"), NOW)
        assert t.state.breach_time == NOW
        assert t.action == "none"


zone_types = st.sampled_from([None, "green", "yellow", "red"])


class TestTransitionInvariants:
    """hypothesis 기반 전이 불변식"""

    @given(prev_breached=st.booleans(), prev_type=zone_types, next_type=zone_types)
    def test_invariants(self, prev_breached, prev_type, next_type):
        prev = _breached(zone_type=prev_type or "red") if prev_breached else BreachState()
        match = _match(next_type) if next_type else None

        t = decide_transition(prev, match, NOW)
        next_breached = next_type in ("yellow", "red")

        assert t.state.geo_fence_breached is next_breached
        assert (t.action == "open") == (next_breached and not prev_breached)
        assert (t.action == "resolve") == (prev_breached and not next_breached)
        assert (t.state.breach_time is None) == (not next_breached)
        if next_type is None:
            assert t.state.current_zone_id is None
            assert t.state.current_zone_type is None
        else:
            assert t.state.current_zone_type == next_type

    @given(prev_breached=st.booleans(), next_type=zone_types)
    def test_idempotent_on_repeat(self, prev_breached, next_type):
        """같은 입력을 다시 적용하면 조치도 변경도 없음"""
        prev = _breached() if prev_breached else BreachState()
        match = _match(next_type) if next_type else None

        first = decide_transition(prev, match, NOW)
        second = decide_transition(first.state, match, NOW + timedelta(seconds=10))

        assert second.action == "none"
        assert second.changed is False
        assert second.state == first.state
