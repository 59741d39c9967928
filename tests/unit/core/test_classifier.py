"""
구역 분류기 단위 테스트
"""

import pytest

from geoguard.core.classifier import classify, is_breach_zone, severity_for_zone


class TestClassify:
    """classify() 테스트"""

    def test_no_zones(self):
        """구역이 없으면 None"""
        assert classify((5, 5), []) is None

    def test_point_outside_all_zones(self, make_zone, square_ring):
        zones = [make_zone("z1", "red", square_ring)]
        assert classify((50, 50), zones) is None

    def test_first_match_wins(self, make_zone, square_ring):
        """겹치는 구역은 먼저 나온 구역이 선택됨 (순서 의존)"""
        z1 = make_zone("z1", "yellow", square_ring)
        z2 = make_zone("z2", "red", [(2, 2), (8, 2), (8, 8), (2, 8)])

        assert classify((5, 5), [z1, z2]).zone.id == "z1"
        assert classify((5, 5), [z2, z1]).zone.id == "z2"

    def test_restricted_inside_caution_keeps_first_match(self, make_zone, square_ring):
        """더 위험한 구역이 안쪽에 있어도 심각도 우선 규칙은 없음"""
        caution = make_zone("caution", "yellow", square_ring)
        restricted = make_zone("restricted", "red", [(4, 4), (6, 4), (6, 6), (4, 6)])

        match = classify((5, 5), [caution, restricted])
        assert match.zone.id == "caution"
        assert match.severity == "MEDIUM"

    def test_safe_zone_is_not_breach(self, make_zone, square_ring):
        match = classify((5, 5), [make_zone("park", "green", square_ring)])
        assert match is not None
        assert match.breach is False
        assert match.severity is None

    @pytest.mark.parametrize("zone_type,severity", [("yellow", "MEDIUM"), ("red", "HIGH")])
    def test_breach_zone_severity(self, make_zone, square_ring, zone_type, severity):
        match = classify((5, 5), [make_zone("z", zone_type, square_ring)])
        assert match.breach is True
        assert match.severity == severity

    def test_skips_non_matching_zone_before_match(self, make_zone, square_ring):
        far = make_zone("far", "red", [(100, 0), (110, 0), (110, 10), (100, 10)])
        near = make_zone("near", "green", square_ring)
        assert classify((5, 5), [far, near]).zone.id == "near"


class TestZoneTypeMapping:
    """구역 유형 매핑 테스트"""

    @pytest.mark.parametrize("zone_type,expected", [("green", False), ("yellow", True), ("red", True)])
    def test_is_breach_zone(self, zone_type, expected):
        assert is_breach_zone(zone_type) is expected

    @pytest.mark.parametrize("zone_type,expected", [("green", None), ("yellow", "MEDIUM"), ("red", "HIGH")])
    def test_severity_for_zone(self, zone_type, expected):
        assert severity_for_zone(zone_type) == expected
