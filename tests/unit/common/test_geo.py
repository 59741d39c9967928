"""
Geo 유틸리티 단위 테스트

이 모듈은 Ray casting 점-폴리곤 판정과 좌표 검증을 테스트합니다.
"""

import math
import pytest
from hypothesis import given, strategies as st

from geoguard.common.geo import point_in_polygon, validate_coordinates, is_finite, is_usable_ring


coord = st.floats(min_value=-1000, max_value=1000, allow_nan=False, allow_infinity=False)
rings = st.lists(st.tuples(coord, coord), min_size=3, max_size=12)


class TestPointInPolygon:
    """점-폴리곤 판정 테스트"""

    def test_point_inside_square(self, square_ring):
        """정사각형 내부 점"""
        assert point_in_polygon((5, 5), square_ring) is True

    def test_point_outside_square(self, square_ring):
        """정사각형 외부 점"""
        assert point_in_polygon((15, 5), square_ring) is False

    def test_right_edge_is_outside(self, square_ring):
        """오른쪽 경계 위의 점은 짝홀 규칙상 외부"""
        assert point_in_polygon((10, 5), square_ring) is False

    def test_left_edge_is_inside(self, square_ring):
        """왼쪽 경계 위의 점은 짝홀 규칙상 내부"""
        assert point_in_polygon((0, 5), square_ring) is True

    def test_explicitly_closed_ring(self, square_ring):
        """첫 꼭짓점을 반복해서 닫은 링도 같은 결과"""
        closed = square_ring + [square_ring[0]]
        assert point_in_polygon((5, 5), closed) is True
        assert point_in_polygon((15, 5), closed) is False

    def test_concave_polygon(self):
        """오목 폴리곤 (U자형)"""
        u_shape = [(0, 0), (9, 0), (9, 9), (6, 9), (6, 3), (3, 3), (3, 9), (0, 9)]
        assert point_in_polygon((1.5, 5), u_shape) is True
        assert point_in_polygon((4.5, 5), u_shape) is False
        assert point_in_polygon((7.5, 5), u_shape) is True

    def test_axis_order_is_lng_lat(self, red_fort_ring):
        """점은 (경도, 위도) 순서로 전달되어야 함"""
        assert point_in_polygon((75.78, 26.90), red_fort_ring) is True
        assert point_in_polygon((26.90, 75.78), red_fort_ring) is False

    def test_horizontal_edge_does_not_divide_by_zero(self, square_ring):
        """수평 간선과 같은 높이의 점"""
        assert point_in_polygon((5, 0), square_ring) in (True, False)
        assert point_in_polygon((5, 10), square_ring) in (True, False)

    @pytest.mark.parametrize("ring", [[], [(1, 1)], [(0, 0), (5, 5)]])
    def test_degenerate_rings_return_false(self, ring):
        """꼭짓점 3개 미만은 예외 없이 False"""
        assert point_in_polygon((1, 1), ring) is False

    @given(ring=rings, x=coord, y=coord)
    def test_always_returns_bool(self, ring, x, y):
        """어떤 입력에도 bool 반환"""
        assert isinstance(point_in_polygon((x, y), ring), bool)

    @given(ring=rings, x=coord, y=coord)
    def test_closing_vertex_does_not_change_result(self, ring, x, y):
        """명시적으로 닫아도 결과 동일"""
        closed = list(ring) + [ring[0]]
        assert point_in_polygon((x, y), ring) == point_in_polygon((x, y), closed)

    @given(ring=rings, y=coord)
    def test_point_right_of_bbox_is_outside(self, ring, y):
        """경계 상자 오른쪽의 점은 항상 외부"""
        x = max(p[0] for p in ring) + 1
        assert point_in_polygon((x, y), ring) is False

    @given(ring=rings, x=coord)
    def test_point_above_bbox_is_outside(self, ring, x):
        """경계 상자 위쪽의 점은 항상 외부"""
        y = max(p[1] for p in ring) + 1
        assert point_in_polygon((x, y), ring) is False


class TestCoordinateValidation:
    """좌표 검증 테스트"""

    @pytest.mark.parametrize("lat,lon,expected", [
        (0, 0, True),
        (90, 180, True),
        (-90, -180, True),
        (90.1, 0, False),
        (0, -180.1, False),
        (float("nan"), 0, False),
        (0, float("inf"), False),
    ])
    def test_validate_coordinates(self, lat, lon, expected):
        assert validate_coordinates(lat, lon) is expected

    def test_is_finite(self):
        assert is_finite(1.5) is True
        assert is_finite(3) is True
        assert is_finite(math.nan) is False
        assert is_finite(math.inf) is False
        assert is_finite(None) is False
        assert is_finite(True) is False

    def test_usable_ring(self, square_ring):
        assert is_usable_ring(square_ring) is True
        assert is_usable_ring(square_ring[:2]) is False
        assert is_usable_ring([(0, 0), (1, math.nan), (1, 1)]) is False
        assert is_usable_ring([(0, 0), (1,), (1, 1)]) is False
