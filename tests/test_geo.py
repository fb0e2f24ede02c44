"""
tests/test_geo.py – Unit tests cho GeoDistanceFilter + các hàm hình học.
Kịch bản: công thức khoảng cách, bounding box không loại nhầm, lọc + sort.
"""
import logging
import math

import pytest

from food_scout.core.errors import InvalidQuery
from food_scout.core.geo import (
    EARTH_RADIUS_MILES, GeoDistanceFilter, GeoPoint,
    bounding_box, great_circle_miles, rank_within_radius,
)
from food_scout.db.models import Restaurant


def _destination(center: GeoPoint, bearing_deg: float, miles: float) -> GeoPoint:
    """Điểm cách `center` đúng `miles` theo hướng `bearing_deg` (trên mặt cầu)."""
    lat1, lng1 = math.radians(center.lat), math.radians(center.lng)
    theta, delta = math.radians(bearing_deg), miles / EARTH_RADIUS_MILES
    lat2 = math.asin(math.sin(lat1) * math.cos(delta) + math.cos(lat1) * math.sin(delta) * math.cos(theta))
    lng2 = lng1 + math.atan2(
        math.sin(theta) * math.sin(delta) * math.cos(lat1),
        math.cos(delta) - math.sin(lat1) * math.sin(lat2),
    )
    return GeoPoint(math.degrees(lat2), (math.degrees(lng2) + 540) % 360 - 180)


class TestGreatCircle:

    def test_same_point_is_zero(self):
        p = GeoPoint(40.0, -75.0)
        assert great_circle_miles(p, p) == pytest.approx(0.0, abs=1e-3)

    def test_one_degree_latitude(self):
        d = great_circle_miles(GeoPoint(40.0, -75.0), GeoPoint(41.0, -75.0))
        assert d == pytest.approx(EARTH_RADIUS_MILES * math.pi / 180)
        assert 69.0 < d < 69.1

    def test_matches_law_of_cosines(self):
        a, b = GeoPoint(39.95, -75.16), GeoPoint(40.71, -74.01)
        expected = 3956 * math.acos(
            math.cos(math.radians(a.lat)) * math.cos(math.radians(b.lat))
            * math.cos(math.radians(b.lng) - math.radians(a.lng))
            + math.sin(math.radians(a.lat)) * math.sin(math.radians(b.lat))
        )
        assert great_circle_miles(a, b) == expected

    def test_symmetric_and_non_negative(self):
        a, b = GeoPoint(-33.9, 151.2), GeoPoint(51.5, -0.1)
        assert great_circle_miles(a, b) == pytest.approx(great_circle_miles(b, a))
        assert great_circle_miles(a, b) > 0


class TestGeoPoint:

    @pytest.mark.parametrize("lat,lng", [(91, 0), (-90.5, 0), (0, 180.1), (0, -181), (math.nan, 0), (0, math.inf)])
    def test_out_of_range_rejected(self, lat, lng):
        with pytest.raises(InvalidQuery):
            GeoPoint(lat, lng)

    def test_parse_strings(self):
        assert GeoPoint.parse("40.5", "-75") == GeoPoint(40.5, -75.0)

    def test_parse_non_numeric(self):
        with pytest.raises(InvalidQuery, match="Non-numeric"):
            GeoPoint.parse("abc", "-75")

    def test_parse_missing_one(self):
        with pytest.raises(InvalidQuery, match="Both latitude and longitude"):
            GeoPoint.parse(40.0, None)

    def test_invalid_query_is_value_error(self):
        with pytest.raises(ValueError):
            GeoPoint(100, 0)


class TestBoundingBox:
    """Prefilter không bao giờ loại điểm nằm trong bán kính."""

    @pytest.mark.parametrize("center", [
        GeoPoint(40.0, -75.0), GeoPoint(0.0, 0.0), GeoPoint(70.0, 20.0), GeoPoint(-60.0, 100.0),
    ])
    @pytest.mark.parametrize("radius", [1.0, 25.0, 500.0])
    def test_no_false_negatives(self, center, radius):
        box = bounding_box(center, radius)
        for bearing in range(0, 360, 5):
            p = _destination(center, bearing, radius * 0.999)
            assert great_circle_miles(center, p) < radius
            assert box.contains(p.lat, p.lng), (bearing, p)

    def test_latitude_window(self):
        box = bounding_box(GeoPoint(40.0, -75.0), 69.0)
        assert box.lat_min == pytest.approx(39.0)
        assert box.lat_max == pytest.approx(41.0)
        assert box.lng_min < -75.0 - 1.0

    def test_pole_drops_longitude_limit(self):
        box = bounding_box(GeoPoint(89.9, 0.0), 50.0)
        assert box.lng_min is None
        assert box.contains(89.9, 180.0)

    def test_antimeridian_drops_longitude_limit(self):
        box = bounding_box(GeoPoint(0.0, 179.9), 20.0)
        assert box.lng_min is None


class TestRankWithinRadius:

    def test_sorted_and_strictly_inside(self):
        center = GeoPoint(40.0, -75.0)
        locations = [
            (1, 40.10, -75.0),    # ~6.9 mi
            (2, 40.02, -75.0),    # ~1.4 mi
            (3, 41.00, -75.0),    # ~69 mi
            (4, 40.00, -75.05),   # ~2.6 mi
        ]
        hits = rank_within_radius(center, 10.0, locations)
        assert [h[0] for h in hits] == [2, 4, 1]
        distances = [h[1] for h in hits]
        assert distances == sorted(distances)
        assert all(d < 10.0 for d in distances)

    def test_matches_brute_force(self):
        center = GeoPoint(40.0, -75.0)
        locations = [(i, 40.0 + (i % 7) * 0.03 - 0.1, -75.0 + (i % 5) * 0.04 - 0.1) for i in range(50)]
        hits = rank_within_radius(center, 5.0, locations)
        expected = {i for i, lat, lng in locations if great_circle_miles(center, GeoPoint(lat, lng)) < 5.0}
        assert {h[0] for h in hits} == expected

    def test_missing_geolocation_skipped(self):
        hits = rank_within_radius(GeoPoint(40.0, -75.0), 1000.0, [(1, None, None), (2, 40.0, None), (3, 40.0, -75.0)])
        assert [h[0] for h in hits] == [3]
        assert hits[0][1] == pytest.approx(0.0, abs=1e-3)

    def test_boundary_is_excluded(self):
        center, edge = GeoPoint(40.0, -75.0), GeoPoint(40.1, -75.0)
        radius = great_circle_miles(center, edge)
        assert rank_within_radius(center, radius, [(1, edge.lat, edge.lng)]) == []

    def test_ties_keep_input_order(self):
        hits = rank_within_radius(GeoPoint(40.0, -75.0), 10.0, [(5, 40.01, -75.0), (2, 40.01, -75.0)])
        assert [h[0] for h in hits] == [5, 2]

    @pytest.mark.parametrize("radius", [0.0, -5.0])
    def test_non_positive_radius(self, radius):
        assert rank_within_radius(GeoPoint(40.0, -75.0), radius, [(1, 40.0, -75.0)]) == []

    def test_empty_locations(self):
        assert rank_within_radius(GeoPoint(40.0, -75.0), 10.0, []) == []

    def test_across_antimeridian(self):
        hits = rank_within_radius(GeoPoint(0.0, 179.9), 20.0, [(1, 0.0, -179.9)])
        assert len(hits) == 1
        assert hits[0][1] == pytest.approx(13.8, abs=0.1)

    def test_invalid_stored_coordinates_skipped(self, caplog):
        locations = [(1, -75.5, 200.0), (2, 90.5, 0.0), (3, math.nan, 0.0), (4, -75.1, 179.8)]
        with caplog.at_level(logging.WARNING, logger="food_scout.core.geo"):
            hits = rank_within_radius(GeoPoint(-75.0, 179.9), 50.0, locations)
        assert [h[0] for h in hits] == [4]
        assert "Data anomaly" in caplog.text
        assert "location id=1" in caplog.text
        assert "location id=2" in caplog.text
        assert "location id=3" in caplog.text

    def test_invalid_stored_latitude_near_pole(self):
        hits = rank_within_radius(GeoPoint(89.9, 0.0), 50.0, [(1, 90.5, 0.0), (2, 89.95, 10.0)])
        assert [h[0] for h in hits] == [2]


class TestFindWithinRadius:
    """GeoDistanceFilter trên DB seed (xem conftest)."""

    @pytest.fixture
    def geo(self):
        return GeoDistanceFilter()

    def test_only_nearby_restaurant(self, geo, session):
        # A (40,-75) và B (41,-75) cách nhau ~69 mi
        hits = geo.find_within_radius(session, GeoPoint(40.0, -75.0), 10.0)
        assert [rid for rid, _ in hits] == [1, 4]
        assert hits[0][1] == pytest.approx(0.0, abs=1e-3)
        assert hits[1][1] == pytest.approx(3.45, abs=0.01)

    def test_large_radius_includes_far(self, geo, session):
        hits = geo.find_within_radius(session, GeoPoint(40.0, -75.0), 100.0)
        assert [rid for rid, _ in hits] == [1, 4, 2]

    def test_ungeocoded_and_draft_never_returned(self, geo, session):
        hits = geo.find_within_radius(session, GeoPoint(40.0, -75.0), 12_000.0)
        ids = {rid for rid, _ in hits}
        assert 3 not in ids
        assert 5 not in ids

    def test_default_radius(self, geo, session):
        hits = geo.find_within_radius(session, GeoPoint(40.0, -75.0), None)
        assert [rid for rid, _ in hits] == [1, 4]

    def test_zero_radius(self, geo, session):
        assert geo.find_within_radius(session, GeoPoint(40.0, -75.0), 0) == []

    def test_missing_center(self, geo, session):
        with pytest.raises(InvalidQuery):
            geo.find_within_radius(session, None, 10.0)

    def test_nan_radius(self, geo, session):
        with pytest.raises(InvalidQuery):
            geo.find_within_radius(session, GeoPoint(40.0, -75.0), math.nan)

    def test_nothing_nearby(self, geo, session):
        assert geo.find_within_radius(session, GeoPoint(-33.9, 151.2), 25.0) == []

    def test_invalid_stored_row_skipped(self, geo, session):
        # gần kinh tuyến 180 → SQL không lọc kinh độ, hàng lỗi tới bước rank
        session.add_all([
            Restaurant(id=6, name="Bad Pin", slug="bad-pin", latitude=-75.5, longitude=200.0),
            Restaurant(id=7, name="Polar Cafe", slug="polar-cafe", latitude=-75.1, longitude=179.8),
        ])
        session.flush()
        hits = geo.find_within_radius(session, GeoPoint(-75.0, 179.9), 50.0)
        assert [rid for rid, _ in hits] == [7]

    def test_invalid_stored_latitude_near_pole(self, geo, session):
        session.add(Restaurant(id=6, name="North Pin", slug="north-pin", latitude=90.5, longitude=0.0))
        session.flush()
        assert geo.find_within_radius(session, GeoPoint(89.9, 0.0), 50.0) == []
