"""
core/geo.py – GeoDistanceFilter class.
Trách nhiệm: tìm các quán trong bán kính R (miles) quanh 1 điểm, gần nhất trước.

2 bước:
  1. Bounding box (rẻ) đẩy xuống SQL → loại phần lớn quán ở xa.
  2. Khoảng cách great-circle chính xác (spherical law of cosines) cho ứng viên còn lại.

Bounding box chỉ dùng để lọc sơ bộ, không bao giờ ảnh hưởng giá trị khoảng cách
hay thứ tự kết quả.
"""
import logging
import math
from dataclasses import dataclass
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from ..db.models import PUBLISHED, Restaurant
from .errors import InvalidQuery

logger = logging.getLogger(__name__)

EARTH_RADIUS_MILES   = 3956.0
MILES_PER_DEGREE_LAT = 69.0
DEFAULT_RADIUS_MILES = 25.0

Location = tuple[int, Optional[float], Optional[float]]


@dataclass(frozen=True)
class GeoPoint:
    lat: float
    lng: float

    def __post_init__(self) -> None:
        if not (math.isfinite(self.lat) and math.isfinite(self.lng)):
            raise InvalidQuery(f"Coordinates must be finite numbers: ({self.lat}, {self.lng})")
        if not -90.0 <= self.lat <= 90.0:
            raise InvalidQuery(f"latitude out of range [-90, 90]: {self.lat}")
        if not -180.0 <= self.lng <= 180.0:
            raise InvalidQuery(f"longitude out of range [-180, 180]: {self.lng}")

    @classmethod
    def parse(cls, lat, lng) -> "GeoPoint":
        """Chuyển input thô (str/số) thành GeoPoint, sai → InvalidQuery."""
        if lat is None or lng is None:
            raise InvalidQuery("Both latitude and longitude are required")
        try:
            lat_f, lng_f = float(lat), float(lng)
        except (TypeError, ValueError):
            raise InvalidQuery(f"Non-numeric coordinates: latitude={lat!r}, longitude={lng!r}") from None
        return cls(lat_f, lng_f)


@dataclass(frozen=True)
class BoundingBox:
    lat_min: float
    lat_max: float
    # None → không giới hạn kinh độ (chạm cực hoặc vắt qua kinh tuyến 180)
    lng_min: Optional[float] = None
    lng_max: Optional[float] = None

    def contains(self, lat: float, lng: float) -> bool:
        if not self.lat_min <= lat <= self.lat_max:
            return False
        if self.lng_min is None:
            return True
        return self.lng_min <= lng <= self.lng_max


def great_circle_miles(a: GeoPoint, b: GeoPoint) -> float:
    return _distance_miles(a.lat, a.lng, b.lat, b.lng)


def _distance_miles(lat1_deg: float, lng1_deg: float, lat2_deg: float, lng2_deg: float) -> float:
    """3956 * acos(cos φ1·cos φ2·cos(λ2-λ1) + sin φ1·sin φ2)"""
    lat1, lng1 = math.radians(lat1_deg), math.radians(lng1_deg)
    lat2, lng2 = math.radians(lat2_deg), math.radians(lng2_deg)
    cos_angle = (
        math.cos(lat1) * math.cos(lat2) * math.cos(lng2 - lng1)
        + math.sin(lat1) * math.sin(lat2)
    )
    # 2 điểm trùng nhau có thể cho 1.0000000000000002
    return EARTH_RADIUS_MILES * math.acos(max(-1.0, min(1.0, cos_angle)))


def bounding_box(center: GeoPoint, radius_miles: float) -> BoundingBox:
    """Hộp lat/lng bao trọn vòng tròn bán kính `radius_miles` quanh `center`.

    Vĩ độ: ± r/69 độ (rộng hơn một chút so với r/R radian vì 69 < 2πR/360).
    Kinh độ: lấy max của quy tắc r/(69·cos φ) và biên chính xác
    asin(sin(r/R) / cos φ), để không bao giờ loại nhầm điểm nằm trong bán kính.
    """
    lat_delta = radius_miles / MILES_PER_DEGREE_LAT
    lat_min, lat_max = center.lat - lat_delta, center.lat + lat_delta

    if lat_max >= 90.0 or lat_min <= -90.0:
        return BoundingBox(lat_min, lat_max)

    cos_lat   = math.cos(math.radians(center.lat))
    flat      = radius_miles / (MILES_PER_DEGREE_LAT * cos_lat)
    # lat_max < 90 đảm bảo sin(r/R) < cos φ
    spherical = math.degrees(math.asin(math.sin(radius_miles / EARTH_RADIUS_MILES) / cos_lat))
    lng_delta = max(flat, spherical)

    lng_min, lng_max = center.lng - lng_delta, center.lng + lng_delta
    if lng_min < -180.0 or lng_max > 180.0:
        return BoundingBox(lat_min, lat_max)
    return BoundingBox(lat_min, lat_max, lng_min, lng_max)


def _is_valid_coordinate(lat: float, lng: float) -> bool:
    return (
        math.isfinite(lat) and math.isfinite(lng)
        and -90.0 <= lat <= 90.0 and -180.0 <= lng <= 180.0
    )


def rank_within_radius(
    center: GeoPoint,
    radius_miles: float,
    locations: Iterable[Location],
) -> list[tuple[int, float]]:
    """Lọc chính xác + sort tăng dần theo khoảng cách.

    Điểm thiếu tọa độ bị bỏ qua; tọa độ lưu sai (ngoài phạm vi) bị bỏ qua + log WARNING.
    Sort ổn định → hòa nhau giữ thứ tự input.
    """
    if radius_miles <= 0:
        return []
    box = bounding_box(center, radius_miles)
    hits: list[tuple[int, float]] = []
    for loc_id, lat, lng in locations:
        if lat is None or lng is None:
            continue
        if not _is_valid_coordinate(lat, lng):
            logger.warning(f"Data anomaly: location id={loc_id} has invalid stored coordinates ({lat}, {lng}), skipped")
            continue
        if not box.contains(lat, lng):
            continue
        distance = _distance_miles(center.lat, center.lng, lat, lng)
        if distance < radius_miles:
            hits.append((loc_id, distance))
    hits.sort(key=lambda h: h[1])
    return hits


class GeoDistanceFilter:
    """Geo-radius search trên bảng restaurant."""

    def find_within_radius(
        self,
        session: Session,
        center: Optional[GeoPoint],
        radius_miles: Optional[float] = DEFAULT_RADIUS_MILES,
    ) -> list[tuple[int, float]]:
        """Trả về [(restaurant_id, distance_miles)] gần nhất trước, distance < radius."""
        if center is None:
            raise InvalidQuery("A center point is required for radius search")
        radius = self.normalize_radius(radius_miles)
        if radius <= 0:
            return []

        box = bounding_box(center, radius)
        q = (
            session.query(Restaurant.id, Restaurant.latitude, Restaurant.longitude)
            .filter(Restaurant.status == PUBLISHED)
            .filter(Restaurant.latitude.isnot(None), Restaurant.longitude.isnot(None))
            .filter(Restaurant.latitude.between(box.lat_min, box.lat_max))
        )
        if box.lng_min is not None:
            q = q.filter(Restaurant.longitude.between(box.lng_min, box.lng_max))
        rows = q.order_by(Restaurant.id).all()

        hits = rank_within_radius(center, radius, ((r.id, r.latitude, r.longitude) for r in rows))
        logger.debug(f"Geo: {len(rows)} in bbox, {len(hits)} within {radius} mi of {center}")
        return hits

    @staticmethod
    def normalize_radius(radius_miles: Optional[float]) -> float:
        if radius_miles is None:
            return DEFAULT_RADIUS_MILES
        try:
            radius = float(radius_miles)
        except (TypeError, ValueError):
            raise InvalidQuery(f"Non-numeric radius: {radius_miles!r}") from None
        if math.isnan(radius) or math.isinf(radius):
            raise InvalidQuery(f"radius must be a finite number: {radius_miles!r}")
        return radius
