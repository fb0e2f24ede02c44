"""
core/geocoder.py – Geocoder + GeolocationService.
Trách nhiệm: địa chỉ quán → (lat, lng), chạy nền sau khi quán được lưu.

Best-effort: lỗi / timeout / non-200 → giữ nguyên geolocation cũ, chỉ log,
không bao giờ raise ra cho bên gọi.
"""
import asyncio
import logging
from typing import Optional

import httpx

from ..db.models import Restaurant
from ..db.session import db_session
from .errors import UpstreamFailure
from .geo import GeoPoint

logger = logging.getLogger(__name__)

GOOGLE_GEOCODE_URL = "https://maps.googleapis.com/maps/api/geocode/json"


def build_address(restaurant: Restaurant) -> str:
    """'{street} {city}, {state} {zip}' – bỏ phần trống."""
    street = (restaurant.street or "").strip()
    city   = (restaurant.city or "").strip()
    state  = (restaurant.state or "").strip()
    zip_   = (restaurant.zip or "").strip()
    if not any((street, city, state, zip_)):
        return ""
    locality = " ".join(p for p in (street, city) if p)
    region   = " ".join(p for p in (state, zip_) if p)
    return ", ".join(p for p in (locality, region) if p)


class Geocoder:
    """Client Google Geocoding API (JSON)."""

    def __init__(
        self,
        api_key: str = "",
        base_url: str = GOOGLE_GEOCODE_URL,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._api_key   = api_key
        self._base_url  = base_url
        self._timeout   = timeout
        self._transport = transport

    async def geocode(self, address: str) -> GeoPoint:
        """Trả về GeoPoint của kết quả đầu tiên, lỗi → UpstreamFailure."""
        params = {"address": address}
        if self._api_key:
            params["key"] = self._api_key
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.get(self._base_url, params=params)
        except httpx.TimeoutException as e:
            raise UpstreamFailure(f"Geocoding timed out after {self._timeout}s") from e
        except httpx.HTTPError as e:
            raise UpstreamFailure(f"Geocoding request failed: {e}") from e

        if response.status_code != 200:
            raise UpstreamFailure(f"Geocoding returned HTTP {response.status_code}")
        try:
            location = response.json()["results"][0]["geometry"]["location"]
            return GeoPoint.parse(location["lat"], location["lng"])
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise UpstreamFailure(f"Geocoding response has no usable location: {e}") from e


class GeolocationService:
    """Tính lại lat/lng cho 1 quán. Chạy như background task."""

    def __init__(self, db_url: str, geocoder: Geocoder, attempts: int = 3, backoff: float = 1.0) -> None:
        self._db_url   = db_url
        self._geocoder = geocoder
        self._attempts = max(1, attempts)
        self._backoff  = backoff

    async def refresh(self, restaurant_id: int) -> bool:
        """True nếu đã ghi geolocation mới. Lỗi geocoding không raise ra ngoài."""
        loop = asyncio.get_event_loop()
        address = await loop.run_in_executor(None, self._load_address, restaurant_id)
        if not address:
            logger.info(f"Restaurant id={restaurant_id}: no address, skip geocoding")
            return False

        point = await self._geocode_with_retry(address)
        if point is None:
            logger.warning(f"Restaurant id={restaurant_id}: geolocation left unchanged")
            return False

        await loop.run_in_executor(None, self._store, restaurant_id, point)
        logger.info(f"Restaurant id={restaurant_id} geolocated at ({point.lat}, {point.lng})")
        return True

    def exists(self, restaurant_id: int) -> bool:
        with db_session(self._db_url) as session:
            return session.get(Restaurant, restaurant_id) is not None

    def require(self, restaurant_id: int) -> None:
        """Quán không tồn tại → LookupError."""
        if not self.exists(restaurant_id):
            raise LookupError(f"Restaurant id={restaurant_id} not found")

    # ── Private ────────────────────────────────────────────────────────────────

    async def _geocode_with_retry(self, address: str) -> Optional[GeoPoint]:
        for attempt in range(1, self._attempts + 1):
            try:
                return await self._geocoder.geocode(address)
            except UpstreamFailure as e:
                logger.warning(f"Geocoding {address!r} failed (attempt {attempt}/{self._attempts}): {e}")
                if attempt < self._attempts and self._backoff > 0:
                    await asyncio.sleep(self._backoff * attempt)
        return None

    def _load_address(self, restaurant_id: int) -> str:
        with db_session(self._db_url) as session:
            restaurant = session.get(Restaurant, restaurant_id)
            return build_address(restaurant) if restaurant is not None else ""

    def _store(self, restaurant_id: int, point: GeoPoint) -> None:
        with db_session(self._db_url) as session:
            restaurant = session.get(Restaurant, restaurant_id)
            if restaurant is None:
                return
            # ghi cả cặp trong 1 transaction
            restaurant.latitude  = point.lat
            restaurant.longitude = point.lng
