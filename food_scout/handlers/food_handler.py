"""
handlers/food_handler.py – FoodHandler class.
Trách nhiệm: điều phối food search, 2 chế độ:

  Có lat/lng: GeoDistanceFilter → RelationshipResolver → TaxonomyFilter → Assembler
  Không có:   tra thẳng món theo taste (không xếp hạng khoảng cách)
"""
import asyncio
import logging
from typing import Optional

from ..core.assembler import ResultAssembler
from ..core.geo import GeoDistanceFilter, GeoPoint
from ..core.relations import RelationshipResolver
from ..core.taxonomy import TaxonomyFilter
from ..db.session import db_session
from ..models import FoodListResponse, FoodSearchParams, FoodView

logger = logging.getLogger(__name__)


class FoodHandler:
    """Xử lý GET /food."""

    def __init__(
        self,
        db_url: str,
        geo: GeoDistanceFilter,
        resolver: RelationshipResolver,
        taxonomy: TaxonomyFilter,
        assembler: ResultAssembler,
    ) -> None:
        self._db_url    = db_url
        self._geo       = geo
        self._resolver  = resolver
        self._taxonomy  = taxonomy
        self._assembler = assembler

    async def handle(self, params: FoodSearchParams) -> FoodListResponse:
        # validate trước khi đụng DB → InvalidQuery ra ngay
        center = GeoPoint.parse(params.latitude, params.longitude) if params.has_geo else None
        radius = self._geo.normalize_radius(params.radius)
        data = await asyncio.get_event_loop().run_in_executor(
            None, self._search, params.taste, center, radius
        )
        return FoodListResponse(data=data)

    def _search(self, taste: Optional[str], center: Optional[GeoPoint], radius: float) -> list[FoodView]:
        with db_session(self._db_url) as session:
            if center is None:
                food = self._taxonomy.food_by_taste(session, taste)
            else:
                hits = self._geo.find_within_radius(session, center, radius)
                if not hits:
                    return []
                nearby = self._resolver.food_for_restaurants(session, [rid for rid, _ in hits])
                food = self._taxonomy.filter_food_by_taste(nearby, taste)
            logger.info(f"Food search taste={taste!r} center={center} radius={radius}: {len(food)} items")
            return self._assembler.food(session, food)
