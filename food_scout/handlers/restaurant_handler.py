"""
handlers/restaurant_handler.py – RestaurantHandler class.
Trách nhiệm: liệt kê toàn bộ quán published.
"""
import asyncio

from ..core.assembler import ResultAssembler
from ..db.models import PUBLISHED, Restaurant
from ..db.session import db_session
from ..models import RestaurantListResponse, RestaurantView


class RestaurantHandler:
    """Xử lý GET /restaurants."""

    def __init__(self, db_url: str, assembler: ResultAssembler) -> None:
        self._db_url    = db_url
        self._assembler = assembler

    async def handle(self) -> RestaurantListResponse:
        data = await asyncio.get_event_loop().run_in_executor(None, self._list)
        return RestaurantListResponse(data=data)

    def _list(self) -> list[RestaurantView]:
        with db_session(self._db_url) as session:
            rows = (
                session.query(Restaurant)
                .filter(Restaurant.status == PUBLISHED)
                .order_by(Restaurant.id)
                .all()
            )
            return self._assembler.restaurants(session, rows)
