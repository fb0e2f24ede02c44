"""
handlers/taste_handler.py – TasteHandler class.
Trách nhiệm: tìm taste term theo từ khóa `q`.
"""
import asyncio
from typing import Optional

from ..core.assembler import ResultAssembler
from ..core.taxonomy import TaxonomyFilter
from ..db.session import db_session
from ..models import TasteListResponse, TasteView


class TasteHandler:
    """Xử lý GET /taste."""

    def __init__(self, db_url: str, taxonomy: TaxonomyFilter, assembler: ResultAssembler) -> None:
        self._db_url    = db_url
        self._taxonomy  = taxonomy
        self._assembler = assembler

    async def handle(self, q: Optional[str]) -> TasteListResponse:
        if not (q or "").strip():
            return TasteListResponse(data=[])
        data = await asyncio.get_event_loop().run_in_executor(None, self._search, q)
        return TasteListResponse(data=data)

    def _search(self, q: str) -> list[TasteView]:
        with db_session(self._db_url) as session:
            return self._assembler.tastes(self._taxonomy.search_taste_terms(session, q))
