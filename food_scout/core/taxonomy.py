"""
core/taxonomy.py – TaxonomyFilter class.
Trách nhiệm: lọc món theo taste slug + tìm taste term theo từ khóa.
"""
import logging
from typing import Optional, Sequence

from sqlalchemy.orm import Session

from ..db.models import PUBLISHED, Food, Taste

logger = logging.getLogger(__name__)


class TaxonomyFilter:
    """Slug là khóa so khớp (so sánh bằng), không dùng tên hiển thị."""

    @staticmethod
    def filter_food_by_taste(food: Sequence[Food], taste_slug: Optional[str]) -> list[Food]:
        """Giữ các món có tag `taste_slug`. Slug rỗng → không lọc."""
        if not taste_slug:
            return list(food)
        return [f for f in food if any(t.slug == taste_slug for t in f.tastes)]

    def food_by_taste(self, session: Session, taste_slug: Optional[str]) -> list[Food]:
        """Tra trực tiếp món theo taste (không có geo). Slug rỗng → []."""
        if not taste_slug:
            return []
        return (
            session.query(Food)
            .join(Food.tastes)
            .filter(Taste.slug == taste_slug)
            .filter(Food.status == PUBLISHED)
            .order_by(Food.id)
            .all()
        )

    def search_taste_terms(self, session: Session, query: Optional[str]) -> list[Taste]:
        """ILIKE trên name + description. Query rỗng → [] (không liệt kê toàn bộ)."""
        term = (query or "").strip().lower()
        if not term:
            return []
        rows = (
            session.query(Taste)
            .filter(
                Taste.name.icontains(term, autoescape=True)
                | Taste.description.icontains(term, autoescape=True)
            )
            .order_by(Taste.name, Taste.id)
            .all()
        )
        logger.debug(f"Taste search {term!r}: {len(rows)} terms")
        return rows
