"""
core/relations.py – RelationshipResolver class.
Trách nhiệm: đi qua cạnh food → restaurant (bảng food_restaurant).

Mỗi món thuộc tối đa 1 quán. Nếu dữ liệu có nhiều link cho 1 món,
link có id nhỏ nhất thắng, phần còn lại bị bỏ qua (log WARNING).
"""
import logging
from typing import Optional, Sequence

from sqlalchemy.orm import Session

from ..db.models import PUBLISHED, Food, FoodRestaurant, Restaurant

logger = logging.getLogger(__name__)


class RelationshipResolver:
    """Join food ↔ restaurant. Chỉ đọc, không giữ state giữa các request."""

    def food_for_restaurants(self, session: Session, restaurant_ids: Sequence[int]) -> list[Food]:
        """Hợp các món của những quán trong `restaurant_ids`.

        Giữ thứ tự quán của input (quán gần nhất trước), trong 1 quán giữ
        thứ tự link. Món chỉ được tính cho quán mà nó resolve về (link đầu tiên);
        link bị bỏ qua không kéo món vào kết quả.
        """
        if not restaurant_ids:
            return []
        rows = (
            session.query(FoodRestaurant.restaurant_id, Food)
            .join(Food, Food.id == FoodRestaurant.food_id)
            .filter(FoodRestaurant.restaurant_id.in_(restaurant_ids))
            .filter(Food.status == PUBLISHED)
            .order_by(FoodRestaurant.id)
            .all()
        )
        resolved, _ = self._resolve(session, list({food.id for _, food in rows}))

        by_restaurant: dict[int, list[Food]] = {}
        for restaurant_id, food in rows:
            owner = resolved.get(food.id)
            if owner is None or owner.id != restaurant_id:
                continue
            by_restaurant.setdefault(restaurant_id, []).append(food)

        seen: set[int] = set()
        result: list[Food] = []
        for restaurant_id in restaurant_ids:
            for food in by_restaurant.get(restaurant_id, []):
                if food.id not in seen:
                    seen.add(food.id)
                    result.append(food)
        return result

    def restaurant_for_food(self, session: Session, food_id: int) -> Optional[Restaurant]:
        return self.restaurants_for_food(session, [food_id]).get(food_id)

    def restaurants_for_food(self, session: Session, food_ids: Sequence[int]) -> dict[int, Restaurant]:
        """food_id → Restaurant. Món không có quán (published) thì không có key."""
        resolved, ignored = self._resolve(session, food_ids)
        for food_id, extra_ids in ignored.items():
            logger.warning(
                f"Data anomaly: food id={food_id} linked to {len(extra_ids) + 1} restaurants, "
                f"using id={resolved[food_id].id}, ignoring {extra_ids}"
            )
        return resolved

    def food_counts(self, session: Session, restaurant_ids: Sequence[int]) -> dict[int, int]:
        """Số món published mà quán là quán 'chính' (theo đúng luật resolve)."""
        counts = dict.fromkeys(restaurant_ids, 0)
        if not restaurant_ids:
            return counts
        food_ids = [
            fid for (fid,) in (
                session.query(FoodRestaurant.food_id)
                .join(Food, Food.id == FoodRestaurant.food_id)
                .filter(FoodRestaurant.restaurant_id.in_(restaurant_ids))
                .filter(Food.status == PUBLISHED)
                .distinct()
                .all()
            )
        ]
        resolved, _ = self._resolve(session, food_ids)
        for restaurant in resolved.values():
            if restaurant.id in counts:
                counts[restaurant.id] += 1
        return counts

    # ── Private ────────────────────────────────────────────────────────────────

    @staticmethod
    def _resolve(session: Session, food_ids: Sequence[int]) -> tuple[dict[int, Restaurant], dict[int, list[int]]]:
        if not food_ids:
            return {}, {}
        rows = (
            session.query(FoodRestaurant.food_id, Restaurant)
            .join(Restaurant, Restaurant.id == FoodRestaurant.restaurant_id)
            .filter(FoodRestaurant.food_id.in_(food_ids))
            .filter(Restaurant.status == PUBLISHED)
            .order_by(FoodRestaurant.id)
            .all()
        )
        resolved: dict[int, Restaurant] = {}
        ignored: dict[int, list[int]] = {}
        for food_id, restaurant in rows:
            if food_id not in resolved:
                resolved[food_id] = restaurant
            elif restaurant.id != resolved[food_id].id:
                ignored.setdefault(food_id, []).append(restaurant.id)
        return resolved, ignored
