"""
core/assembler.py – ResultAssembler class.
Trách nhiệm: ORM rows → RestaurantView / FoodView / TasteView.

- food_count luôn tính lúc assemble, không đọc từ DB.
- Món không có quán → restaurant = None (vẫn có key).
- Input rỗng → list rỗng.
"""
from typing import Optional, Sequence

from sqlalchemy.orm import Session

from ..db.models import Food, Restaurant, Taste
from ..models import FoodView, GeoLocation, RestaurantView, TasteView
from .relations import RelationshipResolver

PLACEHOLDER_COST = "0.00"


class ResultAssembler:

    def __init__(self, resolver: RelationshipResolver) -> None:
        self._resolver = resolver

    # ── Public ─────────────────────────────────────────────────────────────────

    def restaurants(self, session: Session, restaurants: Sequence[Restaurant]) -> list[RestaurantView]:
        if not restaurants:
            return []
        counts = self._resolver.food_counts(session, [r.id for r in restaurants])
        return [self.restaurant_view(r, counts.get(r.id, 0)) for r in restaurants]

    def food(self, session: Session, food: Sequence[Food]) -> list[FoodView]:
        if not food:
            return []
        owners = self._resolver.restaurants_for_food(session, [f.id for f in food])
        unique_owners = {r.id: r for r in owners.values()}
        counts = self._resolver.food_counts(session, list(unique_owners))
        owner_views = {rid: self.restaurant_view(r, counts.get(rid, 0)) for rid, r in unique_owners.items()}

        views: list[FoodView] = []
        for item in food:
            owner = owners.get(item.id)
            views.append(self.food_view(item, owner_views[owner.id] if owner else None))
        return views

    def tastes(self, tastes: Sequence[Taste]) -> list[TasteView]:
        return [self.taste_view(t) for t in tastes]

    # ── Converters ─────────────────────────────────────────────────────────────

    @staticmethod
    def restaurant_view(restaurant: Restaurant, food_count: int) -> RestaurantView:
        address = None
        if restaurant.has_geolocation:
            address = GeoLocation(latitude=restaurant.latitude, longitude=restaurant.longitude)
        return RestaurantView(
            id=restaurant.id,
            name=restaurant.name or "",
            slug=restaurant.slug,
            description=restaurant.description or "",
            food_count=food_count,
            address=address,
        )

    @staticmethod
    def taste_view(taste: Taste) -> TasteView:
        return TasteView(
            id=taste.id,
            name=taste.name or "",
            slug=taste.slug,
            count=taste.count or 0,
            description=taste.description or "",
            type="",
        )

    @classmethod
    def food_view(cls, food: Food, restaurant: Optional[RestaurantView]) -> FoodView:
        return FoodView(
            id=food.id,
            name=food.name or "",
            slug=food.slug,
            description=food.description or "",
            cost=PLACEHOLDER_COST,
            restaurant=restaurant,
            taste=[cls.taste_view(t) for t in food.tastes],
        )
