"""
models.py – Pydantic schemas cho request/response.
"""
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_serializer


# ── Request Models ─────────────────────────────────────────────────────────────

class FoodSearchParams(BaseModel):
    taste: Optional[str] = Field(default=None, description="Taste slug (so khớp chính xác)")
    latitude: Optional[float] = Field(default=None, description="Vĩ độ tâm tìm kiếm")
    longitude: Optional[float] = Field(default=None, description="Kinh độ tâm tìm kiếm")
    radius: Optional[float] = Field(default=None, description="Bán kính (miles), mặc định 25")

    @property
    def has_geo(self) -> bool:
        return self.latitude is not None or self.longitude is not None


# ── Views ──────────────────────────────────────────────────────────────────────

class GeoLocation(BaseModel):
    latitude: float
    longitude: float


class TasteView(BaseModel):
    id: int
    name: str
    slug: str
    count: int = 0
    description: str = ""
    type: str = ""       # dành cho phân loại taxonomy sau này, luôn rỗng

    model_config = ConfigDict(from_attributes=True)


class RestaurantView(BaseModel):
    id: int
    name: str
    slug: str
    description: str = ""
    food_count: int = 0
    address: Optional[GeoLocation] = None

    @model_serializer(mode="wrap")
    def _omit_missing_address(self, handler):
        # chưa geocode → bỏ hẳn key `address`
        data = handler(self)
        if data.get("address") is None:
            data.pop("address", None)
        return data


class FoodView(BaseModel):
    id: int
    name: str
    slug: str
    description: str = ""
    cost: str = "0.00"
    restaurant: Optional[RestaurantView] = None
    taste: List[TasteView] = Field(default_factory=list)


# ── Response Models ────────────────────────────────────────────────────────────

class RestaurantListResponse(BaseModel):
    success: bool = True
    data: List[RestaurantView] = Field(default_factory=list)


class FoodListResponse(BaseModel):
    success: bool = True
    data: List[FoodView] = Field(default_factory=list)


class TasteListResponse(BaseModel):
    success: bool = True
    data: List[TasteView] = Field(default_factory=list)


class GeolocationTask(BaseModel):
    id: int
    scheduled: bool = True


class GeolocationScheduled(BaseModel):
    success: bool = True
    data: GeolocationTask
