"""
food_scout/db/models.py – SQLAlchemy ORM models: restaurant, food, taste.

Quan hệ food → restaurant nằm trong bảng join `food_restaurant` (không nhúng
khóa ngoại vào `food`), để có thể biểu diễn cả trường hợp dữ liệu lỗi
(1 món nối với nhiều quán).
"""
from sqlalchemy import (
    CheckConstraint, Column, Float, ForeignKey, Index, Integer, String, Table, Text,
    func, select,
)
from sqlalchemy.orm import DeclarativeBase, column_property, relationship

PUBLISHED = "publish"


class Base(DeclarativeBase):
    pass


food_taste = Table(
    "food_taste",
    Base.metadata,
    Column("food_id",  Integer, ForeignKey("food.id", ondelete="CASCADE"),  primary_key=True),
    Column("taste_id", Integer, ForeignKey("taste.id", ondelete="CASCADE"), primary_key=True),
)


class Restaurant(Base):
    __tablename__ = "restaurant"
    __table_args__ = (
        # geolocation: có đủ cả 2 hoặc không có gì
        CheckConstraint(
            "(latitude IS NULL AND longitude IS NULL) OR "
            "(latitude IS NOT NULL AND longitude IS NOT NULL)",
            name="ck_restaurant_geolocation_pair",
        ),
        Index("ix_restaurant_geo", "latitude", "longitude"),
    )

    id          = Column(Integer, primary_key=True, autoincrement=True)
    name        = Column(String,  nullable=False, default="")
    slug        = Column(String,  nullable=False, unique=True)
    description = Column(Text,    nullable=True,  default="")
    status      = Column(String,  nullable=False, default=PUBLISHED)
    street      = Column(String,  nullable=True,  default="")
    city        = Column(String,  nullable=True,  default="")
    state       = Column(String,  nullable=True,  default="")
    zip         = Column(String,  nullable=True,  default="")
    latitude    = Column(Float,   nullable=True)
    longitude   = Column(Float,   nullable=True)

    @property
    def has_geolocation(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    def __repr__(self) -> str:
        return f"<Restaurant id={self.id} slug={self.slug!r}>"


class Taste(Base):
    __tablename__ = "taste"

    id          = Column(Integer, primary_key=True, autoincrement=True)
    name        = Column(String,  nullable=False, default="")
    slug        = Column(String,  nullable=False, unique=True)
    description = Column(Text,    nullable=True,  default="")

    def __repr__(self) -> str:
        return f"<Taste id={self.id} slug={self.slug!r}>"


class Food(Base):
    __tablename__ = "food"

    id          = Column(Integer, primary_key=True, autoincrement=True)
    name        = Column(String,  nullable=False, default="")
    slug        = Column(String,  nullable=False, unique=True)
    description = Column(Text,    nullable=True,  default="")
    status      = Column(String,  nullable=False, default=PUBLISHED)

    tastes = relationship("Taste", secondary=food_taste, order_by=Taste.name, lazy="selectin")

    def __repr__(self) -> str:
        return f"<Food id={self.id} slug={self.slug!r}>"


class FoodRestaurant(Base):
    """Cạnh food → restaurant. Link có id nhỏ nhất là link 'chính'."""
    __tablename__ = "food_restaurant"

    id            = Column(Integer, primary_key=True, autoincrement=True)
    food_id       = Column(Integer, ForeignKey("food.id", ondelete="CASCADE"),       nullable=False, index=True)
    restaurant_id = Column(Integer, ForeignKey("restaurant.id", ondelete="CASCADE"), nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<FoodRestaurant food={self.food_id} restaurant={self.restaurant_id}>"


# Số món published đang gắn tag – tính khi đọc, không lưu
_food_t = Food.__table__
Taste.count = column_property(
    select(func.count(food_taste.c.food_id))
    .select_from(food_taste.join(_food_t, _food_t.c.id == food_taste.c.food_id))
    .where(food_taste.c.taste_id == Taste.id, _food_t.c.status == PUBLISHED)
    .correlate_except(food_taste, _food_t)
    .scalar_subquery()
)
