"""tests/conftest.py – shared fixtures for all tests."""
import pytest

from food_scout.db.models import Base, Food, FoodRestaurant, Restaurant, Taste
from food_scout.db.session import db_session, get_engine


# ── Global: reset engine cache giữa các test ───────────────────────────────────

@pytest.fixture(autouse=True)
def clear_engine_cache():
    """Xóa SQLAlchemy engine cache trước mỗi test để tránh xung đột."""
    from food_scout.db import session as sess_module
    sess_module._engines.clear()
    sess_module._session_factories.clear()
    yield
    for engine in sess_module._engines.values():
        engine.dispose()
    sess_module._engines.clear()
    sess_module._session_factories.clear()


# ── Seed data ──────────────────────────────────────────────────────────────────
#
#   id  restaurant     geo               status
#   1   Pizza Place    (40.00, -75.0)    publish
#   2   Taco Town      (41.00, -75.0)    publish   ~69 mi north of 1
#   3   Noodle Bar     –                 publish   chưa geocode
#   4   Corner Diner   (40.05, -75.0)    publish   ~3.45 mi north of 1
#   5   Ghost Kitchen  (40.00, -75.0)    draft
#
#   food       → restaurant   taste
#   Pizza      → 1            spicy
#   Tacos      → 2            spicy, sour
#   Salad      → –            fresh
#   Soup       → 1            –
#   Burger     → 4            spicy
#   Ramen      → 3            spicy
#   Wings      → 1 (draft)    spicy

def _seed(db_url: str) -> None:
    Base.metadata.create_all(get_engine(db_url))
    with db_session(db_url) as session:
        spicy = Taste(id=1, name="Spicy", slug="spicy", description="Hot and fiery")
        sour  = Taste(id=2, name="Sour",  slug="sour",  description="")
        fresh = Taste(id=3, name="Fresh", slug="fresh", description="Crisp greens")
        session.add_all([spicy, sour, fresh])

        session.add_all([
            Restaurant(id=1, name="Pizza Place", slug="pizza-place", description="Wood fired",
                       street="1 Main St", city="Philadelphia", state="PA", zip="19106",
                       latitude=40.0, longitude=-75.0),
            Restaurant(id=2, name="Taco Town", slug="taco-town", latitude=41.0, longitude=-75.0),
            Restaurant(id=3, name="Noodle Bar", slug="noodle-bar",
                       street="9 Elm St", city="Trenton", state="NJ", zip="08608"),
            Restaurant(id=4, name="Corner Diner", slug="corner-diner", latitude=40.05, longitude=-75.0),
            Restaurant(id=5, name="Ghost Kitchen", slug="ghost-kitchen", status="draft",
                       latitude=40.0, longitude=-75.0),
        ])

        session.add_all([
            Food(id=1, name="Pizza",  slug="pizza",  description="Pepperoni", tastes=[spicy]),
            Food(id=2, name="Tacos",  slug="tacos",  tastes=[spicy, sour]),
            Food(id=3, name="Salad",  slug="salad",  tastes=[fresh]),
            Food(id=4, name="Soup",   slug="soup"),
            Food(id=5, name="Burger", slug="burger", tastes=[spicy]),
            Food(id=6, name="Ramen",  slug="ramen",  tastes=[spicy]),
            Food(id=7, name="Wings",  slug="wings",  tastes=[spicy], status="draft"),
        ])
        session.flush()

        session.add_all([
            FoodRestaurant(id=1, food_id=1, restaurant_id=1),
            FoodRestaurant(id=2, food_id=2, restaurant_id=2),
            FoodRestaurant(id=3, food_id=4, restaurant_id=1),
            FoodRestaurant(id=4, food_id=5, restaurant_id=4),
            FoodRestaurant(id=5, food_id=6, restaurant_id=3),
            FoodRestaurant(id=6, food_id=7, restaurant_id=1),
        ])


@pytest.fixture
def db_url(tmp_path) -> str:
    url = f"sqlite:///{tmp_path / 'food_scout.db'}"
    _seed(url)
    return url


@pytest.fixture
def session(db_url):
    with db_session(db_url) as s:
        yield s
