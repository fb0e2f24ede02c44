"""
deps.py – Dependency Injection: singleton service instances.
Khởi tạo 1 lần duy nhất khi server start, không giữ state theo request.
"""
import os

from .core.assembler import ResultAssembler
from .core.geo import GeoDistanceFilter
from .core.geocoder import GOOGLE_GEOCODE_URL, Geocoder, GeolocationService
from .core.relations import RelationshipResolver
from .core.taxonomy import TaxonomyFilter
from .handlers.food_handler import FoodHandler
from .handlers.restaurant_handler import RestaurantHandler
from .handlers.taste_handler import TasteHandler

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./data/food_scout.db")

# ── Core singletons ────────────────────────────────────────────────────────────

_geo       = GeoDistanceFilter()
_resolver  = RelationshipResolver()
_taxonomy  = TaxonomyFilter()
_assembler = ResultAssembler(_resolver)
_geocoder  = Geocoder(
    api_key=os.getenv("GOOGLE_MAPS_API_KEY", ""),
    base_url=os.getenv("GEOCODE_URL", GOOGLE_GEOCODE_URL),
    timeout=float(os.getenv("GEOCODE_TIMEOUT", "30")),
)
_geolocation = GeolocationService(
    DATABASE_URL, _geocoder, attempts=int(os.getenv("GEOCODE_ATTEMPTS", "3")),
)

# ── Handler singletons ─────────────────────────────────────────────────────────

_restaurants = RestaurantHandler(DATABASE_URL, _assembler)
_food        = FoodHandler(DATABASE_URL, _geo, _resolver, _taxonomy, _assembler)
_taste       = TasteHandler(DATABASE_URL, _taxonomy, _assembler)


# ── Getters (dùng trong routes) ────────────────────────────────────────────────

def get_database_url()       -> str:                return DATABASE_URL
def get_geolocation()        -> GeolocationService: return _geolocation
def get_restaurant_handler() -> RestaurantHandler:  return _restaurants
def get_food_handler()       -> FoodHandler:        return _food
def get_taste_handler()      -> TasteHandler:       return _taste
