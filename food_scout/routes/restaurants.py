"""routes/restaurants.py – GET /restaurants, POST /restaurants/{id}/geolocation"""
import asyncio

from fastapi import APIRouter, BackgroundTasks, HTTPException
from ..deps import get_restaurant_handler, get_geolocation
from ..models import RestaurantListResponse, GeolocationScheduled, GeolocationTask

router = APIRouter(tags=["Restaurants"])


@router.get("/restaurants", response_model=RestaurantListResponse)
async def list_restaurants():
    try:
        return await get_restaurant_handler().handle()
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/restaurants/{restaurant_id}/geolocation", response_model=GeolocationScheduled, status_code=202)
async def refresh_geolocation(restaurant_id: int, background: BackgroundTasks):
    """Gọi sau khi lưu quán: geocode địa chỉ ở background, lỗi không ảnh hưởng request."""
    service = get_geolocation()
    try:
        await asyncio.get_event_loop().run_in_executor(None, service.require, restaurant_id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))
    background.add_task(service.refresh, restaurant_id)
    return GeolocationScheduled(data=GeolocationTask(id=restaurant_id))
