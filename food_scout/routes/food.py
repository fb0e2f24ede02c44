"""routes/food.py – GET /food"""
from typing import Optional

from fastapi import APIRouter, Query, HTTPException
from ..deps import get_food_handler
from ..models import FoodListResponse, FoodSearchParams

router = APIRouter(tags=["Food"])


@router.get("/food", response_model=FoodListResponse)
async def search_food(
    taste:     Optional[str]   = Query(default=None, description="Taste slug"),
    latitude:  Optional[float] = Query(default=None),
    longitude: Optional[float] = Query(default=None),
    radius:    Optional[float] = Query(default=None, description="Bán kính (miles), mặc định 25"),
):
    """
    Có `latitude` + `longitude` → món của các quán trong bán kính, quán gần nhất trước.
    Không có → món theo `taste`, không xếp hạng khoảng cách.
    """
    params = FoodSearchParams(taste=taste, latitude=latitude, longitude=longitude, radius=radius)
    try:
        return await get_food_handler().handle(params)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))
