"""routes/taste.py – GET /taste"""
from typing import Optional

from fastapi import APIRouter, Query, HTTPException
from ..deps import get_taste_handler
from ..models import TasteListResponse

router = APIRouter(tags=["Taste"])


@router.get("/taste", response_model=TasteListResponse)
async def search_taste(q: Optional[str] = Query(default=None, description="Từ khoá (rỗng → [])")):
    try:
        return await get_taste_handler().handle(q)
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))
