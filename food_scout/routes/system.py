"""routes/system.py – /health"""
from datetime import datetime
from fastapi import APIRouter

router = APIRouter(tags=["System"])


@router.get("/health")
async def health():
    return {"status": "ok", "time": datetime.now().isoformat()}
