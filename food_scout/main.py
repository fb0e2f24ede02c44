"""
main.py – FastAPI app entry point (slim wire-up only).
Chỉ kết nối routes và lifespan. Không chứa business logic.
"""
import logging
import os
from contextlib import asynccontextmanager
from dotenv import load_dotenv
load_dotenv()

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .routes import restaurants, food, taste, system
from .deps import get_database_url
from .db.models import Base
from .db.session import get_engine

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("🚀 Ensuring database schema…")
    Base.metadata.create_all(get_engine(get_database_url()))
    logger.info("✅ Ready.")
    yield
    logger.info("Shutdown.")


app = FastAPI(
    title="Food Scout API",
    description="Tìm món ăn theo vị trí và khẩu vị: restaurants, food, taste.",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])

app.include_router(system.router)
app.include_router(restaurants.router)
app.include_router(food.router)
app.include_router(taste.router)


def run() -> None:
    """Entry point `food-scout`: chạy app bằng uvicorn (HOST/PORT từ env)."""
    import uvicorn

    uvicorn.run(
        "food_scout.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        log_level="info",
    )


if __name__ == "__main__":
    run()
