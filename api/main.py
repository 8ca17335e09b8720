"""
FastAPI Application Entry Point
Nexus Insights: Comment Intelligence

Serves the analyze / compare / health routes under /api/v1. Tables are
created once in the lifespan hook; the YouTube source, the model client
and the analysis cache are built per request by the router's dependencies.
"""

import logging
import sys
import os
from contextlib import asynccontextmanager

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.routes import router
from config.settings import settings
from db.database import init_db

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"🚀 Starting {settings.APP_NAME} API (cache TTL {settings.CACHE_TTL_HOURS}h)")
    init_db()
    yield
    logger.info(f"🛑 {settings.APP_NAME} API stopped")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description=(
        "Turns the comment section of a YouTube video into product intelligence: "
        "spam filtering, language-model classification, pain / demand / loyalty / "
        "confusion indices and an action plan. Two videos can be compared into a "
        "competitor battle card."
    ),
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

app.include_router(router, prefix="/api/v1")


@app.get("/", tags=["System"])
async def root():
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "endpoints": ["/api/v1/analyze", "/api/v1/compare", "/api/v1/health"],
        "status": "running",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("api.main:app", host=settings.API_HOST, port=settings.API_PORT, reload=settings.DEBUG)
