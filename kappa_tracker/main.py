"""FastAPI application entrypoint."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI

from kappa_tracker.api.health import router as health_router
from kappa_tracker.api.hideout import router as hideout_router
from kappa_tracker.api.progress import router as progress_router
from kappa_tracker.api.quests import router as quests_router
from kappa_tracker.api.teams import router as teams_router
from kappa_tracker.api.users import router as users_router
from kappa_tracker.config import settings
from kappa_tracker.core.logging import get_logger, setup_logging
from kappa_tracker.db.database import engine as db_engine
from kappa_tracker.db.models import Base
from kappa_tracker.services.catalog_service import CatalogService

setup_logging(settings.LOG_LEVEL)
logger = get_logger(__name__)


def build_catalog_service() -> CatalogService:
    return CatalogService(
        endpoint=settings.CATALOG_ENDPOINT,
        cache_dir=settings.CATALOG_CACHE_DIR,
        ttl_hours=settings.CATALOG_CACHE_TTL_HOURS,
        timeout=settings.CATALOG_TIMEOUT_SECONDS,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup and shutdown events."""
    # DB 테이블 생성
    logger.info("Creating database tables...")
    Base.metadata.create_all(bind=db_engine)
    logger.info("Database tables created.")

    # 카탈로그는 첫 요청 때 캐시/조회
    app.state.catalog_service = build_catalog_service()
    logger.info(
        "CatalogService initialized (endpoint=%s, cache=%s)",
        settings.CATALOG_ENDPOINT,
        settings.CATALOG_CACHE_DIR,
    )

    yield

    logger.info("Shutting down...")


app = FastAPI(title="Kappa Tracker", lifespan=lifespan)

app.include_router(health_router)
app.include_router(users_router)
app.include_router(progress_router)
app.include_router(quests_router)
app.include_router(hideout_router)
app.include_router(teams_router)
