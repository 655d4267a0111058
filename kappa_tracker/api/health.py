"""Health check endpoint."""

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from kappa_tracker.api.deps import get_catalog_service
from kappa_tracker.db.database import get_db
from kappa_tracker.services.catalog_service import CatalogService

router = APIRouter(tags=["health"])


@router.get("/health")
def health_check(
    db: Session = Depends(get_db),
    catalog: CatalogService = Depends(get_catalog_service),
) -> dict:
    """Report database connectivity and catalog cache freshness."""
    try:
        db.execute(text("SELECT 1"))
        database = "connected"
    except Exception:
        database = "disconnected"

    return {
        "status": "ok" if database == "connected" else "error",
        "database": database,
        "catalog": catalog.cache_status(),
    }
