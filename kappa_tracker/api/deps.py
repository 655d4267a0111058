"""Shared API dependencies and service-error translation."""

from typing import Optional

from fastapi import Cookie, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from kappa_tracker.core.logging import get_logger
from kappa_tracker.db.database import get_db
from kappa_tracker.services.catalog_service import CatalogService
from kappa_tracker.services.errors import (
    CatalogUnavailableError,
    CompletedQuestItemError,
    InvalidInviteCodeError,
    ItemNotTrackedError,
    StationNotFoundError,
    TeamAccessError,
    TeamFullError,
    TeamNotFoundError,
    UsernameTakenError,
    UserNotFoundError,
)
from kappa_tracker.services.progress_service import ProgressService
from kappa_tracker.services.team_service import TeamService

logger = get_logger(__name__)

USER_COOKIE = "userId"

ERROR_STATUS: dict[type[Exception], int] = {
    UserNotFoundError: 401,
    UsernameTakenError: 409,
    TeamNotFoundError: 404,
    TeamAccessError: 403,
    InvalidInviteCodeError: 404,
    TeamFullError: 409,
    ItemNotTrackedError: 404,
    StationNotFoundError: 404,
    CompletedQuestItemError: 409,
}


def to_http_exception(error: Exception) -> HTTPException:
    """서비스 예외 → HTTPException. 모르는 예외는 로그 후 500."""
    if isinstance(error, CatalogUnavailableError):
        logger.error("Catalog unavailable: %s", error)
        return HTTPException(status_code=502, detail="failed to load catalog")
    for error_type, status_code in ERROR_STATUS.items():
        if isinstance(error, error_type):
            return HTTPException(status_code=status_code, detail=str(error))
    logger.error("Unexpected error: %s", error)
    return HTTPException(status_code=500, detail=str(error))


def get_current_user_id(
    user_id: Optional[str] = Cookie(default=None, alias=USER_COOKIE),
) -> str:
    """userId 쿠키. 없으면 401."""
    if not user_id:
        raise HTTPException(status_code=401, detail="unauthorized")
    return user_id


def get_catalog_service(request: Request) -> CatalogService:
    """CatalogService 인스턴스 반환 (의존성 주입)"""
    service: CatalogService = request.app.state.catalog_service
    return service


def get_progress_service(
    db: Session = Depends(get_db),
    catalog: CatalogService = Depends(get_catalog_service),
) -> ProgressService:
    """요청 단위 ProgressService"""
    return ProgressService(db, catalog)


def get_team_service(
    db: Session = Depends(get_db),
    catalog: CatalogService = Depends(get_catalog_service),
) -> TeamService:
    """요청 단위 TeamService"""
    return TeamService(db, catalog)
