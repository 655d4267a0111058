"""Stored progress endpoints (raw record read / partial update)."""

from fastapi import APIRouter, Depends, HTTPException

from kappa_tracker.api.deps import (
    get_current_user_id,
    get_progress_service,
    to_http_exception,
)
from kappa_tracker.api.schemas import (
    ErrorResponse,
    ProgressResponse,
    ProgressUpdateRequest,
)
from kappa_tracker.api.users import build_user_response
from kappa_tracker.core.logging import get_logger
from kappa_tracker.db.models import UserModel
from kappa_tracker.services.progress_service import ProgressService

logger = get_logger(__name__)

router = APIRouter(prefix="/me/progress", tags=["progress"])


def _build_progress_response(user: UserModel) -> ProgressResponse:
    return ProgressResponse(
        **build_user_response(user).model_dump(),
        quests=list(user.quests or []),
        objectives=list(user.objective_progress or []),
        trader_standings=list(user.trader_standings or []),
        station_levels=list(user.station_levels or []),
    )


@router.get("", response_model=ProgressResponse, responses={401: {"model": ErrorResponse}})
def get_progress(
    user_id: str = Depends(get_current_user_id),
    service: ProgressService = Depends(get_progress_service),
) -> ProgressResponse:
    try:
        return _build_progress_response(service.get_user(user_id))
    except ValueError as e:
        raise to_http_exception(e)


@router.put(
    "",
    response_model=ProgressResponse,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}},
)
def update_progress(
    request: ProgressUpdateRequest,
    user_id: str = Depends(get_current_user_id),
    service: ProgressService = Depends(get_progress_service),
) -> ProgressResponse:
    """
    진행도 갱신

    목록(quests, objectives, trader_standings)은 키 기준으로 upsert,
    스칼라 필드는 요청에 포함된 경우만 반영합니다.
    """
    if not request.model_fields_set:
        raise HTTPException(status_code=400, detail="nothing to update")

    try:
        user = service.update_progress(
            user_id,
            quests=[
                {
                    "questId": entry.quest_id,
                    "status": entry.status,
                    "completedAt": entry.completed_at,
                }
                for entry in request.quests or []
            ],
            objectives=[
                {
                    "questId": entry.quest_id,
                    "objectiveId": entry.objective_id,
                    "collected": entry.collected,
                }
                for entry in request.objectives or []
            ],
            trader_standings=[
                {"traderId": entry.trader_id, "level": entry.level}
                for entry in request.trader_standings or []
            ],
            faction=request.faction,
            game_edition=request.game_edition,
            level=request.level,
            fence_rep=request.fence_rep,
        )
    except ValueError as e:
        raise to_http_exception(e)

    logger.info("Progress updated for %s", user_id)
    return _build_progress_response(user)
