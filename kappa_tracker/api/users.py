"""User endpoints. The current user is identified by the userId cookie."""

from fastapi import APIRouter, Depends, Response

from kappa_tracker.api.deps import (
    USER_COOKIE,
    get_current_user_id,
    get_progress_service,
    to_http_exception,
)
from kappa_tracker.api.schemas import CreateUserRequest, ErrorResponse, UserResponse
from kappa_tracker.db.models import UserModel
from kappa_tracker.services.progress_service import ProgressService

router = APIRouter(tags=["users"])


def build_user_response(user: UserModel) -> UserResponse:
    return UserResponse(
        id=user.id,
        username=user.username,
        faction=user.faction,
        game_edition=user.game_edition,
        level=user.level,
        fence_rep=user.fence_rep,
    )


@router.post(
    "/users",
    response_model=UserResponse,
    status_code=201,
    responses={409: {"model": ErrorResponse}},
)
def create_user(
    request: CreateUserRequest,
    response: Response,
    service: ProgressService = Depends(get_progress_service),
) -> UserResponse:
    """
    사용자 생성

    생성된 사용자 id를 userId 쿠키로 설정합니다.
    """
    try:
        user = service.create_user(
            request.username,
            faction=request.faction,
            game_edition=request.game_edition,
            level=request.level,
            fence_rep=request.fence_rep,
        )
    except ValueError as e:
        raise to_http_exception(e)

    response.set_cookie(USER_COOKIE, user.id, httponly=True, samesite="lax")
    return build_user_response(user)


@router.get("/me", response_model=UserResponse, responses={401: {"model": ErrorResponse}})
def get_me(
    user_id: str = Depends(get_current_user_id),
    service: ProgressService = Depends(get_progress_service),
) -> UserResponse:
    try:
        return build_user_response(service.get_user(user_id))
    except ValueError as e:
        raise to_http_exception(e)
