"""Team endpoints: create / join via invite code, combined needs, member quests."""

from fastapi import APIRouter, Depends

from kappa_tracker.api.deps import (
    get_current_user_id,
    get_team_service,
    to_http_exception,
)
from kappa_tracker.api.schemas import (
    CreateTeamRequest,
    ErrorResponse,
    JoinTeamRequest,
    MemberContributionInfo,
    MemberQuestsInfo,
    MemberQuestStatus,
    TeamInfo,
    TeamItemInfo,
    TeamListResponse,
    TeamMemberInfo,
    TeamNeedsResponse,
    TeamQuestsResponse,
)
from kappa_tracker.core.requirements.team import TeamAggregatedItem
from kappa_tracker.db.models import TeamModel
from kappa_tracker.services.errors import CatalogUnavailableError
from kappa_tracker.services.team_service import TeamService

router = APIRouter(prefix="/teams", tags=["teams"])


def _build_team_info(team: TeamModel) -> TeamInfo:
    return TeamInfo(
        id=team.id,
        name=team.name,
        owner_user_id=team.owner_user_id,
        invite_code=team.invite_code,
        members=[
            TeamMemberInfo(
                user_id=member.user_id,
                username=member.user.username if member.user else None,
                role=member.role,
            )
            for member in team.members
        ],
    )


def _build_team_item(item: TeamAggregatedItem) -> TeamItemInfo:
    return TeamItemInfo(
        item_id=item.item_id,
        name=item.name,
        short_name=item.short_name,
        icon_link=item.icon_link,
        wiki_link=item.wiki_link,
        requires_fir=item.requires_found_in_raid,
        total_required=item.total_required,
        total_collected=item.total_collected,
        members=[
            MemberContributionInfo(
                user_id=member.actor_id,
                username=member.username,
                role=member.role,
                required=member.required,
                collected=member.collected,
            )
            for member in item.members
        ],
    )


@router.post(
    "",
    response_model=TeamInfo,
    status_code=201,
    responses={401: {"model": ErrorResponse}},
)
def create_team(
    request: CreateTeamRequest,
    user_id: str = Depends(get_current_user_id),
    service: TeamService = Depends(get_team_service),
) -> TeamInfo:
    """팀 생성. 생성자는 owner로 가입되고 초대 코드가 발급됩니다."""
    try:
        team = service.create_team(user_id, request.name)
    except ValueError as e:
        raise to_http_exception(e)
    return _build_team_info(team)


@router.get("", response_model=TeamListResponse)
def list_teams(
    user_id: str = Depends(get_current_user_id),
    service: TeamService = Depends(get_team_service),
) -> TeamListResponse:
    try:
        teams = service.list_teams(user_id)
    except ValueError as e:
        raise to_http_exception(e)
    return TeamListResponse(teams=[_build_team_info(team) for team in teams])


@router.post(
    "/join",
    response_model=TeamInfo,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
def join_team(
    request: JoinTeamRequest,
    user_id: str = Depends(get_current_user_id),
    service: TeamService = Depends(get_team_service),
) -> TeamInfo:
    """
    초대 코드로 가입

    코드는 대소문자를 구분하지 않으며, 이미 멤버면 그대로 팀 정보를 반환합니다.
    """
    try:
        team, _ = service.join_team(user_id, request.invite_code)
    except ValueError as e:
        raise to_http_exception(e)
    return _build_team_info(team)


@router.get(
    "/{team_id}",
    response_model=TeamInfo,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def get_team(
    team_id: str,
    user_id: str = Depends(get_current_user_id),
    service: TeamService = Depends(get_team_service),
) -> TeamInfo:
    try:
        team = service.get_team_for_member(team_id, user_id)
    except ValueError as e:
        raise to_http_exception(e)
    return _build_team_info(team)


@router.get(
    "/{team_id}/needs",
    response_model=TeamNeedsResponse,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def team_needs(
    team_id: str,
    user_id: str = Depends(get_current_user_id),
    service: TeamService = Depends(get_team_service),
) -> TeamNeedsResponse:
    """
    팀 요구 아이템

    멤버별 퀘스트 아이템(잠금 포함 전체)과 저장된 하이드아웃 집계를 합산합니다.
    """
    try:
        items = service.team_needs(team_id, user_id)
    except (ValueError, CatalogUnavailableError) as e:
        raise to_http_exception(e)
    return TeamNeedsResponse(
        team_id=team_id, items=[_build_team_item(item) for item in items]
    )


@router.get(
    "/{team_id}/quests",
    response_model=TeamQuestsResponse,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def team_quests(
    team_id: str,
    user_id: str = Depends(get_current_user_id),
    service: TeamService = Depends(get_team_service),
) -> TeamQuestsResponse:
    try:
        members = service.team_quests(team_id, user_id)
    except (ValueError, CatalogUnavailableError) as e:
        raise to_http_exception(e)
    return TeamQuestsResponse(
        team_id=team_id,
        members=[
            MemberQuestsInfo(
                user_id=member.user_id,
                username=member.username,
                role=member.role,
                quests=[
                    MemberQuestStatus(quest_id=quest_id, status=status.value)
                    for quest_id, status in member.statuses.items()
                ],
            )
            for member in members
        ],
    )
