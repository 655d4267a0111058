"""Team Service: 팀 생성/가입, 팀 요구 아이템 / 퀘스트 현황

팀 집계는 읽기 전용. 가입 여부 확인은 여기서 하고,
Core fan-in(combine)에는 가입 멤버만 넘긴다.
"""

import logging
import secrets
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from kappa_tracker.config import settings
from kappa_tracker.core.eligibility.models import QuestStatus
from kappa_tracker.core.eligibility.resolver import resolve, status_map
from kappa_tracker.core.progress.models import (
    cached_totals_from_record,
    progress_from_record,
)
from kappa_tracker.core.requirements.aggregator import (
    aggregate_cached_items,
    aggregate_quest_items,
    merge_items,
)
from kappa_tracker.core.requirements.team import (
    MemberNeeds,
    TeamAggregatedItem,
    combine,
)
from kappa_tracker.db.models import TeamMemberModel, TeamModel, UserModel
from kappa_tracker.services.catalog_service import CatalogService
from kappa_tracker.services.errors import (
    InvalidInviteCodeError,
    TeamAccessError,
    TeamFullError,
    TeamNotFoundError,
    UserNotFoundError,
)

logger = logging.getLogger(__name__)

INVITE_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
INVITE_CODE_LENGTH = 6
INVITE_CODE_RETRIES = 10

ROLE_OWNER = "owner"
ROLE_MEMBER = "member"


def generate_invite_code() -> str:
    """헷갈리는 문자(I, O, 0, 1) 제외 6자리"""
    return "".join(
        secrets.choice(INVITE_CODE_ALPHABET) for _ in range(INVITE_CODE_LENGTH)
    )


@dataclass
class MemberQuestStatuses:
    """팀 퀘스트 현황의 멤버 1명분"""

    user_id: str
    username: Optional[str]
    role: str
    statuses: dict[str, QuestStatus] = field(default_factory=dict)


class TeamService:
    """팀 CRUD + 팀 집계"""

    def __init__(
        self,
        db: Session,
        catalog: CatalogService,
        member_limit: int = settings.TEAM_MEMBER_LIMIT,
    ):
        self._db = db
        self._catalog = catalog
        self._member_limit = member_limit

    # === 팀 관리 ===

    def create_team(self, owner_id: str, name: str) -> TeamModel:
        owner = self._get_user(owner_id)

        invite_code = generate_invite_code()
        for _ in range(INVITE_CODE_RETRIES):
            if not self._invite_code_exists(invite_code):
                break
            invite_code = generate_invite_code()

        now = datetime.now(timezone.utc)
        team = TeamModel(
            id=str(uuid.uuid4()),
            name=name.strip(),
            owner_user_id=owner.id,
            invite_code=invite_code,
            created_at=now,
        )
        team.members.append(
            TeamMemberModel(
                id=str(uuid.uuid4()),
                user_id=owner.id,
                role=ROLE_OWNER,
                joined_at=now,
            )
        )
        self._db.add(team)
        self._db.commit()
        self._db.refresh(team)
        logger.info("Team created: %s (%s) by %s", team.name, team.id, owner.id)
        return team

    def join_team(self, user_id: str, invite_code: str) -> tuple[TeamModel, TeamMemberModel]:
        """초대 코드로 가입. 대소문자 무시, 이미 멤버면 기존 멤버십 반환."""
        user = self._get_user(user_id)
        normalized = invite_code.strip().upper()
        team = (
            self._db.query(TeamModel)
            .filter(func.upper(TeamModel.invite_code) == normalized)
            .first()
        )
        if team is None:
            raise InvalidInviteCodeError(f"Invalid invite code: {invite_code}")

        existing = self._find_membership(team, user.id)
        if existing is not None:
            return team, existing

        if len(team.members) >= self._member_limit:
            raise TeamFullError(f"Team is full: {team.id}")

        membership = TeamMemberModel(
            id=str(uuid.uuid4()),
            user_id=user.id,
            role=ROLE_OWNER if team.owner_user_id == user.id else ROLE_MEMBER,
            joined_at=datetime.now(timezone.utc),
        )
        team.members.append(membership)
        self._db.commit()
        logger.info("User %s joined team %s", user.id, team.id)
        return team, membership

    def list_teams(self, user_id: str) -> list[TeamModel]:
        self._get_user(user_id)
        return (
            self._db.query(TeamModel)
            .join(TeamMemberModel, TeamMemberModel.team_id == TeamModel.id)
            .filter(TeamMemberModel.user_id == user_id)
            .order_by(TeamModel.created_at)
            .all()
        )

    def get_team_for_member(self, team_id: str, user_id: str) -> TeamModel:
        """팀 조회 + 가입 확인 (없으면 404, 비멤버면 403)"""
        self._get_user(user_id)
        team = self._db.get(TeamModel, team_id)
        if team is None:
            raise TeamNotFoundError(f"Team not found: {team_id}")
        if self._find_membership(team, user_id) is None:
            raise TeamAccessError(f"User {user_id} is not a member of {team_id}")
        return team

    # === 팀 집계 ===

    def team_needs(self, team_id: str, user_id: str) -> list[TeamAggregatedItem]:
        """멤버별 퀘스트 아이템(전체 모드) + 저장된 하이드아웃 캐시 합산"""
        team = self.get_team_for_member(team_id, user_id)
        quests = self._catalog.get_quests()

        members: list[MemberNeeds] = []
        for membership in team.members:
            user = membership.user
            progress = progress_from_record(user.id, **user.progress_columns())
            # 잠금 판정 없이 전체 요구, 완료만 반영
            statuses = {
                quest_id: QuestStatus.COMPLETED
                for quest_id in progress.completed_quest_ids
            }
            quest_items = aggregate_quest_items(
                quests, statuses, progress.objective_progress
            )
            hideout_items = aggregate_cached_items(
                cached_totals_from_record(user.hideout_items)
            )
            members.append(
                MemberNeeds(
                    actor_id=user.id,
                    items=tuple(merge_items(quest_items, hideout_items)),
                    username=user.username,
                    role=membership.role,
                )
            )

        return combine(members)

    def team_quests(self, team_id: str, user_id: str) -> list[MemberQuestStatuses]:
        team = self.get_team_for_member(team_id, user_id)
        quests = self._catalog.get_quests()

        result: list[MemberQuestStatuses] = []
        for membership in team.members:
            user = membership.user
            progress = progress_from_record(user.id, **user.progress_columns())
            resolutions = resolve(
                quests, progress.completed_quest_ids, progress.attributes()
            )
            result.append(
                MemberQuestStatuses(
                    user_id=user.id,
                    username=user.username,
                    role=membership.role,
                    statuses=status_map(resolutions),
                )
            )
        return result

    # === 내부 ===

    def _get_user(self, user_id: Optional[str]) -> UserModel:
        user = self._db.get(UserModel, user_id) if user_id else None
        if user is None:
            raise UserNotFoundError(f"User not found: {user_id}")
        return user

    def _invite_code_exists(self, invite_code: str) -> bool:
        return (
            self._db.query(TeamModel.id)
            .filter(TeamModel.invite_code == invite_code)
            .first()
            is not None
        )

    @staticmethod
    def _find_membership(team: TeamModel, user_id: str) -> Optional[TeamMemberModel]:
        for membership in team.members:
            if membership.user_id == user_id:
                return membership
        return None
