"""API request/response schemas."""

from typing import Literal, Optional

from pydantic import BaseModel, Field


# === Request Schemas ===


class CreateUserRequest(BaseModel):
    """사용자 생성 요청"""

    username: str = Field(..., min_length=1, max_length=50, description="사용자 이름")
    faction: Optional[str] = None
    game_edition: Optional[str] = None
    level: Optional[int] = Field(None, ge=1, le=100)
    fence_rep: Optional[float] = Field(None, ge=-7, le=6)


class QuestProgressEntry(BaseModel):
    quest_id: str = Field(..., min_length=1)
    status: Literal["not_started", "in_progress", "completed"]
    completed_at: Optional[str] = None


class ObjectiveProgressEntry(BaseModel):
    quest_id: str = Field(..., min_length=1)
    objective_id: str = Field(..., min_length=1)
    collected: int = Field(..., ge=0)


class TraderStandingEntry(BaseModel):
    trader_id: str = Field(..., min_length=1)
    level: int = Field(..., ge=1)


class ProgressUpdateRequest(BaseModel):
    """진행도 갱신 요청. 주어진 필드만 반영."""

    quests: Optional[list[QuestProgressEntry]] = None
    objectives: Optional[list[ObjectiveProgressEntry]] = None
    trader_standings: Optional[list[TraderStandingEntry]] = None
    faction: Optional[str] = None
    game_edition: Optional[str] = None
    level: Optional[int] = Field(None, ge=1, le=100)
    fence_rep: Optional[float] = Field(None, ge=-7, le=6)


class AdjustRequest(BaseModel):
    """수집량 델타 적용 요청"""

    delta: int = Field(..., description="양수 = 찾음, 음수 = 되돌림")
    row_key: Optional[str] = Field(None, description="하이드아웃 행 1개만 조정")


class MarkRequest(BaseModel):
    found: bool = Field(..., description="true = 전부 찾음, false = 전부 필요")


class StationLevelRequest(BaseModel):
    level: int = Field(..., ge=0)


class HideoutCacheEntry(BaseModel):
    item_id: str = Field(..., min_length=1)
    name: str = "Item"
    short_name: Optional[str] = None
    icon_link: Optional[str] = None
    wiki_link: Optional[str] = None
    requires_fir: bool = False
    total_required: float = 0
    total_collected: float = 0


class HideoutCacheRequest(BaseModel):
    items: list[HideoutCacheEntry]


class CreateTeamRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=80)


class JoinTeamRequest(BaseModel):
    invite_code: str = Field(..., min_length=1, max_length=16)


# === Response Schemas ===


class ErrorResponse(BaseModel):
    detail: str


class UserResponse(BaseModel):
    """사용자 정보"""

    id: str
    username: str
    faction: Optional[str] = None
    game_edition: Optional[str] = None
    level: Optional[int] = None
    fence_rep: Optional[float] = None


class ProgressResponse(UserResponse):
    """저장된 진행도 (레코드 원형)"""

    quests: list[dict] = []
    objectives: list[dict] = []
    trader_standings: list[dict] = []
    station_levels: list[dict] = []


class QuestInfo(BaseModel):
    """퀘스트 + 판정 결과"""

    quest_id: str
    title: str
    trader: str
    map_name: str
    status: str  # locked | available | completed
    display_status: str  # status + in_progress 표시 라벨
    failed_gates: list[str] = []
    lock_reasons: list[str] = []
    level_requirement: Optional[int] = None
    edition_requirement: Optional[str] = None
    required_prestige: Optional[float] = None
    kappa_required: bool = False
    lightkeeper_required: bool = False
    previous_quest_ids: list[str] = []
    next_quest_ids: list[str] = []
    tags: list[str] = []
    wiki_link: Optional[str] = None


class QuestListResponse(BaseModel):
    quests: list[QuestInfo]


class QuestSummaryResponse(BaseModel):
    total_quests: int
    completed_quests: int
    available_quests: int
    locked_quests: int
    total_kappa_quests: int
    completed_kappa_quests: int


class RequirementRowInfo(BaseModel):
    key: str
    source_type: str
    source_id: str
    source_title: str
    sub_id: str
    required: int
    collected: int
    requires_fir: bool
    source_status: Optional[str] = None
    station_level: Optional[int] = None


class AggregatedItemInfo(BaseModel):
    """아이템 1종 집계"""

    item_id: str
    name: str
    short_name: Optional[str] = None
    icon_link: Optional[str] = None
    wiki_link: Optional[str] = None
    total_required: int
    total_collected: int
    remaining: int
    requires_fir: bool
    quest_count: int
    rows: list[RequirementRowInfo] = []


class ItemListResponse(BaseModel):
    items: list[AggregatedItemInfo]


class StationInfo(BaseModel):
    station_id: str
    name: str
    normalized_name: str
    status: str  # active | locked | maxed
    current_level: int
    target_level: int
    max_level: int
    lock_reasons: list[str] = []


class StationListResponse(BaseModel):
    stations: list[StationInfo]


class CachedItemInfo(BaseModel):
    item_id: str
    name: str
    short_name: Optional[str] = None
    icon_link: Optional[str] = None
    wiki_link: Optional[str] = None
    requires_fir: bool
    total_required: int
    total_collected: int


class CachedItemListResponse(BaseModel):
    items: list[CachedItemInfo]


class TeamMemberInfo(BaseModel):
    user_id: str
    username: Optional[str] = None
    role: str


class TeamInfo(BaseModel):
    id: str
    name: str
    owner_user_id: str
    invite_code: str
    members: list[TeamMemberInfo] = []


class TeamListResponse(BaseModel):
    teams: list[TeamInfo]


class MemberContributionInfo(BaseModel):
    user_id: str
    username: Optional[str] = None
    role: Optional[str] = None
    required: int
    collected: int


class TeamItemInfo(BaseModel):
    item_id: str
    name: str
    short_name: Optional[str] = None
    icon_link: Optional[str] = None
    wiki_link: Optional[str] = None
    requires_fir: bool
    total_required: int
    total_collected: int
    members: list[MemberContributionInfo] = []


class TeamNeedsResponse(BaseModel):
    team_id: str
    items: list[TeamItemInfo]


class MemberQuestStatus(BaseModel):
    quest_id: str
    status: str


class MemberQuestsInfo(BaseModel):
    user_id: str
    username: Optional[str] = None
    role: str
    quests: list[MemberQuestStatus] = []


class TeamQuestsResponse(BaseModel):
    team_id: str
    members: list[MemberQuestsInfo]
