"""Quest endpoints: resolved quest list, dashboard summary, quest item tracking."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from kappa_tracker.api.deps import (
    get_current_user_id,
    get_progress_service,
    to_http_exception,
)
from kappa_tracker.api.schemas import (
    AdjustRequest,
    AggregatedItemInfo,
    ErrorResponse,
    ItemListResponse,
    MarkRequest,
    QuestInfo,
    QuestListResponse,
    QuestSummaryResponse,
    RequirementRowInfo,
)
from kappa_tracker.core.catalog.models import ObjectiveTag, Quest
from kappa_tracker.core.eligibility.models import QuestResolution, QuestStatus
from kappa_tracker.core.logging import get_logger
from kappa_tracker.core.progress.models import ActorProgress
from kappa_tracker.core.requirements.models import (
    AggregatedItem,
    AggregationMode,
    AggregationScope,
)
from kappa_tracker.services.errors import CatalogUnavailableError
from kappa_tracker.services.progress_service import ProgressService

logger = get_logger(__name__)

router = APIRouter(prefix="/quests", tags=["quests"])

IN_PROGRESS = "in_progress"


def display_status(
    quest: Quest, resolution: QuestResolution, progress: ActorProgress
) -> str:
    """표시용 상태. 진행 중이면 available 대신 in_progress."""
    if resolution.status != QuestStatus.AVAILABLE:
        return resolution.status.value
    if progress.quest_statuses.get(quest.quest_id) == IN_PROGRESS:
        return IN_PROGRESS
    if progress.has_objective_progress(quest.quest_id):
        return IN_PROGRESS
    return resolution.status.value


def _build_quest_info(
    quest: Quest, resolution: QuestResolution, progress: ActorProgress
) -> QuestInfo:
    return QuestInfo(
        quest_id=quest.quest_id,
        title=quest.title,
        trader=quest.trader,
        map_name=quest.map_name,
        status=resolution.status.value,
        display_status=display_status(quest, resolution, progress),
        failed_gates=[gate.value for gate in resolution.failed_gates],
        lock_reasons=list(resolution.lock_reasons),
        level_requirement=quest.level_requirement,
        edition_requirement=quest.edition_requirement,
        required_prestige=quest.required_prestige,
        kappa_required=quest.kappa_required,
        lightkeeper_required=quest.lightkeeper_required,
        previous_quest_ids=list(quest.previous_quest_ids),
        next_quest_ids=list(quest.next_quest_ids),
        tags=[tag.value for tag in quest.tags],
        wiki_link=quest.wiki_link,
    )


def build_item_info(item: AggregatedItem) -> AggregatedItemInfo:
    """AggregatedItem을 AggregatedItemInfo로 변환 (하이드아웃 라우터와 공용)"""
    return AggregatedItemInfo(
        item_id=item.item_id,
        name=item.name,
        short_name=item.short_name,
        icon_link=item.icon_link,
        wiki_link=item.wiki_link,
        total_required=item.total_required,
        total_collected=item.total_collected,
        remaining=item.remaining,
        requires_fir=item.requires_found_in_raid,
        quest_count=item.quest_count,
        rows=[
            RequirementRowInfo(
                key=row.key,
                source_type=row.source_type.value,
                source_id=row.source_id,
                source_title=row.source_title,
                sub_id=row.sub_id,
                required=row.required_count,
                collected=row.clamped_collected,
                requires_fir=row.requires_found_in_raid,
                source_status=row.source_status,
                station_level=row.station_level,
            )
            for row in item.rows
        ],
    )


def get_scope(
    mode: AggregationMode = Query(AggregationMode.ACTIVE),
    kappa_only: bool = Query(False),
    lightkeeper_only: bool = Query(False),
    fir_only: bool = Query(False),
) -> AggregationScope:
    """쿼리 파라미터 → AggregationScope"""
    return AggregationScope(
        mode=mode,
        kappa_only=kappa_only,
        lightkeeper_only=lightkeeper_only,
        fir_only=fir_only,
    )


@router.get(
    "",
    response_model=QuestListResponse,
    responses={401: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
)
def list_quests(
    status: Optional[str] = Query(None, description="locked | available | in_progress | completed"),
    kappa_only: bool = Query(False),
    lightkeeper_only: bool = Query(False),
    tag: Optional[ObjectiveTag] = Query(None),
    user_id: str = Depends(get_current_user_id),
    service: ProgressService = Depends(get_progress_service),
) -> QuestListResponse:
    """
    퀘스트 목록

    카탈로그 순서 그대로, 사용자 진행도로 판정한 상태를 붙여 반환합니다.
    """
    try:
        quests, resolutions, progress = service.resolve_quests(user_id)
    except (ValueError, CatalogUnavailableError) as e:
        raise to_http_exception(e)

    result: list[QuestInfo] = []
    for quest in quests:
        if kappa_only and not quest.kappa_required:
            continue
        if lightkeeper_only and not quest.lightkeeper_required:
            continue
        if tag is not None and tag not in quest.tags:
            continue
        info = _build_quest_info(quest, resolutions[quest.quest_id], progress)
        if status and status not in (info.status, info.display_status):
            continue
        result.append(info)

    return QuestListResponse(quests=result)


@router.get("/summary", response_model=QuestSummaryResponse)
def quest_summary(
    user_id: str = Depends(get_current_user_id),
    service: ProgressService = Depends(get_progress_service),
) -> QuestSummaryResponse:
    try:
        summary = service.quest_summary(user_id)
    except (ValueError, CatalogUnavailableError) as e:
        raise to_http_exception(e)

    return QuestSummaryResponse(
        total_quests=summary.total,
        completed_quests=summary.completed,
        available_quests=summary.available,
        locked_quests=summary.locked,
        total_kappa_quests=summary.kappa_total,
        completed_kappa_quests=summary.kappa_completed,
    )


@router.get("/items", response_model=ItemListResponse)
def quest_items(
    scope: AggregationScope = Depends(get_scope),
    user_id: str = Depends(get_current_user_id),
    service: ProgressService = Depends(get_progress_service),
) -> ItemListResponse:
    """
    퀘스트 요구 아이템

    mode=active(기본)는 잠긴 퀘스트를 제외, mode=all은 전부 포함합니다.
    """
    try:
        items = service.quest_items(user_id, scope)
    except (ValueError, CatalogUnavailableError) as e:
        raise to_http_exception(e)
    return ItemListResponse(items=[build_item_info(item) for item in items])


@router.post(
    "/items/{item_id}/adjust",
    response_model=AggregatedItemInfo,
    responses={404: {"model": ErrorResponse}},
)
def adjust_quest_item(
    item_id: str,
    request: AdjustRequest,
    scope: AggregationScope = Depends(get_scope),
    user_id: str = Depends(get_current_user_id),
    service: ProgressService = Depends(get_progress_service),
) -> AggregatedItemInfo:
    """
    수집량 조정

    양수는 앞쪽 행부터 채우고, 음수는 뒤쪽 행부터 비웁니다.
    """
    try:
        item = service.adjust_quest_item(user_id, item_id, request.delta, scope)
    except (ValueError, CatalogUnavailableError) as e:
        raise to_http_exception(e)

    logger.info("Adjusted quest item %s by %d for %s", item_id, request.delta, user_id)
    return build_item_info(item)


@router.post(
    "/items/{item_id}/mark",
    response_model=AggregatedItemInfo,
    responses={404: {"model": ErrorResponse}},
)
def mark_quest_item(
    item_id: str,
    request: MarkRequest,
    scope: AggregationScope = Depends(get_scope),
    user_id: str = Depends(get_current_user_id),
    service: ProgressService = Depends(get_progress_service),
) -> AggregatedItemInfo:
    try:
        item = service.mark_quest_item(user_id, item_id, request.found, scope)
    except (ValueError, CatalogUnavailableError) as e:
        raise to_http_exception(e)
    return build_item_info(item)
