"""Hideout endpoints: station levels, upgrade item tracking, stored totals cache."""

from fastapi import APIRouter, Depends, Query

from kappa_tracker.api.deps import (
    get_current_user_id,
    get_progress_service,
    to_http_exception,
)
from kappa_tracker.api.quests import build_item_info
from kappa_tracker.api.schemas import (
    AdjustRequest,
    AggregatedItemInfo,
    CachedItemInfo,
    CachedItemListResponse,
    ErrorResponse,
    HideoutCacheRequest,
    ItemListResponse,
    StationInfo,
    StationLevelRequest,
    StationListResponse,
)
from kappa_tracker.core.catalog.models import Station
from kappa_tracker.core.eligibility.models import StationResolution
from kappa_tracker.core.logging import get_logger
from kappa_tracker.core.requirements.models import AggregationScope, CachedItemTotal
from kappa_tracker.services.errors import CatalogUnavailableError
from kappa_tracker.services.progress_service import ProgressService

logger = get_logger(__name__)

router = APIRouter(prefix="/hideout", tags=["hideout"])


def _build_station_info(station: Station, resolution: StationResolution) -> StationInfo:
    return StationInfo(
        station_id=station.station_id,
        name=station.name,
        normalized_name=station.normalized_name,
        status=resolution.status.value,
        current_level=resolution.current_level,
        target_level=resolution.target_level,
        max_level=resolution.max_level,
        lock_reasons=list(resolution.lock_reasons),
    )


def _build_cached_info(entry: CachedItemTotal) -> CachedItemInfo:
    return CachedItemInfo(
        item_id=entry.item_id,
        name=entry.name,
        short_name=entry.short_name,
        icon_link=entry.icon_link,
        wiki_link=entry.wiki_link,
        requires_fir=entry.requires_found_in_raid,
        total_required=entry.total_required,
        total_collected=entry.total_collected,
    )


@router.get("/stations", response_model=StationListResponse)
def list_stations(
    user_id: str = Depends(get_current_user_id),
    service: ProgressService = Depends(get_progress_service),
) -> StationListResponse:
    """시설 목록 + 다음 레벨 상태 (active / locked / maxed)"""
    try:
        statuses = service.station_statuses(user_id)
    except (ValueError, CatalogUnavailableError) as e:
        raise to_http_exception(e)
    return StationListResponse(
        stations=[_build_station_info(s, r) for s, r in statuses]
    )


@router.put(
    "/stations/{station_id}",
    response_model=StationInfo,
    responses={404: {"model": ErrorResponse}},
)
def set_station_level(
    station_id: str,
    request: StationLevelRequest,
    user_id: str = Depends(get_current_user_id),
    service: ProgressService = Depends(get_progress_service),
) -> StationInfo:
    """현재 레벨 설정. 0..최대 레벨로 잘린다."""
    try:
        station, resolution = service.set_station_level(
            user_id, station_id, request.level
        )
    except (ValueError, CatalogUnavailableError) as e:
        raise to_http_exception(e)
    return _build_station_info(station, resolution)


@router.get("/items", response_model=ItemListResponse)
def hideout_items(
    fir_only: bool = Query(False),
    fir_item: list[str] = Query(default=[], description="FIR로 취급할 아이템 이름"),
    user_id: str = Depends(get_current_user_id),
    service: ProgressService = Depends(get_progress_service),
) -> ItemListResponse:
    """
    하이드아웃 업그레이드 요구 아이템

    fir_item으로 넘긴 이름/약칭과 일치하는 아이템은 FIR 요구로 표시합니다.
    """
    try:
        items = service.hideout_items(
            user_id, AggregationScope(fir_only=fir_only), fir_item
        )
    except (ValueError, CatalogUnavailableError) as e:
        raise to_http_exception(e)
    return ItemListResponse(items=[build_item_info(item) for item in items])


@router.post(
    "/items/{item_id}/adjust",
    response_model=AggregatedItemInfo,
    responses={404: {"model": ErrorResponse}},
)
def adjust_hideout_item(
    item_id: str,
    request: AdjustRequest,
    fir_item: list[str] = Query(default=[]),
    user_id: str = Depends(get_current_user_id),
    service: ProgressService = Depends(get_progress_service),
) -> AggregatedItemInfo:
    """
    수집량 조정

    row_key가 있으면 해당 행만, 없으면 아이템 전체에 분배합니다.
    저장 후 하이드아웃 캐시도 갱신됩니다.
    """
    try:
        item = service.adjust_hideout_item(
            user_id, item_id, request.delta, request.row_key, fir_item
        )
    except (ValueError, CatalogUnavailableError) as e:
        raise to_http_exception(e)

    logger.info("Adjusted hideout item %s by %d for %s", item_id, request.delta, user_id)
    return build_item_info(item)


@router.get("/cache", response_model=CachedItemListResponse)
def get_hideout_cache(
    user_id: str = Depends(get_current_user_id),
    service: ProgressService = Depends(get_progress_service),
) -> CachedItemListResponse:
    try:
        entries = service.get_hideout_cache(user_id)
    except ValueError as e:
        raise to_http_exception(e)
    return CachedItemListResponse(items=[_build_cached_info(e) for e in entries])


@router.put("/cache", response_model=CachedItemListResponse)
def replace_hideout_cache(
    request: HideoutCacheRequest,
    user_id: str = Depends(get_current_user_id),
    service: ProgressService = Depends(get_progress_service),
) -> CachedItemListResponse:
    """저장된 하이드아웃 집계 전체 교체. 요구량 0 이하 항목은 버린다."""
    records = [
        {
            "itemId": entry.item_id,
            "name": entry.name,
            "shortName": entry.short_name,
            "iconLink": entry.icon_link,
            "wikiLink": entry.wiki_link,
            "requiresFir": entry.requires_fir,
            "totalRequired": entry.total_required,
            "totalCollected": entry.total_collected,
        }
        for entry in request.items
    ]
    try:
        entries = service.replace_hideout_cache(user_id, records)
    except ValueError as e:
        raise to_http_exception(e)
    return CachedItemListResponse(items=[_build_cached_info(e) for e in entries])
