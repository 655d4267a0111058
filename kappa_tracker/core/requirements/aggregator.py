"""요구 아이템 집계: 퀘스트 목표 / 하이드아웃 시설 레벨 → AggregatedItem

규칙:
- 아이템이 정확히 1개인 목표만 (여러 개는 대체 목록)
- 설명문이 있으면 아이템 이름/약칭이 설명문에 등장해야 포함
- 화폐는 요구 1로 축약, 원래 요구량 이상 모이면 1
- 완료 퀘스트의 목표는 전부 모은 것으로 본다
- 같은 item_id의 행은 카탈로그 순서대로 하나의 AggregatedItem에 묶인다

반환은 이름 → item_id 순 정렬.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping, Sequence
from typing import Any, Optional

from kappa_tracker.core.catalog.models import ItemRef, Objective, Quest, Station
from kappa_tracker.core.eligibility.models import QuestStatus

from .classifier import is_currency_item, matches_fir_keys
from .models import (
    AggregatedItem,
    AggregationMode,
    AggregationScope,
    CachedItemTotal,
    RequirementRow,
    SourceType,
)

logger = logging.getLogger(__name__)

ObjectiveKey = tuple[str, str]  # (quest_id, objective_id)
HideoutKey = tuple[str, str, str]  # (station_id, level_id, item_id)

CACHE_SOURCE_ID = "hideout"
CACHE_SUB_ID = "cache"


def sanitize_count(value: Any) -> int:
    """저장된 진행도 → 0 이상 정수. 숫자가 아니면 0."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    if not math.isfinite(value):
        return 0
    return max(0, int(value))


def description_mentions(description: str, item: ItemRef) -> bool:
    """설명문이 비어 있으면 통과. 아니면 이름 또는 약칭 부분 일치."""
    text = description.strip().lower()
    if not text:
        return True
    if item.name and item.name.lower() in text:
        return True
    return bool(item.short_name and item.short_name.lower() in text)


def collapse_counts(
    item: ItemRef, nominal: int, raw_collected: int
) -> tuple[int, int, bool]:
    """(required, collected, is_currency). 화폐면 1/0 으로 축약."""
    if is_currency_item(item.name, item.short_name):
        return 1, 1 if raw_collected >= nominal else 0, True
    return nominal, max(0, min(nominal, raw_collected)), False


def _status_value(status: Any) -> str:
    if isinstance(status, QuestStatus):
        return status.value
    return str(status) if status else QuestStatus.AVAILABLE.value


def _quest_in_scope(quest: Quest, status: str, scope: AggregationScope) -> bool:
    if scope.mode == AggregationMode.ACTIVE and status == QuestStatus.LOCKED.value:
        return False
    if scope.kappa_only and not quest.kappa_required:
        return False
    if scope.lightkeeper_only and not quest.lightkeeper_required:
        return False
    return True


def objective_row(
    quest: Quest,
    objective: Objective,
    status: str,
    raw_collected: int,
) -> Optional[RequirementRow]:
    """집계 대상이 아니면 None"""
    requirement = objective.item_requirement
    if requirement is None:
        return None
    if not description_mentions(objective.description, requirement.item):
        return None

    nominal = requirement.required_count
    if status == QuestStatus.COMPLETED.value:
        raw_collected = nominal

    required, collected, is_currency = collapse_counts(
        requirement.item, nominal, raw_collected
    )
    return RequirementRow(
        source_type=SourceType.QUEST_OBJECTIVE,
        source_id=quest.quest_id,
        sub_id=objective.objective_id,
        item_id=requirement.item.item_id,
        required_count=required,
        collected=collected,
        requires_found_in_raid=requirement.requires_found_in_raid,
        source_title=quest.title,
        nominal_count=nominal,
        is_currency=is_currency,
        kappa_required=quest.kappa_required,
        lightkeeper_required=quest.lightkeeper_required,
        source_status=status,
    )


class _Grouper:
    """item_id별 행 묶음 (첫 등장 순서 유지)"""

    def __init__(self) -> None:
        self._refs: dict[str, ItemRef] = {}
        self._rows: dict[str, list[RequirementRow]] = {}

    def add(self, item: ItemRef, row: RequirementRow) -> None:
        if item.item_id not in self._refs:
            self._refs[item.item_id] = item
            self._rows[item.item_id] = []
        self._rows[item.item_id].append(row)

    def build(self) -> list[AggregatedItem]:
        items = [
            AggregatedItem(
                item_id=item_id,
                name=ref.name,
                short_name=ref.short_name,
                icon_link=ref.icon_link,
                wiki_link=ref.wiki_link,
                rows=tuple(self._rows[item_id]),
            )
            for item_id, ref in self._refs.items()
            if self._rows[item_id]
        ]
        return sort_items(items)


def sort_items(items: Iterable[AggregatedItem]) -> list[AggregatedItem]:
    return sorted(items, key=lambda item: (item.name.lower(), item.item_id))


def aggregate_quest_items(
    quests: Sequence[Quest],
    statuses: Mapping[str, Any],
    objective_progress: Mapping[ObjectiveKey, Any],
    scope: Optional[AggregationScope] = None,
) -> list[AggregatedItem]:
    """퀘스트 목표 아이템 집계. statuses에 없는 퀘스트는 available."""
    scope = scope or AggregationScope()
    grouper = _Grouper()

    for quest in quests:
        status = _status_value(statuses.get(quest.quest_id))
        if not _quest_in_scope(quest, status, scope):
            continue

        for objective in quest.objectives:
            raw = sanitize_count(
                objective_progress.get((quest.quest_id, objective.objective_id))
            )
            row = objective_row(quest, objective, status, raw)
            if row is None:
                continue
            if scope.fir_only and not row.requires_found_in_raid:
                continue
            grouper.add(objective.items[0], row)

    return grouper.build()


def aggregate_hideout_items(
    stations: Sequence[Station],
    hideout_progress: Mapping[HideoutKey, Any],
    scope: Optional[AggregationScope] = None,
    fir_item_keys: Iterable[str] = (),
) -> list[AggregatedItem]:
    """시설 레벨 아이템 요구 집계. 시설 잠금 판정은 하지 않는다."""
    scope = scope or AggregationScope()
    fir_keys = tuple(fir_item_keys)
    grouper = _Grouper()

    for station in stations:
        for level in station.levels:
            for requirement in level.item_requirements:
                item = requirement.item
                raw = sanitize_count(
                    hideout_progress.get(
                        (station.station_id, level.level_id, item.item_id)
                    )
                )
                required, collected, is_currency = collapse_counts(
                    item, requirement.count, raw
                )
                fir = requirement.requires_found_in_raid or matches_fir_keys(
                    fir_keys, item.name, item.short_name
                )
                if scope.fir_only and not fir:
                    continue

                grouper.add(
                    item,
                    RequirementRow(
                        source_type=SourceType.HIDEOUT_STATION_LEVEL,
                        source_id=station.station_id,
                        sub_id=level.level_id,
                        item_id=item.item_id,
                        required_count=required,
                        collected=collected,
                        requires_found_in_raid=fir,
                        source_title=station.name,
                        nominal_count=requirement.count,
                        is_currency=is_currency,
                        station_level=level.level,
                    ),
                )

    return grouper.build()


def aggregate_cached_items(entries: Iterable[CachedItemTotal]) -> list[AggregatedItem]:
    """저장된 하이드아웃 캐시 → 캐시 1건당 행 1개인 AggregatedItem"""
    grouper = _Grouper()
    for entry in entries:
        if entry.total_required <= 0:
            continue
        item = ItemRef(
            item_id=entry.item_id,
            name=entry.name,
            short_name=entry.short_name,
            icon_link=entry.icon_link,
            wiki_link=entry.wiki_link,
        )
        grouper.add(
            item,
            RequirementRow(
                source_type=SourceType.HIDEOUT_STATION_LEVEL,
                source_id=CACHE_SOURCE_ID,
                sub_id=CACHE_SUB_ID,
                item_id=entry.item_id,
                required_count=entry.total_required,
                collected=max(0, min(entry.total_required, entry.total_collected)),
                requires_found_in_raid=entry.requires_found_in_raid,
                nominal_count=entry.total_required,
            ),
        )
    return grouper.build()


def merge_items(*groups: Iterable[AggregatedItem]) -> list[AggregatedItem]:
    """여러 집계 결과를 item_id로 합친다. 메타는 먼저 나온 쪽."""
    grouper = _Grouper()
    for group in groups:
        for item in group:
            ref = ItemRef(
                item_id=item.item_id,
                name=item.name,
                short_name=item.short_name,
                icon_link=item.icon_link,
                wiki_link=item.wiki_link,
            )
            for row in item.rows:
                grouper.add(ref, row)
    return grouper.build()


def to_cached_totals(items: Iterable[AggregatedItem]) -> list[CachedItemTotal]:
    """AggregatedItem → 사용자 레코드 캐시 형태"""
    result = [
        CachedItemTotal(
            item_id=item.item_id,
            name=item.name,
            short_name=item.short_name,
            icon_link=item.icon_link,
            wiki_link=item.wiki_link,
            requires_found_in_raid=item.requires_found_in_raid,
            total_required=item.total_required,
            total_collected=item.total_collected,
        )
        for item in items
        if item.total_required > 0
    ]
    logger.debug("Built %d cached hideout totals", len(result))
    return result
