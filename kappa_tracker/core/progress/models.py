"""사용자 진행도 스냅샷 (DB 무관)

엔진은 호출마다 ActorProgress 하나만 받는다.
저장 레코드(JSON 리스트들) → ActorProgress 변환은 progress_from_record.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from kappa_tracker.core.eligibility.models import PlayerAttributes, QuestStatus
from kappa_tracker.core.requirements.models import CachedItemTotal

from .traders import levels_by_name


@dataclass(frozen=True)
class ActorProgress:
    actor_id: str
    completed_quest_ids: frozenset[str] = frozenset()
    quest_statuses: dict[str, str] = field(default_factory=dict)  # 저장된 원본 상태
    objective_progress: dict[tuple[str, str], int] = field(default_factory=dict)

    # 게이트 속성 (None = 모름)
    level: Optional[int] = None
    reputation: Optional[float] = None
    edition: Optional[str] = None
    trader_levels: Optional[dict[str, int]] = None

    # 하이드아웃
    station_levels: dict[str, int] = field(default_factory=dict)
    hideout_progress: dict[tuple[str, str, str], int] = field(default_factory=dict)

    def attributes(self) -> PlayerAttributes:
        return PlayerAttributes(
            level=self.level,
            reputation=self.reputation,
            edition=self.edition or None,
            trader_levels=self.trader_levels,
        )

    def has_objective_progress(self, quest_id: str) -> bool:
        return any(
            count > 0
            for (q_id, _), count in self.objective_progress.items()
            if q_id == quest_id
        )


def _number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    return value


def _count(value: Any) -> int:
    number = _number(value)
    return max(0, int(number)) if number is not None else 0


def _entries(raw: Any) -> Iterable[dict]:
    if not isinstance(raw, list):
        return ()
    return (entry for entry in raw if isinstance(entry, dict))


def progress_from_record(
    actor_id: str,
    *,
    quests: Any = None,
    objective_progress: Any = None,
    trader_standings: Any = None,
    station_levels: Any = None,
    hideout_progress: Any = None,
    level: Any = None,
    fence_rep: Any = None,
    game_edition: Any = None,
) -> ActorProgress:
    """저장 레코드 → ActorProgress. 잘못된 항목은 버린다."""
    statuses: dict[str, str] = {}
    for entry in _entries(quests):
        quest_id, status = entry.get("questId"), entry.get("status")
        if quest_id and status:
            statuses[str(quest_id)] = str(status)

    objectives: dict[tuple[str, str], int] = {}
    for entry in _entries(objective_progress):
        quest_id, objective_id = entry.get("questId"), entry.get("objectiveId")
        if quest_id and objective_id:
            objectives[(str(quest_id), str(objective_id))] = _count(
                entry.get("collected")
            )

    stations: dict[str, int] = {}
    for entry in _entries(station_levels):
        if entry.get("stationId"):
            stations[str(entry["stationId"])] = _count(entry.get("currentLevel"))

    hideout: dict[tuple[str, str, str], int] = {}
    for entry in _entries(hideout_progress):
        key = (entry.get("stationId"), entry.get("levelId"), entry.get("itemId"))
        if all(key):
            hideout[tuple(str(part) for part in key)] = _count(entry.get("collected"))

    level_value = _number(level)
    reputation = _number(fence_rep)

    return ActorProgress(
        actor_id=actor_id,
        completed_quest_ids=frozenset(
            quest_id
            for quest_id, status in statuses.items()
            if status == QuestStatus.COMPLETED.value
        ),
        quest_statuses=statuses,
        objective_progress=objectives,
        level=int(level_value) if level_value is not None else None,
        reputation=float(reputation) if reputation is not None else None,
        edition=str(game_edition) if game_edition else None,
        trader_levels=levels_by_name(_entries(trader_standings)),
        station_levels=stations,
        hideout_progress=hideout,
    )


def cached_totals_from_record(raw: Any) -> list[CachedItemTotal]:
    """hideout_items 레코드 정리: itemId 필수, 요구량 > 0, 수집량은 0..요구량"""
    result: list[CachedItemTotal] = []
    for entry in _entries(raw):
        if not entry.get("itemId"):
            continue
        required = _number(entry.get("totalRequired"))
        total_required = int(required) if required is not None else 0
        if total_required <= 0:
            continue
        total_collected = min(total_required, _count(entry.get("totalCollected")))

        result.append(
            CachedItemTotal(
                item_id=str(entry["itemId"]),
                name=str(entry.get("name") or "Item"),
                short_name=str(entry["shortName"]) if entry.get("shortName") else None,
                icon_link=str(entry["iconLink"]) if entry.get("iconLink") else None,
                wiki_link=str(entry["wikiLink"]) if entry.get("wikiLink") else None,
                requires_found_in_raid=bool(entry.get("requiresFir")),
                total_required=total_required,
                total_collected=total_collected,
            )
        )
    return result


def cached_total_to_record(entry: CachedItemTotal) -> dict[str, Any]:
    record: dict[str, Any] = {
        "itemId": entry.item_id,
        "name": entry.name,
        "requiresFir": entry.requires_found_in_raid,
        "totalRequired": entry.total_required,
        "totalCollected": entry.total_collected,
    }
    if entry.short_name:
        record["shortName"] = entry.short_name
    if entry.icon_link:
        record["iconLink"] = entry.icon_link
    if entry.wiki_link:
        record["wikiLink"] = entry.wiki_link
    return record
