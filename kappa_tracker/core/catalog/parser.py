"""카탈로그 파서: 외부 GraphQL 레코드 → 도메인 엔티티

엄격한 검증 경계. 원시 dict는 여기서만 다루고,
결과는 ParseResult(파싱된 엔티티 또는 스킵 사유)로 반환한다.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from typing import Any, Generic, Optional, TypeVar

from kappa_tracker.core.eligibility.graph import build_next_edges, find_cycles
from kappa_tracker.core.requirements.classifier import has_fir_attribute

from .models import (
    ItemRef,
    Objective,
    Quest,
    Station,
    StationItemRequirement,
    StationLevel,
    StationLevelRequirement,
    TraderLevelRequirement,
)
from .overrides import edition_override_for, reputation_override_for
from .tags import parse_objective_tags

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class ParseResult(Generic[T]):
    """파싱 결과: value 또는 skip_reason 중 하나만 채워진다"""

    value: Optional[T] = None
    skip_reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.value is not None

    @classmethod
    def parsed(cls, value: T) -> "ParseResult[T]":
        return cls(value=value)

    @classmethod
    def skipped(cls, reason: str) -> "ParseResult[T]":
        return cls(skip_reason=reason)


# === 원시 값 헬퍼 ===


def _as_number(value: Any) -> Optional[float]:
    """유한한 int/float만 인정 (bool, NaN, inf 제외)"""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    return value


def _as_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _positive_count(*candidates: Any) -> int:
    """첫 번째 숫자 후보를 정수 개수로. 없거나 0 이하면 1."""
    for candidate in candidates:
        number = _as_number(candidate)
        if number is not None:
            return int(number) if number > 0 else 1
    return 1


def _nested(raw: Any, *keys: str) -> Any:
    current = raw
    for key in keys:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current


def parse_item_ref(raw: Any, fallback_id: Optional[str] = None) -> ParseResult[ItemRef]:
    if not isinstance(raw, dict):
        return ParseResult.skipped("item is not an object")
    item_id = _as_text(raw.get("id")) or fallback_id
    if item_id is None:
        return ParseResult.skipped("item missing id")
    return ParseResult.parsed(
        ItemRef(
            item_id=item_id,
            name=_as_text(raw.get("name")) or "Item",
            short_name=_as_text(raw.get("shortName")),
            icon_link=_as_text(raw.get("iconLink")),
            wiki_link=_as_text(raw.get("wikiLink")),
        )
    )


def parse_trader_requirements(raws: Any) -> tuple[TraderLevelRequirement, ...]:
    """loyaltyLevel 타입, 이름 있음, 값 > 0 인 항목만"""
    if not isinstance(raws, list):
        return ()

    result: list[TraderLevelRequirement] = []
    for raw in raws:
        if not isinstance(raw, dict) or raw.get("requirementType") != "loyaltyLevel":
            continue
        trader_name = _as_text(_nested(raw, "trader", "name"))
        value = _as_number(raw.get("value"))
        if trader_name is None or value is None or value <= 0:
            continue
        result.append(TraderLevelRequirement(trader_name, int(value)))
    return tuple(result)


# === 퀘스트 ===


def parse_objective(raw: Any) -> ParseResult[Objective]:
    if not isinstance(raw, dict):
        return ParseResult.skipped("objective is not an object")
    objective_id = _as_text(raw.get("id"))
    if objective_id is None:
        return ParseResult.skipped("objective missing id")

    raw_items = raw.get("items")
    if not isinstance(raw_items, list):
        raw_items = []

    # id 없는 아이템은 목표 id 기반 키로 유지
    items: list[ItemRef] = []
    for raw_item in raw_items:
        parsed = parse_item_ref(raw_item, fallback_id=f"{objective_id}-item")
        if parsed.ok:
            items.append(parsed.value)

    description = str(raw.get("description") or "")

    return ParseResult.parsed(
        Objective(
            objective_id=objective_id,
            description=description,
            objective_type=str(raw.get("type") or ""),
            items=tuple(items),
            count=_positive_count(raw.get("count")),
            found_in_raid=bool(raw.get("foundInRaid")),
            tags=parse_objective_tags(description, has_items=bool(items)),
            item_entry_count=len(raw_items),
        )
    )


def _quest_map_name(raw: dict) -> str:
    map_name = _as_text(_nested(raw, "map", "name"))
    if map_name:
        return map_name
    for objective in raw.get("objectives") or []:
        for objective_map in _nested(objective, "maps") or []:
            normalized = _as_text(_nested(objective_map, "normalizedName"))
            if normalized:
                return normalized
    return "Any"


def parse_task(raw: Any) -> ParseResult[Quest]:
    """tarkov.dev task 1건 → Quest. 제목 오버라이드 적용."""
    if not isinstance(raw, dict):
        return ParseResult.skipped("task is not an object")
    quest_id = _as_text(raw.get("id"))
    if quest_id is None:
        return ParseResult.skipped("task missing id")

    title = _as_text(raw.get("name")) or "Unknown task"

    previous_ids: list[str] = []
    for requirement in raw.get("taskRequirements") or []:
        prev_id = _nested(requirement, "task", "id")
        if isinstance(prev_id, str) and prev_id:
            previous_ids.append(prev_id)

    objectives: list[Objective] = []
    raw_objectives = raw.get("objectives")
    if isinstance(raw_objectives, list):
        for raw_objective in raw_objectives:
            parsed = parse_objective(raw_objective)
            if parsed.ok:
                objectives.append(parsed.value)
            else:
                logger.warning(
                    "Skipping objective of task %s: %s", quest_id, parsed.skip_reason
                )

    min_level = _as_number(raw.get("minPlayerLevel"))
    prestige = _as_number(_nested(raw, "requiredPrestige", "prestigeLevel"))
    prestige_override = reputation_override_for(title)
    if prestige_override is not None:
        prestige = prestige_override

    return ParseResult.parsed(
        Quest(
            quest_id=quest_id,
            title=title,
            trader=_as_text(_nested(raw, "trader", "name")) or "Unknown trader",
            map_name=_quest_map_name(raw),
            previous_quest_ids=tuple(previous_ids),
            level_requirement=int(min_level) if min_level is not None else None,
            edition_requirement=edition_override_for(title),
            required_prestige=prestige,
            required_trader_levels=parse_trader_requirements(
                raw.get("traderRequirements")
            ),
            kappa_required=bool(raw.get("kappaRequired")),
            lightkeeper_required=bool(raw.get("lightkeeperRequired")),
            objectives=tuple(objectives),
            wiki_link=_as_text(raw.get("wikiLink")),
        )
    )


def link_next_quests(quests: list[Quest]) -> list[Quest]:
    """previous 간선의 역방향(next_quest_ids)을 채운 새 리스트"""
    next_by_id = build_next_edges(quests)
    return [
        replace(quest, next_quest_ids=next_by_id.get(quest.quest_id, ()))
        for quest in quests
    ]


def parse_tasks(raws: Any) -> list[Quest]:
    """task 목록 파싱. 잘못된 항목은 경고 후 스킵."""
    if not isinstance(raws, list):
        logger.warning("Task payload is not a list, got %s", type(raws).__name__)
        return []

    quests: list[Quest] = []
    for raw in raws:
        parsed = parse_task(raw)
        if parsed.ok:
            quests.append(parsed.value)
        else:
            logger.warning("Skipping task: %s", parsed.skip_reason)

    cyclic = find_cycles(quests)
    if cyclic:
        logger.warning("Prerequisite cycle among tasks: %s", ", ".join(sorted(cyclic)))

    return link_next_quests(quests)


# === 하이드아웃 ===


def parse_station_item_requirement(raw: Any) -> ParseResult[StationItemRequirement]:
    if not isinstance(raw, dict):
        return ParseResult.skipped("item requirement is not an object")
    item = parse_item_ref(raw.get("item"))
    if not item.ok:
        return ParseResult.skipped(item.skip_reason or "invalid item")
    return ParseResult.parsed(
        StationItemRequirement(
            item=item.value,
            count=_positive_count(raw.get("quantity"), raw.get("count")),
            requires_found_in_raid=has_fir_attribute(raw.get("attributes")),
        )
    )


def parse_station_level(raw: Any, station_id: str) -> ParseResult[StationLevel]:
    if not isinstance(raw, dict):
        return ParseResult.skipped("station level is not an object")

    level_number = _as_number(raw.get("level"))
    level = int(level_number) if level_number is not None else 1
    level_id = _as_text(raw.get("id")) or f"{station_id}-{level}"

    item_requirements: list[StationItemRequirement] = []
    for raw_requirement in raw.get("itemRequirements") or []:
        parsed = parse_station_item_requirement(raw_requirement)
        if parsed.ok:
            item_requirements.append(parsed.value)
        else:
            logger.warning(
                "Skipping item requirement of level %s: %s",
                level_id,
                parsed.skip_reason,
            )

    station_requirements: list[StationLevelRequirement] = []
    for raw_requirement in raw.get("stationLevelRequirements") or []:
        if not isinstance(raw_requirement, dict):
            continue
        required_level = _as_number(raw_requirement.get("level"))
        station_requirements.append(
            StationLevelRequirement(
                station_id=_as_text(_nested(raw_requirement, "station", "id")),
                station_name=_as_text(_nested(raw_requirement, "station", "name"))
                or "",
                level=int(required_level) if required_level is not None else 1,
            )
        )

    return ParseResult.parsed(
        StationLevel(
            level_id=level_id,
            level=level,
            item_requirements=tuple(item_requirements),
            station_level_requirements=tuple(station_requirements),
            trader_requirements=parse_trader_requirements(
                raw.get("traderRequirements")
            ),
        )
    )


def parse_station(raw: Any) -> ParseResult[Station]:
    if not isinstance(raw, dict):
        return ParseResult.skipped("station is not an object")
    station_id = _as_text(raw.get("id"))
    if station_id is None:
        return ParseResult.skipped("station missing id")

    levels: list[StationLevel] = []
    for raw_level in raw.get("levels") or []:
        parsed = parse_station_level(raw_level, station_id)
        if parsed.ok:
            levels.append(parsed.value)

    levels.sort(key=lambda lvl: lvl.level)

    return ParseResult.parsed(
        Station(
            station_id=station_id,
            name=_as_text(raw.get("name")) or "Station",
            normalized_name=_as_text(raw.get("normalizedName")) or "",
            levels=tuple(levels),
        )
    )


def unwrap_connection(raw: Any) -> list:
    """list 그대로, 또는 GraphQL connection(nodes / edges[].node) 해제"""
    if isinstance(raw, list):
        return raw
    if isinstance(raw, dict):
        if isinstance(raw.get("nodes"), list):
            return raw["nodes"]
        if isinstance(raw.get("edges"), list):
            return [
                edge["node"]
                for edge in raw["edges"]
                if isinstance(edge, dict) and edge.get("node")
            ]
    return []


def parse_stations(raws: Any) -> list[Station]:
    stations: list[Station] = []
    for raw in unwrap_connection(raws):
        parsed = parse_station(raw)
        if parsed.ok:
            stations.append(parsed.value)
        else:
            logger.warning("Skipping station: %s", parsed.skip_reason)
    return stations
