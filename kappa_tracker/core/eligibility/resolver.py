"""퀘스트 잠금 판정: 완료 상태 + 플레이어 속성 게이트

외부 I/O 없음. 입력 스냅샷 → 새 결과 dict.

게이트 (독립, 실패를 OR):
1. 선행 퀘스트: previous_quest_ids 중 미완료가 있으면 실패
2. 레벨: level < level_requirement
3. 평판: 요구치 >= 0 이면 rep >= 요구치, 음수면 rep <= 요구치
4. 에디션: EOD는 EOD/Unheard로 충족, 그 외는 일치
5. 상인 LL: trader_levels 중 미달 또는 누락

속성이 None이면 해당 게이트는 통과 (모름 → 막지 않음).
완료된 퀘스트는 게이트를 다시 보지 않는다.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Optional

from kappa_tracker.core.catalog.models import (
    GameEdition,
    Quest,
    TraderLevelRequirement,
)

from .models import LockGate, PlayerAttributes, QuestResolution, QuestStatus

logger = logging.getLogger(__name__)

# 상위 에디션이 포함하는 에디션
EDITION_SUPERSETS: dict[str, frozenset[str]] = {
    GameEdition.EDGE_OF_DARKNESS.value: frozenset(
        {GameEdition.EDGE_OF_DARKNESS.value, GameEdition.UNHEARD.value}
    ),
}


def edition_satisfies(required: str, edition: str) -> bool:
    accepted = EDITION_SUPERSETS.get(required)
    if accepted is not None:
        return edition in accepted
    return edition == required


def meets_reputation(required: float, reputation: float) -> bool:
    if required >= 0:
        return reputation >= required
    return reputation <= required


def trader_level_failures(
    requirements: Iterable[TraderLevelRequirement],
    trader_levels: Optional[Mapping[str, int]],
) -> list[str]:
    """미달 상인 요구의 표시 문자열. trader_levels가 None이면 빈 리스트."""
    if trader_levels is None:
        return []

    failures: list[str] = []
    for requirement in requirements:
        current = trader_levels.get(requirement.trader_name)
        if current is None or current < requirement.loyalty_level:
            failures.append(f"{requirement.trader_name} LL{requirement.loyalty_level}")
    return failures


def evaluate_quest(
    quest: Quest,
    completed: Iterable[str],
    attrs: Optional[PlayerAttributes] = None,
    titles_by_id: Optional[Mapping[str, str]] = None,
) -> QuestResolution:
    completed_ids = completed if isinstance(completed, (set, frozenset)) else set(completed)
    attrs = attrs or PlayerAttributes()

    if quest.quest_id in completed_ids:
        return QuestResolution(quest_id=quest.quest_id, status=QuestStatus.COMPLETED)

    gates: list[LockGate] = []
    reasons: list[str] = []

    missing = [
        (titles_by_id or {}).get(prev_id, prev_id)
        for prev_id in quest.previous_quest_ids
        if prev_id not in completed_ids
    ]
    if missing:
        gates.append(LockGate.PREREQUISITE)
        reasons.extend(missing)

    if (
        quest.level_requirement is not None
        and attrs.level is not None
        and attrs.level < quest.level_requirement
    ):
        gates.append(LockGate.LEVEL)
        reasons.append(f"level {quest.level_requirement}")

    if (
        quest.required_prestige is not None
        and attrs.reputation is not None
        and not meets_reputation(quest.required_prestige, attrs.reputation)
    ):
        gates.append(LockGate.REPUTATION)
        reasons.append(f"Fence rep {quest.required_prestige:.2f}")

    if (
        quest.edition_requirement
        and attrs.edition
        and not edition_satisfies(quest.edition_requirement, attrs.edition)
    ):
        gates.append(LockGate.EDITION)
        reasons.append(f"{quest.edition_requirement} edition")

    trader_failures = trader_level_failures(
        quest.required_trader_levels, attrs.trader_levels
    )
    if trader_failures:
        gates.append(LockGate.TRADER_LEVEL)
        reasons.extend(trader_failures)

    if gates:
        return QuestResolution(
            quest_id=quest.quest_id,
            status=QuestStatus.LOCKED,
            failed_gates=tuple(gates),
            missing_prerequisites=tuple(missing),
            lock_reasons=tuple(reasons),
        )

    return QuestResolution(quest_id=quest.quest_id, status=QuestStatus.AVAILABLE)


def resolve(
    quests: Sequence[Quest],
    completed: Iterable[str],
    attrs: Optional[PlayerAttributes] = None,
) -> dict[str, QuestResolution]:
    """전체 퀘스트 상태 판정. 반환 순서는 입력 순서."""
    completed_ids = frozenset(completed)
    titles_by_id = {quest.quest_id: quest.title for quest in quests}

    result: dict[str, QuestResolution] = {}
    for quest in quests:
        result[quest.quest_id] = evaluate_quest(
            quest, completed_ids, attrs, titles_by_id
        )

    locked = sum(1 for r in result.values() if r.status == QuestStatus.LOCKED)
    logger.debug(
        "Resolved %d quests (%d completed, %d locked)",
        len(result),
        sum(1 for r in result.values() if r.status == QuestStatus.COMPLETED),
        locked,
    )
    return result


def status_map(resolutions: Mapping[str, QuestResolution]) -> dict[str, QuestStatus]:
    return {quest_id: r.status for quest_id, r in resolutions.items()}
