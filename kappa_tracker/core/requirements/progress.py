"""진행도 병합: 델타 적용 (first-fill / last-drain)

입력 AggregatedItem은 건드리지 않고 새 값을 반환한다.
적용량 = clamp(delta, -현재합, 요구합 - 현재합), 1단위씩 분배:
- 증가: 행 순서대로 cap 미만인 첫 행을 채움
- 감소: 역순으로 collected > 0 인 마지막 행을 비움
적용량 0 (delta 0, 가득 찬 상태의 +, 빈 상태의 -)은 조용한 no-op.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable

from .models import AggregatedItem, RequirementRow, SourceType


def clamp_delta(delta: int, current: int, total: int) -> int:
    return max(-current, min(total - current, delta))


def adjust(item: AggregatedItem, delta: int) -> AggregatedItem:
    applied = clamp_delta(delta, item.total_collected, item.total_required)
    if applied == 0:
        return item

    collected = [row.clamped_collected for row in item.rows]
    step = 1 if applied > 0 else -1

    for _ in range(abs(applied)):
        if step > 0:
            index = next(
                i
                for i, row in enumerate(item.rows)
                if collected[i] < row.required_count
            )
        else:
            index = next(
                i for i in reversed(range(len(item.rows))) if collected[i] > 0
            )
        collected[index] += step

    return replace(
        item,
        rows=tuple(
            replace(row, collected=value) for row, value in zip(item.rows, collected)
        ),
    )


def mark_all(item: AggregatedItem, found: bool) -> AggregatedItem:
    """전부 찾음 / 전부 필요 토글"""
    current = item.total_collected
    delta = item.total_required - current if found else -current
    return adjust(item, delta)


def adjust_row(item: AggregatedItem, row_key: str, delta: int) -> AggregatedItem:
    """행 1개만 조정 (시설별 화면). 없는 키면 KeyError."""
    for index, row in enumerate(item.rows):
        if row.key != row_key:
            continue
        current = row.clamped_collected
        applied = clamp_delta(delta, current, row.required_count)
        if applied == 0:
            return item
        rows = list(item.rows)
        rows[index] = replace(row, collected=current + applied)
        return replace(item, rows=tuple(rows))
    raise KeyError(row_key)


def persisted_count(row: RequirementRow) -> int:
    """저장할 원시 collected. 화폐 행은 1이면 원래 요구량."""
    if row.is_currency:
        return row.nominal_count if row.clamped_collected >= 1 else 0
    return row.clamped_collected


def rows_to_progress(rows: Iterable[RequirementRow]) -> dict[tuple[str, ...], int]:
    """행 → 저장 키별 카운트

    퀘스트 행: (quest_id, objective_id)
    시설 행: (station_id, level_id, item_id)
    """
    result: dict[tuple[str, ...], int] = {}
    for row in rows:
        if row.source_type == SourceType.QUEST_OBJECTIVE:
            result[(row.source_id, row.sub_id)] = persisted_count(row)
        else:
            result[(row.source_id, row.sub_id, row.item_id)] = persisted_count(row)
    return result
