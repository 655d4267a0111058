"""상인 테이블: 저장된 trader_id → 이름 / 최대 LL"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Optional


@dataclass(frozen=True)
class TraderInfo:
    trader_id: str
    name: str
    max_level: int = 4


TRADERS: tuple[TraderInfo, ...] = (
    TraderInfo("prapor", "Prapor"),
    TraderInfo("therapist", "Therapist"),
    TraderInfo("skier", "Skier"),
    TraderInfo("peacekeeper", "Peacekeeper"),
    TraderInfo("mechanic", "Mechanic"),
    TraderInfo("ragman", "Ragman"),
    TraderInfo("jaeger", "Jaeger"),
    TraderInfo("fence", "Fence"),
    TraderInfo("ref", "Ref"),
    TraderInfo("lightkeeper", "Lightkeeper", max_level=1),
)

_BY_ID = {trader.trader_id: trader for trader in TRADERS}


def get_trader(trader_id: str) -> Optional[TraderInfo]:
    return _BY_ID.get(str(trader_id).lower())


def clamp_level(trader: TraderInfo, level: Any) -> Optional[int]:
    """1..max_level 로 자른다. 숫자가 아니면 None"""
    if isinstance(level, bool):
        return None
    try:
        value = int(float(level))
    except (TypeError, ValueError, OverflowError):
        return None
    return min(trader.max_level, max(1, value))


def levels_by_name(standings: Iterable[Any]) -> Optional[dict[str, int]]:
    """[{traderId, level}] → {상인 이름: LL}. 인식된 항목이 없으면 None."""
    result: dict[str, int] = {}
    for standing in standings:
        if not isinstance(standing, dict) or not standing.get("traderId"):
            continue
        trader = get_trader(standing["traderId"])
        if trader is None:
            continue
        level = clamp_level(trader, standing.get("level", 1))
        if level is None:
            continue
        result[trader.name] = level
    return result or None
