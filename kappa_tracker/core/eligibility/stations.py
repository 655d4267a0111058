"""하이드아웃 시설 다음 레벨 판정 (active / locked / maxed)

퀘스트 게이트와 같은 규칙을 시설 레벨에 적용한다:
- 선행 시설 레벨이 모두 지어져 있어야 함
- 상인 LL 요구 충족 (trader_levels 누락 = 실패)
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Optional

from kappa_tracker.core.catalog.models import Station

from .models import StationResolution, StationStatus
from .resolver import trader_level_failures


def evaluate_station(
    station: Station,
    station_levels: Mapping[str, int],
    trader_levels: Optional[Mapping[str, int]] = None,
) -> StationResolution:
    max_level = station.max_level
    current = max(0, station_levels.get(station.station_id, 0))

    if max_level <= 0:
        return StationResolution(
            station_id=station.station_id,
            status=StationStatus.LOCKED,
            current_level=current,
            target_level=0,
            max_level=0,
        )

    if current >= max_level:
        return StationResolution(
            station_id=station.station_id,
            status=StationStatus.MAXED,
            current_level=current,
            target_level=max_level,
            max_level=max_level,
        )

    target = current + 1
    target_level = station.get_level(target) or station.levels[-1]

    reasons: list[str] = []
    for requirement in target_level.station_level_requirements:
        required_station = requirement.station_id or station.station_id
        if station_levels.get(required_station, 0) < requirement.level:
            name = requirement.station_name or required_station
            reasons.append(f"{name} level {requirement.level}")

    # trader_levels 없음 = 모든 상인 요구 미달
    reasons.extend(
        trader_level_failures(target_level.trader_requirements, trader_levels or {})
    )

    return StationResolution(
        station_id=station.station_id,
        status=StationStatus.LOCKED if reasons else StationStatus.ACTIVE,
        current_level=current,
        target_level=target,
        max_level=max_level,
        lock_reasons=tuple(reasons),
    )


def resolve_stations(
    stations: Sequence[Station],
    station_levels: Mapping[str, int],
    trader_levels: Optional[Mapping[str, int]] = None,
) -> dict[str, StationResolution]:
    return {
        station.station_id: evaluate_station(station, station_levels, trader_levels)
        for station in stations
    }
