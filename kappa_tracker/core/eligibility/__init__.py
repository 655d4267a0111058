"""퀘스트/시설 잠금 판정 Core 패키지"""

from kappa_tracker.core.eligibility.graph import (
    build_next_edges,
    find_cycles,
)
from kappa_tracker.core.eligibility.models import (
    LockGate,
    PlayerAttributes,
    QuestResolution,
    QuestStatus,
    StationResolution,
    StationStatus,
)
from kappa_tracker.core.eligibility.resolver import evaluate_quest, resolve, status_map
from kappa_tracker.core.eligibility.stations import evaluate_station, resolve_stations

__all__ = [
    "LockGate",
    "PlayerAttributes",
    "QuestResolution",
    "QuestStatus",
    "StationResolution",
    "StationStatus",
    "build_next_edges",
    "evaluate_quest",
    "evaluate_station",
    "find_cycles",
    "resolve",
    "resolve_stations",
    "status_map",
]
