"""카탈로그 Core 패키지: 외부 퀘스트/하이드아웃 정의 스냅샷"""

from kappa_tracker.core.catalog.models import (
    GameEdition,
    ItemRef,
    Objective,
    ObjectiveItemRequirement,
    ObjectiveTag,
    Quest,
    Station,
    StationItemRequirement,
    StationLevel,
    StationLevelRequirement,
    TraderLevelRequirement,
)

__all__ = [
    "GameEdition",
    "ItemRef",
    "Objective",
    "ObjectiveItemRequirement",
    "ObjectiveTag",
    "Quest",
    "Station",
    "StationItemRequirement",
    "StationLevel",
    "StationLevelRequirement",
    "TraderLevelRequirement",
]
