"""카탈로그 도메인 모델 (DB 무관)

외부 카탈로그(tarkov.dev)에서 받아온 퀘스트/하이드아웃 정의의 불변 스냅샷.
parser.py만 이 타입을 생성한다.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class GameEdition(str, Enum):
    STANDARD = "Standard"
    LEFT_BEHIND = "Left Behind"
    PREPARE_FOR_ESCAPE = "Prepare for Escape"
    EDGE_OF_DARKNESS = "Edge of Darkness"
    UNHEARD = "Unheard"


class ObjectiveTag(str, Enum):
    MARKER = "marker"
    JAMMER = "jammer"
    CAMERA = "camera"
    ITEM = "item"
    KEY = "key"


@dataclass(frozen=True)
class ItemRef:
    """아이템 참조: 표시용 메타 포함"""

    item_id: str
    name: str = "Item"
    short_name: Optional[str] = None
    icon_link: Optional[str] = None
    wiki_link: Optional[str] = None


@dataclass(frozen=True)
class TraderLevelRequirement:
    """상인 신뢰도(LL) 요구"""

    trader_name: str
    loyalty_level: int


@dataclass(frozen=True)
class ObjectiveItemRequirement:
    """단일 아이템 목표의 요구량"""

    item: ItemRef
    required_count: int
    requires_found_in_raid: bool


@dataclass(frozen=True)
class Objective:
    """퀘스트 목표 단위"""

    objective_id: str
    description: str = ""
    objective_type: str = ""
    items: tuple[ItemRef, ...] = ()
    count: int = 1
    found_in_raid: bool = False
    tags: tuple[ObjectiveTag, ...] = ()
    # 피드 원본 items 항목 수 (파싱 실패 항목 포함). None이면 len(items)
    item_entry_count: Optional[int] = None

    @property
    def item_requirement(self) -> Optional[ObjectiveItemRequirement]:
        """아이템이 정확히 1개일 때만 요구량 반환.

        2개 이상은 "그중 하나" 대체 목록이므로 집계 대상이 아니다.
        """
        entries = (
            len(self.items) if self.item_entry_count is None else self.item_entry_count
        )
        if entries != 1 or len(self.items) != 1:
            return None
        return ObjectiveItemRequirement(
            item=self.items[0],
            required_count=self.count,
            requires_found_in_raid=self.found_in_raid,
        )


@dataclass(frozen=True)
class Quest:
    """퀘스트(태스크) 본체"""

    quest_id: str
    title: str = "Unknown task"
    trader: str = "Unknown trader"
    map_name: str = "Any"

    # 선행 관계
    previous_quest_ids: tuple[str, ...] = ()
    next_quest_ids: tuple[str, ...] = ()

    # 게이트
    level_requirement: Optional[int] = None
    edition_requirement: Optional[str] = None  # GameEdition 값
    required_prestige: Optional[float] = None  # 음수면 상한
    required_trader_levels: tuple[TraderLevelRequirement, ...] = ()

    # 마일스톤
    kappa_required: bool = False
    lightkeeper_required: bool = False

    objectives: tuple[Objective, ...] = ()

    wiki_link: Optional[str] = None

    @property
    def tags(self) -> tuple[ObjectiveTag, ...]:
        """목표 태그 합집합 (필터용, 첫 등장 순)"""
        seen: list[ObjectiveTag] = []
        for objective in self.objectives:
            for tag in objective.tags:
                if tag not in seen:
                    seen.append(tag)
        return tuple(seen)


@dataclass(frozen=True)
class StationLevelRequirement:
    """다른(또는 같은) 시설 레벨 선행 요구"""

    station_id: Optional[str]
    station_name: str = ""
    level: int = 1


@dataclass(frozen=True)
class StationItemRequirement:
    """시설 레벨 업그레이드 아이템 요구"""

    item: ItemRef
    count: int = 1
    requires_found_in_raid: bool = False


@dataclass(frozen=True)
class StationLevel:
    """하이드아웃 시설의 업그레이드 단계 1개"""

    level_id: str
    level: int
    item_requirements: tuple[StationItemRequirement, ...] = ()
    station_level_requirements: tuple[StationLevelRequirement, ...] = ()
    trader_requirements: tuple[TraderLevelRequirement, ...] = ()


@dataclass(frozen=True)
class Station:
    """하이드아웃 시설"""

    station_id: str
    name: str = "Station"
    normalized_name: str = ""
    levels: tuple[StationLevel, ...] = field(default_factory=tuple)

    @property
    def max_level(self) -> int:
        return max((lvl.level for lvl in self.levels), default=0)

    def get_level(self, level: int) -> Optional[StationLevel]:
        for lvl in self.levels:
            if lvl.level == level:
                return lvl
        return None
