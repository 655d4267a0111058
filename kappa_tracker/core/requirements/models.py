"""요구 아이템 집계 도메인 모델 (DB 무관)

RequirementRow 하나 = (출처, 세부 출처, 아이템) 요구 1건.
같은 아이템의 행들은 AggregatedItem으로 묶이지만 합쳐지지 않는다.
행별 collected가 남아 있어야 진행도를 다시 분배할 수 있다.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class SourceType(str, Enum):
    QUEST_OBJECTIVE = "quest_objective"
    HIDEOUT_STATION_LEVEL = "hideout_station_level"


class AggregationMode(str, Enum):
    ALL = "all"
    ACTIVE = "active"  # 잠긴 퀘스트 제외


@dataclass(frozen=True)
class AggregationScope:
    """집계 필터. 필터로 빠진 행은 합계에 들어가지 않는다."""

    mode: AggregationMode = AggregationMode.ALL
    kappa_only: bool = False
    lightkeeper_only: bool = False
    fir_only: bool = False


@dataclass(frozen=True)
class RequirementRow:
    """집계 단위 요구 행

    required_count / collected는 화폐 축약 후 값.
    nominal_count는 카탈로그 원래 요구량 (저장 시 화폐 환산용).
    """

    source_type: SourceType
    source_id: str  # quest_id 또는 station_id
    sub_id: str  # objective_id 또는 level_id
    item_id: str
    required_count: int
    collected: int = 0
    requires_found_in_raid: bool = False

    source_title: str = ""
    nominal_count: int = 0
    is_currency: bool = False
    kappa_required: bool = False
    lightkeeper_required: bool = False
    source_status: Optional[str] = None  # 퀘스트 상태 값
    station_level: Optional[int] = None

    @property
    def key(self) -> str:
        return f"{self.source_id}:{self.sub_id}:{self.item_id}"

    @property
    def clamped_collected(self) -> int:
        return max(0, min(self.required_count, self.collected))

    @property
    def is_quest_row(self) -> bool:
        return self.source_type == SourceType.QUEST_OBJECTIVE


@dataclass(frozen=True)
class AggregatedItem:
    """아이템 1종의 요구 합계 + 기여 행"""

    item_id: str
    name: str = "Item"
    short_name: Optional[str] = None
    icon_link: Optional[str] = None
    wiki_link: Optional[str] = None
    rows: tuple[RequirementRow, ...] = ()

    @property
    def total_required(self) -> int:
        return sum(row.required_count for row in self.rows)

    @property
    def total_collected(self) -> int:
        return sum(row.clamped_collected for row in self.rows)

    @property
    def requires_found_in_raid(self) -> bool:
        return any(row.requires_found_in_raid for row in self.rows)

    @property
    def quest_count(self) -> int:
        """"N개 퀘스트에서 사용" 표시용 (서로 다른 퀘스트 수)"""
        return len({row.source_id for row in self.rows if row.is_quest_row})

    @property
    def remaining(self) -> int:
        return self.total_required - self.total_collected

    @property
    def is_found(self) -> bool:
        return self.total_required > 0 and self.remaining == 0


@dataclass(frozen=True)
class CachedItemTotal:
    """사용자 레코드에 저장된 하이드아웃 집계 캐시 1건"""

    item_id: str
    name: str = "Item"
    short_name: Optional[str] = None
    icon_link: Optional[str] = None
    wiki_link: Optional[str] = None
    requires_found_in_raid: bool = False
    total_required: int = 0
    total_collected: int = 0
