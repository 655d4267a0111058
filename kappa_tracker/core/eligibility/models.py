"""Eligibility 도메인 모델 (DB 무관)"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class QuestStatus(str, Enum):
    LOCKED = "locked"
    AVAILABLE = "available"
    COMPLETED = "completed"


class LockGate(str, Enum):
    PREREQUISITE = "prerequisite"
    LEVEL = "level"
    REPUTATION = "reputation"
    EDITION = "edition"
    TRADER_LEVEL = "trader_level"


class StationStatus(str, Enum):
    ACTIVE = "active"
    LOCKED = "locked"
    MAXED = "maxed"


@dataclass(frozen=True)
class PlayerAttributes:
    """게이트 판정용 플레이어 속성. None = 모름 → 게이트 통과"""

    level: Optional[int] = None
    reputation: Optional[float] = None
    edition: Optional[str] = None
    trader_levels: Optional[dict[str, int]] = None


@dataclass(frozen=True)
class QuestResolution:
    """퀘스트 1건의 판정 결과"""

    quest_id: str
    status: QuestStatus
    failed_gates: tuple[LockGate, ...] = ()
    missing_prerequisites: tuple[str, ...] = ()  # 미완료 선행 퀘스트 제목
    lock_reasons: tuple[str, ...] = ()

    @property
    def is_locked(self) -> bool:
        return self.status == QuestStatus.LOCKED


@dataclass(frozen=True)
class StationResolution:
    """하이드아웃 시설의 다음 레벨 판정"""

    station_id: str
    status: StationStatus
    current_level: int
    target_level: int
    max_level: int
    lock_reasons: tuple[str, ...] = field(default_factory=tuple)
