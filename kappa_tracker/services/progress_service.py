"""Progress Service: 사용자 진행도 Core↔DB 연결

퀘스트 상태 판정, 아이템 집계, 진행도 조정/저장.
카탈로그는 CatalogService에서 받고, 판정/집계는 전부 Core에 위임한다.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from sqlalchemy.orm import Session

from kappa_tracker.core.catalog.models import Quest, Station
from kappa_tracker.core.eligibility.models import (
    QuestResolution,
    QuestStatus,
    StationResolution,
)
from kappa_tracker.core.eligibility.resolver import resolve, status_map
from kappa_tracker.core.eligibility.stations import evaluate_station, resolve_stations
from kappa_tracker.core.progress.models import (
    ActorProgress,
    cached_total_to_record,
    cached_totals_from_record,
    progress_from_record,
)
from kappa_tracker.core.requirements.aggregator import (
    aggregate_hideout_items,
    aggregate_quest_items,
    to_cached_totals,
)
from kappa_tracker.core.requirements.models import (
    AggregatedItem,
    AggregationScope,
    CachedItemTotal,
)
from kappa_tracker.core.requirements.progress import (
    adjust,
    adjust_row,
    mark_all,
    rows_to_progress,
)
from kappa_tracker.db.models import UserModel
from kappa_tracker.services.catalog_service import CatalogService
from kappa_tracker.services.errors import (
    CompletedQuestItemError,
    ItemNotTrackedError,
    StationNotFoundError,
    UsernameTakenError,
    UserNotFoundError,
)

logger = logging.getLogger(__name__)


@dataclass
class QuestSummary:
    """대시보드 통계"""

    total: int = 0
    completed: int = 0
    available: int = 0
    locked: int = 0
    kappa_total: int = 0
    kappa_completed: int = 0


def _upsert(entries: list, incoming: Iterable[dict], key_fields: tuple[str, ...]) -> list:
    """key_fields가 같은 항목은 갱신, 없으면 뒤에 추가. 새 리스트 반환."""
    result = [dict(entry) for entry in entries if isinstance(entry, dict)]
    index = {tuple(entry.get(k) for k in key_fields): i for i, entry in enumerate(result)}

    for entry in incoming:
        key = tuple(entry.get(k) for k in key_fields)
        if key in index:
            result[index[key]].update(entry)
        else:
            index[key] = len(result)
            result.append(dict(entry))
    return result


class ProgressService:
    """사용자 진행도 CRUD + 판정/집계"""

    def __init__(self, db: Session, catalog: CatalogService):
        self._db = db
        self._catalog = catalog

    # === 사용자 ===

    def create_user(self, username: str, **fields: Any) -> UserModel:
        name = username.strip()
        existing = self._db.query(UserModel).filter(UserModel.username == name).first()
        if existing is not None:
            raise UsernameTakenError(f"Username already taken: {name}")

        user = UserModel(
            id=str(uuid.uuid4()),
            username=name,
            faction=fields.get("faction"),
            game_edition=fields.get("game_edition"),
            level=fields.get("level"),
            fence_rep=fields.get("fence_rep"),
            quests=[],
            objective_progress=[],
            trader_standings=[],
            hideout_items=[],
            station_levels=[],
            hideout_progress=[],
            created_at=datetime.now(timezone.utc),
        )
        self._db.add(user)
        self._db.commit()
        self._db.refresh(user)
        logger.info("User created: %s (%s)", user.username, user.id)
        return user

    def get_user(self, user_id: Optional[str]) -> UserModel:
        user = self._db.get(UserModel, user_id) if user_id else None
        if user is None:
            raise UserNotFoundError(f"User not found: {user_id}")
        return user

    def load_progress(self, user_id: str) -> ActorProgress:
        user = self.get_user(user_id)
        return progress_from_record(user.id, **user.progress_columns())

    def update_progress(
        self,
        user_id: str,
        *,
        quests: Optional[list[dict]] = None,
        objectives: Optional[list[dict]] = None,
        trader_standings: Optional[list[dict]] = None,
        faction: Optional[str] = None,
        game_edition: Optional[str] = None,
        level: Optional[int] = None,
        fence_rep: Optional[float] = None,
    ) -> UserModel:
        """목록은 키 기준 upsert, 스칼라는 값이 주어진 경우만 갱신"""
        user = self.get_user(user_id)

        if faction is not None:
            user.faction = faction
        if game_edition is not None:
            user.game_edition = game_edition
        if level is not None:
            user.level = level
        if fence_rep is not None:
            user.fence_rep = fence_rep

        # JSON 컬럼은 새 리스트를 대입해야 변경이 감지된다
        if quests:
            user.quests = _upsert(user.quests or [], quests, ("questId",))
        if objectives:
            user.objective_progress = _upsert(
                user.objective_progress or [], objectives, ("questId", "objectiveId")
            )
        if trader_standings:
            user.trader_standings = _upsert(
                user.trader_standings or [], trader_standings, ("traderId",)
            )

        self._db.commit()
        return user

    # === 퀘스트 ===

    def resolve_quests(
        self, user_id: str
    ) -> tuple[list[Quest], dict[str, QuestResolution], ActorProgress]:
        progress = self.load_progress(user_id)
        quests = self._catalog.get_quests()
        resolutions = resolve(
            quests, progress.completed_quest_ids, progress.attributes()
        )
        return quests, resolutions, progress

    def quest_summary(self, user_id: str) -> QuestSummary:
        quests, resolutions, _ = self.resolve_quests(user_id)
        summary = QuestSummary()
        for quest in quests:
            status = resolutions[quest.quest_id].status
            summary.total += 1
            if quest.kappa_required:
                summary.kappa_total += 1
            if status == QuestStatus.COMPLETED:
                summary.completed += 1
                if quest.kappa_required:
                    summary.kappa_completed += 1
            elif status == QuestStatus.LOCKED:
                summary.locked += 1
            else:
                summary.available += 1
        return summary

    def quest_items(
        self, user_id: str, scope: Optional[AggregationScope] = None
    ) -> list[AggregatedItem]:
        quests, resolutions, progress = self.resolve_quests(user_id)
        return aggregate_quest_items(
            quests, status_map(resolutions), progress.objective_progress, scope
        )

    def adjust_quest_item(
        self,
        user_id: str,
        item_id: str,
        delta: int,
        scope: Optional[AggregationScope] = None,
    ) -> AggregatedItem:
        item = self._find_item(self.quest_items(user_id, scope), item_id)
        if delta < 0:
            self._ensure_no_completed_rows(item)
        updated = adjust(item, delta)
        self._save_objective_rows(user_id, item, updated)
        return updated

    def mark_quest_item(
        self,
        user_id: str,
        item_id: str,
        found: bool,
        scope: Optional[AggregationScope] = None,
    ) -> AggregatedItem:
        item = self._find_item(self.quest_items(user_id, scope), item_id)
        if not found:
            self._ensure_no_completed_rows(item)
        updated = mark_all(item, found)
        self._save_objective_rows(user_id, item, updated)
        return updated

    def _save_objective_rows(
        self, user_id: str, before: AggregatedItem, after: AggregatedItem
    ) -> None:
        changed = [new for old, new in zip(before.rows, after.rows) if old != new]
        if not changed:
            return
        updates = [
            {"questId": quest_id, "objectiveId": objective_id, "collected": count}
            for (quest_id, objective_id), count in rows_to_progress(changed).items()
        ]
        user = self.get_user(user_id)
        user.objective_progress = _upsert(
            user.objective_progress or [], updates, ("questId", "objectiveId")
        )
        self._db.commit()
        logger.debug("Saved %d objective rows for %s", len(updates), user_id)

    # === 하이드아웃 ===

    def station_statuses(
        self, user_id: str
    ) -> list[tuple[Station, StationResolution]]:
        progress = self.load_progress(user_id)
        stations = self._catalog.get_stations()
        resolutions = resolve_stations(
            stations, progress.station_levels, progress.trader_levels
        )
        return [(station, resolutions[station.station_id]) for station in stations]

    def set_station_level(
        self, user_id: str, station_id: str, level: int
    ) -> tuple[Station, StationResolution]:
        station = next(
            (s for s in self._catalog.get_stations() if s.station_id == station_id),
            None,
        )
        if station is None:
            raise StationNotFoundError(f"Station not found: {station_id}")

        clamped = max(0, min(station.max_level, level))
        user = self.get_user(user_id)
        user.station_levels = _upsert(
            user.station_levels or [],
            [{"stationId": station_id, "currentLevel": clamped}],
            ("stationId",),
        )
        self._db.commit()

        progress = progress_from_record(user.id, **user.progress_columns())
        return station, evaluate_station(
            station, progress.station_levels, progress.trader_levels
        )

    def hideout_items(
        self,
        user_id: str,
        scope: Optional[AggregationScope] = None,
        fir_item_keys: Iterable[str] = (),
    ) -> list[AggregatedItem]:
        progress = self.load_progress(user_id)
        return aggregate_hideout_items(
            self._catalog.get_stations(),
            progress.hideout_progress,
            scope,
            fir_item_keys,
        )

    def adjust_hideout_item(
        self,
        user_id: str,
        item_id: str,
        delta: int,
        row_key: Optional[str] = None,
        fir_item_keys: Iterable[str] = (),
    ) -> AggregatedItem:
        """전체 아이템 또는 행(row_key) 하나 조정. 저장 후 캐시도 갱신."""
        fir_keys = tuple(fir_item_keys)
        items = self.hideout_items(user_id, fir_item_keys=fir_keys)
        item = self._find_item(items, item_id)

        if row_key is None:
            updated = adjust(item, delta)
        else:
            try:
                updated = adjust_row(item, row_key, delta)
            except KeyError as e:
                raise ItemNotTrackedError(f"Requirement row not found: {row_key}") from e

        changed = [new for old, new in zip(item.rows, updated.rows) if old != new]
        if not changed:
            return updated

        updates = [
            {"stationId": s_id, "levelId": l_id, "itemId": i_id, "collected": count}
            for (s_id, l_id, i_id), count in rows_to_progress(changed).items()
        ]
        user = self.get_user(user_id)
        user.hideout_progress = _upsert(
            user.hideout_progress or [], updates, ("stationId", "levelId", "itemId")
        )
        refreshed = [updated if i.item_id == item_id else i for i in items]
        user.hideout_items = [
            cached_total_to_record(entry) for entry in to_cached_totals(refreshed)
        ]
        self._db.commit()
        return updated

    def get_hideout_cache(self, user_id: str) -> list[CachedItemTotal]:
        return cached_totals_from_record(self.get_user(user_id).hideout_items)

    def replace_hideout_cache(
        self, user_id: str, entries: list[dict]
    ) -> list[CachedItemTotal]:
        sanitized = cached_totals_from_record(entries)
        user = self.get_user(user_id)
        user.hideout_items = [cached_total_to_record(entry) for entry in sanitized]
        self._db.commit()
        logger.info("Hideout cache replaced for %s (%d items)", user_id, len(sanitized))
        return sanitized

    # === 내부 ===

    @staticmethod
    def _ensure_no_completed_rows(item: AggregatedItem) -> None:
        """완료 퀘스트 행은 재집계 시 다시 가득 차므로 감소를 거부한다"""
        completed = [
            row.source_id
            for row in item.rows
            if row.source_status == QuestStatus.COMPLETED.value
        ]
        if completed:
            raise CompletedQuestItemError(
                f"Quest completed: {completed[0]}. Change the quest status instead."
            )

    @staticmethod
    def _find_item(items: list[AggregatedItem], item_id: str) -> AggregatedItem:
        for item in items:
            if item.item_id == item_id:
                return item
        raise ItemNotTrackedError(f"Item not tracked: {item_id}")
