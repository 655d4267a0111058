"""저장 레코드 → ActorProgress 변환 테스트"""

from kappa_tracker.core.progress.models import (
    cached_total_to_record,
    cached_totals_from_record,
    progress_from_record,
)
from kappa_tracker.core.progress.traders import clamp_level, get_trader, levels_by_name
from kappa_tracker.core.requirements.models import CachedItemTotal


class TestProgressFromRecord:
    def test_full_record(self):
        progress = progress_from_record(
            "u1",
            quests=[
                {"questId": "a", "status": "completed"},
                {"questId": "b", "status": "in_progress"},
                {"status": "completed"},
                "garbage",
            ],
            objective_progress=[
                {"questId": "b", "objectiveId": "o1", "collected": 2},
                {"questId": "b", "objectiveId": "o2", "collected": -3},
                {"questId": "b", "collected": 1},
            ],
            trader_standings=[{"traderId": "prapor", "level": 3}],
            station_levels=[{"stationId": "lav", "currentLevel": 2}],
            hideout_progress=[
                {"stationId": "lav", "levelId": "lav-1", "itemId": "tp", "collected": 1}
            ],
            level=12,
            fence_rep=1.5,
            game_edition="Unheard",
        )
        assert progress.completed_quest_ids == frozenset({"a"})
        assert progress.quest_statuses == {"a": "completed", "b": "in_progress"}
        assert progress.objective_progress == {("b", "o1"): 2, ("b", "o2"): 0}
        assert progress.trader_levels == {"Prapor": 3}
        assert progress.station_levels == {"lav": 2}
        assert progress.hideout_progress == {("lav", "lav-1", "tp"): 1}
        assert progress.has_objective_progress("b")
        assert not progress.has_objective_progress("a")

        attrs = progress.attributes()
        assert attrs.level == 12
        assert attrs.reputation == 1.5
        assert attrs.edition == "Unheard"

    def test_empty_record_is_unknown(self):
        progress = progress_from_record("u1", quests=None, level="high", game_edition="")
        attrs = progress.attributes()
        assert progress.completed_quest_ids == frozenset()
        assert attrs.level is None
        assert attrs.edition is None
        assert attrs.trader_levels is None


class TestTraders:
    def test_lookup_is_case_insensitive(self):
        assert get_trader("Prapor").name == "Prapor"
        assert get_trader("unknown") is None

    def test_levels_clamped(self):
        lightkeeper = get_trader("lightkeeper")
        assert clamp_level(lightkeeper, 4) == 1
        assert clamp_level(get_trader("skier"), 0) == 1
        assert clamp_level(get_trader("skier"), "3") == 3
        assert clamp_level(get_trader("skier"), "abc") is None
        assert clamp_level(get_trader("skier"), float("inf")) is None

    def test_levels_by_name(self):
        standings = [
            {"traderId": "mechanic", "level": 9},
            {"traderId": "nobody", "level": 2},
            {"level": 2},
        ]
        assert levels_by_name(standings) == {"Mechanic": 4}
        assert levels_by_name([]) is None


class TestCachedTotals:
    def test_sanitized(self):
        entries = cached_totals_from_record(
            [
                {"itemId": "bolts", "name": "Bolts", "requiresFir": True, "totalRequired": 4, "totalCollected": 9},
                {"itemId": "zero", "totalRequired": 0},
                {"name": "no id", "totalRequired": 2},
                {"itemId": "neg", "totalRequired": 2, "totalCollected": -1},
            ]
        )
        assert [(e.item_id, e.total_required, e.total_collected) for e in entries] == [
            ("bolts", 4, 4),
            ("neg", 2, 0),
        ]
        assert entries[0].requires_found_in_raid is True
        assert entries[1].name == "Item"

    def test_record_shape(self):
        record = cached_total_to_record(
            CachedItemTotal("bolts", "Bolts", short_name="B", total_required=2, total_collected=1)
        )
        assert record == {
            "itemId": "bolts",
            "name": "Bolts",
            "shortName": "B",
            "requiresFir": False,
            "totalRequired": 2,
            "totalCollected": 1,
        }
