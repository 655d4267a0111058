"""진행도 병합 테스트: first-fill / last-drain 분배와 클램프"""

import pytest

from kappa_tracker.core.requirements.models import (
    AggregatedItem,
    RequirementRow,
    SourceType,
)
from kappa_tracker.core.requirements.progress import (
    adjust,
    adjust_row,
    clamp_delta,
    mark_all,
    rows_to_progress,
)


def _row(source_id, required=1, collected=0, sub_id="obj", source_type=None, **kwargs) -> RequirementRow:
    return RequirementRow(
        source_type=source_type or SourceType.QUEST_OBJECTIVE,
        source_id=source_id,
        sub_id=sub_id,
        item_id="bolts",
        required_count=required,
        collected=collected,
        **kwargs,
    )


def _item(*rows) -> AggregatedItem:
    return AggregatedItem(item_id="bolts", name="Bolts", rows=tuple(rows))


def _collected(item):
    return [row.collected for row in item.rows]


class TestAdjust:
    def test_deterministic_redistribution(self):
        item = _item(_row("q1"), _row("q2"), _row("q3"))
        filled = adjust(item, 2)
        assert _collected(filled) == [1, 1, 0]
        drained = adjust(filled, -1)
        assert _collected(drained) == [1, 0, 0]

    def test_input_untouched(self):
        item = _item(_row("q1"), _row("q2"))
        adjust(item, 2)
        assert _collected(item) == [0, 0]

    def test_zero_delta_is_noop(self):
        item = _item(_row("q1", required=3, collected=1))
        assert adjust(item, 0) is item

    def test_positive_at_cap_and_negative_at_zero(self):
        full = _item(_row("q1", required=2, collected=2))
        empty = _item(_row("q1", required=2))
        assert adjust(full, 5) is full
        assert adjust(empty, -5) is empty

    def test_clamped_to_bounds(self):
        item = _item(_row("q1", required=2), _row("q2", required=3))
        assert _collected(adjust(item, 100)) == [2, 3]
        assert _collected(adjust(adjust(item, 4), -100)) == [0, 0]

    @pytest.mark.parametrize(
        "deltas",
        [[3, -1, 7, -2], [-4, 1, 1, 1, 1], [10, -10, 10], [0, 2, -5, 6]],
    )
    def test_totals_stay_within_bounds(self, deltas):
        item = _item(_row("q1", required=2), _row("q2", required=1), _row("q3", required=3))
        for delta in deltas:
            item = adjust(item, delta)
            assert 0 <= item.total_collected <= item.total_required
            assert all(0 <= row.collected <= row.required_count for row in item.rows)

    def test_overfilled_row_is_clamped_before_fill(self):
        item = _item(_row("q1", required=1, collected=5), _row("q2", required=2))
        assert _collected(adjust(item, 1)) == [1, 1]

    def test_clamp_delta(self):
        assert clamp_delta(5, 2, 4) == 2
        assert clamp_delta(-5, 2, 4) == -2
        assert clamp_delta(1, 0, 4) == 1


class TestMarkAll:
    def test_found_and_reset(self):
        item = _item(_row("q1", required=2, collected=1), _row("q2", required=3))
        found = mark_all(item, True)
        assert found.is_found
        assert _collected(mark_all(found, False)) == [0, 0]


class TestAdjustRow:
    def test_single_row_only(self):
        item = _item(
            _row("lav", required=2, sub_id="lav-1", source_type=SourceType.HIDEOUT_STATION_LEVEL),
            _row("lav", required=3, sub_id="lav-2", source_type=SourceType.HIDEOUT_STATION_LEVEL),
        )
        updated = adjust_row(item, "lav:lav-2:bolts", 5)
        assert _collected(updated) == [0, 3]

    def test_unknown_key(self):
        with pytest.raises(KeyError):
            adjust_row(_item(_row("q1")), "nope", 1)

    def test_noop_returns_same_item(self):
        item = _item(_row("q1", required=1, collected=1))
        assert adjust_row(item, "q1:obj:bolts", 1) is item


class TestRowsToProgress:
    def test_quest_and_hideout_keys(self):
        rows = [
            _row("q1", required=2, collected=1, sub_id="o1"),
            _row(
                "lav",
                required=3,
                collected=2,
                sub_id="lav-1",
                source_type=SourceType.HIDEOUT_STATION_LEVEL,
            ),
        ]
        assert rows_to_progress(rows) == {("q1", "o1"): 1, ("lav", "lav-1", "bolts"): 2}

    def test_currency_row_persists_nominal(self):
        rows = [
            _row("q1", collected=1, sub_id="o1", is_currency=True, nominal_count=50000),
            _row("q2", collected=0, sub_id="o2", is_currency=True, nominal_count=50000),
        ]
        assert rows_to_progress(rows) == {("q1", "o1"): 50000, ("q2", "o2"): 0}
