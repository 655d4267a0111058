"""팀 요구 아이템 합산 테스트"""

from kappa_tracker.core.requirements.models import (
    AggregatedItem,
    RequirementRow,
    SourceType,
)
from kappa_tracker.core.requirements.team import MemberNeeds, combine


def _item(item_id, required, collected=0, name=None, fir=False) -> AggregatedItem:
    return AggregatedItem(
        item_id=item_id,
        name=name or item_id.title(),
        rows=(
            RequirementRow(
                source_type=SourceType.QUEST_OBJECTIVE,
                source_id="q",
                sub_id="o",
                item_id=item_id,
                required_count=required,
                collected=collected,
                requires_found_in_raid=fir,
            ),
        ),
    )


class TestCombine:
    def test_totals_are_member_sums(self):
        alice = MemberNeeds("u1", (_item("bolts", 3, 1),), username="alice", role="owner")
        bob = MemberNeeds("u2", (_item("bolts", 2, 2, fir=True), _item("salewa", 1)), username="bob")

        items = {item.item_id: item for item in combine([alice, bob])}
        bolts = items["bolts"]
        assert bolts.total_required == 5
        assert bolts.total_collected == 3
        assert bolts.remaining == 2
        assert bolts.requires_found_in_raid is True
        assert [(m.actor_id, m.required, m.collected) for m in bolts.members] == [
            ("u1", 3, 1),
            ("u2", 2, 2),
        ]
        assert bolts.members[0].username == "alice"
        assert bolts.members[0].role == "owner"
        assert bolts.members[1].remaining == 0

        assert [m.actor_id for m in items["salewa"].members] == ["u2"]

    def test_excluding_member_removes_only_their_share(self):
        alice = MemberNeeds("u1", (_item("bolts", 3),))
        outsider = MemberNeeds("u9", (_item("bolts", 10),))
        with_outsider = combine([alice, outsider])[0]
        without = combine([alice])[0]
        assert with_outsider.total_required == 13
        assert without.total_required == 3

    def test_metadata_from_first_member_and_sorted(self):
        first = MemberNeeds("u1", (_item("x", 1, name="Zeta"), _item("y", 1, name="alpha")))
        second = MemberNeeds("u2", (_item("x", 1, name="Renamed"),))
        items = combine([first, second])
        assert [item.name for item in items] == ["alpha", "Zeta"]

    def test_same_member_twice_is_merged(self):
        member = MemberNeeds("u1", (_item("bolts", 2, 1), _item("bolts", 3, 1)))
        item = combine([member])[0]
        assert len(item.members) == 1
        assert (item.total_required, item.total_collected) == (5, 2)

    def test_empty(self):
        assert combine([]) == []
