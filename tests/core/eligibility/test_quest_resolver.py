"""퀘스트 잠금 판정 테스트: 게이트별 독립 판정 + 선행 체인"""

from kappa_tracker.core.catalog.models import Quest, TraderLevelRequirement
from kappa_tracker.core.eligibility.models import (
    LockGate,
    PlayerAttributes,
    QuestStatus,
)
from kappa_tracker.core.eligibility.resolver import (
    edition_satisfies,
    evaluate_quest,
    meets_reputation,
    resolve,
    status_map,
)


class TestGates:
    """게이트 독립성"""

    def test_level_gate_boundary(self):
        quest = Quest("q", level_requirement=10)
        locked = evaluate_quest(quest, set(), PlayerAttributes(level=9))
        available = evaluate_quest(quest, set(), PlayerAttributes(level=10))
        assert locked.status == QuestStatus.LOCKED
        assert locked.failed_gates == (LockGate.LEVEL,)
        assert locked.lock_reasons == ("level 10",)
        assert available.status == QuestStatus.AVAILABLE

    def test_unknown_attributes_pass(self):
        quest = Quest(
            "q",
            level_requirement=30,
            required_prestige=2,
            edition_requirement="Edge of Darkness",
            required_trader_levels=(TraderLevelRequirement("Prapor", 3),),
        )
        assert evaluate_quest(quest, set()).status == QuestStatus.AVAILABLE

    def test_reputation_positive_and_negative(self):
        assert meets_reputation(2, 2.0)
        assert not meets_reputation(2, 1.99)
        assert meets_reputation(-1, -1.5)
        assert not meets_reputation(-1, 0)

        quest = Quest("q", required_prestige=-1)
        result = evaluate_quest(quest, set(), PlayerAttributes(reputation=0.5))
        assert result.failed_gates == (LockGate.REPUTATION,)
        assert result.lock_reasons == ("Fence rep -1.00",)

    def test_edition(self):
        assert edition_satisfies("Edge of Darkness", "Unheard")
        assert edition_satisfies("Edge of Darkness", "Edge of Darkness")
        assert not edition_satisfies("Edge of Darkness", "Standard")
        assert edition_satisfies("Unheard", "Unheard")
        assert not edition_satisfies("Unheard", "Edge of Darkness")

        quest = Quest("q", edition_requirement="Edge of Darkness")
        result = evaluate_quest(quest, set(), PlayerAttributes(edition="Standard"))
        assert result.lock_reasons == ("Edge of Darkness edition",)

    def test_trader_levels_missing_or_below(self):
        quest = Quest(
            "q",
            required_trader_levels=(
                TraderLevelRequirement("Prapor", 2),
                TraderLevelRequirement("Skier", 1),
            ),
        )
        result = evaluate_quest(
            quest, set(), PlayerAttributes(trader_levels={"Prapor": 1})
        )
        assert result.failed_gates == (LockGate.TRADER_LEVEL,)
        assert result.lock_reasons == ("Prapor LL2", "Skier LL1")

        ok = evaluate_quest(
            quest, set(), PlayerAttributes(trader_levels={"Prapor": 4, "Skier": 1})
        )
        assert ok.status == QuestStatus.AVAILABLE

    def test_gates_are_ored_in_order(self):
        quest = Quest(
            "b", previous_quest_ids=("a",), level_requirement=15, required_prestige=1
        )
        result = evaluate_quest(
            quest, set(), PlayerAttributes(level=10, reputation=0), {"a": "Quest A"}
        )
        assert result.failed_gates == (
            LockGate.PREREQUISITE,
            LockGate.LEVEL,
            LockGate.REPUTATION,
        )
        assert result.lock_reasons == ("Quest A", "level 15", "Fence rep 1.00")
        assert result.missing_prerequisites == ("Quest A",)

    def test_completed_ignores_gates(self):
        quest = Quest("q", previous_quest_ids=("x",), level_requirement=50)
        result = evaluate_quest(quest, {"q"}, PlayerAttributes(level=1))
        assert result.status == QuestStatus.COMPLETED
        assert result.lock_reasons == ()


class TestResolve:
    def test_prerequisite_chain(self):
        quests = [
            Quest("a", title="A"),
            Quest("b", title="B", previous_quest_ids=("a",)),
            Quest("c", title="C", previous_quest_ids=("b",)),
        ]
        statuses = status_map(resolve(quests, {"a"}))
        assert statuses == {
            "a": QuestStatus.COMPLETED,
            "b": QuestStatus.AVAILABLE,
            "c": QuestStatus.LOCKED,
        }

    def test_reason_is_prerequisite_title(self):
        quests = [
            Quest("a", title="First Steps"),
            Quest("b", title="B", previous_quest_ids=("a", "ghost")),
        ]
        result = resolve(quests, [])["b"]
        assert result.missing_prerequisites == ("First Steps", "ghost")

    def test_end_to_end_scenario(self):
        quests = [
            Quest("A", title="Quest A"),
            Quest("B", title="Quest B", previous_quest_ids=("A",), level_requirement=15),
        ]

        before = resolve(quests, [], PlayerAttributes(level=10))
        assert before["A"].status == QuestStatus.AVAILABLE
        assert before["B"].status == QuestStatus.LOCKED
        assert before["B"].failed_gates == (LockGate.PREREQUISITE, LockGate.LEVEL)
        assert before["B"].lock_reasons == ("Quest A", "level 15")

        after = resolve(quests, ["A"], PlayerAttributes(level=15))
        assert after["A"].status == QuestStatus.COMPLETED
        assert after["B"].status == QuestStatus.AVAILABLE

    def test_keeps_catalog_order_and_input_untouched(self):
        quests = [Quest("z"), Quest("a"), Quest("m")]
        completed = ["a"]
        result = resolve(quests, completed)
        assert list(result) == ["z", "a", "m"]
        assert completed == ["a"]
