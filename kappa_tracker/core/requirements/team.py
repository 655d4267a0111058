"""팀 요구 아이템 합산: 멤버별 집계 → 팀 전체 + 멤버별 기여

읽기 전용 fan-in. 권한 확인은 하지 않는다 (호출자가 가입 멤버만 넘긴다).
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Optional

from .models import AggregatedItem


@dataclass(frozen=True)
class MemberNeeds:
    actor_id: str
    items: tuple[AggregatedItem, ...] = ()
    username: Optional[str] = None
    role: Optional[str] = None


@dataclass(frozen=True)
class MemberContribution:
    actor_id: str
    required: int
    collected: int
    username: Optional[str] = None
    role: Optional[str] = None

    @property
    def remaining(self) -> int:
        return max(self.required - self.collected, 0)


@dataclass(frozen=True)
class TeamAggregatedItem:
    """팀 전체 아이템 1종. 합계 = 멤버 합계의 합."""

    item_id: str
    name: str = "Item"
    short_name: Optional[str] = None
    icon_link: Optional[str] = None
    wiki_link: Optional[str] = None
    requires_found_in_raid: bool = False
    members: tuple[MemberContribution, ...] = field(default_factory=tuple)

    @property
    def total_required(self) -> int:
        return sum(member.required for member in self.members)

    @property
    def total_collected(self) -> int:
        return sum(member.collected for member in self.members)

    @property
    def remaining(self) -> int:
        return self.total_required - self.total_collected


@dataclass
class _TeamEntry:
    head: AggregatedItem
    requires_found_in_raid: bool
    members: list[MemberContribution] = field(default_factory=list)


def combine(members: Sequence[MemberNeeds]) -> list[TeamAggregatedItem]:
    """item_id로 합산. 메타는 처음 나온 멤버 기준, FIR은 OR."""
    entries: dict[str, _TeamEntry] = {}

    for member in members:
        for item in member.items:
            entry = entries.get(item.item_id)
            if entry is None:
                entry = _TeamEntry(
                    head=item, requires_found_in_raid=item.requires_found_in_raid
                )
                entries[item.item_id] = entry
            elif item.requires_found_in_raid:
                entry.requires_found_in_raid = True

            entry.members.append(
                MemberContribution(
                    actor_id=member.actor_id,
                    required=item.total_required,
                    collected=item.total_collected,
                    username=member.username,
                    role=member.role,
                )
            )

    result = [
        TeamAggregatedItem(
            item_id=item_id,
            name=entry.head.name,
            short_name=entry.head.short_name,
            icon_link=entry.head.icon_link,
            wiki_link=entry.head.wiki_link,
            requires_found_in_raid=entry.requires_found_in_raid,
            members=_merge_same_member(entry.members),
        )
        for item_id, entry in entries.items()
    ]
    result.sort(key=lambda item: (item.name.lower(), item.item_id))
    return result


def _merge_same_member(
    contributions: list[MemberContribution],
) -> tuple[MemberContribution, ...]:
    """같은 멤버가 같은 아이템을 두 번 넘긴 경우 합친다 (멤버 순서 유지)"""
    merged: dict[str, MemberContribution] = {}
    for contribution in contributions:
        previous = merged.get(contribution.actor_id)
        if previous is None:
            merged[contribution.actor_id] = contribution
        else:
            merged[contribution.actor_id] = MemberContribution(
                actor_id=previous.actor_id,
                required=previous.required + contribution.required,
                collected=previous.collected + contribution.collected,
                username=previous.username,
                role=previous.role,
            )
    return tuple(merged.values())
