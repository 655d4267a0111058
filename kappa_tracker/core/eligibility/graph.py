"""선행 퀘스트 그래프 유틸: 순환은 해결하지 않고 감지/회피만"""

from __future__ import annotations

from collections.abc import Sequence

from kappa_tracker.core.catalog.models import Quest


def build_next_edges(quests: Sequence[Quest]) -> dict[str, tuple[str, ...]]:
    """quest_id → 이 퀘스트가 해금하는 퀘스트 id (카탈로그 순)"""
    result: dict[str, list[str]] = {}
    for quest in quests:
        for prev_id in quest.previous_quest_ids:
            bucket = result.setdefault(prev_id, [])
            if quest.quest_id not in bucket:
                bucket.append(quest.quest_id)
    return {quest_id: tuple(ids) for quest_id, ids in result.items()}


def find_cycles(quests: Sequence[Quest]) -> set[str]:
    """선행 순환에 속한 quest_id 집합 (반복 DFS, 3색 표시)"""
    by_id = {quest.quest_id: quest for quest in quests}
    white, grey, black = 0, 1, 2
    color = {quest_id: white for quest_id in by_id}
    in_cycle: set[str] = set()

    for root in by_id:
        if color[root] != white:
            continue
        path: list[str] = []
        stack: list[tuple[str, int]] = [(root, 0)]
        color[root] = grey
        path.append(root)

        while stack:
            node, index = stack[-1]
            prev_ids = [p for p in by_id[node].previous_quest_ids if p in by_id]
            if index < len(prev_ids):
                stack[-1] = (node, index + 1)
                nxt = prev_ids[index]
                if color[nxt] == white:
                    color[nxt] = grey
                    path.append(nxt)
                    stack.append((nxt, 0))
                elif color[nxt] == grey:
                    in_cycle.update(path[path.index(nxt):])
            else:
                color[node] = black
                path.pop()
                stack.pop()

    return in_cycle
