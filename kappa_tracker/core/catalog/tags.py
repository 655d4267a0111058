"""목표 설명문 → 필터 태그 (정확성과 무관, UI 필터 전용)"""

from .models import ObjectiveTag

MARKER_WORDS = ("mark", "marker", "signal")


def parse_objective_tags(description: str, has_items: bool) -> tuple[ObjectiveTag, ...]:
    text = description.lower()
    tags: list[ObjectiveTag] = []

    if has_items:
        tags.append(ObjectiveTag.ITEM)
    if any(word in text for word in MARKER_WORDS):
        tags.append(ObjectiveTag.MARKER)
    if "jammer" in text:
        tags.append(ObjectiveTag.JAMMER)
    if "camera" in text:
        tags.append(ObjectiveTag.CAMERA)
    if " key" in text:
        tags.append(ObjectiveTag.KEY)

    return tuple(tags)
