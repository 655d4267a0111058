"""퀘스트 제목 기반 하드코딩 오버라이드

외부 카탈로그에 없는 에디션/평판 게이트를 제목으로 보정한다.
카탈로그 전체와 대조 검증된 목록이 아니다. 규칙을 일반화하지 말 것.
"""

from typing import Optional

from .models import GameEdition

# 제목 완전 일치
EDITION_OVERRIDES: dict[str, str] = {
    "Minute of Fame": GameEdition.EDGE_OF_DARKNESS.value,
    "The Good Times - Part 1": GameEdition.EDGE_OF_DARKNESS.value,
    "Quality Standard": GameEdition.EDGE_OF_DARKNESS.value,
    "Key to the City": GameEdition.EDGE_OF_DARKNESS.value,
    "Serious Allegations": GameEdition.EDGE_OF_DARKNESS.value,
}

# 제목 부분 일치 (대소문자 무시), 위에서부터 첫 매치
REPUTATION_OVERRIDES: tuple[tuple[str, float], ...] = (
    ("Compensation for Damage", -1),
    ("Establish Contact", 4),
)


def edition_override_for(title: str) -> Optional[str]:
    return EDITION_OVERRIDES.get(title)


def reputation_override_for(title: str) -> Optional[float]:
    normalized = title.lower()
    for match, threshold in REPUTATION_OVERRIDES:
        if match.lower() in normalized:
            return threshold
    return None
