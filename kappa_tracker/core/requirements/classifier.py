"""화폐 / FIR(Found in Raid) 판정: 순수 함수"""

import re
from typing import Any, Iterable, Optional

CURRENCY_NAME_TOKENS = ("rouble", "ruble", "rubl", "euro", "dollar")
CURRENCY_SHORT_NAMES = ("rub", "eur", "usd")
CURRENCY_SYMBOLS = ("₽", "$", "€")

FIR_EXACT = "fir"
FIR_TOKENS = ("findinraid", "foundinraid")

_SEPARATORS = re.compile(r"[\s_-]+")
_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def is_currency_item(name: Optional[str], short_name: Optional[str] = None) -> bool:
    """루블/달러/유로 판정 (대소문자 무시)"""
    lower_name = (name or "").lower()
    lower_short = (short_name or "").lower()

    if not lower_name and not lower_short:
        return False
    if any(token in lower_name for token in CURRENCY_NAME_TOKENS):
        return True
    if lower_short in CURRENCY_SHORT_NAMES:
        return True
    return any(symbol in lower_short for symbol in CURRENCY_SYMBOLS)


def has_fir_attribute(attributes: Any) -> bool:
    """하이드아웃 요구 attributes 중 FIR 표시가 있는지.

    이름을 소문자화하고 공백/_/- 제거 후
    "fir" 완전 일치 또는 "findinraid"/"foundinraid" 포함.
    """
    if not isinstance(attributes, list):
        return False

    for attr in attributes:
        if not isinstance(attr, dict):
            continue
        raw = str(attr.get("name") or "").lower()
        if not raw:
            continue
        normalized = _SEPARATORS.sub("", raw)
        if normalized == FIR_EXACT or any(token in normalized for token in FIR_TOKENS):
            return True
    return False


def normalize_item_key(name: Optional[str]) -> str:
    """외부 FIR 아이템 이름 목록과 대조하기 위한 키"""
    return _NON_ALNUM.sub("", (name or "").lower())


def matches_fir_keys(
    fir_item_keys: Iterable[str], name: Optional[str], short_name: Optional[str]
) -> bool:
    keys = {key.lower() for key in fir_item_keys}
    if not keys:
        return False
    name_key = normalize_item_key(name)
    short_key = normalize_item_key(short_name)
    return bool(name_key and name_key in keys) or bool(short_key and short_key in keys)
