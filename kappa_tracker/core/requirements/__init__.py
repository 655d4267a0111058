"""요구 아이템 집계 Core 패키지"""

from kappa_tracker.core.requirements.classifier import (
    has_fir_attribute,
    is_currency_item,
    normalize_item_key,
)
from kappa_tracker.core.requirements.models import (
    AggregatedItem,
    AggregationMode,
    AggregationScope,
    CachedItemTotal,
    RequirementRow,
    SourceType,
)

__all__ = [
    "AggregatedItem",
    "AggregationMode",
    "AggregationScope",
    "CachedItemTotal",
    "RequirementRow",
    "SourceType",
    "has_fir_attribute",
    "is_currency_item",
    "normalize_item_key",
]
