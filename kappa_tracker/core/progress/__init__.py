"""사용자 진행도 Core 패키지"""

from kappa_tracker.core.progress.models import ActorProgress, progress_from_record
from kappa_tracker.core.progress.traders import TRADERS, TraderInfo, get_trader

__all__ = [
    "ActorProgress",
    "TRADERS",
    "TraderInfo",
    "get_trader",
    "progress_from_record",
]
