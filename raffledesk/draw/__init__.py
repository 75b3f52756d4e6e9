"""Winner drawing and prize-claim state machine."""

from .eligibility import check_duplicate, get_eligible_entries
from .engine import DrawEngine, select_uniform

__all__ = [
    "DrawEngine",
    "check_duplicate",
    "get_eligible_entries",
    "select_uniform",
]
