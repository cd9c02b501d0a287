"""semtag - semantic version resolution and release tagging for workspaces."""

from .calculator import calculate_version
from .strategies import StrategyKind, run_strategy, select_strategy
from .versions import bump_version

__all__ = [
    "StrategyKind",
    "bump_version",
    "calculate_version",
    "run_strategy",
    "select_strategy",
]
