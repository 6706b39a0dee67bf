"""
Progression - Level curve and the per-gang state record.

1. CurveEngine maps total XP <-> level (soft/hard capped)
2. GangProgressionState holds one gang's XP, upgrades, doctrine, credits
3. ProgressionResult reports the outcome of a facade mutation
"""

from .curve import CurveEngine, LevelProgress, required_xp, level_for
from .state import GangProgressionState, DoctrineID
from .result import ProgressionResult

__all__ = [
    "CurveEngine",
    "LevelProgress",
    "required_xp",
    "level_for",
    "GangProgressionState",
    "DoctrineID",
    "ProgressionResult",
]
