"""
Gang Progression State - The per-gang root record.

Design principles:
- Immutable: every transform returns a new record
- Level is derived: it is recomputed from total_xp on every XP change
  and is never set on its own
- Serializable: see schemas.GangProgressionRecord
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from enum import Enum

from ..errors import InvalidArgument
from .curve import CurveEngine


class DoctrineID(str, Enum):
    """The exclusive specialization paths a gang can follow."""
    LEDGER = "ledger"
    IRONWALL = "ironwall"
    NIGHTFALL = "nightfall"


def _check_non_negative_int(name: str, value) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgument(f"{name} must be an integer, got {value!r}")
    if value < 0:
        raise InvalidArgument(f"{name} must be >= 0, got {value}")
    return value


@dataclass(frozen=True)
class GangProgressionState:
    """
    Progression state of one gang at a point in time.

    Only the facade commits new records; everything else returns
    transformed copies.

    `level` must equal curve.level_for(total_xp). The dataclass has no
    curve to check that against, so build records through at_xp(),
    founded() or with_xp() rather than passing a level by hand.
    """
    gang_id: str
    total_xp: int = 0
    level: int = 1
    owned_upgrades: frozenset[str] = field(default_factory=frozenset)
    active_doctrine: DoctrineID | None = None
    premium_credits: int = 0

    # Bumped by the facade on every committed mutation
    revision: int = 0

    def __post_init__(self):
        _check_non_negative_int("total_xp", self.total_xp)
        if isinstance(self.level, bool) or not isinstance(self.level, int) or self.level < 1:
            raise InvalidArgument(f"level must be an integer >= 1, got {self.level!r}")
        _check_non_negative_int("premium_credits", self.premium_credits)
        if not isinstance(self.owned_upgrades, frozenset):
            object.__setattr__(self, "owned_upgrades", frozenset(self.owned_upgrades))

    @classmethod
    def at_xp(cls, gang_id: str, total_xp: int, curve: CurveEngine, **fields) -> GangProgressionState:
        """Record whose level is derived from total_xp on the given curve."""
        _check_non_negative_int("total_xp", total_xp)
        return cls(gang_id=gang_id, total_xp=total_xp, level=curve.level_for(total_xp), **fields)

    @classmethod
    def founded(
        cls,
        gang_id: str,
        curve: CurveEngine,
        starting_premium_credits: int = 0,
    ) -> GangProgressionState:
        """Fresh record for a newly founded gang."""
        return cls.at_xp(gang_id, 0, curve, premium_credits=starting_premium_credits)

    def owns(self, upgrade_id: str) -> bool:
        return upgrade_id in self.owned_upgrades

    def with_xp(self, total_xp: int, curve: CurveEngine) -> GangProgressionState:
        """Return new state with total_xp set and level recomputed."""
        _check_non_negative_int("total_xp", total_xp)
        return replace(self, total_xp=total_xp, level=curve.level_for(total_xp))

    def with_upgrade(self, upgrade_id: str) -> GangProgressionState:
        """Return new state with the upgrade added."""
        return replace(self, owned_upgrades=self.owned_upgrades | {upgrade_id})

    def with_doctrine(self, doctrine: DoctrineID | None) -> GangProgressionState:
        """Return new state with a different active doctrine (or none)."""
        return replace(self, active_doctrine=doctrine)

    def with_premium_credits(self, premium_credits: int) -> GangProgressionState:
        """Return new state with a different premium balance."""
        _check_non_negative_int("premium_credits", premium_credits)
        return replace(self, premium_credits=premium_credits)

    def next_revision(self) -> GangProgressionState:
        return replace(self, revision=self.revision + 1)
