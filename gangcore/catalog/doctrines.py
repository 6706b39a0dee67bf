"""
Doctrine State Machine - One exclusive specialization per gang.

States: None (initial), ledger, ironwall, nightfall. No terminal state.

Transitions:
- Any state -> any registered doctrine
- Re-selecting the active doctrine is an idempotent success
- Selecting a new doctrine replaces the old one; consumers re-read
  active_doctrine instead of diffing bonuses
"""

from __future__ import annotations
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping

from ..errors import LevelTooLow, UnknownDoctrine
from ..progression.state import DoctrineID, GangProgressionState


@dataclass(frozen=True)
class DoctrineDefinition:
    """Static definition of a doctrine and its bonus weights."""
    doctrine_id: DoctrineID
    name: str
    description: str
    effects: Mapping[str, float] = field(default_factory=dict)
    min_level: int = 0  # Optional level gate, checked like upgrade min_level

    def __post_init__(self):
        object.__setattr__(self, "effects", MappingProxyType(dict(self.effects)))


DEFAULT_DOCTRINES: tuple[DoctrineDefinition, ...] = (
    DoctrineDefinition(
        doctrine_id=DoctrineID.LEDGER,
        name="The Ledger",
        description="Money first. Bigger payouts and cheaper upgrades, softer on the street.",
        effects={"income_multiplier": 0.10, "upgrade_discount": 0.05, "member_damage": -0.05},
    ),
    DoctrineDefinition(
        doctrine_id=DoctrineID.IRONWALL,
        name="Ironwall",
        description="Hold what you have. Tougher turf and property, slower expansion.",
        effects={"turf_defense": 0.15, "property_health": 0.20, "capture_speed": -0.10},
    ),
    DoctrineDefinition(
        doctrine_id=DoctrineID.NIGHTFALL,
        name="Nightfall",
        description="Strike unseen. Faster raids and quieter heat, weaker defenses.",
        effects={"raid_speed": 0.15, "wanted_gain": -0.20, "turf_defense": -0.10},
    ),
)


class DoctrineRegistry:
    """
    Registered doctrines plus the selection transitions.

    Usage:
        doctrines = DoctrineRegistry()
        new_state = doctrines.select_doctrine(state, "ironwall")
    """

    def __init__(self, doctrines: Iterable[DoctrineDefinition] | None = None):
        entries: dict[DoctrineID, DoctrineDefinition] = {}
        for doctrine in (DEFAULT_DOCTRINES if doctrines is None else doctrines):
            entries[doctrine.doctrine_id] = doctrine
        self._doctrines = MappingProxyType(entries)

    def __contains__(self, doctrine_id: object) -> bool:
        return self._resolve(doctrine_id) is not None

    def __iter__(self) -> Iterator[DoctrineDefinition]:
        return iter(self._doctrines.values())

    def __len__(self) -> int:
        return len(self._doctrines)

    def get(self, doctrine_id: DoctrineID | str) -> DoctrineDefinition | None:
        doctrine = self._resolve(doctrine_id)
        return self._doctrines.get(doctrine) if doctrine else None

    def select_doctrine(
        self,
        state: GangProgressionState,
        doctrine_id: DoctrineID | str,
    ) -> GangProgressionState:
        """
        Return new state with doctrine_id active.

        Returns `state` itself when doctrine_id is already active.

        Raises:
            UnknownDoctrine: doctrine_id is not registered
            LevelTooLow: the doctrine's min_level is above the gang level
        """
        doctrine = self._resolve(doctrine_id)
        if doctrine is None:
            raise UnknownDoctrine(str(doctrine_id))

        if state.active_doctrine == doctrine:
            return state

        definition = self._doctrines[doctrine]
        if state.level < definition.min_level:
            raise LevelTooLow(definition.name, state.level, definition.min_level)

        return state.with_doctrine(doctrine)

    def clear_doctrine(self, state: GangProgressionState) -> GangProgressionState:
        """Return new state with no doctrine active."""
        if state.active_doctrine is None:
            return state
        return state.with_doctrine(None)

    def _resolve(self, doctrine_id: object) -> DoctrineID | None:
        """Map a DoctrineID or its string value to a registered DoctrineID."""
        if isinstance(doctrine_id, DoctrineID):
            doctrine = doctrine_id
        elif isinstance(doctrine_id, str):
            try:
                doctrine = DoctrineID(doctrine_id)
            except ValueError:
                return None
        else:
            return None
        return doctrine if doctrine in self._doctrines else None
