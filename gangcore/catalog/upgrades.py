"""
Upgrade Catalog - Static registry of purchasable gang upgrades.

Each upgrade has:
- A category (economy, defense, logistics, warfare, influence, identity)
- A cost in ordinary gang funds (deducted by the funds collaborator)
- A minimum gang level
- A declarative effect descriptor consumed by gameplay code

The catalog is read-only for the process lifetime. Purchases are pure
transforms on GangProgressionState; the facade commits them.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping, NamedTuple
import logging

from ..errors import AlreadyOwned, LevelTooLow, UnknownUpgrade
from ..progression.state import GangProgressionState

logger = logging.getLogger(__name__)


class UpgradeCategory(str, Enum):
    """Upgrade categories. Every catalog covers all of them."""
    ECONOMY = "economy"
    DEFENSE = "defense"
    LOGISTICS = "logistics"
    WARFARE = "warfare"
    INFLUENCE = "influence"
    IDENTITY = "identity"


class RejectionReason(str, Enum):
    """Why a purchase check failed."""
    UNKNOWN_UPGRADE = "UNKNOWN_UPGRADE"
    ALREADY_OWNED = "ALREADY_OWNED"
    LEVEL_TOO_LOW = "LEVEL_TOO_LOW"


class PurchaseCheck(NamedTuple):
    """Outcome of can_purchase. Unpacks as (ok, reason)."""
    ok: bool
    reason: RejectionReason | None = None


@dataclass(frozen=True)
class UpgradeDefinition:
    """
    Static definition of an upgrade.

    effects is opaque to this package: keys and weights are read by the
    gameplay effect collaborator.
    """
    upgrade_id: str
    name: str
    category: UpgradeCategory
    cost: int
    min_level: int = 0
    description: str = ""
    effects: Mapping[str, float] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "effects", MappingProxyType(dict(self.effects)))


DEFAULT_UPGRADES: tuple[UpgradeDefinition, ...] = (
    # Economy
    UpgradeDefinition(
        upgrade_id="laundering_network",
        name="Laundering Network",
        category=UpgradeCategory.ECONOMY,
        cost=25_000,
        min_level=1,
        description="Front businesses clean a share of every payout.",
        effects={"income_multiplier": 0.05},
    ),
    UpgradeDefinition(
        upgrade_id="protection_racket",
        name="Protection Racket",
        category=UpgradeCategory.ECONOMY,
        cost=60_000,
        min_level=5,
        description="Local shops pay the gang a weekly cut.",
        effects={"passive_income": 150.0},
    ),
    UpgradeDefinition(
        upgrade_id="offshore_accounts",
        name="Offshore Accounts",
        category=UpgradeCategory.ECONOMY,
        cost=250_000,
        min_level=18,
        description="Part of the gang bank survives raids.",
        effects={"bank_protection": 0.25},
    ),
    # Defense
    UpgradeDefinition(
        upgrade_id="reinforced_doors",
        name="Reinforced Doors",
        category=UpgradeCategory.DEFENSE,
        cost=30_000,
        min_level=3,
        description="Gang property takes longer to breach.",
        effects={"breach_time_multiplier": 1.25},
    ),
    UpgradeDefinition(
        upgrade_id="safehouse_network",
        name="Safehouse Network",
        category=UpgradeCategory.DEFENSE,
        cost=120_000,
        min_level=12,
        description="Extra respawn points inside gang territory.",
        effects={"safehouse_slots": 2.0},
    ),
    UpgradeDefinition(
        upgrade_id="armored_vault",
        name="Armored Vault",
        category=UpgradeCategory.DEFENSE,
        cost=400_000,
        min_level=30,
        description="The gang stash can no longer be looted outright.",
        effects={"vault_loot_fraction": -0.5},
    ),
    # Logistics
    UpgradeDefinition(
        upgrade_id="stash_expansion",
        name="Stash Expansion",
        category=UpgradeCategory.LOGISTICS,
        cost=20_000,
        min_level=2,
        description="More shared storage slots.",
        effects={"storage_slots": 20.0},
    ),
    UpgradeDefinition(
        upgrade_id="smuggling_routes",
        name="Smuggling Routes",
        category=UpgradeCategory.LOGISTICS,
        cost=90_000,
        min_level=10,
        description="Shipments arrive faster and are seized less often.",
        effects={"shipment_speed": 0.2, "seizure_chance": -0.1},
    ),
    # Warfare
    UpgradeDefinition(
        upgrade_id="armory_access",
        name="Armory Access",
        category=UpgradeCategory.WARFARE,
        cost=75_000,
        min_level=8,
        description="Members can draw weapons from a shared armory.",
        effects={"armory_slots": 6.0},
    ),
    UpgradeDefinition(
        upgrade_id="hired_muscle",
        name="Hired Muscle",
        category=UpgradeCategory.WARFARE,
        cost=150_000,
        min_level=15,
        description="NPC enforcers defend captured turf.",
        effects={"turf_guards": 3.0},
    ),
    UpgradeDefinition(
        upgrade_id="heavy_ordnance",
        name="Heavy Ordnance",
        category=UpgradeCategory.WARFARE,
        cost=600_000,
        min_level=40,
        description="Unlocks explosive gear for turf wars.",
        effects={"explosives_unlocked": 1.0},
    ),
    # Influence
    UpgradeDefinition(
        upgrade_id="street_informants",
        name="Street Informants",
        category=UpgradeCategory.INFLUENCE,
        cost=45_000,
        min_level=6,
        description="Warnings when rivals or police enter gang turf.",
        effects={"intel_radius": 150.0},
    ),
    UpgradeDefinition(
        upgrade_id="bribed_officials",
        name="Bribed Officials",
        category=UpgradeCategory.INFLUENCE,
        cost=200_000,
        min_level=20,
        description="Lower wanted levels after gang activity.",
        effects={"wanted_decay": 0.3},
    ),
    # Identity
    UpgradeDefinition(
        upgrade_id="gang_colors",
        name="Gang Colors",
        category=UpgradeCategory.IDENTITY,
        cost=10_000,
        min_level=1,
        description="Custom gang colors on members and property.",
        effects={"custom_colors": 1.0},
    ),
    UpgradeDefinition(
        upgrade_id="tag_crew",
        name="Tag Crew",
        category=UpgradeCategory.IDENTITY,
        cost=35_000,
        min_level=4,
        description="Members can tag walls to mark territory.",
        effects={"territory_tags": 10.0},
    ),
)


class UpgradeCatalog:
    """
    Read-only registry of UpgradeDefinitions keyed by upgrade_id.

    Usage:
        catalog = UpgradeCatalog()
        ok, reason = catalog.can_purchase(state, "armory_access")
        if ok:
            new_state = catalog.apply_purchase(state, "armory_access")
    """

    def __init__(self, upgrades: Iterable[UpgradeDefinition] | None = None):
        entries: dict[str, UpgradeDefinition] = {}
        for upgrade in (DEFAULT_UPGRADES if upgrades is None else upgrades):
            if upgrade.upgrade_id in entries:
                raise ValueError(f"Duplicate upgrade_id: {upgrade.upgrade_id}")
            entries[upgrade.upgrade_id] = upgrade
        self._upgrades = MappingProxyType(entries)

    def __contains__(self, upgrade_id: object) -> bool:
        return upgrade_id in self._upgrades

    def __iter__(self) -> Iterator[UpgradeDefinition]:
        return iter(self._upgrades.values())

    def __len__(self) -> int:
        return len(self._upgrades)

    def get(self, upgrade_id: str) -> UpgradeDefinition | None:
        """Get an upgrade by ID."""
        return self._upgrades.get(upgrade_id)

    def categories(self) -> set[UpgradeCategory]:
        return {u.category for u in self._upgrades.values()}

    def by_category(self, category: UpgradeCategory | str) -> list[UpgradeDefinition]:
        category = UpgradeCategory(category)
        return [u for u in self._upgrades.values() if u.category == category]

    def can_purchase(self, state: GangProgressionState, upgrade_id: str) -> PurchaseCheck:
        """
        Check whether the gang may buy an upgrade right now.

        The answer is only valid at the instant it is read; the facade
        re-checks inside the gang's critical section.
        """
        upgrade = self._upgrades.get(upgrade_id)
        if upgrade is None:
            return PurchaseCheck(False, RejectionReason.UNKNOWN_UPGRADE)
        if state.owns(upgrade_id):
            return PurchaseCheck(False, RejectionReason.ALREADY_OWNED)
        if state.level < upgrade.min_level:
            return PurchaseCheck(False, RejectionReason.LEVEL_TOO_LOW)
        return PurchaseCheck(True)

    def apply_purchase(self, state: GangProgressionState, upgrade_id: str) -> GangProgressionState:
        """
        Return new state with the upgrade owned.

        Does not deduct gang funds.

        Raises:
            UnknownUpgrade, AlreadyOwned, LevelTooLow
        """
        ok, reason = self.can_purchase(state, upgrade_id)
        if not ok:
            logger.debug("Purchase of %s rejected for %s: %s", upgrade_id, state.gang_id, reason.value)
            raise self._rejection_error(state, upgrade_id, reason)
        return state.with_upgrade(upgrade_id)

    def available_for(self, state: GangProgressionState) -> list[UpgradeDefinition]:
        """Upgrades the gang could buy right now, cheapest tier first."""
        available = [
            u for u in self._upgrades.values()
            if self.can_purchase(state, u.upgrade_id).ok
        ]
        return sorted(available, key=lambda u: (u.min_level, u.cost, u.upgrade_id))

    def _rejection_error(self, state: GangProgressionState, upgrade_id: str, reason: RejectionReason):
        if reason == RejectionReason.UNKNOWN_UPGRADE:
            return UnknownUpgrade(upgrade_id)
        if reason == RejectionReason.ALREADY_OWNED:
            return AlreadyOwned(state.gang_id, upgrade_id)
        return LevelTooLow(upgrade_id, state.level, self._upgrades[upgrade_id].min_level)
