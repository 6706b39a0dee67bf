"""
Gang Progression Facade - The only writer of gang progression state.

Every mutation runs load -> validate -> act -> commit inside the gang's
exclusive section, so two members buying the same upgrade, or an XP
grant racing a purchase, can never interleave. Different gangs proceed
in parallel.

Read-only queries (can_purchase, get_state, required_xp, level_for) take
no lock. Their answers are only valid at the instant they are read;
mutations always re-validate inside the critical section.

Reporting:
- Business rejections (unknown upgrade, already owned, level too low,
  unknown doctrine, insufficient funds/credits) -> ProgressionResult.failure
- Malformed input -> InvalidArgument is raised
- Missing gang -> GangNotFound is raised
"""

from __future__ import annotations
from typing import Callable
import logging

from ..catalog.doctrines import DoctrineRegistry
from ..catalog.upgrades import PurchaseCheck, UpgradeCatalog
from ..config import ProgressionSettings
from ..errors import (
    GangAlreadyExists,
    GangNotFound,
    InsufficientFunds,
    InvalidArgument,
    ProgressionError,
)
from ..premium.actions import Allowed, PremiumAction, PremiumActionResolver
from ..premium.store_url import CreditsStoreProvider, StoreURLResolver
from ..progression.curve import CurveEngine
from ..progression.result import ProgressionResult
from ..progression.state import DoctrineID, GangProgressionState
from ..schemas import EffectInfo, GangProgressionRecord, GangSnapshot
from .funds import FundsCollaborator
from .locks import GangLockRegistry
from .store import InMemoryProgressionStore, ProgressionStore

logger = logging.getLogger(__name__)


def _check_amount(name: str, value) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgument(f"{name} must be an integer, got {value!r}")
    if value < 0:
        raise InvalidArgument(f"{name} must be >= 0, got {value}")
    return value


class GangProgressionFacade:
    """
    Per-gang aggregate over XP, upgrades, doctrine and premium credits.

    Usage:
        facade = build_facade(load_settings())
        facade.found_gang("gang_42")
        facade.grant_xp("gang_42", 5_000)
        result = facade.purchase_upgrade("gang_42", "stash_expansion")
        if not result.success:
            print(result.error_code)
    """

    def __init__(
        self,
        curve: CurveEngine,
        catalog: UpgradeCatalog,
        doctrines: DoctrineRegistry,
        premium: PremiumActionResolver,
        store: ProgressionStore | None = None,
        funds: FundsCollaborator | None = None,
        starting_premium_credits: int = 0,
        locks: GangLockRegistry | None = None,
    ):
        self.curve = curve
        self.catalog = catalog
        self.doctrines = doctrines
        self.premium = premium
        self.store = store if store is not None else InMemoryProgressionStore()
        self.funds = funds
        self.starting_premium_credits = _check_amount(
            "starting_premium_credits", starting_premium_credits
        )
        self.locks = locks or GangLockRegistry()

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def found_gang(self, gang_id: str) -> GangProgressionState:
        """Create the record for a newly founded gang."""
        if not gang_id:
            raise InvalidArgument("gang_id must be non-empty")
        with self.locks.exclusive(gang_id):
            if self.store.load(gang_id) is not None:
                raise GangAlreadyExists(gang_id)
            state = GangProgressionState.founded(
                gang_id, self.curve, self.starting_premium_credits
            )
            self.store.save(state)
        logger.info("Gang %s founded with %d premium credits", gang_id, state.premium_credits)
        return state

    def disband_gang(self, gang_id: str) -> bool:
        """Delete a gang's record. Returns False if it did not exist."""
        with self.locks.exclusive(gang_id):
            if self.store.load(gang_id) is None:
                return False
            self.store.delete(gang_id)
        logger.info("Gang %s disbanded", gang_id)
        return True

    # =========================================================================
    # Read-only queries (no lock)
    # =========================================================================

    def get_state(self, gang_id: str) -> GangProgressionState:
        state = self.store.load(gang_id)
        if state is None:
            raise GangNotFound(gang_id)
        if state.level != self.curve.level_for(state.total_xp):
            # Records saved by hand may carry a stale level
            state = state.with_xp(state.total_xp, self.curve)
        return state

    def required_xp(self, level: int) -> int:
        return self.curve.required_xp(level)

    def level_for(self, total_xp: int | float) -> int:
        return self.curve.level_for(total_xp)

    def can_purchase(self, gang_id: str, upgrade_id: str) -> PurchaseCheck:
        return self.catalog.can_purchase(self.get_state(gang_id), upgrade_id)

    def resolve_premium_credits_store_url(self) -> str:
        return self.premium.resolve_premium_credits_store_url()

    def get_custom_job_premium_credit_action(self, gang_id: str, custom_job_cost: int) -> PremiumAction:
        """Affordability preview against the gang's current balance. Does not debit."""
        state = self.get_state(gang_id)
        return self.premium.get_custom_job_premium_credit_action(state.premium_credits, custom_job_cost)

    def snapshot(self, gang_id: str) -> GangSnapshot:
        """Read model for gameplay code: record, level progress, effect sources."""
        state = self.get_state(gang_id)
        progress = self.curve.progress(state.total_xp)

        sources = []
        for upgrade_id in sorted(state.owned_upgrades):
            upgrade = self.catalog.get(upgrade_id)
            if upgrade is not None:
                sources.append(EffectInfo(
                    source_id=upgrade_id,
                    source_type="upgrade",
                    effects=dict(upgrade.effects),
                ))
        if state.active_doctrine is not None:
            doctrine = self.doctrines.get(state.active_doctrine)
            if doctrine is not None:
                sources.append(EffectInfo(
                    source_id=doctrine.doctrine_id.value,
                    source_type="doctrine",
                    effects=dict(doctrine.effects),
                ))

        return GangSnapshot(
            record=GangProgressionRecord.from_state(state),
            xp_into_level=progress.xp_into_level,
            xp_to_next_level=progress.xp_to_next_level,
            level_fraction=progress.fraction,
            effect_sources=sources,
        )

    # =========================================================================
    # Serialized mutations
    # =========================================================================

    def grant_xp(self, gang_id: str, amount: int) -> ProgressionResult:
        """Add XP and recompute the level."""
        _check_amount("amount", amount)

        def act(state: GangProgressionState) -> ProgressionResult:
            new_state = state.with_xp(state.total_xp + amount, self.curve)
            changes = [f"+{amount} XP"]
            if new_state.level > state.level:
                changes.append(f"Level {state.level} -> {new_state.level}")
                logger.info("Gang %s reached level %d", gang_id, new_state.level)
            return self._commit(new_state, changes)

        return self._mutate(gang_id, act)

    def reset_progression(self, gang_id: str) -> ProgressionResult:
        """
        Admin reset: XP back to zero, upgrades and doctrine cleared.

        Premium credits are kept; they were paid for separately.
        """
        def act(state: GangProgressionState) -> ProgressionResult:
            new_state = GangProgressionState.at_xp(
                gang_id, 0, self.curve,
                premium_credits=state.premium_credits,
                revision=state.revision,
            )
            logger.warning("Gang %s progression reset (was level %d)", gang_id, state.level)
            return self._commit(new_state, ["Progression reset"])

        return self._mutate(gang_id, act)

    def purchase_upgrade(self, gang_id: str, upgrade_id: str) -> ProgressionResult:
        """
        Buy an upgrade: re-validate, deduct funds, apply, commit.

        Funds are only deducted after validation passes inside the
        critical section, and refunded if the commit fails. Rejections
        carry UNKNOWN_UPGRADE, ALREADY_OWNED, LEVEL_TOO_LOW or
        INSUFFICIENT_FUNDS.
        """
        def act(state: GangProgressionState) -> ProgressionResult:
            try:
                new_state = self.catalog.apply_purchase(state, upgrade_id)
            except ProgressionError as e:
                return ProgressionResult.from_error(e, state=state)

            upgrade = self.catalog.get(upgrade_id)
            if self.funds is not None and not self.funds.deduct(gang_id, upgrade.cost):
                logger.debug("Gang %s cannot afford %s (%d)", gang_id, upgrade_id, upgrade.cost)
                return ProgressionResult.from_error(InsufficientFunds(gang_id, upgrade.cost), state=state)

            try:
                result = self._commit(new_state, [f"Purchased {upgrade.name}"])
            except Exception:
                if self.funds is not None:
                    logger.warning("Refunding %d to gang %s after failed purchase commit", upgrade.cost, gang_id)
                    self.funds.refund(gang_id, upgrade.cost)
                raise

            logger.info("Gang %s purchased %s for %d", gang_id, upgrade_id, upgrade.cost)
            return result

        return self._mutate(gang_id, act)

    def select_doctrine(self, gang_id: str, doctrine_id: DoctrineID | str) -> ProgressionResult:
        """Make doctrine_id the gang's only active doctrine. Idempotent."""
        def act(state: GangProgressionState) -> ProgressionResult:
            try:
                new_state = self.doctrines.select_doctrine(state, doctrine_id)
            except ProgressionError as e:
                logger.debug("Gang %s cannot select doctrine %s: %s", gang_id, doctrine_id, e)
                return ProgressionResult.from_error(e, state=state)

            if new_state is state:
                return ProgressionResult.success_with_state(state)

            previous = state.active_doctrine.value if state.active_doctrine else "none"
            logger.info("Gang %s doctrine %s -> %s", gang_id, previous, new_state.active_doctrine.value)
            return self._commit(new_state, [f"Doctrine {previous} -> {new_state.active_doctrine.value}"])

        return self._mutate(gang_id, act)

    def clear_doctrine(self, gang_id: str) -> ProgressionResult:
        def act(state: GangProgressionState) -> ProgressionResult:
            new_state = self.doctrines.clear_doctrine(state)
            if new_state is state:
                return ProgressionResult.success_with_state(state)
            return self._commit(new_state, ["Doctrine cleared"])

        return self._mutate(gang_id, act)

    def add_premium_credits(self, gang_id: str, amount: int) -> ProgressionResult:
        """Credit premium currency (e.g. after a store purchase clears)."""
        _check_amount("amount", amount)

        def act(state: GangProgressionState) -> ProgressionResult:
            new_state = state.with_premium_credits(state.premium_credits + amount)
            logger.info("Gang %s received %d premium credits", gang_id, amount)
            return self._commit(new_state, [f"+{amount} premium credits"])

        return self._mutate(gang_id, act)

    def spend_premium_credits(self, gang_id: str, custom_job_cost: int) -> ProgressionResult:
        """
        Pay for a custom job with premium credits.

        The decision is taken against the balance inside the critical
        section. result.detail carries the Allowed/Denied action; denials
        carry the store CTA URL.
        """
        _check_amount("custom_job_cost", custom_job_cost)

        def act(state: GangProgressionState) -> ProgressionResult:
            action = self.premium.get_custom_job_premium_credit_action(
                state.premium_credits, custom_job_cost
            )
            if not isinstance(action, Allowed):
                logger.debug("Gang %s short %d premium credits", gang_id, action.shortfall)
                return ProgressionResult.failure(
                    f"Needs {action.shortfall} more premium credits",
                    error_code=action.error_code,
                    state=state,
                    detail=action,
                )

            new_state = state.with_premium_credits(state.premium_credits - action.cost)
            logger.info("Gang %s spent %d premium credits", gang_id, action.cost)
            result = self._commit(new_state, [f"-{action.cost} premium credits"])
            result.detail = action
            return result

        return self._mutate(gang_id, act)

    # =========================================================================
    # Helpers
    # =========================================================================

    def _mutate(
        self,
        gang_id: str,
        act: Callable[[GangProgressionState], ProgressionResult],
    ) -> ProgressionResult:
        """Run `act` on the freshly loaded state inside the gang's critical section."""
        with self.locks.exclusive(gang_id):
            state = self.get_state(gang_id)
            return act(state)

    def _commit(self, new_state: GangProgressionState, changes: list[str]) -> ProgressionResult:
        committed = new_state.next_revision()
        self.store.save(committed)
        return ProgressionResult.success_with_state(committed, changes=changes)


def build_facade(
    settings: ProgressionSettings | None = None,
    store: ProgressionStore | None = None,
    funds: FundsCollaborator | None = None,
    provider: CreditsStoreProvider | None = None,
    catalog: UpgradeCatalog | None = None,
    doctrines: DoctrineRegistry | None = None,
) -> GangProgressionFacade:
    """
    Wire a facade from settings.

    Static data (curve, catalog, doctrines) is built once here and
    shared by reference with everything that needs it.
    """
    settings = settings or ProgressionSettings()
    resolver = StoreURLResolver.from_config(settings.premium_store, provider)
    return GangProgressionFacade(
        curve=CurveEngine(settings.curve),
        catalog=catalog if catalog is not None else UpgradeCatalog(),
        doctrines=doctrines if doctrines is not None else DoctrineRegistry(),
        premium=PremiumActionResolver(resolver),
        store=store,
        funds=funds,
        starting_premium_credits=settings.starting_premium_credits,
    )
