"""
Pytest fixtures for Gangcore tests.
"""

import pytest

from ..config import CurveConfig, PremiumStoreConfig, ProgressionSettings
from ..catalog import DoctrineRegistry, UpgradeCatalog
from ..gangs import InMemoryFundsLedger, InMemoryProgressionStore, build_facade
from ..premium import PremiumActionResolver, StaticCreditsStoreProvider, StoreURLResolver
from ..progression import CurveEngine, GangProgressionState

DEFAULT_URL = "https://store.example.test/default"


@pytest.fixture
def curve() -> CurveEngine:
    """Curve with the default tuning."""
    return CurveEngine(CurveConfig())


@pytest.fixture
def catalog() -> UpgradeCatalog:
    return UpgradeCatalog()


@pytest.fixture
def doctrines() -> DoctrineRegistry:
    return DoctrineRegistry()


@pytest.fixture
def state_at_level(curve):
    """Factory: a gang state sitting exactly at the start of `level`."""
    def make(level: int, gang_id: str = "test_gang", **kwargs) -> GangProgressionState:
        return GangProgressionState.at_xp(gang_id, curve.xp_to_reach(level), curve, **kwargs)
    return make


@pytest.fixture
def store_config() -> PremiumStoreConfig:
    return PremiumStoreConfig(default_url=DEFAULT_URL)


@pytest.fixture
def premium(store_config) -> PremiumActionResolver:
    """Premium resolver whose provider knows no URL, so the default wins."""
    resolver = StoreURLResolver.from_config(store_config, StaticCreditsStoreProvider(None))
    return PremiumActionResolver(resolver)


@pytest.fixture
def funds() -> InMemoryFundsLedger:
    return InMemoryFundsLedger({"test_gang": 1_000_000})


@pytest.fixture
def settings(store_config) -> ProgressionSettings:
    return ProgressionSettings(premium_store=store_config, starting_premium_credits=100)


@pytest.fixture
def facade(settings, funds):
    """Facade over an in-memory store with one founded gang."""
    facade = build_facade(
        settings,
        store=InMemoryProgressionStore(),
        funds=funds,
        provider=StaticCreditsStoreProvider(None),
    )
    facade.found_gang("test_gang")
    return facade
