"""
Premium - Monetized actions and the credits store call-to-action.

The store URL resolver is independent of gang state; the facade
composes it with each gang's premium balance.
"""

from .store_url import (
    StoreURLResolver,
    CreditsStoreProvider,
    StaticCreditsStoreProvider,
    HttpCreditsStoreProvider,
    ConfiguredOverrideStrategy,
    ProviderLookupStrategy,
    DefaultURLStrategy,
)
from .actions import (
    PremiumActionResolver,
    PremiumAction,
    Allowed,
    Denied,
    INSUFFICIENT_PREMIUM_CREDITS,
)

__all__ = [
    "StoreURLResolver",
    "CreditsStoreProvider",
    "StaticCreditsStoreProvider",
    "HttpCreditsStoreProvider",
    "ConfiguredOverrideStrategy",
    "ProviderLookupStrategy",
    "DefaultURLStrategy",
    "PremiumActionResolver",
    "PremiumAction",
    "Allowed",
    "Denied",
    "INSUFFICIENT_PREMIUM_CREDITS",
]
