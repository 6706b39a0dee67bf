"""
Store URL Resolution - Where a denied premium action sends the player.

The resolver walks an ordered list of strategies. Each strategy
returns a URL ("resolved") or None ("try next"):

1. ConfiguredOverrideStrategy - operator override, if non-blank
2. ProviderLookupStrategy - the credits-store provider, bounded by a timeout
3. DefaultURLStrategy - configured default, cannot fail

Resolution never raises. Provider errors and timeouts are logged and
fall through to the next strategy.
"""

from __future__ import annotations
from typing import Any, Iterable, Optional, Protocol, runtime_checkable
import logging
import threading

import requests

from ..config import PremiumStoreConfig

logger = logging.getLogger(__name__)


@runtime_checkable
class CreditsStoreProvider(Protocol):
    """External collaborator that knows the current credits store URL."""

    def get_credits_store_url(self) -> Optional[str]:
        ...


class StaticCreditsStoreProvider:
    """Provider that always answers with the same URL (or None)."""

    def __init__(self, url: str | None):
        self.url = url

    def get_credits_store_url(self) -> Optional[str]:
        return self.url


class HttpCreditsStoreProvider:
    """
    Provider backed by an HTTP endpoint.

    The endpoint answers with JSON like {"url": "https://..."} or with
    the URL as plain text.
    """

    def __init__(self, endpoint: str, timeout: float = 2.0, session: requests.Session | None = None):
        self.endpoint = endpoint
        self.timeout = timeout
        self.session = session or requests.Session()

    def get_credits_store_url(self) -> Optional[str]:
        response = self.session.get(
            self.endpoint,
            headers={"Accept": "application/json"},
            timeout=self.timeout,
        )
        response.raise_for_status()

        content_type = response.headers.get("Content-Type", "")
        if "json" in content_type:
            data = response.json()
            if isinstance(data, dict):
                return data.get("url")
            return data if isinstance(data, str) else None
        return response.text.strip() or None


class ResolverStrategy(Protocol):
    name: str

    def resolve(self) -> Optional[str]:
        ...


def _usable(url: object) -> Optional[str]:
    """A URL is usable when it is a non-blank string."""
    if isinstance(url, str) and url.strip():
        return url.strip()
    return None


class ConfiguredOverrideStrategy:
    name = "override"

    def __init__(self, override_url: str | None):
        self.override_url = override_url

    def resolve(self) -> Optional[str]:
        return _usable(self.override_url)


class ProviderLookupStrategy:
    """
    Ask the provider, giving up after `timeout` seconds.

    Each lookup runs on its own daemon thread. A provider that never
    answers leaves only that thread behind; it holds no pool slot and
    does not keep the process alive at exit.
    """

    name = "provider"

    def __init__(self, provider: CreditsStoreProvider | None, timeout: float = 2.0):
        self.provider = provider
        self.timeout = timeout

    def resolve(self) -> Optional[str]:
        if self.provider is None:
            return None

        outcome: dict[str, Any] = {}

        def lookup():
            try:
                outcome["url"] = self.provider.get_credits_store_url()
            except Exception as e:
                outcome["error"] = e

        thread = threading.Thread(target=lookup, name="credits-store-lookup", daemon=True)
        thread.start()
        thread.join(self.timeout)

        if thread.is_alive():
            logger.warning("Credits store provider timed out after %.2fs", self.timeout)
            return None
        if "error" in outcome:
            logger.warning("Credits store provider failed: %s", outcome["error"])
            return None

        resolved = _usable(outcome.get("url"))
        if resolved is None:
            logger.warning("Credits store provider returned no URL")
        return resolved


class DefaultURLStrategy:
    name = "default"

    def __init__(self, default_url: str):
        if not _usable(default_url):
            raise ValueError("default_url must be a non-blank URL")
        self.default_url = default_url.strip()

    def resolve(self) -> str:
        return self.default_url


class StoreURLResolver:
    """
    Ordered fallback chain ending in a strategy that cannot fail.

    Usage:
        resolver = StoreURLResolver.from_config(settings.premium_store, provider)
        url = resolver.resolve_premium_credits_store_url()
    """

    def __init__(self, strategies: Iterable[ResolverStrategy], fallback: DefaultURLStrategy):
        self.strategies = list(strategies)
        self.fallback = fallback

    @classmethod
    def from_config(
        cls,
        config: PremiumStoreConfig,
        provider: CreditsStoreProvider | None = None,
    ) -> StoreURLResolver:
        """
        Build the standard chain. Without an explicit provider, one is
        created from config.provider_url when that is set.
        """
        if provider is None and config.provider_url:
            provider = HttpCreditsStoreProvider(
                config.provider_url,
                timeout=config.provider_timeout_seconds,
            )
        return cls(
            strategies=[
                ConfiguredOverrideStrategy(config.override_url),
                ProviderLookupStrategy(provider, timeout=config.provider_timeout_seconds),
            ],
            fallback=DefaultURLStrategy(config.default_url),
        )

    def resolve_premium_credits_store_url(self) -> str:
        """First URL any strategy resolves; the default if none do."""
        for strategy in self.strategies:
            url = strategy.resolve()
            if url:
                logger.debug("Store URL resolved by %s strategy", strategy.name)
                return url
        return self.fallback.resolve()
