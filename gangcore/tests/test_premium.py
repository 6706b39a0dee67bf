"""
Tests for premium actions and store URL resolution.

Tests:
- Allowed / Denied decisions and the equal-balance boundary
- Malformed input is a fault, not a denial
- Fallback chain order: override -> provider -> default
- Provider failures and timeouts fall through silently
- HTTP provider response parsing
"""

from pathlib import Path
import subprocess
import sys
import textwrap
import threading
import time

import pytest
import requests

from ..config import PremiumStoreConfig
from ..errors import InvalidArgument
from ..premium import (
    Allowed,
    ConfiguredOverrideStrategy,
    DefaultURLStrategy,
    Denied,
    HttpCreditsStoreProvider,
    PremiumActionResolver,
    ProviderLookupStrategy,
    StaticCreditsStoreProvider,
    StoreURLResolver,
)
from .conftest import DEFAULT_URL


class FailingProvider:
    def get_credits_store_url(self):
        raise ConnectionError("store backend down")


class HangingProvider:
    """Blocks until released; stands in for a provider that never answers."""

    def __init__(self):
        self.release = threading.Event()

    def get_credits_store_url(self):
        self.release.wait(5)
        return "https://late.example.test/"


class RecoveringProvider:
    """Hangs for the first `hung_calls` lookups, then answers normally."""

    def __init__(self, hung_calls):
        self.hung_calls = hung_calls
        self.calls = 0
        self.release = threading.Event()
        self._lock = threading.Lock()

    def get_credits_store_url(self):
        with self._lock:
            self.calls += 1
            hang = self.calls <= self.hung_calls
        if hang:
            self.release.wait(5)
        return "https://recovered.example.test/"


class FakeResponse:
    def __init__(self, body, content_type="application/json", status=200):
        self.body = body
        self.headers = {"Content-Type": content_type}
        self.status_code = status
        self.text = body if isinstance(body, str) else ""

    def json(self):
        return self.body

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


class FakeSession:
    def __init__(self, response):
        self.response = response
        self.headers = {}
        self.calls = []

    def get(self, url, headers=None, timeout=None):
        self.calls.append((url, headers, timeout))
        return self.response


class TestCustomJobPremiumAction:
    """Tests for affordability decisions."""

    def test_shortfall_denied_with_cta(self, premium):
        """50 credits vs cost 200 -> Denied with shortfall 150 and CTA."""
        action = premium.get_custom_job_premium_credit_action(50, 200)

        assert isinstance(action, Denied)
        assert action.error_code == "insufficient_premium_credits"
        assert action.shortfall == 150
        assert action.cta_url == DEFAULT_URL
        assert not action.allowed

    def test_equal_balance_allowed(self, premium):
        """Balance equal to cost is enough."""
        action = premium.get_custom_job_premium_credit_action(200, 200)
        assert action == Allowed(cost=200)
        assert action.allowed

    def test_free_job_allowed_with_no_credits(self, premium):
        assert premium.get_custom_job_premium_credit_action(0, 0) == Allowed(cost=0)

    @pytest.mark.parametrize("credits,cost", [
        (-1, 10),
        (10, -1),
        (10.5, 10),
        (10, "10"),
        (True, 1),
    ])
    def test_malformed_input_is_fault(self, premium, credits, cost):
        """Bad amounts raise instead of returning Denied."""
        with pytest.raises(InvalidArgument):
            premium.get_custom_job_premium_credit_action(credits, cost)

    def test_to_dict(self, premium):
        denied = premium.get_custom_job_premium_credit_action(0, 5).to_dict()
        assert denied == {
            "allowed": False,
            "errorCode": "insufficient_premium_credits",
            "shortfall": 5,
            "ctaURL": DEFAULT_URL,
        }
        assert premium.get_custom_job_premium_credit_action(5, 5).to_dict() == {"allowed": True, "cost": 5}

    def test_allowed_does_not_resolve_url(self):
        """Only denials need the CTA, so allowed decisions skip the lookup."""
        provider = StaticCreditsStoreProvider("https://provider.example.test/")
        calls = []
        provider.get_credits_store_url = lambda: calls.append(1) or "https://provider.example.test/"
        resolver = PremiumActionResolver(
            StoreURLResolver.from_config(PremiumStoreConfig(), provider)
        )

        resolver.get_custom_job_premium_credit_action(10, 5)
        assert calls == []


class TestStoreURLResolution:
    """Tests for the fallback chain."""

    def test_override_wins(self):
        config = PremiumStoreConfig(override_url="https://override.example.test/", default_url=DEFAULT_URL)
        provider = StaticCreditsStoreProvider("https://provider.example.test/")
        resolver = StoreURLResolver.from_config(config, provider)

        assert resolver.resolve_premium_credits_store_url() == "https://override.example.test/"

    def test_blank_override_ignored(self):
        config = PremiumStoreConfig(override_url="   ", default_url=DEFAULT_URL)
        provider = StaticCreditsStoreProvider("https://provider.example.test/")
        resolver = StoreURLResolver.from_config(config, provider)

        assert resolver.resolve_premium_credits_store_url() == "https://provider.example.test/"

    def test_default_when_nothing_else(self):
        resolver = StoreURLResolver.from_config(PremiumStoreConfig(default_url=DEFAULT_URL))
        assert resolver.resolve_premium_credits_store_url() == DEFAULT_URL

    def test_builtin_default(self):
        resolver = StoreURLResolver.from_config(PremiumStoreConfig())
        assert resolver.resolve_premium_credits_store_url() == "https://smgrpdonate.shop/"

    def test_provider_error_falls_back(self):
        """Override unset and provider failing -> default, never an error."""
        resolver = StoreURLResolver.from_config(
            PremiumStoreConfig(default_url=DEFAULT_URL), FailingProvider()
        )
        assert resolver.resolve_premium_credits_store_url() == DEFAULT_URL

    def test_provider_timeout_falls_back(self):
        """Override unset and provider hanging -> default after the timeout."""
        provider = HangingProvider()
        resolver = StoreURLResolver.from_config(
            PremiumStoreConfig(default_url=DEFAULT_URL, provider_timeout_seconds=0.05),
            provider,
        )
        try:
            assert resolver.resolve_premium_credits_store_url() == DEFAULT_URL
        finally:
            provider.release.set()

    def test_hung_lookups_do_not_block_later_ones(self):
        """Once the provider recovers, lookups succeed even while old ones still hang."""
        provider = RecoveringProvider(hung_calls=3)
        resolver = StoreURLResolver.from_config(
            PremiumStoreConfig(default_url=DEFAULT_URL, provider_timeout_seconds=0.05),
            provider,
        )
        try:
            for _ in range(3):
                assert resolver.resolve_premium_credits_store_url() == DEFAULT_URL
            assert resolver.resolve_premium_credits_store_url() == "https://recovered.example.test/"
        finally:
            provider.release.set()

    def test_hung_provider_does_not_delay_exit(self):
        script = textwrap.dedent("""
            import time
            from gangcore.config import PremiumStoreConfig
            from gangcore.premium import StoreURLResolver

            class SleepyProvider:
                def get_credits_store_url(self):
                    time.sleep(30)

            config = PremiumStoreConfig(provider_timeout_seconds=0.1)
            print(StoreURLResolver.from_config(config, SleepyProvider()).resolve_premium_credits_store_url())
        """)
        project_root = Path(__file__).resolve().parents[2]

        started = time.perf_counter()
        completed = subprocess.run(
            [sys.executable, "-c", script],
            cwd=project_root,
            capture_output=True,
            text=True,
            timeout=20,
        )
        elapsed = time.perf_counter() - started

        assert completed.returncode == 0, completed.stderr
        assert completed.stdout.strip() == "https://smgrpdonate.shop/"
        assert elapsed < 10

    def test_provider_blank_answer_falls_back(self):
        resolver = StoreURLResolver.from_config(
            PremiumStoreConfig(default_url=DEFAULT_URL), StaticCreditsStoreProvider("")
        )
        assert resolver.resolve_premium_credits_store_url() == DEFAULT_URL

    def test_custom_strategy_order(self):
        resolver = StoreURLResolver(
            strategies=[
                ProviderLookupStrategy(StaticCreditsStoreProvider("https://first.example.test/")),
                ConfiguredOverrideStrategy("https://second.example.test/"),
            ],
            fallback=DefaultURLStrategy(DEFAULT_URL),
        )
        assert resolver.resolve_premium_credits_store_url() == "https://first.example.test/"

    def test_default_strategy_requires_url(self):
        with pytest.raises(ValueError):
            DefaultURLStrategy("  ")


class TestHttpCreditsStoreProvider:
    """Tests for the HTTP-backed provider."""

    def test_json_body(self):
        session = FakeSession(FakeResponse({"url": "https://json.example.test/"}))
        provider = HttpCreditsStoreProvider("https://provider.example.test/store", timeout=1.5, session=session)

        assert provider.get_credits_store_url() == "https://json.example.test/"
        assert session.calls == [("https://provider.example.test/store", {"Accept": "application/json"}, 1.5)]

    def test_caller_session_left_untouched(self):
        session = FakeSession(FakeResponse({"url": "https://json.example.test/"}))
        session.headers = {"User-Agent": "game-server"}
        provider = HttpCreditsStoreProvider("https://provider.example.test/store", session=session)

        provider.get_credits_store_url()

        assert session.headers == {"User-Agent": "game-server"}

    def test_plain_text_body(self):
        session = FakeSession(FakeResponse("https://text.example.test/\n", content_type="text/plain"))
        provider = HttpCreditsStoreProvider("https://provider.example.test/store", session=session)

        assert provider.get_credits_store_url() == "https://text.example.test/"

    def test_http_error_falls_back_in_chain(self):
        session = FakeSession(FakeResponse({}, status=503))
        provider = HttpCreditsStoreProvider("https://provider.example.test/store", session=session)
        resolver = StoreURLResolver.from_config(PremiumStoreConfig(default_url=DEFAULT_URL), provider)

        assert resolver.resolve_premium_credits_store_url() == DEFAULT_URL

    def test_provider_built_from_config(self):
        config = PremiumStoreConfig(provider_url="https://provider.example.test/store")
        resolver = StoreURLResolver.from_config(config)

        provider_strategy = resolver.strategies[1]
        assert isinstance(provider_strategy.provider, HttpCreditsStoreProvider)
        assert provider_strategy.provider.endpoint == "https://provider.example.test/store"
