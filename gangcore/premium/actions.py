"""
Premium Actions - Affordability of premium-credit-priced actions.

A custom job costs premium credits. The decision is either:
- Allowed(cost) when the balance covers the cost (equal is enough)
- Denied(error_code, shortfall, cta_url) otherwise, with a ready-to-use
  store link so the UI can show a purchase prompt as-is

Malformed input (negative or non-integer amounts) raises InvalidArgument;
it is never reported as a Denied result.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Union

from ..errors import InvalidArgument
from .store_url import StoreURLResolver

INSUFFICIENT_PREMIUM_CREDITS = "insufficient_premium_credits"


@dataclass(frozen=True)
class Allowed:
    cost: int
    allowed: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {"allowed": True, "cost": self.cost}


@dataclass(frozen=True)
class Denied:
    shortfall: int
    cta_url: str
    error_code: str = INSUFFICIENT_PREMIUM_CREDITS
    allowed: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "allowed": False,
            "errorCode": self.error_code,
            "shortfall": self.shortfall,
            "ctaURL": self.cta_url,
        }


PremiumAction = Union[Allowed, Denied]


def _check_amount(name: str, value) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgument(f"{name} must be an integer, got {value!r}")
    if value < 0:
        raise InvalidArgument(f"{name} must be >= 0, got {value}")
    return value


class PremiumActionResolver:
    """Decides premium actions and resolves the store CTA for denials."""

    def __init__(self, store_url_resolver: StoreURLResolver):
        self.store_url_resolver = store_url_resolver

    def resolve_premium_credits_store_url(self) -> str:
        return self.store_url_resolver.resolve_premium_credits_store_url()

    def get_custom_job_premium_credit_action(
        self,
        premium_credits: int,
        custom_job_cost: int,
    ) -> PremiumAction:
        """
        Decide whether a custom job can be paid with premium credits.

        Raises:
            InvalidArgument: either amount is negative or not an integer
        """
        _check_amount("premium_credits", premium_credits)
        _check_amount("custom_job_cost", custom_job_cost)

        if premium_credits >= custom_job_cost:
            return Allowed(cost=custom_job_cost)

        return Denied(
            shortfall=custom_job_cost - premium_credits,
            cta_url=self.resolve_premium_credits_store_url(),
        )
