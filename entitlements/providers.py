"""
Subscription providers.

A provider resolves a company id to the company's current subscription tier.
It is the only asynchronous, fallible step in an access decision, so every
lookup goes through ``lookup_tier`` which bounds it with a timeout and turns
failures into a fail-closed result (no tier, flagged as failed).
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

from asgiref.sync import async_to_sync, sync_to_async
from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import DatabaseError
from django.utils.module_loading import import_string

from .exceptions import ProviderFailure
from .plans import Tier, coerce_tier

logger = logging.getLogger(__name__)

DEFAULT_LOOKUP_TIMEOUT = 5  # seconds


class SubscriptionProvider(ABC):
    @abstractmethod
    async def resolve_tier(self, company_id):
        """Return the company's Tier, or None when it has no usable subscription."""


class StaticSubscriptionProvider(SubscriptionProvider):
    """Fixed company -> tier mapping. Used for demos and in tests."""

    def __init__(self, tiers=None, default=None):
        self.tiers = {str(k): v for k, v in (tiers or {}).items()}
        self.default = default

    async def resolve_tier(self, company_id):
        return coerce_tier(self.tiers.get(str(company_id), self.default))


class DatabaseSubscriptionProvider(SubscriptionProvider):
    """Reads the tier from the company's Subscription row."""

    async def resolve_tier(self, company_id):
        try:
            return await sync_to_async(self._lookup)(company_id)
        except DatabaseError as e:
            raise ProviderFailure(company_id, str(e)) from e

    @staticmethod
    def _lookup(company_id):
        from core.models import Subscription

        try:
            subscription = Subscription.objects.select_related("company").get(
                company_id=company_id
            )
        except (Subscription.DoesNotExist, ValidationError, ValueError):
            return None
        return subscription.effective_tier


def get_subscription_provider():
    """Instantiate the provider named by the SUBSCRIPTION_PROVIDER setting."""
    path = getattr(
        settings,
        "SUBSCRIPTION_PROVIDER",
        "entitlements.providers.DatabaseSubscriptionProvider",
    )
    return import_string(path)()


@dataclass(frozen=True)
class TierLookup:
    company_id: str | None
    tier: Tier | None
    failed: bool = False


async def lookup_tier(provider, company_id, timeout=None) -> TierLookup:
    """
    Resolve a company's tier without ever raising.

    No company means no tier. Errors and timeouts resolve to no tier with
    ``failed`` set so callers can tell "not subscribed" from "could not check".
    """
    if not company_id:
        return TierLookup(company_id=None, tier=None)

    if timeout is None:
        timeout = getattr(settings, "SUBSCRIPTION_LOOKUP_TIMEOUT", DEFAULT_LOOKUP_TIMEOUT)

    try:
        tier = await asyncio.wait_for(provider.resolve_tier(company_id), timeout)
    except asyncio.TimeoutError:
        logger.warning("Subscription lookup timed out after %ss for company %s", timeout, company_id)
        return TierLookup(company_id=company_id, tier=None, failed=True)
    except ProviderFailure as e:
        logger.warning("Subscription lookup failed for company %s: %s", company_id, e.reason)
        return TierLookup(company_id=company_id, tier=None, failed=True)
    except Exception:
        logger.exception("Unexpected error resolving subscription for company %s", company_id)
        return TierLookup(company_id=company_id, tier=None, failed=True)

    return TierLookup(company_id=company_id, tier=coerce_tier(tier))


def lookup_tier_sync(provider, company_id, timeout=None) -> TierLookup:
    return async_to_sync(lookup_tier)(provider, company_id, timeout)
