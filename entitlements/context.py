"""Per-request access to the actor session and the company's tier."""

from .gate import ActorSession
from .providers import get_subscription_provider, lookup_tier_sync


def actor_for(request) -> ActorSession:
    """The session attached by ActorSessionMiddleware, or one built from request.user."""
    actor = getattr(request, "actor", None)
    if actor is None:
        actor = ActorSession.from_user(getattr(request, "user", None))
    return actor


def tier_lookup_for(request, provider=None):
    """
    Resolve the acting company's tier once per request.

    The result is stored on the request so several permission checks in the
    same request agree with each other.
    """
    cached = getattr(request, "_tier_lookup", None)
    actor = actor_for(request)
    if cached is not None and cached.company_id == actor.company_id:
        return cached

    lookup = lookup_tier_sync(provider or get_subscription_provider(), actor.company_id)
    request._tier_lookup = lookup
    return lookup
