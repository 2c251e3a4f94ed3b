"""
Access and feature gates.

An AccessGate turns an ActorSession into one of three states:

    LOADING     session still resolving, or a tier lookup for this actor is in flight
    AUTHORIZED  the protected content may be rendered
    DENIED      never render; redirect to ``redirect_to``

Every evaluation is recomputed from the resolvers. The only thing a gate
remembers is the tier lookup for the actor it last saw; when the actor's
role, company or authentication changes that lookup is dropped, and a lookup
still in flight for the previous actor is discarded when it returns.
"""

import logging
from dataclasses import dataclass

from asgiref.sync import async_to_sync
from django.db import models

from .access import LOGIN_PATH, can_access_route, dashboard_path_for
from .features import has_feature, suggest_upgrade
from .plans import Tier, coerce_feature, coerce_tier, plan_of
from .providers import get_subscription_provider, lookup_tier
from .roles import Role, coerce_role

logger = logging.getLogger(__name__)

UNVERIFIED_MESSAGE = "Unable to verify access."
FORBIDDEN_MESSAGE = "You do not have access to this page."
LOGIN_MESSAGE = "Please sign in to continue."


@dataclass(frozen=True)
class ActorSession:
    """Read-only snapshot of who is acting, built once per request."""

    role: Role | None = None
    company_id: str | None = None
    employee_id: str | None = None
    is_authenticated: bool = False
    is_loading: bool = False

    @classmethod
    def from_user(cls, user):
        if user is None or not user.is_authenticated:
            return ANONYMOUS
        company_id = getattr(user, "company_id", None)
        employee_id = getattr(user, "employee_id", None)
        return cls(
            role=coerce_role(getattr(user, "role", None)),
            company_id=str(company_id) if company_id else None,
            employee_id=str(employee_id) if employee_id else None,
            is_authenticated=True,
        )

    @property
    def key(self):
        return (self.is_authenticated, self.role, self.company_id)


ANONYMOUS = ActorSession()
LOADING_SESSION = ActorSession(is_loading=True)


class GateState(models.TextChoices):
    LOADING = "loading", "Loading"
    AUTHORIZED = "authorized", "Authorized"
    DENIED = "denied", "Denied"


@dataclass(frozen=True)
class GateDecision:
    state: GateState
    redirect_to: str | None = None
    message: str = ""

    @property
    def is_loading(self):
        return self.state == GateState.LOADING

    @property
    def is_authorized(self):
        return self.state == GateState.AUTHORIZED

    @property
    def is_denied(self):
        return self.state == GateState.DENIED

    def as_dict(self):
        return {
            "state": self.state.value,
            "redirect_to": self.redirect_to,
            "message": self.message,
        }


LOADING = GateDecision(GateState.LOADING)
AUTHORIZED = GateDecision(GateState.AUTHORIZED)


def _denied(redirect_to, message):
    return GateDecision(GateState.DENIED, redirect_to=redirect_to, message=message)


class _TierTracking:
    """Tracks the tier lookup for the current actor and drops stale ones."""

    def __init__(self, provider=None, timeout=None):
        self._provider = provider
        self.timeout = timeout
        self._actor_key = None
        self._session = None
        self._generation = 0
        self._lookup = None

    @property
    def provider(self):
        if self._provider is None:
            self._provider = get_subscription_provider()
        return self._provider

    def _track(self, session):
        self._session = session
        if session.key != self._actor_key:
            self._actor_key = session.key
            self._generation += 1
            self._lookup = None

    def _expire(self, session):
        """Forget the last lookup so the next decision waits on a fresh tier."""
        self._track(session)
        self._lookup = None

    async def _fetch(self, session):
        """Look up the tier for ``session``. Returns False if the result went stale."""
        generation = self._generation
        lookup = await lookup_tier(self.provider, session.company_id, self.timeout)
        if generation != self._generation:
            logger.debug(
                "Discarding tier lookup for company %s: actor changed while in flight",
                session.company_id,
            )
            return False
        self._lookup = lookup
        return True


class AccessGate(_TierTracking):
    """
    Guards one protected area.

    ``route`` checks the UI route tables, ``allowed_roles`` restricts to an
    explicit role list and ``required_feature`` additionally requires the
    company's tier to include a feature. With none of them, any authenticated
    actor passes.
    """

    def __init__(
        self, route=None, *, allowed_roles=None, required_feature=None,
        provider=None, timeout=None,
    ):
        super().__init__(provider=provider, timeout=timeout)
        self.route = route
        self.allowed_roles = None
        if allowed_roles is not None:
            self.allowed_roles = frozenset(
                r for r in (coerce_role(role) for role in allowed_roles) if r is not None
            )
        self.required_feature = None
        if required_feature is not None:
            self.required_feature = coerce_feature(required_feature)
            if self.required_feature is None:
                raise ValueError(f"Unknown feature: {required_feature!r}")

    def _role_allowed(self, role):
        if self.allowed_roles is not None and role not in self.allowed_roles:
            return False
        if self.route is not None and not can_access_route(role, self.route):
            return False
        return True

    def evaluate(self, session) -> GateDecision:
        self._track(session)

        if session.is_loading:
            return LOADING
        if not session.is_authenticated or session.role is None:
            return _denied(LOGIN_PATH, LOGIN_MESSAGE)

        if not self._role_allowed(session.role):
            return _denied(dashboard_path_for(session.role), FORBIDDEN_MESSAGE)

        if self.required_feature is None:
            return AUTHORIZED

        if self._lookup is None:
            return LOADING
        if self._lookup.failed:
            return _denied(dashboard_path_for(session.role), UNVERIFIED_MESSAGE)
        if has_feature(self._lookup.tier, self.required_feature):
            return AUTHORIZED
        return _denied(
            dashboard_path_for(session.role),
            f"{self.required_feature.label} is not available on your plan. Upgrade to access.",
        )

    async def resolve(self, session) -> GateDecision:
        """Evaluate, looking the tier up afresh whenever the decision depends on it."""
        self._expire(session)
        decision = self.evaluate(session)
        if not decision.is_loading or session.is_loading:
            return decision
        if not await self._fetch(session):
            return self.evaluate(self._session)
        return self.evaluate(session)

    def check(self, session) -> GateDecision:
        return async_to_sync(self.resolve)(session)


@dataclass(frozen=True)
class FeatureGateResult:
    feature: str
    is_available: bool
    current_tier: Tier | None
    current_plan: str
    suggested_upgrade_tier: Tier | None
    suggested_plan: str | None
    is_loading: bool = False
    verified: bool = True

    @property
    def show_upgrade_prompt(self):
        return not self.is_available and not self.is_loading

    def as_dict(self):
        return {
            "feature": self.feature,
            "is_available": self.is_available,
            "show_upgrade_prompt": self.show_upgrade_prompt,
            "current_tier": self.current_tier,
            "current_plan": self.current_plan,
            "suggested_upgrade_tier": self.suggested_upgrade_tier,
            "suggested_plan": self.suggested_plan,
            "is_loading": self.is_loading,
            "verified": self.verified,
        }


def feature_gate(tier, feature_key, verified=True) -> FeatureGateResult:
    """Advisory availability of a feature for a tier, with an upgrade suggestion."""
    tier = coerce_tier(tier)
    feature = coerce_feature(feature_key)
    upgrade = suggest_upgrade(tier)
    return FeatureGateResult(
        feature=feature.value if feature is not None else str(feature_key),
        is_available=has_feature(tier, feature_key),
        current_tier=tier,
        current_plan=plan_of(tier).name,
        suggested_upgrade_tier=upgrade,
        suggested_plan=plan_of(upgrade).name if upgrade else None,
        verified=verified,
    )


class FeatureGate(_TierTracking):
    """Feature availability for the current actor's company. Never denies on its own."""

    def __init__(self, feature_key, *, provider=None, timeout=None):
        super().__init__(provider=provider, timeout=timeout)
        self.feature = coerce_feature(feature_key)
        if self.feature is None:
            raise ValueError(f"Unknown feature: {feature_key!r}")

    def evaluate(self, session) -> FeatureGateResult:
        self._track(session)
        if session.is_loading or (session.company_id and self._lookup is None):
            return FeatureGateResult(
                feature=self.feature.value,
                is_available=False,
                current_tier=None,
                current_plan=plan_of(None).name,
                suggested_upgrade_tier=None,
                suggested_plan=None,
                is_loading=True,
            )
        lookup = self._lookup
        tier = lookup.tier if lookup else None
        verified = not (lookup and lookup.failed)
        return feature_gate(tier, self.feature, verified=verified)

    async def resolve(self, session) -> FeatureGateResult:
        self._expire(session)
        result = self.evaluate(session)
        if not result.is_loading or session.is_loading:
            return result
        if not await self._fetch(session):
            return self.evaluate(self._session)
        return self.evaluate(session)

    def check(self, session) -> FeatureGateResult:
        return async_to_sync(self.resolve)(session)


COMPANY_ADMIN_ROLES = (Role.PLATFORM_OWNER, Role.COMPANY_ADMIN)


def system_owner_gate(**kwargs):
    return AccessGate(allowed_roles=(Role.PLATFORM_OWNER,), **kwargs)


def company_admin_gate(**kwargs):
    """Employee, payroll, leave, reports and settings management areas."""
    return AccessGate(allowed_roles=COMPANY_ADMIN_ROLES, **kwargs)


def self_service_gate(**kwargs):
    return AccessGate(**kwargs)
