"""
Role- and plan-based access control for the API.

Role Hierarchy:
    platform_owner > company_admin > employee

Role checks go through the role catalog; plan checks resolve the company's
tier through the configured SubscriptionProvider, once per request.

Usage in views:
    from permissions import IsCompanyAdminOrAbove, requires_feature

    @api_view(["GET"])
    @permission_classes([IsAuthenticated, IsCompanyAdminOrAbove, requires_feature("audit_trail")])
    def my_view(request):
        ...
"""

from rest_framework.permissions import BasePermission

from entitlements.context import actor_for, tier_lookup_for
from entitlements.features import has_feature
from entitlements.gate import UNVERIFIED_MESSAGE
from entitlements.plans import coerce_feature
from entitlements.roles import Role, has_permission


class IsPlatformOwner(BasePermission):
    """Actor must be the platform owner."""

    message = "Only the platform owner can perform this action."

    def has_permission(self, request, view):
        return actor_for(request).role == Role.PLATFORM_OWNER


class IsCompanyAdminOrAbove(BasePermission):
    """Actor must be a company admin or the platform owner."""

    message = "Only HR administrators can perform this action."

    def has_permission(self, request, view):
        return actor_for(request).role in (Role.PLATFORM_OWNER, Role.COMPANY_ADMIN)


class IsCompanyMember(BasePermission):
    """Actor must be linked to a company."""

    message = "You are not a member of any company."

    def has_permission(self, request, view):
        actor = actor_for(request)
        return actor.is_authenticated and actor.company_id is not None


class IsCompanySubscriptionActive(BasePermission):
    """Company must have an active subscription on a known tier."""

    message = "Company subscription is not active."

    def has_permission(self, request, view):
        lookup = tier_lookup_for(request)
        if lookup.failed:
            self.message = UNVERIFIED_MESSAGE
            return False
        return lookup.tier is not None


def requires_permission(permission):
    """Permission class granting access when the actor's role has ``permission``."""

    class RequiresPermission(BasePermission):
        message = "You do not have permission to perform this action."

        def has_permission(self, request, view):
            return has_permission(actor_for(request).role, permission)

    RequiresPermission.__name__ = f"Requires_{permission}"
    return RequiresPermission


def requires_feature(feature_key):
    """Permission class granting access when the company's plan includes a feature."""
    feature = coerce_feature(feature_key)
    if feature is None:
        raise ValueError(f"Unknown feature: {feature_key!r}")

    class RequiresFeature(BasePermission):
        message = f"{feature.label} is not available on your plan. Upgrade to access."

        def has_permission(self, request, view):
            lookup = tier_lookup_for(request)
            if lookup.failed:
                self.message = UNVERIFIED_MESSAGE
                return False
            return has_feature(lookup.tier, feature)

    RequiresFeature.__name__ = f"Requires_{feature.value}"
    return RequiresFeature

