"""
Entitlement endpoints used by the web client to build its UI.

The client mirrors these decisions for display only; every protected API
endpoint re-checks them server-side through the classes in permissions.py.
"""

from rest_framework import status, permissions
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from core.models import Company
from core.serializers import PlanSerializer
from permissions import IsCompanyAdminOrAbove, IsCompanyMember
from .access import classify_route, dashboard_path_for, navigation_for
from .context import actor_for, tier_lookup_for
from .features import (
    enabled_features,
    is_at_employee_limit,
    remaining_slots,
    suggest_upgrade,
)
from .gate import AccessGate, FeatureGate, UNVERIFIED_MESSAGE
from .plans import plan_of
from .roles import ROLE_DESCRIPTIONS, ROLE_DISPLAY_NAMES, permissions_of


@api_view(["GET"])
def my_permissions(request):
    """Permission set for the current actor's role."""
    actor = actor_for(request)
    perms = permissions_of(actor.role)
    return Response(
        {
            "role": actor.role,
            "role_display": ROLE_DISPLAY_NAMES.get(actor.role, ""),
            "role_description": ROLE_DESCRIPTIONS.get(actor.role, ""),
            "permissions": perms.as_dict(),
            "granted": list(perms.granted()),
        }
    )


@api_view(["GET"])
@permission_classes([permissions.AllowAny])
def route_access(request):
    """
    Gate decision for a UI route: ?path=/app/payroll

    Anonymous callers get a decision too (a redirect to the login page),
    so the client can use one code path for every visitor.
    """
    path = request.query_params.get("path")
    if not path:
        return Response(
            {"error": "The path query parameter is required."},
            status=status.HTTP_400_BAD_REQUEST,
        )
    decision = AccessGate(route=path).check(actor_for(request))
    return Response({"path": path, "group": classify_route(path), **decision.as_dict()})


@api_view(["GET"])
def navigation(request):
    """Menu entries for the current actor's role."""
    actor = actor_for(request)
    return Response(
        {
            "role": actor.role,
            "dashboard_path": dashboard_path_for(actor.role),
            "items": navigation_for(actor.role),
        }
    )


@api_view(["GET"])
@permission_classes([permissions.IsAuthenticated, IsCompanyMember, IsCompanyAdminOrAbove])
def features(request):
    """The company's plan, enabled features and headcount usage. HR administrators only."""
    lookup = tier_lookup_for(request)
    if lookup.failed:
        return Response({"error": UNVERIFIED_MESSAGE}, status=status.HTTP_403_FORBIDDEN)

    try:
        company = Company.objects.get(id=lookup.company_id)
    except Company.DoesNotExist:
        return Response(status=status.HTTP_404_NOT_FOUND)

    tier = lookup.tier
    plan = plan_of(tier)
    count = company.employee_count
    return Response(
        {
            "tier": tier,
            "plan": PlanSerializer(plan).data,
            "enabled_features": list(enabled_features(tier)),
            "employee_count": count,
            "employee_limit": plan.employee_limit,
            "remaining_slots": remaining_slots(tier, count),
            "is_at_employee_limit": is_at_employee_limit(tier, count),
            "suggested_upgrade": suggest_upgrade(tier),
        }
    )


@api_view(["GET"])
def feature_detail(request, feature_key):
    """Availability of one feature for the actor's company, with an upgrade hint."""
    try:
        gate = FeatureGate(feature_key)
    except ValueError:
        return Response(
            {"error": f"Unknown feature: {feature_key}"},
            status=status.HTTP_404_NOT_FOUND,
        )
    return Response(gate.check(actor_for(request)).as_dict())
