import logging

from django.db import transaction
from rest_framework import status, permissions
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from entitlements.context import actor_for, tier_lookup_for
from entitlements.features import employee_limit, is_at_employee_limit, remaining_slots
from entitlements.plans import Feature, all_plans
from entitlements.roles import Permission
from permissions import (
    IsCompanyMember,
    IsCompanySubscriptionActive,
    IsPlatformOwner,
    requires_feature,
    requires_permission,
)
from .models import Company, Subscription, Employee
from .serializers import (
    PlanSerializer,
    CompanySerializer,
    EmployeeSerializer,
    SubscriptionSerializer,
    SubscriptionUpdateSerializer,
    feature_categories,
)

logger = logging.getLogger(__name__)

# Checked in order before an employee is added; the first failure is reported.
ADD_EMPLOYEE_CHECKS = (IsCompanySubscriptionActive, requires_feature(Feature.EMPLOYEE_PROFILES))


# ---------------------------------------------------------------------------
# Public: Subscription Plans
# ---------------------------------------------------------------------------
@api_view(["GET"])
@permission_classes([permissions.AllowAny])
def plan_list(request):
    """Public plan catalogue, cheapest tier first, with the feature categories."""
    return Response(
        {
            "plans": PlanSerializer(all_plans(), many=True).data,
            "categories": feature_categories(),
        }
    )


# ---------------------------------------------------------------------------
# Company
# ---------------------------------------------------------------------------
@api_view(["GET"])
@permission_classes([permissions.IsAuthenticated, IsCompanyMember])
def get_my_company(request):
    """Get the current user's company with its derived plan."""
    try:
        company = Company.objects.get(id=actor_for(request).company_id)
    except Company.DoesNotExist:
        return Response(status=status.HTTP_404_NOT_FOUND)
    return Response(CompanySerializer(company).data)


# ---------------------------------------------------------------------------
# Employee roster
# ---------------------------------------------------------------------------
@api_view(["GET", "POST"])
@permission_classes([
    permissions.IsAuthenticated,
    IsCompanyMember,
    requires_permission(Permission.MANAGE_EMPLOYEES),
])
def employees(request):
    """
    List or add employees for the current company.

    Adding is refused once the plan's headcount quota is used up. The check
    and the insert run under a lock on the company row, so two concurrent
    requests cannot both take the last slot.
    """
    company_id = actor_for(request).company_id

    if request.method == "GET":
        qs = Employee.objects.filter(company_id=company_id)
        return Response(EmployeeSerializer(qs, many=True).data)

    for check_class in ADD_EMPLOYEE_CHECKS:
        check = check_class()
        if not check.has_permission(request, None):
            return Response({"error": check.message}, status=status.HTTP_403_FORBIDDEN)

    lookup = tier_lookup_for(request)

    serializer = EmployeeSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    with transaction.atomic():
        company = Company.objects.select_for_update().get(id=company_id)
        current = company.employee_count
        if is_at_employee_limit(lookup.tier, current):
            limit = employee_limit(lookup.tier)
            logger.info(
                "Employee limit reached for company %s (%s/%s)", company_id, current, limit
            )
            return Response(
                {"error": f"Employee limit reached ({limit}). Upgrade your plan."},
                status=status.HTTP_403_FORBIDDEN,
            )

        number = serializer.validated_data["employee_number"]
        if Employee.objects.filter(company=company, employee_number=number).exists():
            return Response(
                {"error": "An employee with this number already exists."},
                status=status.HTTP_400_BAD_REQUEST,
            )
        serializer.save(company=company)

    return Response(
        {
            "employee": serializer.data,
            "remaining_slots": remaining_slots(lookup.tier, current + 1),
        },
        status=status.HTTP_201_CREATED,
    )


# ---------------------------------------------------------------------------
# Platform owner: companies & subscriptions
# ---------------------------------------------------------------------------
@api_view(["GET"])
@permission_classes([permissions.IsAuthenticated, IsPlatformOwner])
def company_list(request):
    """All companies with their subscription and derived plan."""
    qs = Company.objects.select_related("subscription")
    status_filter = request.query_params.get("status")
    if status_filter:
        qs = qs.filter(status=status_filter)
    return Response(CompanySerializer(qs, many=True).data)


@api_view(["PATCH"])
@permission_classes([
    permissions.IsAuthenticated,
    IsPlatformOwner,
    requires_permission(Permission.MANAGE_SUBSCRIPTIONS),
])
def change_subscription(request, company_id):
    """
    Change a company's tier and/or subscription status.

    Tier and status are written together in one transaction; the company's
    features follow the new tier from the next lookup on.
    """
    try:
        company = Company.objects.get(id=company_id)
    except Company.DoesNotExist:
        return Response(
            {"error": "Company not found."},
            status=status.HTTP_404_NOT_FOUND,
        )

    serializer = SubscriptionUpdateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    subscription, created = Subscription.objects.get_or_create(company=company)
    previous = (subscription.tier, subscription.status)
    subscription.change(tier=data.get("tier"), status=data.get("status"))

    logger.info(
        "Subscription for company %s changed from %s/%s to %s/%s",
        company.id, previous[0], previous[1], subscription.tier, subscription.status,
    )
    return Response(SubscriptionSerializer(subscription).data)
