"""
Tests for the entitlement endpoints the web client builds its UI from.
"""

import pytest
from rest_framework import status

from core.models import Subscription
from entitlements.exceptions import ProviderFailure
from entitlements.providers import SubscriptionProvider


class FailingProvider(SubscriptionProvider):
    async def resolve_tier(self, company_id):
        raise ProviderFailure(company_id, "billing service down")


@pytest.mark.django_db
class TestPermissionsEndpoint:
    def test_admin_permissions(self, admin_client):
        response = admin_client.get("/api/v1/access/permissions/")
        assert response.status_code == status.HTTP_200_OK
        assert response.data["role"] == "company_admin"
        assert response.data["role_display"] == "HR Administrator"
        assert response.data["permissions"]["can_manage_employees"] is True
        assert "can_manage_companies" not in response.data["granted"]

    def test_requires_auth(self, api_client):
        response = api_client.get("/api/v1/access/permissions/")
        assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.django_db
class TestRouteEndpoint:
    def test_employee_redirected_from_employee_list(self, employee_client):
        response = employee_client.get("/api/v1/access/route/", {"path": "/app/employees"})
        assert response.status_code == status.HTTP_200_OK
        assert response.data["state"] == "denied"
        assert response.data["redirect_to"] == "/app/dashboard"
        assert response.data["group"] == "company"

    def test_owner_reaches_companies(self, owner_client):
        response = owner_client.get("/api/v1/access/route/", {"path": "/app/companies"})
        assert response.data["state"] == "authorized"

    def test_anonymous_redirected_to_login(self, api_client):
        response = api_client.get("/api/v1/access/route/", {"path": "/app/my-profile"})
        assert response.status_code == status.HTTP_200_OK
        assert response.data["state"] == "denied"
        assert response.data["redirect_to"] == "/login"

    def test_path_is_required(self, admin_client):
        response = admin_client.get("/api/v1/access/route/")
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "error" in response.data


@pytest.mark.django_db
class TestNavigationEndpoint:
    def test_owner_navigation(self, owner_client):
        response = owner_client.get("/api/v1/access/navigation/")
        assert response.status_code == status.HTTP_200_OK
        assert response.data["dashboard_path"] == "/app/owner-dashboard"
        hrefs = [item["href"] for item in response.data["items"]]
        assert "/app/companies" in hrefs
        assert "/app/payroll" not in hrefs


@pytest.mark.django_db
class TestFeaturesEndpoint:
    def test_company_features_and_usage(self, admin_client, add_employees, company):
        add_employees(company, 3)
        response = admin_client.get("/api/v1/access/features/")
        assert response.status_code == status.HTTP_200_OK
        assert response.data["tier"] == "professional"
        assert response.data["employee_count"] == 3
        assert response.data["employee_limit"] == 50
        assert response.data["remaining_slots"] == 47
        assert response.data["is_at_employee_limit"] is False
        assert response.data["suggested_upgrade"] == "enterprise"
        assert "audit_trail" in response.data["enabled_features"]
        assert "multi_branch" not in response.data["enabled_features"]

    def test_lapsed_subscription_gets_no_plan(self, admin_client, company):
        Subscription.objects.filter(company=company).update(status=Subscription.Status.EXPIRED)
        response = admin_client.get("/api/v1/access/features/")
        assert response.status_code == status.HTTP_200_OK
        assert response.data["tier"] is None
        assert response.data["enabled_features"] == []
        assert response.data["employee_limit"] == 0
        assert response.data["is_at_employee_limit"] is True

    def test_provider_failure_is_forbidden(self, admin_client, monkeypatch):
        monkeypatch.setattr("entitlements.context.get_subscription_provider", FailingProvider)
        response = admin_client.get("/api/v1/access/features/")
        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data["error"] == "Unable to verify access."

    def test_platform_owner_has_no_company(self, owner_client):
        response = owner_client.get("/api/v1/access/features/")
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_employee_cannot_see_plan_usage(self, employee_client):
        response = employee_client.get("/api/v1/access/features/")
        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data["detail"] == "Only HR administrators can perform this action."

    def test_employee_can_still_check_one_feature(self, employee_client):
        response = employee_client.get("/api/v1/access/features/audit_trail/")
        assert response.status_code == status.HTTP_200_OK
        assert response.data["is_available"] is True


@pytest.mark.django_db
class TestFeatureDetailEndpoint:
    def test_camel_case_key(self, admin_client):
        response = admin_client.get("/api/v1/access/features/multiBranch/")
        assert response.status_code == status.HTTP_200_OK
        assert response.data["feature"] == "multi_branch"
        assert response.data["is_available"] is False
        assert response.data["show_upgrade_prompt"] is True
        assert response.data["suggested_upgrade_tier"] == "enterprise"

    def test_available_feature(self, admin_client):
        response = admin_client.get("/api/v1/access/features/audit_trail/")
        assert response.data["is_available"] is True
        assert response.data["show_upgrade_prompt"] is False

    def test_unknown_feature(self, admin_client):
        response = admin_client.get("/api/v1/access/features/teleportation/")
        assert response.status_code == status.HTTP_404_NOT_FOUND
