"""
Tests for the plan catalogue, company profile and employee roster endpoints.
"""

import pytest
from rest_framework import status

from core.models import Employee, Subscription
from entitlements.exceptions import ProviderFailure
from entitlements.plans import Feature
from entitlements.providers import SubscriptionProvider
from permissions import IsCompanySubscriptionActive, requires_feature


class FailingProvider(SubscriptionProvider):
    async def resolve_tier(self, company_id):
        raise ProviderFailure(company_id, "billing service down")


def new_employee(number):
    return {
        "employee_number": number,
        "first_name": "Andres",
        "last_name": "Bonifacio",
        "department": "Operations",
    }


@pytest.mark.django_db
class TestPlanCatalogue:
    def test_plans_are_public(self, api_client):
        response = api_client.get("/api/v1/plans/")
        assert response.status_code == status.HTTP_200_OK
        tiers = [plan["tier"] for plan in response.data["plans"]]
        assert tiers == ["starter", "professional", "enterprise"]

    def test_plan_details(self, api_client):
        plans = {p["tier"]: p for p in api_client.get("/api/v1/plans/").data["plans"]}
        assert plans["starter"]["monthly_price_display"] == "₱1,399"
        assert plans["starter"]["employee_limit_text"] == "Up to 10 employees"
        assert plans["enterprise"]["employee_limit_text"] == "Unlimited employees"
        assert plans["professional"]["popular"] is True
        assert plans["enterprise"]["features"]["multi_branch"] is True

    def test_categories(self, api_client):
        categories = api_client.get("/api/v1/plans/").data["categories"]
        assert categories[0]["key"] == "employees"
        assert categories[0]["features"][0] == {
            "key": "employee_profiles",
            "label": "Employee Profiles & 201 Files",
        }


@pytest.mark.django_db
class TestMyCompany:
    def test_company_with_derived_plan(self, admin_client, company):
        response = admin_client.get("/api/v1/company/")
        assert response.status_code == status.HTTP_200_OK
        assert response.data["name"] == "Test Company"
        assert response.data["tier"] == "professional"
        assert response.data["plan_name"] == "Professional"
        assert response.data["employee_limit"] == 50

    def test_platform_owner_has_no_company(self, owner_client):
        response = owner_client.get("/api/v1/company/")
        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data["detail"] == "You are not a member of any company."


@pytest.mark.django_db
class TestEmployeeRoster:
    def test_list_only_own_company(self, admin_client, company, starter_company, add_employees):
        add_employees(company, 2)
        add_employees(starter_company, 4)
        response = admin_client.get("/api/v1/employees/")
        assert response.status_code == status.HTTP_200_OK
        assert len(response.data) == 2

    def test_employee_cannot_list_roster(self, employee_client):
        response = employee_client.get("/api/v1/employees/")
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_add_employee(self, admin_client, company):
        response = admin_client.post("/api/v1/employees/", new_employee("EMP-0100"))
        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["employee"]["employee_number"] == "EMP-0100"
        assert response.data["remaining_slots"] == 49
        assert Employee.objects.filter(company=company).count() == 1

    def test_duplicate_employee_number(self, admin_client, company, add_employees):
        add_employees(company, 1)
        response = admin_client.post("/api/v1/employees/", new_employee("EMP-0001"))
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_quota_blocks_new_employees(self, client_for, starter_company, add_employees):
        from accounts.models import User

        hr = User.objects.create_user(
            email="hr@sari-sari.ph", password="x-secret-123", full_name="HR",
            role="company_admin", company=starter_company,
        )
        client = client_for(hr)
        add_employees(starter_company, 9)

        response = client.post("/api/v1/employees/", new_employee("EMP-0010"))
        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["remaining_slots"] == 0

        response = client.post("/api/v1/employees/", new_employee("EMP-0011"))
        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data["error"] == "Employee limit reached (10). Upgrade your plan."
        assert Employee.objects.filter(company=starter_company).count() == 10

    def test_inactive_employees_do_not_use_quota(self, client_for, starter_company, add_employees):
        from accounts.models import User

        hr = User.objects.create_user(
            email="hr@sari-sari.ph", password="x-secret-123", full_name="HR",
            role="company_admin", company=starter_company,
        )
        for employee in add_employees(starter_company, 10)[:2]:
            employee.status = Employee.Status.RESIGNED
            employee.save()

        response = client_for(hr).post("/api/v1/employees/", new_employee("EMP-0011"))
        assert response.status_code == status.HTTP_201_CREATED

    def test_enterprise_has_no_quota(self, client_for, enterprise_company, add_employees):
        from accounts.models import User

        hr = User.objects.create_user(
            email="hr@big.ph", password="x-secret-123", full_name="HR",
            role="company_admin", company=enterprise_company,
        )
        add_employees(enterprise_company, 60)
        response = client_for(hr).post("/api/v1/employees/", new_employee("EMP-0061"))
        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["remaining_slots"] == -1

    def test_lapsed_subscription_cannot_add(self, admin_client, company):
        Subscription.objects.filter(company=company).update(status=Subscription.Status.EXPIRED)
        response = admin_client.post("/api/v1/employees/", new_employee("EMP-0100"))
        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data["error"] == "Company subscription is not active."

    def test_unverified_subscription_cannot_add(self, admin_client, company, monkeypatch):
        monkeypatch.setattr("entitlements.context.get_subscription_provider", FailingProvider)
        response = admin_client.post("/api/v1/employees/", new_employee("EMP-0100"))
        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data["error"] == "Unable to verify access."
        assert not Employee.objects.filter(company=company).exists()

    def test_adding_requires_plan_feature(self, admin_client, company, monkeypatch):
        monkeypatch.setattr(
            "core.views.ADD_EMPLOYEE_CHECKS",
            (IsCompanySubscriptionActive, requires_feature(Feature.MULTI_BRANCH)),
        )
        response = admin_client.post("/api/v1/employees/", new_employee("EMP-0100"))
        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data["error"] == (
            "Multi-Branch Support is not available on your plan. Upgrade to access."
        )
