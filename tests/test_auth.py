"""
Tests for authentication, login, logout and the current actor.
"""

import pytest
from rest_framework import status
from rest_framework.authtoken.models import Token


@pytest.mark.django_db
class TestLogin:
    def test_login_success(self, api_client, admin_user):
        response = api_client.post("/api/v1/auth/login/", {
            "email": "hr@testcompany.ph",
            "password": "adminpass123",
        })
        assert response.status_code == status.HTTP_200_OK
        assert "token" in response.data
        assert response.data["user"]["email"] == "hr@testcompany.ph"
        assert response.data["session"]["role"] == "company_admin"
        assert response.data["dashboard_path"] == "/app/dashboard"
        assert response.data["permissions"]["can_manage_payroll"] is True

    def test_platform_owner_lands_on_owner_dashboard(self, api_client, platform_owner):
        response = api_client.post("/api/v1/auth/login/", {
            "email": "owner@sahod.ph",
            "password": "securepassword123",
        })
        assert response.status_code == status.HTTP_200_OK
        assert response.data["dashboard_path"] == "/app/owner-dashboard"
        assert response.data["session"]["company_id"] is None

    def test_login_records_ip(self, api_client, admin_user):
        api_client.post(
            "/api/v1/auth/login/",
            {"email": "hr@testcompany.ph", "password": "adminpass123"},
            HTTP_X_FORWARDED_FOR="203.0.113.7, 10.0.0.1",
        )
        admin_user.refresh_from_db()
        assert admin_user.last_login_ip == "203.0.113.7"

    def test_login_wrong_password(self, api_client, admin_user):
        response = api_client.post("/api/v1/auth/login/", {
            "email": "hr@testcompany.ph",
            "password": "wrongpassword",
        })
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_login_nonexistent_user(self, api_client):
        response = api_client.post("/api/v1/auth/login/", {
            "email": "nobody@example.com",
            "password": "password123",
        })
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_login_inactive_user(self, api_client, admin_user):
        admin_user.is_active = False
        admin_user.save()
        response = api_client.post("/api/v1/auth/login/", {
            "email": "hr@testcompany.ph",
            "password": "adminpass123",
        })
        assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.django_db
class TestLogout:
    def test_logout_clears_token(self, admin_client, admin_user):
        response = admin_client.post("/api/v1/auth/logout/")
        assert response.status_code == status.HTTP_200_OK
        assert not Token.objects.filter(user=admin_user).exists()

    def test_token_is_useless_after_logout(self, admin_client):
        admin_client.post("/api/v1/auth/logout/")
        response = admin_client.get("/api/v1/auth/me/")
        assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.django_db
class TestCurrentUser:
    def test_me_returns_session(self, employee_client, employee_user, employee_record):
        response = employee_client.get("/api/v1/auth/me/")
        assert response.status_code == status.HTTP_200_OK
        assert response.data["user"]["email"] == "jose@testcompany.ph"
        assert response.data["session"]["employee_id"] == str(employee_record.id)
        assert response.data["permissions"]["can_manage_employees"] is False
        hrefs = [item["href"] for item in response.data["navigation"]]
        assert "/app/my-payslips" in hrefs
        assert "/app/employees" not in hrefs

    def test_role_change_applies_on_next_request(self, employee_client, employee_user):
        employee_user.role = "company_admin"
        employee_user.save()
        response = employee_client.get("/api/v1/auth/me/")
        assert response.data["permissions"]["can_manage_employees"] is True

    def test_me_requires_auth(self, api_client):
        response = api_client.get("/api/v1/auth/me/")
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
