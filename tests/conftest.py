"""
Pytest fixtures for the SAHOD HRIS test suite.

Provides:
  - Companies on each tier, each with an active subscription
  - Platform owner, HR administrator and employee users
  - Auth tokens and authenticated API clients
"""

import pytest
from django.core.cache import cache
from rest_framework.test import APIClient
from rest_framework.authtoken.models import Token

from core.models import Company, Subscription, Employee
from accounts.models import User
from entitlements.roles import Role


@pytest.fixture(autouse=True)
def _reset_throttles():
    # DRF throttling counts requests in the default cache.
    cache.clear()
    yield
    cache.clear()


def _make_company(name, slug, tier, status="active"):
    company = Company.objects.create(
        name=name,
        slug=slug,
        email=f"hr@{slug}.ph",
        phone="+639170000000",
        status=Company.Status.ACTIVE if status == "active" else Company.Status.TRIAL,
    )
    subscription = Subscription(company=company, tier=tier)
    if status == "trial":
        subscription.start_trial()
    else:
        subscription.status = Subscription.Status.ACTIVE
    subscription.save()
    return company


def _add_employees(company, count, start=1):
    return [
        Employee.objects.create(
            company=company,
            employee_number=f"EMP-{n:04d}",
            first_name="Juan",
            last_name=f"Dela Cruz {n}",
        )
        for n in range(start, start + count)
    ]


@pytest.fixture
def starter_company(db):
    return _make_company("Sari-Sari Trading", "sari-sari", "starter")


@pytest.fixture
def company(db):
    return _make_company("Test Company", "test-company", "professional")


@pytest.fixture
def enterprise_company(db):
    return _make_company("Big Conglomerate", "big-conglomerate", "enterprise")


@pytest.fixture
def platform_owner(db):
    return User.objects.create_user(
        email="owner@sahod.ph",
        password="securepassword123",
        full_name="Platform Owner",
        role=Role.PLATFORM_OWNER,
    )


@pytest.fixture
def admin_user(company):
    return User.objects.create_user(
        email="hr@testcompany.ph",
        password="adminpass123",
        full_name="Maria Santos",
        role=Role.COMPANY_ADMIN,
        company=company,
    )


@pytest.fixture
def employee_record(company):
    return Employee.objects.create(
        company=company,
        employee_number="EMP-0001",
        first_name="Jose",
        last_name="Rizal",
        email="jose@testcompany.ph",
    )


@pytest.fixture
def employee_user(company, employee_record):
    return User.objects.create_user(
        email="jose@testcompany.ph",
        password="employeepass123",
        full_name="Jose Rizal",
        role=Role.EMPLOYEE,
        company=company,
        employee=employee_record,
    )


def _client_for(user):
    token, _ = Token.objects.get_or_create(user=user)
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f"Token {token.key}")
    return client


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def owner_client(platform_owner):
    return _client_for(platform_owner)


@pytest.fixture
def admin_client(admin_user):
    return _client_for(admin_user)


@pytest.fixture
def employee_client(employee_user):
    return _client_for(employee_user)


@pytest.fixture
def client_for(db):
    """Build an authenticated client for any user created inside a test."""
    return _client_for


@pytest.fixture
def make_company(db):
    """Factory: make_company(name, slug, tier, status="active")."""
    return _make_company


@pytest.fixture
def add_employees(db):
    """Factory: add_employees(company, count, start=1) creates active roster entries."""
    return _add_employees
