"""
Route access control.

UI routes are grouped into disjoint prefix tables. A path is classified by the
longest prefix that matches on a segment boundary, so ``/app/leaves/calendar``
falls under ``/app/leaves`` but ``/app/leavesx`` matches nothing.

    platform         -> platform_owner only
    company          -> platform_owner, company_admin
    self_service     -> any authenticated role
    shared           -> any authenticated role (landing dashboard)
    everything else  -> denied
"""

import posixpath

from django.db import models

from .roles import Role, coerce_role

LOGIN_PATH = "/login"
OWNER_DASHBOARD_PATH = "/app/owner-dashboard"
DASHBOARD_PATH = "/app/dashboard"


class RouteGroup(models.TextChoices):
    PLATFORM = "platform", "Platform"
    COMPANY = "company", "Company administration"
    SELF_SERVICE = "self_service", "Employee self-service"
    SHARED = "shared", "Shared"


PLATFORM_ROUTES = (
    "/app/companies",
    "/app/subscriptions",
    "/app/system-config",
    "/app/platform-analytics",
    OWNER_DASHBOARD_PATH,
)

COMPANY_ROUTES = (
    "/app/employees",
    "/app/attendance",
    "/app/payroll",
    "/app/leaves",
    "/app/reports",
    "/app/settings",
)

SELF_SERVICE_ROUTES = (
    "/app/my-profile",
    "/app/my-attendance",
    "/app/my-leaves",
    "/app/my-payslips",
)

# Matched exactly, never as a prefix.
SHARED_ROUTES = ("/app", DASHBOARD_PATH)

ROUTE_TABLE = (
    (RouteGroup.PLATFORM, PLATFORM_ROUTES),
    (RouteGroup.COMPANY, COMPANY_ROUTES),
    (RouteGroup.SELF_SERVICE, SELF_SERVICE_ROUTES),
)

GROUP_ROLES = {
    RouteGroup.PLATFORM: frozenset({Role.PLATFORM_OWNER}),
    RouteGroup.COMPANY: frozenset({Role.PLATFORM_OWNER, Role.COMPANY_ADMIN}),
    RouteGroup.SELF_SERVICE: frozenset(Role),
    RouteGroup.SHARED: frozenset(Role),
}


def _normalize(route_path):
    if not isinstance(route_path, str) or not route_path:
        return ""
    path = route_path.split("?", 1)[0].split("#", 1)[0]
    if not path:
        return ""
    # "/app/my-profile/../employees" is "/app/employees".
    path = posixpath.normpath(path)
    if len(path) > 1:
        path = path.rstrip("/")
    return path


def _matches(path, prefix):
    return path == prefix or path.startswith(prefix + "/")


def classify_route(route_path):
    """Return the RouteGroup for a path, or None when it is not covered."""
    path = _normalize(route_path)
    if not path:
        return None
    if path in SHARED_ROUTES:
        return RouteGroup.SHARED

    best_group, best_length = None, -1
    for group, prefixes in ROUTE_TABLE:
        for prefix in prefixes:
            if _matches(path, prefix) and len(prefix) > best_length:
                best_group, best_length = group, len(prefix)
    return best_group


def allowed_roles_for(route_path):
    group = classify_route(route_path)
    if group is None:
        return frozenset()
    return GROUP_ROLES[group]


def can_access_route(role, route_path) -> bool:
    role = coerce_role(role)
    if role is None:
        return False
    return role in allowed_roles_for(route_path)


def dashboard_path_for(role):
    """Landing page for a role; anonymous actors go to the login page."""
    role = coerce_role(role)
    if role is None:
        return LOGIN_PATH
    if role == Role.PLATFORM_OWNER:
        return OWNER_DASHBOARD_PATH
    return DASHBOARD_PATH


NAVIGATION = {
    Role.PLATFORM_OWNER: [
        {"name": "Dashboard", "href": OWNER_DASHBOARD_PATH, "icon": "LayoutDashboard"},
        {"name": "Companies", "href": "/app/companies", "icon": "Building2"},
        {"name": "Subscriptions", "href": "/app/subscriptions", "icon": "CreditCard"},
        {"name": "System Config", "href": "/app/system-config", "icon": "Settings2"},
        {"name": "Analytics", "href": "/app/platform-analytics", "icon": "BarChart3"},
    ],
    Role.COMPANY_ADMIN: [
        {"name": "Dashboard", "href": DASHBOARD_PATH, "icon": "LayoutDashboard"},
        {"name": "Employees", "href": "/app/employees", "icon": "Users"},
        {"name": "Attendance", "href": "/app/attendance", "icon": "Clock"},
        {"name": "Leaves", "href": "/app/leaves", "icon": "Calendar"},
        {"name": "Payroll", "href": "/app/payroll", "icon": "Wallet"},
        {"name": "Reports", "href": "/app/reports", "icon": "FileText"},
        {"name": "Settings", "href": "/app/settings", "icon": "Settings"},
    ],
    Role.EMPLOYEE: [
        {"name": "Dashboard", "href": DASHBOARD_PATH, "icon": "LayoutDashboard"},
        {"name": "My Profile", "href": "/app/my-profile", "icon": "User"},
        {"name": "My Attendance", "href": "/app/my-attendance", "icon": "Clock"},
        {"name": "My Leaves", "href": "/app/my-leaves", "icon": "Calendar"},
        {"name": "My Payslips", "href": "/app/my-payslips", "icon": "Receipt"},
    ],
}


def navigation_for(role):
    """Menu entries for a role, as fresh dicts the caller may mutate."""
    role = coerce_role(role)
    if role is None:
        return []
    return [dict(item) for item in NAVIGATION[role]]
