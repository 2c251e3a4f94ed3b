"""
Role catalog.

Role Hierarchy:
    platform_owner  - Platform level (SaaS operator, manages all companies)
    company_admin   - Company level (HR administrator, manages one company)
    employee        - Employee level (self-service, own data only)

Every role maps to exactly one PermissionSet. Anything that is not a known
role (including an anonymous actor) resolves to NO_PERMISSIONS.
"""

from dataclasses import dataclass, fields

from django.core.exceptions import ImproperlyConfigured
from django.db import models


class Role(models.TextChoices):
    PLATFORM_OWNER = "platform_owner", "Platform Owner"
    COMPANY_ADMIN = "company_admin", "HR Administrator"
    EMPLOYEE = "employee", "Employee"


class Permission(models.TextChoices):
    # Platform
    MANAGE_COMPANIES = "can_manage_companies", "Manage companies"
    MANAGE_SUBSCRIPTIONS = "can_manage_subscriptions", "Manage subscriptions"
    MANAGE_SYSTEM_CONFIG = "can_manage_system_config", "Manage system configuration"
    VIEW_PLATFORM_ANALYTICS = "can_view_platform_analytics", "View platform analytics"

    # Company
    MANAGE_EMPLOYEES = "can_manage_employees", "Manage employees"
    MANAGE_ATTENDANCE = "can_manage_attendance", "Manage attendance"
    MANAGE_PAYROLL = "can_manage_payroll", "Manage payroll"
    MANAGE_LEAVES = "can_manage_leaves", "Manage leaves"
    VIEW_REPORTS = "can_view_reports", "View reports"
    MANAGE_COMPANY_SETTINGS = "can_manage_company_settings", "Manage company settings"

    # Self-service
    VIEW_OWN_PROFILE = "can_view_own_profile", "View own profile"
    VIEW_OWN_ATTENDANCE = "can_view_own_attendance", "View own attendance"
    FILE_LEAVE_REQUEST = "can_file_leave_request", "File leave requests"
    VIEW_OWN_PAYSLIPS = "can_view_own_payslips", "View own payslips"


@dataclass(frozen=True)
class PermissionSet:
    """Fixed-shape record with one flag per Permission."""

    can_manage_companies: bool = False
    can_manage_subscriptions: bool = False
    can_manage_system_config: bool = False
    can_view_platform_analytics: bool = False

    can_manage_employees: bool = False
    can_manage_attendance: bool = False
    can_manage_payroll: bool = False
    can_manage_leaves: bool = False
    can_view_reports: bool = False
    can_manage_company_settings: bool = False

    can_view_own_profile: bool = False
    can_view_own_attendance: bool = False
    can_file_leave_request: bool = False
    can_view_own_payslips: bool = False

    @classmethod
    def granting(cls, *permissions):
        return cls(**{Permission(p).value: True for p in permissions})

    def allows(self, permission) -> bool:
        try:
            permission = Permission(permission)
        except (ValueError, TypeError):
            return False
        return getattr(self, permission.value)

    def granted(self):
        """Granted permissions, in declaration order."""
        return tuple(p for p in Permission if getattr(self, p.value))

    def as_dict(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}


NO_PERMISSIONS = PermissionSet()

ROLE_PERMISSIONS: dict[Role, PermissionSet] = {
    Role.PLATFORM_OWNER: PermissionSet.granting(
        Permission.MANAGE_COMPANIES,
        Permission.MANAGE_SUBSCRIPTIONS,
        Permission.MANAGE_SYSTEM_CONFIG,
        Permission.VIEW_PLATFORM_ANALYTICS,
        Permission.VIEW_REPORTS,
        Permission.VIEW_OWN_PROFILE,
    ),
    Role.COMPANY_ADMIN: PermissionSet.granting(
        Permission.MANAGE_EMPLOYEES,
        Permission.MANAGE_ATTENDANCE,
        Permission.MANAGE_PAYROLL,
        Permission.MANAGE_LEAVES,
        Permission.VIEW_REPORTS,
        Permission.MANAGE_COMPANY_SETTINGS,
        Permission.VIEW_OWN_PROFILE,
        Permission.VIEW_OWN_ATTENDANCE,
        Permission.FILE_LEAVE_REQUEST,
        Permission.VIEW_OWN_PAYSLIPS,
    ),
    Role.EMPLOYEE: PermissionSet.granting(
        Permission.VIEW_OWN_PROFILE,
        Permission.VIEW_OWN_ATTENDANCE,
        Permission.FILE_LEAVE_REQUEST,
        Permission.VIEW_OWN_PAYSLIPS,
    ),
}

ROLE_DISPLAY_NAMES = {
    Role.PLATFORM_OWNER: "System Owner",
    Role.COMPANY_ADMIN: "HR Administrator",
    Role.EMPLOYEE: "Employee",
}

ROLE_DESCRIPTIONS = {
    Role.PLATFORM_OWNER: "Full platform access. Manages all companies and system configuration.",
    Role.COMPANY_ADMIN: "Company-level access. Manages employees, payroll, attendance, and reports.",
    Role.EMPLOYEE: "Self-service access. View profile, attendance, leaves, and payslips.",
}


def check_role_catalog(role_permissions=None):
    """Raise ImproperlyConfigured when a Permission or a Role is missing from the tables."""
    table = ROLE_PERMISSIONS if role_permissions is None else role_permissions
    if {f.name for f in fields(PermissionSet)} != set(Permission.values):
        raise ImproperlyConfigured("PermissionSet fields and Permission members are out of sync")
    missing = [role.value for role in Role if role not in table]
    if missing:
        raise ImproperlyConfigured(f"Roles without a PermissionSet: {', '.join(missing)}")


# Adding a Permission or Role without updating the tables above fails at import.
check_role_catalog()


def coerce_role(role):
    """Return the Role for ``role`` (member or value), or None if unknown."""
    if isinstance(role, Role):
        return role
    try:
        return Role(role)
    except (ValueError, TypeError):
        return None


def permissions_of(role) -> PermissionSet:
    """Default permissions for a role. Unknown or missing roles get nothing."""
    role = coerce_role(role)
    if role is None:
        return NO_PERMISSIONS
    return ROLE_PERMISSIONS[role]


def has_permission(role, permission) -> bool:
    return permissions_of(role).allows(permission)
