"""
Subscription plan catalog.

Defines which features are available per subscription tier. Companies only
see and use features their active tier includes; the matrix is looked up
live from the tier every time, never copied onto a company.

Feature values are booleans (on/off), the ``max_employees`` headcount quota
(-1 means unlimited) or a support level / response time string.
"""

from dataclasses import dataclass, fields, replace
from functools import lru_cache

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.core.signals import setting_changed
from django.db import models
from django.dispatch import receiver

UNLIMITED = -1

DEFAULT_MONTHLY_PRICE = 1399
DEFAULT_YEARLY_PRICE = 15588


class Tier(models.TextChoices):
    STARTER = "starter", "Starter"
    PROFESSIONAL = "professional", "Professional"
    ENTERPRISE = "enterprise", "Enterprise"


class SupportLevel(models.TextChoices):
    EMAIL = "email", "Email"
    PRIORITY = "priority", "Priority"
    DEDICATED = "dedicated", "Dedicated"


class Feature(models.TextChoices):
    # Employee management
    MAX_EMPLOYEES = "max_employees", "Employee limit"
    EMPLOYEE_PROFILES = "employee_profiles", "Employee Profiles & 201 Files"
    DOCUMENT_STORAGE = "document_storage", "Document Storage"
    ORGANIZATION_CHART = "organization_chart", "Organization Chart"

    # Attendance & time
    ATTENDANCE_TRACKING = "attendance_tracking", "Attendance Tracking"
    OVERTIME_COMPUTATION = "overtime_computation", "Overtime Computation"
    SHIFT_SCHEDULING = "shift_scheduling", "Shift Scheduling"
    BIOMETRIC_INTEGRATION = "biometric_integration", "Biometric Integration"

    # Leave management
    LEAVE_MANAGEMENT = "leave_management", "Leave Requests"
    LEAVE_APPROVAL_WORKFLOW = "leave_approval_workflow", "Approval Workflow"
    CUSTOM_LEAVE_TYPES = "custom_leave_types", "Custom Leave Types"
    LEAVE_CREDITS_MANAGEMENT = "leave_credits_management", "Leave Credits Management"

    # Payroll
    BASIC_PAYROLL = "basic_payroll", "Basic Payroll Processing"
    ADVANCED_PAYROLL = "advanced_payroll", "Advanced Payroll (OT, Night Diff)"
    AUTOMATIC_DEDUCTIONS = "automatic_deductions", "Automatic Deductions"
    BONUS_MANAGEMENT = "bonus_management", "Bonus Management"
    LOAN_MANAGEMENT = "loan_management", "Loan & Cash Advance"
    THIRTEENTH_MONTH_PAY = "thirteenth_month_pay", "13th Month Pay Computation"

    # Government compliance
    SSS_COMPUTATION = "sss_computation", "SSS Computation"
    PHILHEALTH_COMPUTATION = "philhealth_computation", "PhilHealth Computation"
    PAGIBIG_COMPUTATION = "pagibig_computation", "Pag-IBIG Computation"
    BIR_TAX_COMPUTATION = "bir_tax_computation", "BIR Withholding Tax Computation"
    GOVERNMENT_REPORTS = "government_reports", "Government Reports Generation"

    # Reports
    BASIC_REPORTS = "basic_reports", "Basic Reports"
    ADVANCED_REPORTS = "advanced_reports", "Advanced Analytics"
    CUSTOM_REPORTS = "custom_reports", "Custom Report Builder"
    EXPORT_TO_PDF = "export_to_pdf", "Export to PDF"
    EXPORT_TO_EXCEL = "export_to_excel", "Export to Excel"
    SCHEDULED_REPORTS = "scheduled_reports", "Scheduled Reports"

    # Additional
    MULTI_BRANCH = "multi_branch", "Multi-Branch Support"
    API_ACCESS = "api_access", "API Access"
    AUDIT_TRAIL = "audit_trail", "Audit Trail"
    DATA_BACKUP = "data_backup", "Automatic Data Backup"
    CUSTOM_BRANDING = "custom_branding", "Custom Branding"

    # Support
    SUPPORT_LEVEL = "support_level", "Support Level"
    SUPPORT_RESPONSE_TIME = "support_response_time", "Support Response Time"


@dataclass(frozen=True)
class FeatureMatrix:
    max_employees: int = 0
    employee_profiles: bool = False
    document_storage: bool = False
    organization_chart: bool = False

    attendance_tracking: bool = False
    overtime_computation: bool = False
    shift_scheduling: bool = False
    biometric_integration: bool = False

    leave_management: bool = False
    leave_approval_workflow: bool = False
    custom_leave_types: bool = False
    leave_credits_management: bool = False

    basic_payroll: bool = False
    advanced_payroll: bool = False
    automatic_deductions: bool = False
    bonus_management: bool = False
    loan_management: bool = False
    thirteenth_month_pay: bool = False

    sss_computation: bool = False
    philhealth_computation: bool = False
    pagibig_computation: bool = False
    bir_tax_computation: bool = False
    government_reports: bool = False

    basic_reports: bool = False
    advanced_reports: bool = False
    custom_reports: bool = False
    export_to_pdf: bool = False
    export_to_excel: bool = False
    scheduled_reports: bool = False

    multi_branch: bool = False
    api_access: bool = False
    audit_trail: bool = False
    data_backup: bool = False
    custom_branding: bool = False

    support_level: SupportLevel | None = None
    support_response_time: str | None = None

    def value_of(self, feature):
        return getattr(self, Feature(feature).value)

    def items(self):
        """(name, value) pairs in definition order."""
        return [(f.name, getattr(self, f.name)) for f in fields(self)]

    def as_dict(self) -> dict:
        return dict(self.items())


@dataclass(frozen=True)
class PlanInfo:
    tier: Tier | None
    name: str
    description: str
    monthly_price: int
    yearly_price: int
    employee_limit: int
    features: FeatureMatrix
    popular: bool = False

    @property
    def is_unlimited(self):
        return self.employee_limit == UNLIMITED


# Fail-closed matrix for anything that is not a known tier.
DENY_ALL = FeatureMatrix()

NO_PLAN = PlanInfo(
    tier=None,
    name="No Plan",
    description="",
    monthly_price=0,
    yearly_price=0,
    employee_limit=0,
    features=DENY_ALL,
)


def check_feature_matrix():
    if [f.name for f in fields(FeatureMatrix)] != list(Feature.values):
        raise ImproperlyConfigured("FeatureMatrix fields and Feature members are out of sync")


check_feature_matrix()


def _camel(name):
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


# Legacy camelCase keys ("multiBranch", "maxEmployees") used by the web client.
FEATURE_ALIASES = {_camel(feature.value): feature for feature in Feature}


def coerce_feature(key):
    """Return the Feature for an enum member, value or camelCase alias."""
    if isinstance(key, Feature):
        return key
    try:
        return Feature(key)
    except (ValueError, TypeError):
        pass
    if isinstance(key, str):
        return FEATURE_ALIASES.get(key)
    return None


def coerce_tier(tier):
    if isinstance(tier, Tier):
        return tier
    try:
        return Tier(tier)
    except (ValueError, TypeError):
        return None


def build_plan_catalog(
    monthly_price=DEFAULT_MONTHLY_PRICE,
    yearly_price=DEFAULT_YEARLY_PRICE,
    bir_tax_enabled=False,
):
    """Complete feature definitions per tier."""
    starter = FeatureMatrix(
        max_employees=10,
        employee_profiles=True,
        attendance_tracking=True,
        leave_management=True,
        leave_approval_workflow=True,
        basic_payroll=True,
        automatic_deductions=True,
        thirteenth_month_pay=True,
        sss_computation=True,
        philhealth_computation=True,
        pagibig_computation=True,
        bir_tax_computation=bool(bir_tax_enabled),
        basic_reports=True,
        export_to_pdf=True,
        support_level=SupportLevel.EMAIL,
        support_response_time="48 hours",
    )
    professional = replace(
        starter,
        max_employees=50,
        document_storage=True,
        organization_chart=True,
        overtime_computation=True,
        shift_scheduling=True,
        custom_leave_types=True,
        leave_credits_management=True,
        advanced_payroll=True,
        bonus_management=True,
        loan_management=True,
        bir_tax_computation=True,
        government_reports=True,
        advanced_reports=True,
        export_to_excel=True,
        audit_trail=True,
        data_backup=True,
        support_level=SupportLevel.PRIORITY,
        support_response_time="24 hours",
    )
    enterprise = replace(
        professional,
        max_employees=UNLIMITED,
        biometric_integration=True,
        custom_reports=True,
        scheduled_reports=True,
        multi_branch=True,
        api_access=True,
        custom_branding=True,
        support_level=SupportLevel.DEDICATED,
        support_response_time="4 hours",
    )

    return {
        Tier.STARTER: PlanInfo(
            tier=Tier.STARTER,
            name="Starter",
            description="Perfect for small businesses getting started with HR automation",
            monthly_price=monthly_price,
            yearly_price=yearly_price,
            employee_limit=starter.max_employees,
            features=starter,
        ),
        Tier.PROFESSIONAL: PlanInfo(
            tier=Tier.PROFESSIONAL,
            name="Professional",
            description="Ideal for growing companies with advanced HR needs",
            monthly_price=monthly_price,
            yearly_price=yearly_price,
            employee_limit=professional.max_employees,
            features=professional,
            popular=True,
        ),
        Tier.ENTERPRISE: PlanInfo(
            tier=Tier.ENTERPRISE,
            name="Enterprise",
            description="For large organizations with custom requirements",
            monthly_price=monthly_price,
            yearly_price=yearly_price,
            employee_limit=enterprise.max_employees,
            features=enterprise,
        ),
    }


def check_plan_catalog(catalog):
    """Raise ImproperlyConfigured unless every Tier has a plan."""
    missing = [tier.value for tier in Tier if tier not in catalog]
    if missing:
        raise ImproperlyConfigured(f"Tiers without a plan: {', '.join(missing)}")


@lru_cache(maxsize=None)
def get_plan_catalog():
    """The catalog priced and flagged from settings."""
    catalog = build_plan_catalog(
        monthly_price=getattr(settings, "PLAN_MONTHLY_PRICE", DEFAULT_MONTHLY_PRICE),
        yearly_price=getattr(settings, "PLAN_YEARLY_PRICE", DEFAULT_YEARLY_PRICE),
        bir_tax_enabled=getattr(settings, "ENABLE_BIR_TAX", False),
    )
    check_plan_catalog(catalog)
    return catalog


@receiver(setting_changed)
def _reset_plan_catalog(setting, **kwargs):
    if setting in ("PLAN_MONTHLY_PRICE", "PLAN_YEARLY_PRICE", "ENABLE_BIR_TAX"):
        get_plan_catalog.cache_clear()


def plan_of(tier) -> PlanInfo:
    """Plan for a tier. Unknown tiers resolve to NO_PLAN (deny-all, quota 0)."""
    tier = coerce_tier(tier)
    if tier is None:
        return NO_PLAN
    return get_plan_catalog()[tier]


def all_plans():
    """Known plans, cheapest tier first."""
    catalog = get_plan_catalog()
    return [catalog[tier] for tier in Tier]


FEATURE_CATEGORIES = [
    {
        "key": "employees",
        "name": "Employee Management",
        "icon": "Users",
        "features": [
            Feature.EMPLOYEE_PROFILES,
            Feature.DOCUMENT_STORAGE,
            Feature.ORGANIZATION_CHART,
        ],
    },
    {
        "key": "attendance",
        "name": "Attendance & Time",
        "icon": "Clock",
        "features": [
            Feature.ATTENDANCE_TRACKING,
            Feature.OVERTIME_COMPUTATION,
            Feature.SHIFT_SCHEDULING,
            Feature.BIOMETRIC_INTEGRATION,
        ],
    },
    {
        "key": "leaves",
        "name": "Leave Management",
        "icon": "Calendar",
        "features": [
            Feature.LEAVE_MANAGEMENT,
            Feature.LEAVE_APPROVAL_WORKFLOW,
            Feature.CUSTOM_LEAVE_TYPES,
            Feature.LEAVE_CREDITS_MANAGEMENT,
        ],
    },
    {
        "key": "payroll",
        "name": "Payroll",
        "icon": "Wallet",
        "features": [
            Feature.BASIC_PAYROLL,
            Feature.ADVANCED_PAYROLL,
            Feature.BONUS_MANAGEMENT,
            Feature.LOAN_MANAGEMENT,
            Feature.THIRTEENTH_MONTH_PAY,
        ],
    },
    {
        "key": "compliance",
        "name": "Government Compliance",
        "icon": "Shield",
        "features": [
            Feature.SSS_COMPUTATION,
            Feature.PHILHEALTH_COMPUTATION,
            Feature.PAGIBIG_COMPUTATION,
            Feature.GOVERNMENT_REPORTS,
        ],
    },
    {
        "key": "reports",
        "name": "Reports & Analytics",
        "icon": "FileText",
        "features": [
            Feature.BASIC_REPORTS,
            Feature.ADVANCED_REPORTS,
            Feature.CUSTOM_REPORTS,
            Feature.EXPORT_TO_PDF,
            Feature.EXPORT_TO_EXCEL,
            Feature.SCHEDULED_REPORTS,
        ],
    },
    {
        "key": "additional",
        "name": "Additional Features",
        "icon": "Settings",
        "features": [
            Feature.MULTI_BRANCH,
            Feature.API_ACCESS,
            Feature.AUDIT_TRAIL,
            Feature.DATA_BACKUP,
            Feature.CUSTOM_BRANDING,
        ],
    },
]
