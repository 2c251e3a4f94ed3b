import uuid
from datetime import timedelta

from django.conf import settings
from django.db import models, transaction
from django.utils import timezone

from entitlements.features import is_at_employee_limit, remaining_slots
from entitlements.plans import Tier, coerce_tier, plan_of


class Company(models.Model):
    """
    The tenant. Every company is an isolated workspace.
    All data (HR users, employees) belongs to a company.

    Account Status Flow:
        pending   - registered, awaiting platform approval
        trial     - approved, trial running
        active    - paid subscription active
        expired   - trial or subscription ended without payment
        suspended - suspended by the platform owner
        rejected  - application rejected
    """

    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        TRIAL = "trial", "Trial"
        ACTIVE = "active", "Active"
        EXPIRED = "expired", "Expired"
        SUSPENDED = "suspended", "Suspended"
        REJECTED = "rejected", "Rejected"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255)
    slug = models.SlugField(max_length=255, unique=True)
    email = models.EmailField()
    phone = models.CharField(max_length=20, blank=True)
    address = models.TextField(blank=True)
    tin = models.CharField(max_length=50, blank=True, help_text="Tax Identification Number")
    industry_type = models.CharField(max_length=100, blank=True)
    company_size = models.CharField(max_length=50, blank=True)

    status = models.CharField(
        max_length=20, choices=Status.choices, default=Status.PENDING
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = "companies"
        ordering = ["-created_at"]

    def __str__(self):
        return self.name

    @property
    def is_operational(self):
        return self.status in (self.Status.TRIAL, self.Status.ACTIVE)

    @property
    def tier(self):
        """Tier currently in force, or None when there is no usable subscription."""
        try:
            subscription = self.subscription
        except Subscription.DoesNotExist:
            return None
        return subscription.effective_tier

    @property
    def plan(self):
        """Plan derived live from the subscription tier; never stored on the company."""
        return plan_of(self.tier)

    @property
    def employee_count(self):
        return self.employees.filter(status=Employee.Status.ACTIVE).count()

    def is_at_employee_limit(self, current_count=None):
        if current_count is None:
            current_count = self.employee_count
        return is_at_employee_limit(self.tier, current_count)

    def remaining_employee_slots(self, current_count=None):
        if current_count is None:
            current_count = self.employee_count
        return remaining_slots(self.tier, current_count)


class Subscription(models.Model):
    """The single subscription a company holds at any time."""

    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        TRIAL = "trial", "Trial"
        ACTIVE = "active", "Active"
        CANCELLED = "cancelled", "Cancelled"
        EXPIRED = "expired", "Expired"
        SUSPENDED = "suspended", "Suspended"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    company = models.OneToOneField(
        Company, on_delete=models.CASCADE, related_name="subscription"
    )
    tier = models.CharField(max_length=20, choices=Tier.choices, default=Tier.STARTER)
    status = models.CharField(
        max_length=20, choices=Status.choices, default=Status.PENDING
    )

    start_date = models.DateTimeField(null=True, blank=True)
    end_date = models.DateTimeField(null=True, blank=True)
    trial_start_date = models.DateTimeField(null=True, blank=True)
    trial_end_date = models.DateTimeField(null=True, blank=True)
    last_payment_date = models.DateTimeField(null=True, blank=True)
    next_payment_due_date = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.company.name} - {self.tier} ({self.status})"

    @property
    def is_on_trial(self):
        if self.status != self.Status.TRIAL:
            return False
        if self.trial_end_date and self.trial_end_date < timezone.now():
            return False
        return True

    @property
    def is_active(self):
        if not self.company.is_operational:
            return False
        if self.status == self.Status.TRIAL:
            return self.is_on_trial
        if self.status == self.Status.ACTIVE:
            if self.end_date:
                return self.end_date > timezone.now()
            return True
        return False

    @property
    def effective_tier(self):
        if not self.is_active:
            return None
        return coerce_tier(self.tier)

    @property
    def has_lapsed(self):
        now = timezone.now()
        if self.status == self.Status.TRIAL:
            return bool(self.trial_end_date and self.trial_end_date < now)
        if self.status == self.Status.ACTIVE:
            return bool(self.end_date and self.end_date < now)
        return False

    def start_trial(self, days=None):
        days = days if days is not None else settings.TRIAL_DAYS
        now = timezone.now()
        self.status = self.Status.TRIAL
        self.trial_start_date = now
        self.trial_end_date = now + timedelta(days=days)
        self.start_date = self.start_date or now

    def change(self, tier=None, status=None):
        """
        Change tier and/or status in one transaction.

        Features follow the tier live, so once this commits every lookup sees
        the new plan and none sees a mix of the two.
        """
        with transaction.atomic():
            locked = Subscription.objects.select_for_update().get(pk=self.pk)
            if tier is not None:
                locked.tier = Tier(tier)
            if status is not None:
                locked.status = self.Status(status)
                if locked.status == self.Status.ACTIVE and not locked.start_date:
                    locked.start_date = timezone.now()
                if locked.status == self.Status.TRIAL and not locked.trial_end_date:
                    locked.start_trial()
            locked.save()

            company_status = {
                self.Status.TRIAL: Company.Status.TRIAL,
                self.Status.ACTIVE: Company.Status.ACTIVE,
                self.Status.EXPIRED: Company.Status.EXPIRED,
                self.Status.SUSPENDED: Company.Status.SUSPENDED,
            }.get(locked.status)
            if status is not None and company_status:
                Company.objects.filter(pk=locked.company_id).update(status=company_status)

        self.refresh_from_db()
        self.company.refresh_from_db()
        return self


class Employee(models.Model):
    """Roster entry counted against the plan's headcount quota."""

    class Status(models.TextChoices):
        ACTIVE = "active", "Active"
        INACTIVE = "inactive", "Inactive"
        RESIGNED = "resigned", "Resigned"
        TERMINATED = "terminated", "Terminated"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    company = models.ForeignKey(
        Company, on_delete=models.CASCADE, related_name="employees"
    )
    employee_number = models.CharField(max_length=50)
    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    email = models.EmailField(blank=True)
    department = models.CharField(max_length=100, blank=True)
    position = models.CharField(max_length=100, blank=True)
    status = models.CharField(
        max_length=20, choices=Status.choices, default=Status.ACTIVE
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["last_name", "first_name"]
        unique_together = [["company", "employee_number"]]

    def __str__(self):
        return f"{self.first_name} {self.last_name} ({self.employee_number})"
