from django.contrib import admin
from .models import Company, Subscription, Employee


class SubscriptionInline(admin.StackedInline):
    model = Subscription
    can_delete = False
    extra = 0


@admin.register(Company)
class CompanyAdmin(admin.ModelAdmin):
    list_display = ["name", "slug", "email", "status", "created_at"]
    list_filter = ["status"]
    search_fields = ["name", "email", "slug", "tin"]
    readonly_fields = ["id", "created_at", "updated_at"]
    prepopulated_fields = {"slug": ("name",)}
    inlines = [SubscriptionInline]


@admin.register(Subscription)
class SubscriptionAdmin(admin.ModelAdmin):
    list_display = ["company", "tier", "status", "trial_end_date", "end_date", "updated_at"]
    list_filter = ["tier", "status"]
    search_fields = ["company__name"]
    readonly_fields = ["id", "created_at", "updated_at"]


@admin.register(Employee)
class EmployeeAdmin(admin.ModelAdmin):
    list_display = ["employee_number", "last_name", "first_name", "company", "department", "status"]
    list_filter = ["status", "department"]
    search_fields = ["employee_number", "first_name", "last_name", "email", "company__name"]
    raw_id_fields = ["company"]
