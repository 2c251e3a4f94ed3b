from rest_framework import serializers

from entitlements.features import employee_limit_text, enabled_features, format_price
from entitlements.plans import FEATURE_CATEGORIES, Tier
from .models import Company, Subscription, Employee


class PlanSerializer(serializers.Serializer):
    """Read-only view of a PlanInfo from the plan catalog."""

    tier = serializers.CharField()
    name = serializers.CharField()
    description = serializers.CharField()
    monthly_price = serializers.IntegerField()
    yearly_price = serializers.IntegerField()
    monthly_price_display = serializers.SerializerMethodField()
    employee_limit = serializers.IntegerField()
    employee_limit_text = serializers.SerializerMethodField()
    popular = serializers.BooleanField()
    features = serializers.SerializerMethodField()
    enabled_features = serializers.SerializerMethodField()

    def get_monthly_price_display(self, plan):
        return format_price(plan.monthly_price)

    def get_employee_limit_text(self, plan):
        return employee_limit_text(plan.employee_limit)

    def get_features(self, plan):
        return plan.features.as_dict()

    def get_enabled_features(self, plan):
        return list(enabled_features(plan.tier))


def feature_categories():
    return [
        {
            "key": category["key"],
            "name": category["name"],
            "icon": category["icon"],
            "features": [
                {"key": feature.value, "label": feature.label}
                for feature in category["features"]
            ],
        }
        for category in FEATURE_CATEGORIES
    ]


class SubscriptionSerializer(serializers.ModelSerializer):
    is_active = serializers.BooleanField(read_only=True)
    is_on_trial = serializers.BooleanField(read_only=True)

    class Meta:
        model = Subscription
        fields = [
            "id", "tier", "status", "is_active", "is_on_trial",
            "start_date", "end_date", "trial_start_date", "trial_end_date",
            "last_payment_date", "next_payment_due_date",
            "created_at", "updated_at",
        ]
        read_only_fields = fields


class SubscriptionUpdateSerializer(serializers.Serializer):
    tier = serializers.ChoiceField(choices=Tier.choices, required=False)
    status = serializers.ChoiceField(choices=Subscription.Status.choices, required=False)

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError("Provide a tier or a status.")
        return attrs


class CompanySerializer(serializers.ModelSerializer):
    subscription = SubscriptionSerializer(read_only=True)
    tier = serializers.CharField(read_only=True, allow_null=True)
    plan_name = serializers.CharField(source="plan.name", read_only=True)
    employee_limit = serializers.IntegerField(source="plan.employee_limit", read_only=True)
    employee_count = serializers.IntegerField(read_only=True)

    class Meta:
        model = Company
        fields = [
            "id", "name", "slug", "email", "phone", "address", "tin",
            "industry_type", "company_size", "status",
            "subscription", "tier", "plan_name",
            "employee_limit", "employee_count",
            "created_at", "updated_at",
        ]
        read_only_fields = ["id", "slug", "status", "created_at", "updated_at"]


class EmployeeSerializer(serializers.ModelSerializer):
    class Meta:
        model = Employee
        fields = [
            "id", "company", "employee_number", "first_name", "last_name",
            "email", "department", "position", "status",
            "created_at", "updated_at",
        ]
        read_only_fields = ["id", "company", "created_at", "updated_at"]
