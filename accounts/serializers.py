from rest_framework import serializers

from entitlements.roles import ROLE_DISPLAY_NAMES
from .models import User


class UserSerializer(serializers.ModelSerializer):
    role_display = serializers.SerializerMethodField()
    company_name = serializers.CharField(source="company.name", read_only=True, default=None)

    class Meta:
        model = User
        fields = [
            "id", "email", "phone", "full_name", "role", "role_display",
            "company", "company_name", "employee",
            "is_active", "created_at", "last_login_ip",
        ]
        read_only_fields = fields

    def get_role_display(self, obj):
        return ROLE_DISPLAY_NAMES.get(obj.role, "")


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)
