from django.contrib.auth import authenticate
from rest_framework import status, permissions
from rest_framework.authtoken.models import Token
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from entitlements.access import dashboard_path_for, navigation_for
from entitlements.gate import ActorSession
from entitlements.roles import permissions_of
from .serializers import UserSerializer, LoginSerializer


def _session_payload(user):
    """Everything the web client needs to render the shell for ``user``."""
    actor = ActorSession.from_user(user)
    return {
        "user": UserSerializer(user).data,
        "session": {
            "role": actor.role,
            "company_id": actor.company_id,
            "employee_id": actor.employee_id,
        },
        "permissions": permissions_of(actor.role).as_dict(),
        "navigation": navigation_for(actor.role),
        "dashboard_path": dashboard_path_for(actor.role),
    }


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------
@api_view(["POST"])
@permission_classes([permissions.AllowAny])
def login(request):
    """Login with email/password. Returns a token and the actor session."""
    serializer = LoginSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    user = authenticate(request, email=data["email"], password=data["password"])
    if not user:
        return Response(
            {"error": "Invalid email or password."},
            status=status.HTTP_401_UNAUTHORIZED,
        )

    if not user.is_active:
        return Response(
            {"error": "Account is deactivated."},
            status=status.HTTP_403_FORBIDDEN,
        )

    # Update last login IP
    ip = request.META.get("HTTP_X_FORWARDED_FOR", request.META.get("REMOTE_ADDR", ""))
    if ip:
        ip = ip.split(",")[0].strip()
        user.last_login_ip = ip
        user.save(update_fields=["last_login_ip"])

    token, _ = Token.objects.get_or_create(user=user)
    return Response({"token": token.key, **_session_payload(user)})


@api_view(["POST"])
def logout(request):
    """Delete auth token."""
    Token.objects.filter(user=request.user).delete()
    return Response({"message": "Logged out."})


@api_view(["GET"])
def me(request):
    """Current user with role permissions, navigation and landing page."""
    return Response(_session_payload(request.user))
