"""
Health check endpoints for load balancers, Docker, and monitoring.

  GET /api/v1/health/       - Liveness: is the process running?
  GET /api/v1/health/ready/ - Readiness: can the app serve traffic?
"""

from django.db import connection
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework import status

from entitlements.plans import get_plan_catalog
from entitlements.providers import get_subscription_provider


@api_view(["GET"])
@permission_classes([AllowAny])
def health_check(request):
    """Liveness probe. Always returns 200 if the process is up."""
    return Response({"status": "healthy", "service": "sahod-hris-api"})


@api_view(["GET"])
@permission_classes([AllowAny])
def readiness_check(request):
    """
    Readiness probe. Checks the database and the entitlement configuration.
    Returns 503 if any of them is unavailable.
    """
    checks = {}
    all_ok = True

    # Database
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
        checks["database"] = "ok"
    except Exception as e:
        checks["database"] = f"error: {e}"
        all_ok = False

    # Subscription provider
    try:
        provider = get_subscription_provider()
        checks["subscription_provider"] = type(provider).__name__
    except ImportError as e:
        checks["subscription_provider"] = f"error: {e}"
        all_ok = False

    checks["plans"] = len(get_plan_catalog())

    http_status = status.HTTP_200_OK if all_ok else status.HTTP_503_SERVICE_UNAVAILABLE
    return Response({"status": "ready" if all_ok else "degraded", "checks": checks}, status=http_status)
