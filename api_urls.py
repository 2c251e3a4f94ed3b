"""
API v1 URL routing.
All endpoints are prefixed with /api/v1/ via config/urls.py.
"""

from django.urls import path, include

from core.views_health import health_check, readiness_check

urlpatterns = [
    path("", include("core.urls")),
    path("auth/", include("accounts.urls")),
    path("access/", include("entitlements.urls")),

    # Health checks (public)
    path("health/", health_check, name="health-check"),
    path("health/ready/", readiness_check, name="readiness-check"),
]
