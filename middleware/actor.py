"""
Actor Session Middleware.

Builds the ActorSession (role, company, employee) for every request and
attaches it as request.actor. Views and permission classes read the session
from the request instead of any global state; it is rebuilt from scratch on
the next request, so a role change or logout takes effect immediately.

Note: DRF's TokenAuthentication runs at the view level, not in middleware.
This middleware resolves the token manually so that request.actor is
available before the view runs.
"""

from entitlements.gate import ActorSession


def _resolve_user(request):
    """
    Return the authenticated user from either:
    - Django session (already set by AuthenticationMiddleware), or
    - DRF Authorization: Token <key> header.
    """
    user = getattr(request, "user", None)
    if user is not None and user.is_authenticated:
        return user

    auth_header = request.META.get("HTTP_AUTHORIZATION", "")
    if auth_header.startswith("Token "):
        from rest_framework.authtoken.models import Token

        key = auth_header[6:].strip()
        try:
            token_obj = Token.objects.select_related("user").get(key=key)
        except Token.DoesNotExist:
            return None
        if token_obj.user.is_active:
            return token_obj.user

    return None


class ActorSessionMiddleware:
    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        request.actor = ActorSession.from_user(_resolve_user(request))
        response = self.get_response(request)
        return response
