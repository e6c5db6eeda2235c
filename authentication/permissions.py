import hmac
import logging

from django.conf import settings
from rest_framework import permissions

from .exceptions import Unauthorized

logger = logging.getLogger(__name__)


def extract_token(request):
    """Accept ``Bearer <secret>`` or the bare secret in the Authorization header."""
    auth = request.META.get('HTTP_AUTHORIZATION', '')
    if not auth:
        return None
    if auth.startswith('Bearer '):
        return auth[len('Bearer '):].strip()
    return auth.strip()


class IsAdminToken(permissions.BasePermission):
    """
    Permission for admin mutations, checked against the ADMIN_PASSWORD setting.

    With no password configured the gate is open only while DEBUG is on.
    """
    message = Unauthorized.default_detail

    def has_permission(self, request, view):
        expected = getattr(settings, 'ADMIN_PASSWORD', '')
        if not expected:
            if settings.DEBUG:
                logger.warning("ADMIN_PASSWORD is not set; admin routes are open in DEBUG mode")
                return True
            logger.error("ADMIN_PASSWORD is not set; refusing admin request to %s", request.path)
            raise Unauthorized()

        token = extract_token(request)
        if not token or not hmac.compare_digest(token.encode(), expected.encode()):
            logger.warning("Rejected admin request %s %s", request.method, request.path)
            raise Unauthorized()
        return True


class AdminWritePermissionMixin:
    """Open reads, admin token for anything that mutates."""
    write_methods = ('POST', 'PUT', 'PATCH', 'DELETE')

    def get_permissions(self):
        if self.request.method in self.write_methods:
            return [IsAdminToken()]
        return [permissions.AllowAny()]
