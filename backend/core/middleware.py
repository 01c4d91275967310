"""
Custom middleware for the Subscription Platform.
"""
import logging
import time
import uuid

from django.conf import settings
from django.utils.deprecation import MiddlewareMixin

logger = logging.getLogger(__name__)


class SecurityHeadersMiddleware(MiddlewareMixin):
    """Add security headers to every response."""

    def process_response(self, request, response):
        response['X-Content-Type-Options'] = 'nosniff'
        response['X-Frame-Options'] = 'DENY'
        response['Referrer-Policy'] = 'strict-origin-when-cross-origin'

        # The API only serves JSON plus a static landing page
        if not settings.DEBUG:
            response['Content-Security-Policy'] = (
                "default-src 'self'; "
                "img-src 'self' data: https:; "
                "frame-ancestors 'none';"
            )

        return response


class RequestAuditMiddleware(MiddlewareMixin):
    """
    Tag each request with a correlation id and log who did what.
    The id comes from X-Request-ID when the caller (or the gateway) sends one.
    """

    def process_request(self, request):
        request.correlation_id = request.headers.get('X-Request-ID') or str(uuid.uuid4())
        request._audit_timestamp = time.time()
        return None

    def process_view(self, request, view_func, view_args, view_kwargs):
        request._audit_view = getattr(view_func, '__name__', 'unknown')
        return None

    def process_response(self, request, response):
        correlation_id = getattr(request, 'correlation_id', None)
        if correlation_id:
            response['X-Request-ID'] = correlation_id

        user = getattr(request, 'user', None)
        elapsed_ms = (time.time() - getattr(request, '_audit_timestamp', time.time())) * 1000
        logger.debug(
            f"[{correlation_id}] {request.method} {request.path} -> {response.status_code} "
            f"view={getattr(request, '_audit_view', 'unknown')} "
            f"user={user.email if user is not None and user.is_authenticated else 'anonymous'} "
            f"({elapsed_ms:.1f} ms)"
        )
        return response
