import logging

import jwt
from django.conf import settings
from django.http import JsonResponse

from mirart.jwt_utils import validate_jwt_token

logger = logging.getLogger(__name__)


class JWTAuthMiddleware:
    """
    Attach the caller's identity to every request.

    A valid ``Authorization: Bearer <token>`` header sets ``request.user_id``,
    ``user_email``, ``user_name``, ``user_roles`` and ``is_authenticated``.
    """

    # URLs that don't require authentication
    exempt_urls = [
        '/ping/',
        '/admin/',
        '/static/',
    ]

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        if self._is_exempt_url(request.path):
            return self.get_response(request)

        auth_header = request.META.get('HTTP_AUTHORIZATION', '')

        if auth_header.startswith('Bearer '):
            token = auth_header.split(' ', 1)[1].strip()
            try:
                payload = validate_jwt_token(token)
            except jwt.InvalidTokenError as e:
                logger.warning(f"Rejected bearer token: {e}")
                return JsonResponse({'error': str(e), 'code': 'not_authenticated'}, status=401)

            self._set_identity(
                request,
                user_id=str(payload['sub']),
                email=payload.get('email'),
                name=payload.get('name'),
                roles=payload.get('roles', []),
            )
        elif settings.DEBUG and getattr(settings, 'ALLOW_DEV_USER', False):
            self._set_identity(request, user_id=settings.DEV_USER_ID, roles=[])
        else:
            return JsonResponse({'error': 'Authentication required', 'code': 'not_authenticated'}, status=401)

        return self.get_response(request)

    def _set_identity(self, request, user_id, email=None, name=None, roles=None):
        request.user_id = user_id
        request.user_email = email or ''
        request.user_name = name or ''
        request.user_roles = list(roles or [])
        request.is_authenticated = True

    def _is_exempt_url(self, path):
        """Check if the URL path is exempt from authentication"""
        for exempt_url in self.exempt_urls:
            if path.startswith(exempt_url):
                return True
        return False
