"""
JWT utilities for the mirart application.

Tokens are issued by the identity provider; this module only validates them
and mints signed tokens for tests and local tooling.
"""

import time

import jwt
from django.conf import settings


class JWTManager:
    """
    JWT Manager for token generation and validation.
    """

    def __init__(self):
        # Don't access settings immediately
        self._secret = None
        self._algorithm = None

    def _get_secret(self):
        if self._secret is None:
            self._secret = getattr(settings, 'JWT_SECRET', 'test_jwt_secret_key')
        return self._secret

    def _get_algorithm(self):
        if self._algorithm is None:
            self._algorithm = getattr(settings, 'JWT_ALGORITHM', 'HS256')
        return self._algorithm

    def generate_token(self, user_id, expires_in_hours=24, **claims):
        """
        Generate a signed token for ``user_id``.

        Extra keyword arguments become claims (``roles``, ``email``, ``name``).
        """
        now = int(time.time())
        payload = {
            'sub': user_id,
            'iat': now,
            'exp': now + (expires_in_hours * 3600),
        }
        audience = getattr(settings, 'JWT_AUDIENCE', None)
        issuer = getattr(settings, 'JWT_ISSUER', None)
        if audience:
            payload['aud'] = audience
        if issuer:
            payload['iss'] = issuer
        payload.update(claims)

        return jwt.encode(payload, self._get_secret(), algorithm=self._get_algorithm())

    def validate_token(self, token):
        """
        Validate a JWT token and return its payload.

        Raises:
            jwt.InvalidTokenError: If the token is invalid or expired
        """
        audience = getattr(settings, 'JWT_AUDIENCE', None)
        issuer = getattr(settings, 'JWT_ISSUER', None)
        options = {'require': ['sub', 'exp']}
        if not audience:
            options['verify_aud'] = False

        try:
            return jwt.decode(
                token,
                self._get_secret(),
                algorithms=[self._get_algorithm()],
                audience=audience,
                issuer=issuer,
                options=options,
            )
        except jwt.ExpiredSignatureError:
            raise jwt.InvalidTokenError("Token has expired")
        except jwt.InvalidTokenError as e:
            raise jwt.InvalidTokenError(f"Invalid token: {str(e)}")


_jwt_manager = None


def _get_jwt_manager():
    global _jwt_manager
    if _jwt_manager is None:
        _jwt_manager = JWTManager()
    return _jwt_manager


def generate_test_token(user_id, expires_in_hours=24, **claims):
    """Generate a test JWT token for the given user ID."""
    return _get_jwt_manager().generate_token(user_id, expires_in_hours, **claims)


def validate_jwt_token(token):
    """Validate a JWT token and return the payload."""
    return _get_jwt_manager().validate_token(token)
