"""
Chat error taxonomy and the REST framework exception handler.

Every API error is rendered as ``{"error": <message>, "code": <code>}`` so
clients can branch on ``code`` without parsing messages.
"""

import logging
from functools import wraps

from django.db import InterfaceError, OperationalError
from rest_framework import status
from rest_framework.exceptions import APIException, ValidationError
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class ChatError(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Chat request failed.'
    default_code = 'chat_error'


class InvalidParticipant(ChatError):
    default_detail = 'You cannot start a conversation with yourself.'
    default_code = 'invalid_participant'


class NotParticipant(ChatError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = 'You are not a participant in this conversation.'
    default_code = 'not_participant'


class EmptyMessage(ChatError):
    default_detail = 'Message cannot be empty.'
    default_code = 'empty_message'


class NotFound(ChatError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Not found.'
    default_code = 'not_found'


class TransientIOFailure(ChatError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = 'The message store is temporarily unavailable.'
    default_code = 'transient_io_failure'


def api_exception_handler(exc, context):
    response = exception_handler(exc, context)
    if response is None:
        return None

    if isinstance(exc, ValidationError):
        response.data = {
            'error': 'Invalid request',
            'code': 'invalid',
            'details': response.data,
        }
        return response

    detail = response.data.get('detail') if isinstance(response.data, dict) else None
    if detail is not None:
        response.data = {
            'error': str(detail),
            'code': getattr(detail, 'code', 'error'),
        }
    return response


def transient_on_db_error(func):
    """Re-raise database connectivity errors as TransientIOFailure."""
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (OperationalError, InterfaceError) as e:
            logger.error(f"{func.__qualname__} failed: {e}")
            raise TransientIOFailure() from e
    return wrapper
