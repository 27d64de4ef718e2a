from django.conf import settings
from rest_framework.permissions import BasePermission


class IsSupportOperator(BasePermission):
    """Allows access to identities carrying the support operator role."""

    message = 'Support operator access required'

    def has_permission(self, request, view):
        if not getattr(request, 'is_authenticated', False):
            return False

        user_roles = getattr(request, 'user_roles', [])
        return settings.SUPPORT_OPERATOR_ROLE in user_roles
