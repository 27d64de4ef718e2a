from django.conf import settings
from rest_framework.response import Response
from rest_framework.views import APIView

from mirart.exceptions import NotFound

from .directory import get_user_directory


class UserSearchView(APIView):
    def get(self, request):
        """Find people to start a conversation with"""
        query = request.GET.get('q', '').strip()
        try:
            limit = int(request.GET.get('limit', 10))
        except (TypeError, ValueError):
            limit = 10
        limit = max(1, min(limit, settings.USER_SEARCH_MAX_LIMIT))

        users = get_user_directory().search_users(query, limit, exclude_user_id=request.user_id)

        return Response({
            'users': users,
            'query': query,
            'total': len(users),
            'limit': limit,
        })


class UserIdentityView(APIView):
    def get(self, request, user_id):
        """Display identity for one user"""
        identity = get_user_directory().get_identity(user_id)
        if identity is None:
            raise NotFound('User not found')
        return Response(identity)
