import logging
from typing import Dict, Iterable, List, Optional

from django.conf import settings
from django.core.cache import cache
from django.db.models import Q

from .models import User

logger = logging.getLogger(__name__)


class UserDirectory:
    """Looks up users for search and for rendering conversation summaries"""

    MIN_QUERY_LENGTH = 2

    def _safe_cache_get(self, key: str):
        """Safely get from cache, return None if the cache backend is unavailable"""
        try:
            return cache.get(key)
        except Exception as e:
            logger.warning(f"Cache read failed for {key}: {e}")
            return None

    def _safe_cache_set(self, key: str, value, timeout: int):
        """Safely set cache, ignore if the cache backend is unavailable"""
        try:
            cache.set(key, value, timeout)
        except Exception as e:
            logger.warning(f"Cache write failed for {key}: {e}")

    def search_users(self, query: str, limit: int = 10, exclude_user_id: Optional[str] = None) -> List[Dict]:
        """Search active users by username, name, business name or email

        Args:
            query: Search query string
            limit: Maximum number of results (capped at USER_SEARCH_MAX_LIMIT)
            exclude_user_id: The searching user, never part of the results
        """
        query = (query or '').strip()
        limit = max(1, min(limit, settings.USER_SEARCH_MAX_LIMIT))

        if len(query) < self.MIN_QUERY_LENGTH:
            return []

        cache_key = f"user_search:{query.lower()}:{limit}:{exclude_user_id or ''}"
        cached_results = self._safe_cache_get(cache_key)
        if cached_results is not None:
            return cached_results

        users = User.objects.filter(is_active=True).filter(
            Q(username__icontains=query)
            | Q(first_name__icontains=query)
            | Q(last_name__icontains=query)
            | Q(business_name__icontains=query)
            | Q(email__icontains=query)
        )
        if exclude_user_id:
            users = users.exclude(user_id=exclude_user_id)

        results = [self.format_user(user) for user in users.order_by('username')[:limit]]
        self._safe_cache_set(cache_key, results, settings.USER_SEARCH_CACHE_TTL)
        return results

    def get_identity(self, user_id: str) -> Optional[Dict]:
        """Display identity for one user, or None when the user is unknown"""
        return self.get_identities([user_id]).get(user_id)

    def get_identities(self, user_ids: Iterable[str]) -> Dict[str, Dict]:
        """Display identities keyed by user id; unknown ids are left out"""
        ids = {user_id for user_id in user_ids if user_id}
        if not ids:
            return {}
        return {user.user_id: self.format_user(user) for user in User.objects.filter(user_id__in=ids)}

    def exists(self, user_id: str) -> bool:
        return User.objects.filter(user_id=user_id, is_active=True).exists()

    def format_user(self, user: User) -> Dict:
        return {
            'id': user.user_id,
            'username': user.username,
            'display_name': user.display_name,
            'email': user.email or '',
            'avatar_url': user.avatar_url or None,
        }


_user_directory = None


def get_user_directory() -> UserDirectory:
    """Get global user directory instance"""
    global _user_directory
    if _user_directory is None:
        _user_directory = UserDirectory()
    return _user_directory
