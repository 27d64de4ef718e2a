import logging
from typing import Dict, List, Optional

import requests

from .errors import TransientIOFailure, error_for

logger = logging.getLogger(__name__)


class ChatApiClient:
    """Blocking client for the chat and support chat REST APIs"""

    def __init__(self, base_url: str, token: Optional[str] = None, timeout: float = 10.0, session=None):
        self.base_url = base_url.rstrip('/')
        self.token = token
        self.timeout = timeout
        self.session = session or requests.Session()

    def _get_headers(self) -> Dict[str, str]:
        headers = {'Content-Type': 'application/json'}
        if self.token:
            headers['Authorization'] = f'Bearer {self.token}'
        return headers

    def _request(self, method: str, path: str, **kwargs):
        url = f"{self.base_url}/{path.lstrip('/')}"
        try:
            response = self.session.request(
                method, url, headers=self._get_headers(), timeout=self.timeout, **kwargs
            )
        except requests.RequestException as e:
            logger.warning(f"{method} {url} failed: {e}")
            raise TransientIOFailure(str(e)) from e

        if response.status_code >= 500:
            logger.warning(f"{method} {url} returned {response.status_code}")
            raise TransientIOFailure(self._error_message(response), response.status_code)

        if response.status_code >= 400:
            try:
                body = response.json()
            except ValueError:
                body = {}
            code = body.get('code') if isinstance(body, dict) else None
            raise error_for(code, self._error_message(response), response.status_code)

        try:
            return response.json()
        except ValueError as e:
            logger.warning(f"{method} {url} returned a non-JSON body")
            raise TransientIOFailure(f'Unreadable response from {url}', response.status_code) from e

    def _error_message(self, response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text or f'HTTP {response.status_code}'
        if isinstance(body, dict):
            return body.get('error') or body.get('detail') or f'HTTP {response.status_code}'
        return f'HTTP {response.status_code}'

    # Conversations

    def list_conversations(self) -> List[Dict]:
        return self._request('GET', '/chat/conversations/')['results']

    def create_conversation(self, recipient_id: str, body: str, listing_id: Optional[int] = None) -> Dict:
        payload = {'recipient_id': recipient_id, 'message': body}
        if listing_id is not None:
            payload['listing_id'] = listing_id
        return self._request('POST', '/chat/conversations/', json=payload)

    def fetch_messages(self, conversation_id: str) -> List[Dict]:
        return self._request('GET', f'/chat/conversations/{conversation_id}/messages/')['messages']

    def send_message(self, conversation_id: str, body: str) -> Dict:
        return self._request('POST', f'/chat/conversations/{conversation_id}/messages/', json={'body': body})

    def mark_read(self, conversation_id: str) -> int:
        return self._request('POST', f'/chat/conversations/{conversation_id}/read/')['updated']

    def unread_count(self) -> int:
        return self._request('GET', '/chat/unread-count/')['unread_count']

    def chat_enabled(self) -> bool:
        return self._request('GET', '/chat/enabled/')['enabled']

    def search_users(self, query: str, limit: int = 10) -> List[Dict]:
        return self._request('GET', '/users/search/', params={'q': query, 'limit': limit})['users']

    # Support chat

    def support_config(self) -> Dict:
        return self._request('GET', '/support-chat/config/')

    def support_status(self) -> Dict:
        return self._request('GET', '/support-chat/status/')

    def support_messages(self) -> List[Dict]:
        return self._request('GET', '/support-chat/messages/')['messages']

    def support_send(self, body: str) -> Dict:
        return self._request('POST', '/support-chat/messages/', json={'body': body})

    def support_mark_read(self) -> int:
        return self._request('POST', '/support-chat/messages/read/')['updated']
