import logging
from datetime import datetime
from typing import Dict, List, Optional

from support_chat.hours import SupportChatConfig, greeting, is_online

from .errors import ChatClientError, EmptyMessage
from .poller import PollingWidget

logger = logging.getLogger(__name__)

SUPPORT_SCOPE = 'support_thread'


class SupportViewState:
    def __init__(self):
        self.messages: List[Dict] = []
        self.draft = ''
        self.notice: Optional[str] = None

    @property
    def unread_count(self) -> int:
        return sum(1 for m in self.messages if m.get('sender_role') == 'admin' and not m.get('read_at'))


class SupportPoller(PollingWidget):
    """Polls the caller's support thread while the support widget is open.

    Business hours are evaluated locally by ``status()`` from the last loaded
    config and are never polled.
    """

    def __init__(self, api, interval: float = 5.0, failure_threshold: int = 3,
                 config: Optional[SupportChatConfig] = None, view: SupportViewState = None):
        super().__init__(interval, failure_threshold)
        self.api = api
        self.config = config
        self.view = view or SupportViewState()
        self.is_open = False
        self._pending_mark_read = False

    async def open(self):
        self.is_open = True
        self._pending_mark_read = True
        await self._restart()

    async def close(self):
        await self._stop_polling()
        self.reconciler.invalidate(SUPPORT_SCOPE)
        self._pending_mark_read = False
        self.is_open = False

    async def load_config(self) -> SupportChatConfig:
        data = await self._call(self.api.support_config)
        self.config = SupportChatConfig.from_dict(data)
        return self.config

    def status(self, now: Optional[datetime] = None) -> Dict:
        config = self.config
        return {
            'enabled': bool(config and config.enabled),
            'online': is_online(config, now),
            'greeting': greeting(config, now),
        }

    async def send(self, body: Optional[str] = None) -> Dict:
        if body is not None:
            self.view.draft = body
        text = self.view.draft
        if not (text or '').strip():
            raise EmptyMessage('Message cannot be empty.')

        try:
            message = await self._call(self.api.support_send, text)
        except ChatClientError as e:
            logger.warning(f"Support message failed: {e.message}")
            self.view.notice = e.message
            raise

        self.view.draft = ''
        if self.is_open:
            await self.refresh()
        return message

    async def _refresh(self):
        if not self.is_open:
            return

        if self.config is None:
            await self.load_config()

        await self._fetch(SUPPORT_SCOPE, self.api.support_messages, (), self._set_messages)
        if self._pending_mark_read:
            await self._call(self.api.support_mark_read)
            self._pending_mark_read = False

    def _set_messages(self, messages: List[Dict]):
        if self.is_open:
            self.view.messages = messages
