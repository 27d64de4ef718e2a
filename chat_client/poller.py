"""
Client-side polling of the chat API.

A poller owns one widget's view state and keeps it in sync with the server by
replacing whole snapshots on a fixed interval. Blocking HTTP calls run in
worker threads via ``asyncio.to_thread`` so the event loop stays responsive,
and every snapshot passes through ``LatestWins`` before it reaches the view.
"""

import asyncio
import logging
from enum import Enum
from typing import Dict, List, Optional

from .errors import ChatClientError, EmptyMessage, TransientIOFailure
from .reconcile import LatestWins

logger = logging.getLogger(__name__)

CONNECTION_NOTICE = 'Having trouble reaching the chat server. Retrying...'

CONVERSATIONS_SCOPE = 'conversations'


def messages_scope(conversation_id: str):
    return ('messages', conversation_id)


class PollerState(Enum):
    CLOSED = 'closed'
    LIST_ONLY = 'list_only'
    IN_CONVERSATION = 'in_conversation'


class ChatViewState:
    """What the chat widget renders"""

    def __init__(self):
        self.conversations: List[Dict] = []
        self.messages: List[Dict] = []
        self.selected_conversation_id: Optional[str] = None
        self.draft = ''
        self.notice: Optional[str] = None

    @property
    def total_unread(self) -> int:
        return sum(c.get('unread_count') or 0 for c in self.conversations)


class PollingWidget:
    """Timer, failure policy and reconciliation shared by the chat pollers"""

    def __init__(self, interval: float, failure_threshold: int = 3):
        self.interval = interval
        self.failure_threshold = failure_threshold
        self.consecutive_failures = 0
        self.reconciler = LatestWins()
        self.view = None
        self._task: Optional[asyncio.Task] = None

    async def refresh(self) -> bool:
        """Run one poll cycle now; returns False if it failed"""
        try:
            await self._refresh()
        except ChatClientError as e:
            self._record_failure(e)
            return False
        except Exception as e:
            logger.exception(f"Unexpected poll error: {e}")
            self._record_failure(TransientIOFailure(str(e) or type(e).__name__))
            return False

        self.consecutive_failures = 0
        return True

    def dismiss_notice(self):
        self.view.notice = None

    @property
    def polling(self) -> bool:
        return self._task is not None and not self._task.done()

    async def _refresh(self):
        raise NotImplementedError

    async def _call(self, func, *args):
        return await asyncio.to_thread(func, *args)

    async def _fetch(self, scope, func, args, setter) -> bool:
        ticket = self.reconciler.issue(scope)
        snapshot = await self._call(func, *args)
        return self.reconciler.apply(scope, ticket, snapshot, setter)

    def _record_failure(self, error: ChatClientError):
        if isinstance(error, TransientIOFailure):
            self.consecutive_failures += 1
            logger.warning(f"Poll failed ({self.consecutive_failures} in a row): {error.message}")
            if self.consecutive_failures >= self.failure_threshold:
                self.view.notice = CONNECTION_NOTICE
        else:
            logger.error(f"Poll failed: {error.message}")
            self.view.notice = error.message

    async def _poll_loop(self):
        while True:
            await asyncio.sleep(self.interval)
            await self.refresh()

    def _start_polling(self):
        if not self.polling:
            self._task = asyncio.create_task(self._poll_loop())

    async def _stop_polling(self):
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def _restart(self):
        await self._stop_polling()
        await self.refresh()
        self._start_polling()


class ConversationPoller(PollingWidget):
    """Keeps the conversation list and the selected conversation up to date.

    ``open()`` shows the list, ``select()`` enters a conversation, and
    ``deselect()``, ``minimize()`` or ``close()`` leave it. Entering a
    conversation fetches at once and marks it read exactly once.
    """

    def __init__(self, api, interval: float = 2.0, failure_threshold: int = 3, view: ChatViewState = None):
        super().__init__(interval, failure_threshold)
        self.api = api
        self.view = view or ChatViewState()
        self.state = PollerState.CLOSED
        self._pending_mark_read: Optional[str] = None

    async def open(self):
        if self.state is PollerState.CLOSED:
            conversation_id = self.view.selected_conversation_id
            if conversation_id:
                self.state = PollerState.IN_CONVERSATION
                self._pending_mark_read = conversation_id
            else:
                self.state = PollerState.LIST_ONLY
        await self._restart()

    async def select(self, conversation_id: str):
        await self._stop_polling()
        self._leave_conversation(keep_selection=self.view.selected_conversation_id == conversation_id)

        self.view.selected_conversation_id = conversation_id
        self.state = PollerState.IN_CONVERSATION
        self._pending_mark_read = conversation_id
        await self._restart()

    async def deselect(self):
        await self._stop_polling()
        self._leave_conversation()
        if self.state is not PollerState.CLOSED:
            self.state = PollerState.LIST_ONLY
            await self._restart()

    async def minimize(self):
        """Stop polling but keep what is on screen for the next open()"""
        await self._stop_polling()
        self._invalidate_all()
        self._pending_mark_read = None
        self.state = PollerState.CLOSED

    async def close(self):
        await self._stop_polling()
        self._leave_conversation()
        self._invalidate_all()
        self.state = PollerState.CLOSED

    async def send(self, body: Optional[str] = None) -> Dict:
        """Send ``body`` (or the draft) to the selected conversation.

        The draft is cleared only once the server accepted the message.
        """
        if body is not None:
            self.view.draft = body
        text = self.view.draft
        conversation_id = self.view.selected_conversation_id
        if conversation_id is None:
            raise ChatClientError('No conversation selected')
        if not (text or '').strip():
            raise EmptyMessage('Message cannot be empty.')

        try:
            message = await self._call(self.api.send_message, conversation_id, text)
        except ChatClientError as e:
            logger.warning(f"Send to {conversation_id} failed: {e.message}")
            self.view.notice = e.message
            raise

        self.view.draft = ''
        if self.view.selected_conversation_id == conversation_id:
            await self.refresh()
        return message

    async def start_chat(self, recipient_id: str, body: str, listing_id: Optional[int] = None) -> str:
        """Create or reuse a conversation with ``recipient_id`` and open it"""
        try:
            result = await self._call(self.api.create_conversation, recipient_id, body, listing_id)
        except ChatClientError as e:
            self.view.notice = e.message
            raise

        conversation_id = result['conversation_id']
        await self.select(conversation_id)
        return conversation_id

    async def _refresh(self):
        if self.state is PollerState.CLOSED:
            return

        conversation_id = self.view.selected_conversation_id
        if self.state is PollerState.IN_CONVERSATION and conversation_id:
            await self._fetch(
                messages_scope(conversation_id),
                self.api.fetch_messages,
                (conversation_id,),
                lambda messages: self._set_messages(conversation_id, messages),
            )

        mark_read_error = None
        if self.state is PollerState.IN_CONVERSATION and conversation_id and self._pending_mark_read == conversation_id:
            try:
                await self._call(self.api.mark_read, conversation_id)
            except ChatClientError as e:
                # stays pending, retried next tick
                mark_read_error = e
            else:
                if self._pending_mark_read == conversation_id:
                    self._pending_mark_read = None

        await self._fetch(CONVERSATIONS_SCOPE, self.api.list_conversations, (), self._set_conversations)
        if mark_read_error is not None:
            raise mark_read_error

    def _set_messages(self, conversation_id: str, messages: List[Dict]):
        if self.view.selected_conversation_id == conversation_id:
            self.view.messages = messages

    def _set_conversations(self, conversations: List[Dict]):
        self.view.conversations = conversations

    def _leave_conversation(self, keep_selection: bool = False):
        conversation_id = self.view.selected_conversation_id
        if conversation_id is None:
            return
        self.reconciler.invalidate(messages_scope(conversation_id))
        self._pending_mark_read = None
        if not keep_selection:
            self.view.selected_conversation_id = None
            self.view.messages = []

    def _invalidate_all(self):
        self.reconciler.invalidate(CONVERSATIONS_SCOPE)
        if self.view.selected_conversation_id:
            self.reconciler.invalidate(messages_scope(self.view.selected_conversation_id))
