"""
Conversation store: the authoritative owner of peer-to-peer conversations
and their message logs.

Writes to one conversation (send, mark read, get-or-create + first message)
run inside a transaction holding that conversation's row lock, so unread
state never races a concurrent send.
"""

import html
import logging
from typing import Dict, List, Optional, Tuple

import bleach
from django.db import IntegrityError, transaction
from django.db.models import Count, OuterRef, Q, Subquery
from django.utils import timezone

from listings.catalog import get_listing, summarize
from mirart.exceptions import (
    EmptyMessage,
    InvalidParticipant,
    NotFound,
    NotParticipant,
    transient_on_db_error,
)
from users.directory import get_user_directory

from .models import Conversation, ConversationMessage

logger = logging.getLogger(__name__)


def clean_body(body: Optional[str]) -> str:
    """Trim and strip markup, keeping plain text such as ``&`` or ``<`` as typed.

    Blank results raise EmptyMessage.
    """
    text = (body or '').strip()
    if not text:
        raise EmptyMessage()

    text = html.unescape(bleach.clean(text, tags=set(), attributes={}, strip=True)).strip()
    if not text:
        raise EmptyMessage()
    return text


class ConversationStore:
    def __init__(self, directory=None):
        self.directory = directory or get_user_directory()

    @transient_on_db_error
    def list_conversations(self, user_id: str) -> List[Conversation]:
        """Conversations of ``user_id``, most recently active first.

        Each conversation is annotated with ``unread_count``,
        ``last_message_body``, ``last_message_sender_id``, ``other_user``
        (display identity) and ``listing_summary``.
        """
        latest = ConversationMessage.objects.filter(conversation=OuterRef('pk')).order_by('-created_at', '-id')

        conversations = list(
            Conversation.objects.filter(Q(participant_a=user_id) | Q(participant_b=user_id))
            .select_related('subject_listing')
            .annotate(
                last_message_body=Subquery(latest.values('body')[:1]),
                last_message_sender_id=Subquery(latest.values('sender_id')[:1]),
                unread_count=Count(
                    'messages',
                    filter=Q(messages__read_at__isnull=True) & ~Q(messages__sender_id=user_id),
                ),
            )
            .order_by('-last_message_at', '-id')
        )

        identities = self.directory.get_identities(c.other_participant(user_id) for c in conversations)
        for conversation in conversations:
            other_id = conversation.other_participant(user_id)
            conversation.other_user = identities.get(other_id) or self._unknown_identity(other_id)
            listing = conversation.subject_listing
            conversation.listing_summary = summarize(listing) if listing else None

        return conversations

    @transient_on_db_error
    def create_conversation(
        self, initiator_id: str, recipient_id: str, body: str, listing_id=None
    ) -> Tuple[Conversation, ConversationMessage, bool]:
        """Get or create the conversation for the pair + subject and append ``body``.

        Returns ``(conversation, message, created)``.
        """
        if not recipient_id or initiator_id == recipient_id:
            raise InvalidParticipant()

        text = clean_body(body)

        if not self.directory.exists(recipient_id):
            raise NotFound(f'User {recipient_id} not found')

        listing = get_listing(listing_id) if listing_id is not None else None
        participant_a, participant_b = Conversation.ordered_pair(initiator_id, recipient_id)

        with transaction.atomic():
            conversation = self._find_conversation(participant_a, participant_b, listing)
            created = False

            if conversation is None:
                try:
                    with transaction.atomic():
                        conversation = Conversation.objects.create(
                            participant_a=participant_a,
                            participant_b=participant_b,
                            subject_listing=listing,
                        )
                    created = True
                except IntegrityError:
                    # Another caller created the same key first
                    conversation = self._find_conversation(participant_a, participant_b, listing)
                    if conversation is None:
                        raise
                    logger.info(f"Joined concurrently created {conversation}")

            message = self._append(conversation, initiator_id, text)

        if created:
            logger.info(f"Created {conversation} for {participant_a}/{participant_b} (listing={listing_id})")
        return conversation, message, created

    @transient_on_db_error
    def fetch_messages(self, conversation_id: str, viewer_id: str) -> List[ConversationMessage]:
        """All messages in chronological order; does not mark anything read"""
        conversation = self._get_conversation(conversation_id)
        self._check_participant(conversation, viewer_id)
        return list(conversation.messages.order_by('created_at', 'id'))

    @transient_on_db_error
    def send_message(self, conversation_id: str, sender_id: str, body: str) -> ConversationMessage:
        text = clean_body(body)

        with transaction.atomic():
            conversation = self._get_conversation(conversation_id, lock=True)
            self._check_participant(conversation, sender_id)
            return self._append(conversation, sender_id, text)

    @transient_on_db_error
    def mark_read(self, conversation_id: str, viewer_id: str) -> int:
        """Mark the other participant's unread messages read; returns how many changed"""
        with transaction.atomic():
            conversation = self._get_conversation(conversation_id, lock=True)
            self._check_participant(conversation, viewer_id)
            updated = (
                conversation.messages.filter(read_at__isnull=True)
                .exclude(sender_id=viewer_id)
                .update(read_at=timezone.now())
            )

        if updated:
            logger.debug(f"{viewer_id} read {updated} messages in {conversation_id}")
        return updated

    @transient_on_db_error
    def unread_count(self, conversation_id: str, viewer_id: str) -> int:
        conversation = self._get_conversation(conversation_id)
        self._check_participant(conversation, viewer_id)
        return conversation.messages.filter(read_at__isnull=True).exclude(sender_id=viewer_id).count()

    @transient_on_db_error
    def unread_total(self, user_id: str) -> int:
        """Unread messages addressed to ``user_id`` across all conversations"""
        return (
            ConversationMessage.objects.filter(
                Q(conversation__participant_a=user_id) | Q(conversation__participant_b=user_id),
                read_at__isnull=True,
            )
            .exclude(sender_id=user_id)
            .count()
        )

    def _find_conversation(self, participant_a, participant_b, listing) -> Optional[Conversation]:
        return (
            Conversation.objects.select_for_update()
            .filter(participant_a=participant_a, participant_b=participant_b, subject_listing=listing)
            .first()
        )

    def _get_conversation(self, conversation_id: str, lock: bool = False) -> Conversation:
        queryset = Conversation.objects.select_for_update() if lock else Conversation.objects.all()
        try:
            return queryset.get(conversation_id=conversation_id)
        except Conversation.DoesNotExist:
            raise NotFound('Conversation not found')

    def _check_participant(self, conversation: Conversation, user_id: str):
        if not user_id or not conversation.has_participant(user_id):
            logger.warning(f"{user_id} denied access to {conversation}")
            raise NotParticipant()

    def _append(self, conversation: Conversation, sender_id: str, text: str) -> ConversationMessage:
        message = ConversationMessage.objects.create(
            conversation=conversation,
            sender_id=sender_id,
            body=text,
        )
        conversation.last_message_at = message.created_at
        conversation.save(update_fields=['last_message_at', 'updated_at'])
        return message

    def _unknown_identity(self, user_id: str) -> Dict:
        return {
            'id': user_id,
            'username': None,
            'display_name': user_id,
            'email': '',
            'avatar_url': None,
        }


_conversation_store = None


def get_conversation_store() -> ConversationStore:
    """Get global conversation store instance"""
    global _conversation_store
    if _conversation_store is None:
        _conversation_store = ConversationStore()
    return _conversation_store
