"""
Support thread store. Every user has one flat thread with the support desk;
operators answer it as ``admin``.
"""

import logging
from typing import List, Optional

from django.db import transaction
from django.db.models import Count, Max, OuterRef, Q, Subquery
from django.utils import timezone

from conversations.store import clean_body
from mirart.exceptions import ChatError, transient_on_db_error

from .models import SupportMessage

logger = logging.getLogger(__name__)

SENDER_ROLES = (SupportMessage.SENDER_USER, SupportMessage.SENDER_ADMIN)


class SupportStore:

    @transient_on_db_error
    def fetch_thread(self, user_id: str) -> List[SupportMessage]:
        return list(SupportMessage.objects.filter(user_id=user_id).order_by('created_at', 'id'))

    @transient_on_db_error
    def post_message(
        self,
        user_id: str,
        sender_role: str,
        body: str,
        admin_id: Optional[str] = None,
        user_email: str = '',
        user_name: str = '',
    ) -> SupportMessage:
        if sender_role not in SENDER_ROLES:
            raise ChatError(f'Unknown sender role {sender_role}')
        text = clean_body(body)

        message = SupportMessage.objects.create(
            user_id=user_id,
            user_email=user_email or '',
            user_name=user_name or '',
            sender_role=sender_role,
            admin_id=admin_id if sender_role == SupportMessage.SENDER_ADMIN else None,
            body=text,
        )
        logger.info(f"Support message {message.id} from {sender_role} in thread {user_id}")
        return message

    @transient_on_db_error
    def mark_read(self, user_id: str, sender_role: str) -> int:
        """Mark unread messages sent by ``sender_role`` in the thread read"""
        with transaction.atomic():
            updated = SupportMessage.objects.filter(
                user_id=user_id,
                sender_role=sender_role,
                read_at__isnull=True,
            ).update(read_at=timezone.now())

        if updated:
            logger.debug(f"Marked {updated} {sender_role} messages read in thread {user_id}")
        return updated

    @transient_on_db_error
    def unread_for_user(self, user_id: str) -> int:
        """Operator replies the user has not read yet"""
        return SupportMessage.objects.filter(
            user_id=user_id,
            sender_role=SupportMessage.SENDER_ADMIN,
            read_at__isnull=True,
        ).count()

    @transient_on_db_error
    def list_threads(self) -> List[dict]:
        """Operator inbox: one row per user, newest activity first"""
        latest = SupportMessage.objects.filter(user_id=OuterRef('user_id')).order_by('-created_at', '-id')

        rows = (
            SupportMessage.objects.values('user_id')
            .annotate(
                last_message_at=Max('created_at'),
                unread_count=Count(
                    'id',
                    filter=Q(sender_role=SupportMessage.SENDER_USER, read_at__isnull=True),
                ),
                last_message=Subquery(latest.values('body')[:1]),
                last_sender=Subquery(latest.values('sender_role')[:1]),
                email=Subquery(
                    latest.filter(sender_role=SupportMessage.SENDER_USER).values('user_email')[:1]
                ),
                name=Subquery(
                    latest.filter(sender_role=SupportMessage.SENDER_USER).values('user_name')[:1]
                ),
            )
            .order_by('-last_message_at', 'user_id')
        )
        return list(rows)


_support_store = None


def get_support_store() -> SupportStore:
    global _support_store
    if _support_store is None:
        _support_store = SupportStore()
    return _support_store
