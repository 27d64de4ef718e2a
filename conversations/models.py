import uuid

from django.db import models
from django.db.models import Q
from django.utils import timezone


def generate_conversation_id():
    return f"conv_{uuid.uuid4().hex[:12]}"


class Conversation(models.Model):
    """A 1:1 thread, optionally about one listing.

    The participant pair is stored sorted so ``(a, b)`` and ``(b, a)`` map to
    the same row.
    """

    conversation_id = models.CharField(max_length=100, unique=True, default=generate_conversation_id, editable=False)
    participant_a = models.CharField(max_length=100, db_index=True)
    participant_b = models.CharField(max_length=100, db_index=True)
    subject_listing = models.ForeignKey(
        'listings.Listing', on_delete=models.PROTECT, related_name='conversations', null=True, blank=True
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    last_message_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        db_table = 'conversations_conversation'
        constraints = [
            models.UniqueConstraint(
                fields=['participant_a', 'participant_b', 'subject_listing'],
                condition=Q(subject_listing__isnull=False),
                name='unique_conversation_per_subject',
            ),
            models.UniqueConstraint(
                fields=['participant_a', 'participant_b'],
                condition=Q(subject_listing__isnull=True),
                name='unique_unscoped_conversation',
            ),
        ]

    @staticmethod
    def ordered_pair(user_id, other_user_id):
        return tuple(sorted((user_id, other_user_id)))

    @property
    def participants(self):
        return (self.participant_a, self.participant_b)

    def has_participant(self, user_id):
        return user_id in self.participants

    def other_participant(self, user_id):
        return self.participant_b if user_id == self.participant_a else self.participant_a

    def __str__(self):
        return f"Conversation {self.conversation_id}"


class ConversationMessage(models.Model):
    conversation = models.ForeignKey(Conversation, on_delete=models.CASCADE, related_name='messages')
    sender_id = models.CharField(max_length=100)
    body = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)
    read_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'conversations_conversationmessage'
        ordering = ['created_at', 'id']
        indexes = [
            models.Index(fields=['conversation', 'created_at'], name='conv_msg_conv_created_idx'),
            models.Index(fields=['conversation', 'read_at'], name='conv_msg_conv_read_idx'),
        ]

    @property
    def is_read(self):
        return self.read_at is not None

    def __str__(self):
        return f"{self.sender_id}: {self.body[:50]}..."
