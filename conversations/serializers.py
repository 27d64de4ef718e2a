from django.conf import settings
from rest_framework import serializers

from .models import Conversation, ConversationMessage


class ConversationMessageSerializer(serializers.ModelSerializer):
    conversation_id = serializers.CharField(source='conversation.conversation_id', read_only=True)
    is_read = serializers.BooleanField(read_only=True)

    class Meta:
        model = ConversationMessage
        fields = ['id', 'conversation_id', 'sender_id', 'body', 'created_at', 'read_at', 'is_read']
        read_only_fields = fields


class ConversationSummarySerializer(serializers.ModelSerializer):
    """Conversation list entry as seen by one participant.

    Expects the annotations added by ``ConversationStore.list_conversations``.
    """
    listing_id = serializers.IntegerField(source='subject_listing_id', read_only=True, allow_null=True)
    listing_title = serializers.SerializerMethodField()
    listing_image = serializers.SerializerMethodField()
    other_user = serializers.DictField(read_only=True)
    last_message = serializers.SerializerMethodField()
    unread_count = serializers.IntegerField(read_only=True)

    class Meta:
        model = Conversation
        fields = ['conversation_id', 'listing_id', 'listing_title', 'listing_image', 'other_user',
                  'last_message', 'last_message_at', 'unread_count', 'created_at']

    def get_listing_title(self, obj):
        summary = getattr(obj, 'listing_summary', None)
        return summary['title'] if summary else None

    def get_listing_image(self, obj):
        summary = getattr(obj, 'listing_summary', None)
        return summary['image_url'] if summary else None

    def get_last_message(self, obj):
        body = getattr(obj, 'last_message_body', None)
        if body is None:
            return None
        return {
            'sender_id': obj.last_message_sender_id,
            'body': body[:100] + '...' if len(body) > 100 else body,
        }


class ConversationCreateSerializer(serializers.Serializer):
    recipient_id = serializers.CharField(max_length=100)
    listing_id = serializers.IntegerField(required=False, allow_null=True)
    message = serializers.CharField(required=False, default='', allow_blank=True, trim_whitespace=False,
                                    max_length=settings.CHAT_MESSAGE_MAX_LENGTH)


class MessageCreateSerializer(serializers.Serializer):
    body = serializers.CharField(required=False, default='', allow_blank=True, trim_whitespace=False,
                                 max_length=settings.CHAT_MESSAGE_MAX_LENGTH)


class ChatEnabledSerializer(serializers.Serializer):
    enabled = serializers.BooleanField()
