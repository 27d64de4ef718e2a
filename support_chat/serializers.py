from django.conf import settings
from rest_framework import serializers

from .models import SupportMessage


class SupportMessageSerializer(serializers.ModelSerializer):
    is_read = serializers.SerializerMethodField()

    class Meta:
        model = SupportMessage
        fields = ['id', 'user_id', 'sender_role', 'admin_id', 'body', 'created_at', 'read_at', 'is_read']
        read_only_fields = fields

    def get_is_read(self, obj):
        return obj.read_at is not None


class SupportMessageCreateSerializer(serializers.Serializer):
    body = serializers.CharField(required=False, default='', allow_blank=True, trim_whitespace=False,
                                 max_length=settings.CHAT_MESSAGE_MAX_LENGTH)


class SupportThreadSerializer(serializers.Serializer):
    """Operator inbox row produced by ``SupportStore.list_threads``"""
    user_id = serializers.CharField()
    user_email = serializers.CharField(source='email', allow_null=True)
    user_name = serializers.CharField(source='name', allow_null=True)
    last_message = serializers.SerializerMethodField()
    last_sender = serializers.CharField()
    last_message_at = serializers.DateTimeField()
    unread_count = serializers.IntegerField()

    def get_last_message(self, obj):
        body = obj.get('last_message') or ''
        return body[:100] + '...' if len(body) > 100 else body
