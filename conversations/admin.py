from django.contrib import admin

from .models import Conversation, ConversationMessage


@admin.register(Conversation)
class ConversationAdmin(admin.ModelAdmin):
    list_display = ['conversation_id', 'participant_a', 'participant_b', 'subject_listing', 'created_at', 'last_message_at']
    list_filter = ['created_at', 'last_message_at']
    search_fields = ['conversation_id', 'participant_a', 'participant_b']
    readonly_fields = ['conversation_id', 'created_at', 'updated_at']
    raw_id_fields = ['subject_listing']


@admin.register(ConversationMessage)
class ConversationMessageAdmin(admin.ModelAdmin):
    list_display = ['id', 'conversation', 'sender_id', 'content_preview', 'created_at', 'read_at']
    list_filter = ['created_at', 'sender_id']
    search_fields = ['body', 'sender_id', 'conversation__conversation_id']
    readonly_fields = ['created_at']

    @admin.display(description='Content Preview')
    def content_preview(self, obj):
        return obj.body[:50] + "..." if len(obj.body) > 50 else obj.body
