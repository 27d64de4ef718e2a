from django.contrib import admin

from .models import SiteSetting, SupportMessage


@admin.register(SupportMessage)
class SupportMessageAdmin(admin.ModelAdmin):
    list_display = ['id', 'user_id', 'sender_role', 'content_preview', 'created_at', 'read_at']
    list_filter = ['sender_role', 'created_at']
    search_fields = ['user_id', 'user_email', 'body']
    readonly_fields = ['created_at']

    @admin.display(description='Content Preview')
    def content_preview(self, obj):
        return obj.body[:50] + "..." if len(obj.body) > 50 else obj.body


@admin.register(SiteSetting)
class SiteSettingAdmin(admin.ModelAdmin):
    list_display = ['key', 'updated_at']
    search_fields = ['key']
