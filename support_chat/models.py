from django.db import models


class SupportMessage(models.Model):
    """One entry in a user's single support thread"""

    SENDER_USER = "user"
    SENDER_ADMIN = "admin"
    SENDER_ROLE_CHOICES = [
        (SENDER_USER, "User"),
        (SENDER_ADMIN, "Admin"),
    ]

    user_id = models.CharField(max_length=100, db_index=True)
    user_email = models.EmailField(max_length=255, blank=True, default='')
    user_name = models.CharField(max_length=255, blank=True, default='')
    sender_role = models.CharField(max_length=10, choices=SENDER_ROLE_CHOICES)
    admin_id = models.CharField(max_length=100, null=True, blank=True)
    body = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)
    read_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'support_chat_messages'
        ordering = ['created_at', 'id']
        indexes = [
            models.Index(fields=['user_id', 'created_at'], name='support_msg_user_created_idx'),
        ]

    def __str__(self):
        return f"{self.sender_role} ({self.user_id}): {self.body[:50]}..."


class SiteSetting(models.Model):
    key = models.CharField(max_length=100, unique=True)
    value = models.JSONField(default=dict)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'site_settings'

    def __str__(self):
        return self.key
