from django.db import models


class User(models.Model):
    user_id = models.CharField(max_length=100, unique=True, primary_key=True)
    username = models.CharField(max_length=100, unique=True)
    first_name = models.CharField(max_length=100, blank=True, default='')
    last_name = models.CharField(max_length=100, blank=True, default='')
    business_name = models.CharField(max_length=255, blank=True, default='')
    email = models.EmailField(max_length=255, null=True, blank=True)
    avatar_url = models.URLField(max_length=500, blank=True, default='')
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'users'
        indexes = [
            models.Index(fields=['email'], name='users_email_4b85f2_idx'),
            models.Index(fields=['business_name'], name='users_busines_7d3a2c_idx'),
        ]

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def display_name(self):
        """Business name, then full name, then email, then username."""
        return self.business_name or self.full_name or self.email or self.username

    def __str__(self):
        return f"{self.username} ({self.user_id})"
