from django.contrib import admin

from .models import Listing


@admin.register(Listing)
class ListingAdmin(admin.ModelAdmin):
    list_display = ['id', 'title', 'artist', 'status', 'created_at']
    list_filter = ['status', 'created_at']
    search_fields = ['title', 'artist__username']
