from django.contrib import admin
from .models import GuestDraft, GuestMagicLink


@admin.register(GuestDraft)
class GuestDraftAdmin(admin.ModelAdmin):
    list_display = ['id', 'type', 'created_at']
    list_filter = ['type', 'created_at']
    ordering = ['-created_at']
    readonly_fields = ['created_at', 'updated_at']


@admin.register(GuestMagicLink)
class GuestMagicLinkAdmin(admin.ModelAdmin):
    list_display = ['email', 'intent', 'expires_at', 'used_at', 'created_by_ip', 'created_at']
    list_filter = ['intent', 'created_at']
    search_fields = ['email']
    ordering = ['-created_at']
    readonly_fields = ['token_hash', 'created_at']
