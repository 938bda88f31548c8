from django.db import models
from django.utils import timezone


class GuestDraft(models.Model):
    """Quote or sample request saved by a visitor without an account"""
    TYPE_QUOTE = 'quote'
    TYPE_SAMPLE = 'sample'
    TYPE_CHOICES = [
        (TYPE_QUOTE, 'Quote'),
        (TYPE_SAMPLE, 'Sample'),
    ]

    type = models.CharField(max_length=20, choices=TYPE_CHOICES, default=TYPE_QUOTE, db_index=True)
    info = models.JSONField(default=dict, blank=True)
    address = models.JSONField(default=dict, blank=True)
    draft = models.JSONField(default=dict, blank=True)
    totals = models.JSONField(default=dict, blank=True)
    pricing = models.JSONField(default=dict, blank=True)
    metadata = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.type} draft {self.pk}"

    class Meta:
        db_table = 'guest_drafts'
        ordering = ['-created_at']


class GuestMagicLink(models.Model):
    """Single-use sign-in link; only the SHA-256 of the token is stored"""
    INTENT_AUTH = 'auth'
    INTENT_ORDER_ACCESS = 'order_access'
    INTENT_CHOICES = [
        (INTENT_AUTH, 'Auth'),
        (INTENT_ORDER_ACCESS, 'Order Access'),
    ]

    email = models.EmailField(db_index=True)
    token_hash = models.CharField(max_length=64, unique=True)
    order_ids = models.JSONField(default=list, blank=True)
    intent = models.CharField(max_length=20, choices=INTENT_CHOICES, default=INTENT_ORDER_ACCESS)
    expires_at = models.DateTimeField(db_index=True)
    used_at = models.DateTimeField(null=True, blank=True)
    created_by_ip = models.GenericIPAddressField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def save(self, *args, **kwargs):
        self.email = self.email.lower().strip()
        super().save(*args, **kwargs)

    @property
    def is_expired(self):
        return self.expires_at < timezone.now()

    def __str__(self):
        return f"{self.email} ({self.intent})"

    class Meta:
        db_table = 'guest_magic_links'
        ordering = ['-created_at']
