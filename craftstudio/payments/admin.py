from django.contrib import admin
from .models import Payment


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ['order', 'phase', 'amount_cents', 'currency', 'status', 'paid_at', 'created_at']
    list_filter = ['phase', 'status', 'created_at']
    search_fields = ['order__order_number', 'stripe_payment_intent_id', 'stripe_checkout_session_id']
    ordering = ['-created_at']
    readonly_fields = ['created_at', 'updated_at']
