from django.db import models


class Payment(models.Model):
    """One phase (deposit or balance) of an order's payment"""
    PHASE_DEPOSIT = 'deposit'
    PHASE_BALANCE = 'balance'
    PHASE_CHOICES = [
        (PHASE_DEPOSIT, 'Deposit'),
        (PHASE_BALANCE, 'Balance'),
    ]

    STATUS_PENDING = 'pending'
    STATUS_REQUIRES_ACTION = 'requires_action'
    STATUS_PAID = 'paid'
    STATUS_FAILED = 'failed'
    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_REQUIRES_ACTION, 'Requires Action'),
        (STATUS_PAID, 'Paid'),
        (STATUS_FAILED, 'Failed'),
    ]

    order = models.ForeignKey('orders.Order', on_delete=models.CASCADE, related_name='payments')
    phase = models.CharField(max_length=20, choices=PHASE_CHOICES)
    amount_cents = models.PositiveIntegerField()
    currency = models.CharField(max_length=10, default='usd')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    stripe_payment_intent_id = models.CharField(max_length=255, blank=True, db_index=True)
    stripe_checkout_session_id = models.CharField(max_length=255, blank=True)
    stripe_charge_id = models.CharField(max_length=255, blank=True)
    paid_at = models.DateTimeField(null=True, blank=True)
    metadata = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.order.order_number} {self.phase} ({self.status})"

    class Meta:
        db_table = 'payments'
        ordering = ['created_at']
        indexes = [
            models.Index(fields=['order', 'phase'], name='idx_payment_order_phase'),
        ]
