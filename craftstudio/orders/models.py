from django.db import models
from decimal import Decimal
from craftstudio.core.models import User


def empty_list():
    return []


class OrderQuerySet(models.QuerySet):
    def visible_to(self, user):
        """Admins see every order, customers the ones they placed or claimed"""
        if getattr(user, 'role', None) == User.ROLE_ADMIN:
            return self
        return self.filter(models.Q(user=user) | models.Q(claimed_by=user))


class Order(models.Model):
    """Custom apparel order, paid as a deposit then a balance"""
    STATUS_SUBMITTED = 'submitted'
    STATUS_PAID = 'paid'
    STATUS_IN_PRODUCTION = 'in_production'
    STATUS_SHIPPING = 'shipping'
    STATUS_DELIVERED = 'delivered'
    STATUS_CHOICES = [
        (STATUS_SUBMITTED, 'Submitted'),
        (STATUS_PAID, 'Paid'),
        (STATUS_IN_PRODUCTION, 'In Production'),
        (STATUS_SHIPPING, 'Shipping'),
        (STATUS_DELIVERED, 'Delivered'),
    ]
    STATUS_FLOW = [choice for choice, _ in STATUS_CHOICES]

    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='orders')
    company = models.ForeignKey('parties.Company', on_delete=models.SET_NULL, null=True, blank=True,
                                related_name='orders')
    customer_email = models.EmailField(blank=True)
    customer_name = models.CharField(max_length=200, blank=True)
    company_name = models.CharField(max_length=200, blank=True)
    order_number = models.CharField(max_length=50, unique=True)
    product_category = models.CharField(max_length=100)
    product = models.ForeignKey('catalog.Product', on_delete=models.SET_NULL, null=True, blank=True,
                                related_name='orders')
    product_name = models.CharField(max_length=200)
    quantity = models.PositiveIntegerField()
    unit_price = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    total_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    deposit_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    balance_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    customization = models.JSONField(default=dict, blank=True)
    colors = models.JSONField(default=empty_list, blank=True)
    sizes = models.JSONField(default=dict, blank=True)
    print_locations = models.JSONField(default=empty_list, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_SUBMITTED, db_index=True)
    priority = models.CharField(max_length=20, blank=True)
    labels = models.JSONField(default=empty_list, blank=True)
    total_paid_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    paid_at = models.DateTimeField(null=True, blank=True)
    shipping_address = models.JSONField(default=dict, blank=True)
    tracking_number = models.CharField(max_length=100, blank=True)
    estimated_delivery = models.DateTimeField(null=True, blank=True)
    actual_delivery = models.DateTimeField(null=True, blank=True)
    artwork_files = models.JSONField(default=empty_list, blank=True)
    production_notes = models.TextField(blank=True)
    customer_notes = models.TextField(blank=True)
    admin_notes = models.TextField(blank=True)
    stripe_deposit_payment_intent = models.CharField(max_length=255, blank=True)
    stripe_balance_payment_intent = models.CharField(max_length=255, blank=True)
    # {"front", "back", "sleeve", "composite"} image URLs
    mockup_images = models.JSONField(default=dict, blank=True)
    lead_time_snapshot = models.JSONField(null=True, blank=True)
    expected_schedule = models.JSONField(null=True, blank=True)
    estimated_delivery_window = models.JSONField(null=True, blank=True)
    guest_email = models.EmailField(blank=True, db_index=True)
    guest_verified_at = models.DateTimeField(null=True, blank=True)
    claimed_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True,
                                   related_name='claimed_orders')
    access_revoked_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = OrderQuerySet.as_manager()

    def __str__(self):
        return self.order_number

    def save(self, *args, **kwargs):
        if self.guest_email:
            self.guest_email = self.guest_email.lower().strip()
        super().save(*args, **kwargs)

    def can_transition_to(self, new_status):
        """Status may only move forward through STATUS_FLOW"""
        if new_status not in self.STATUS_FLOW:
            return False
        return self.STATUS_FLOW.index(new_status) > self.STATUS_FLOW.index(self.status)

    @property
    def notification_email(self):
        return self.customer_email or self.guest_email or (self.user.email if self.user else '')

    class Meta:
        db_table = 'orders'
        ordering = ['-created_at']


class OrderTimeline(models.Model):
    """Event history of an order"""
    SOURCE_CHOICES = [
        ('manual', 'Manual'),
        ('system', 'System'),
        ('webhook', 'Webhook'),
        ('api', 'API'),
        ('admin', 'Admin'),
    ]

    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name='timeline')
    event_type = models.CharField(max_length=50)
    description = models.TextField()
    event_data = models.JSONField(default=dict, blank=True)
    trigger_source = models.CharField(max_length=20, choices=SOURCE_CHOICES, default='manual')
    triggered_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True,
                                     related_name='order_events')
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.order.order_number} - {self.event_type}"

    class Meta:
        db_table = 'order_timeline'
        ordering = ['-created_at']


class ProductionUpdate(models.Model):
    """Progress note from the production floor, optionally hidden from the customer"""
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name='production_updates')
    stage = models.CharField(max_length=50)
    status = models.CharField(max_length=50)
    description = models.TextField(blank=True)
    photos = models.JSONField(default=empty_list, blank=True)
    documents = models.JSONField(default=empty_list, blank=True)
    estimated_completion = models.DateTimeField(null=True, blank=True)
    actual_completion = models.DateTimeField(null=True, blank=True)
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True,
                                   related_name='production_updates')
    visible_to_customer = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.order.order_number} - {self.stage}: {self.status}"

    class Meta:
        db_table = 'production_updates'
        ordering = ['-created_at']


class Sample(models.Model):
    """Sample pack ordered before a bulk order"""
    STATUS_CHOICES = [
        ('ordered', 'Ordered'),
        ('processing', 'Processing'),
        ('shipped', 'Shipped'),
        ('delivered', 'Delivered'),
        ('converted_to_order', 'Converted to Order'),
    ]

    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='samples')
    company = models.ForeignKey('parties.Company', on_delete=models.SET_NULL, null=True, blank=True,
                                related_name='samples')
    sample_number = models.CharField(max_length=50, unique=True)
    products = models.JSONField(default=empty_list, blank=True)
    total_price = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='ordered')
    shipping_address = models.JSONField(default=dict, blank=True)
    tracking_number = models.CharField(max_length=100, blank=True)
    converted_order = models.ForeignKey(Order, on_delete=models.SET_NULL, null=True, blank=True,
                                        related_name='source_samples')
    stripe_payment_intent_id = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.sample_number

    class Meta:
        db_table = 'samples'
        ordering = ['-created_at']
