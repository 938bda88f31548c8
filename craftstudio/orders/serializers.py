from rest_framework import serializers
from craftstudio.catalog.models import Product
from .models import Order, OrderTimeline, ProductionUpdate, Sample


MONEY = dict(max_digits=12, decimal_places=2, coerce_to_string=False)


class OrderSerializer(serializers.ModelSerializer):
    user_id = serializers.IntegerField(source='user.id', read_only=True, allow_null=True)
    product_id = serializers.IntegerField(source='product.id', read_only=True, allow_null=True)
    unit_price = serializers.DecimalField(max_digits=10, decimal_places=2, coerce_to_string=False, read_only=True)
    total_amount = serializers.DecimalField(read_only=True, **MONEY)
    deposit_amount = serializers.DecimalField(read_only=True, **MONEY)
    balance_amount = serializers.DecimalField(read_only=True, **MONEY)
    total_paid_amount = serializers.DecimalField(read_only=True, **MONEY)

    class Meta:
        model = Order
        fields = [
            'id', 'order_number', 'user_id', 'customer_email', 'customer_name', 'company_name',
            'product_id', 'product_category', 'product_name', 'quantity', 'unit_price', 'total_amount',
            'deposit_amount', 'balance_amount', 'customization', 'colors', 'sizes', 'print_locations',
            'status', 'priority', 'labels', 'total_paid_amount', 'paid_at', 'shipping_address',
            'tracking_number', 'estimated_delivery', 'actual_delivery', 'artwork_files',
            'production_notes', 'customer_notes', 'admin_notes', 'stripe_deposit_payment_intent',
            'stripe_balance_payment_intent', 'mockup_images', 'lead_time_snapshot', 'expected_schedule',
            'estimated_delivery_window', 'guest_email', 'guest_verified_at', 'created_at', 'updated_at'
        ]
        read_only_fields = fields


class OrderCreateSerializer(serializers.Serializer):
    """Fields a customer supplies when placing an order"""
    product_category = serializers.CharField(max_length=100)
    product_name = serializers.CharField(max_length=200)
    product_id = serializers.PrimaryKeyRelatedField(
        queryset=Product.objects.all(), source='product', required=False, allow_null=True
    )
    quantity = serializers.IntegerField(min_value=1)
    unit_price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False, default=0)
    total_amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False)
    customization = serializers.JSONField(required=False, default=dict)
    colors = serializers.ListField(required=False, default=list)
    sizes = serializers.DictField(required=False, default=dict)
    print_locations = serializers.ListField(required=False, default=list)
    shipping_address = serializers.DictField(required=False, default=dict)
    artwork_files = serializers.ListField(required=False, default=list)
    customer_notes = serializers.CharField(required=False, allow_blank=True, default='')
    customer_email = serializers.EmailField(required=False, allow_blank=True, default='')
    customer_name = serializers.CharField(required=False, allow_blank=True, default='', max_length=200)
    company_name = serializers.CharField(required=False, allow_blank=True, default='', max_length=200)
    mockup_images = serializers.DictField(required=False, default=dict)


class OrderUpdateSerializer(serializers.ModelSerializer):
    """Admin-editable order fields"""
    status = serializers.ChoiceField(choices=Order.STATUS_CHOICES, required=False)

    class Meta:
        model = Order
        fields = [
            'status', 'priority', 'labels', 'tracking_number', 'estimated_delivery', 'shipping_address',
            'artwork_files', 'production_notes', 'customer_notes', 'admin_notes', 'mockup_images'
        ]


class OrderTimelineSerializer(serializers.ModelSerializer):
    order_id = serializers.IntegerField(source='order.id', read_only=True)
    triggered_by_id = serializers.IntegerField(source='triggered_by.id', read_only=True, allow_null=True)

    class Meta:
        model = OrderTimeline
        fields = ['id', 'order_id', 'event_type', 'description', 'event_data', 'trigger_source',
                  'triggered_by_id', 'created_at']
        read_only_fields = ['trigger_source', 'created_at']


class ProductionUpdateSerializer(serializers.ModelSerializer):
    order_id = serializers.IntegerField(source='order.id', read_only=True)
    created_by_id = serializers.IntegerField(source='created_by.id', read_only=True, allow_null=True)

    class Meta:
        model = ProductionUpdate
        fields = ['id', 'order_id', 'stage', 'status', 'description', 'photos', 'documents',
                  'estimated_completion', 'actual_completion', 'created_by_id', 'visible_to_customer',
                  'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']


class SampleSerializer(serializers.ModelSerializer):
    user_id = serializers.IntegerField(source='user.id', read_only=True, allow_null=True)
    total_price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, coerce_to_string=False,
                                           required=False)

    class Meta:
        model = Sample
        fields = ['id', 'sample_number', 'user_id', 'products', 'total_price', 'status', 'shipping_address',
                  'tracking_number', 'converted_order', 'stripe_payment_intent_id', 'created_at', 'updated_at']
        read_only_fields = ['sample_number', 'stripe_payment_intent_id', 'created_at', 'updated_at']

    def validate_products(self, value):
        if not isinstance(value, list):
            raise serializers.ValidationError('products must be a list')
        return value
