from rest_framework import serializers
from .models import Product, ProductVariant
from .validators import validate_lead_time_range, validate_business_calendar


class ProductVariantSerializer(serializers.ModelSerializer):
    product_id = serializers.IntegerField(source='product.id', read_only=True)

    class Meta:
        model = ProductVariant
        fields = [
            'id', 'product_id', 'color_name', 'color_hex', 'stock', 'price', 'image_url',
            'front_image_url', 'back_image_url', 'sleeve_image_url', 'active', 'created_at', 'updated_at'
        ]
        read_only_fields = ['created_at', 'updated_at']


class ProductVariantCreateSerializer(serializers.ModelSerializer):
    color_hex = serializers.RegexField(r'^#[0-9A-Fa-f]{6}$', required=False, default='#000000')
    stock = serializers.IntegerField(min_value=0, required=False, default=0)

    class Meta:
        model = ProductVariant
        fields = [
            'color_name', 'color_hex', 'stock', 'price', 'image_url',
            'front_image_url', 'back_image_url', 'sleeve_image_url', 'active'
        ]


class ProductSerializer(serializers.ModelSerializer):
    base_price = serializers.DecimalField(max_digits=10, decimal_places=2, coerce_to_string=False)

    class Meta:
        model = Product
        fields = [
            'id', 'name', 'category', 'base_price', 'description', 'image_url', 'images', 'materials',
            'colors', 'sizes', 'minimum_quantity', 'moq', 'specifications', 'active', 'lead_times',
            'created_at', 'updated_at'
        ]
        read_only_fields = ['lead_times', 'created_at', 'updated_at']

    def validate_base_price(self, value):
        if value < 0:
            raise serializers.ValidationError('base_price must be >= 0')
        return value


class InventoryRowSerializer(serializers.ModelSerializer):
    """Admin inventory row: a product with its variants and summed stock"""
    variants = ProductVariantSerializer(many=True, read_only=True)
    total_stock = serializers.SerializerMethodField()

    class Meta:
        model = Product
        fields = ['id', 'name', 'category', 'base_price', 'image_url', 'active', 'variants', 'total_stock']

    def get_total_stock(self, obj):
        return sum(v.stock for v in obj.variants.all())


class StockAdjustmentSerializer(serializers.Serializer):
    delta = serializers.IntegerField()
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True, default='')

    def validate_delta(self, value):
        if value == 0:
            raise serializers.ValidationError('delta must not be zero')
        return value


class LeadTimeDefaultsSerializer(serializers.Serializer):
    production = serializers.JSONField()
    shipping = serializers.JSONField()
    business_calendar = serializers.JSONField()

    def validate_production(self, value):
        return validate_lead_time_range(value, 'production')

    def validate_shipping(self, value):
        return validate_lead_time_range(value, 'shipping')

    def validate_business_calendar(self, value):
        return validate_business_calendar(value)
