from rest_framework import serializers
from .calculator import MAX_PRINTS
from .models import PricingRule


class PricingRuleSerializer(serializers.ModelSerializer):
    class Meta:
        model = PricingRule
        fields = [
            'id', 'product_type', 'customization_type', 'quantity_min', 'quantity_max', 'base_price',
            'customization_cost', 'discount_percentage', 'active', 'created_at', 'updated_at'
        ]
        read_only_fields = ['created_at', 'updated_at']

    def validate(self, attrs):
        quantity_min = attrs.get('quantity_min', getattr(self.instance, 'quantity_min', None))
        quantity_max = attrs.get('quantity_max', getattr(self.instance, 'quantity_max', None))
        if quantity_max is not None and quantity_min is not None and quantity_max < quantity_min:
            raise serializers.ValidationError({'quantity_max': 'quantity_max must be >= quantity_min'})
        return attrs


class PrintSerializer(serializers.Serializer):
    location = serializers.CharField(max_length=50)
    method = serializers.CharField(max_length=50, required=False, allow_blank=True, default='')
    active = serializers.BooleanField(required=False, default=True)


class QuoteRequestSerializer(serializers.Serializer):
    product_type = serializers.CharField(max_length=100)
    customization_type = serializers.CharField(max_length=100, required=False, allow_blank=True, default='')
    quantity = serializers.IntegerField(min_value=1)
    prints = PrintSerializer(many=True, required=False, default=list)

    def validate_prints(self, value):
        if len(value) > MAX_PRINTS:
            raise serializers.ValidationError(f'At most {MAX_PRINTS} prints are allowed')
        return value
