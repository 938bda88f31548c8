from rest_framework import serializers
from craftstudio.orders.serializers import OrderSerializer
from .models import GuestDraft


class GuestDraftSerializer(serializers.ModelSerializer):
    type = serializers.ChoiceField(choices=GuestDraft.TYPE_CHOICES, required=False, default=GuestDraft.TYPE_QUOTE)

    class Meta:
        model = GuestDraft
        fields = ['id', 'type', 'info', 'address', 'draft', 'totals', 'pricing', 'metadata',
                  'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']
        extra_kwargs = {field: {'allow_null': True}
                        for field in ('info', 'address', 'draft', 'totals', 'pricing', 'metadata')}

    def validate(self, attrs):
        # JSON blobs default to {} when sent as null
        for field in ('info', 'address', 'draft', 'totals', 'pricing', 'metadata'):
            if field in attrs and attrs[field] is None:
                attrs[field] = {}
        return attrs


class MagicLinkRequestSerializer(serializers.Serializer):
    email = serializers.EmailField(error_messages={'invalid': 'Valid email required',
                                                   'required': 'Valid email required',
                                                   'blank': 'Valid email required'})
    order_id = serializers.IntegerField(required=False, allow_null=True)

    def validate_email(self, value):
        return value.lower().strip()


class MagicLinkVerifySerializer(serializers.Serializer):
    token = serializers.CharField(error_messages={'required': 'Missing token', 'blank': 'Missing token'})


class GuestOrderSerializer(OrderSerializer):
    """Order as shown to its guest owner"""

    class Meta(OrderSerializer.Meta):
        fields = [f for f in OrderSerializer.Meta.fields if f not in (
            'admin_notes', 'user_id', 'stripe_deposit_payment_intent', 'stripe_balance_payment_intent',
            'lead_time_snapshot',
        )]
        read_only_fields = fields


class GuestOrderCreateSerializer(serializers.Serializer):
    email = serializers.EmailField(error_messages={'invalid': 'Valid email required',
                                                   'required': 'Valid email required',
                                                   'blank': 'Valid email required'})
    product_category = serializers.CharField(max_length=100, required=False, default='custom')
    product_name = serializers.CharField(max_length=200, required=False, default='Custom Product')
    quantity = serializers.IntegerField(min_value=1, required=False, default=1)
    unit_price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False, default=0)
    total_amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False)
    customization = serializers.JSONField(required=False, default=dict)
    colors = serializers.ListField(required=False, default=list)
    sizes = serializers.DictField(required=False, default=dict)
    print_locations = serializers.ListField(required=False, default=list)
    shipping_address = serializers.DictField(required=False, default=dict)
    customer_name = serializers.CharField(required=False, allow_blank=True, default='', max_length=200)

    def validate_email(self, value):
        return value.lower().strip()
