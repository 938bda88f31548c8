from rest_framework import serializers
from .models import Payment


class PaymentSerializer(serializers.ModelSerializer):
    order_id = serializers.IntegerField(source='order.id', read_only=True)

    class Meta:
        model = Payment
        fields = [
            'id', 'order_id', 'phase', 'amount_cents', 'currency', 'status', 'stripe_payment_intent_id',
            'stripe_checkout_session_id', 'stripe_charge_id', 'paid_at', 'metadata', 'created_at', 'updated_at'
        ]
        read_only_fields = fields


class CheckoutRequestSerializer(serializers.Serializer):
    order_id = serializers.IntegerField()
    phase = serializers.ChoiceField(choices=Payment.PHASE_CHOICES, error_messages={
        'invalid_choice': 'phase must be deposit or balance',
    })


class InvoiceRequestSerializer(serializers.Serializer):
    order_id = serializers.IntegerField()
    customer_email = serializers.EmailField(required=False)


class ReconcileRequestSerializer(serializers.Serializer):
    session_id = serializers.CharField(required=False, allow_blank=True)
    order_id = serializers.IntegerField(required=False)
    phase = serializers.ChoiceField(choices=Payment.PHASE_CHOICES, required=False, error_messages={
        'invalid_choice': 'phase must be deposit or balance',
    })

    def validate(self, attrs):
        if not attrs.get('session_id') and not (attrs.get('order_id') and attrs.get('phase')):
            raise serializers.ValidationError('Provide session_id or (order_id and phase)')
        return attrs
