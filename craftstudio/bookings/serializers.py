from rest_framework import serializers
from .models import DesignerBooking


class DesignerBookingSerializer(serializers.ModelSerializer):
    user_id = serializers.IntegerField(source='user.id', read_only=True, allow_null=True)
    company_id = serializers.IntegerField(source='company.id', read_only=True, allow_null=True)
    price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, coerce_to_string=False)
    duration_minutes = serializers.IntegerField(min_value=15, required=False, default=60)

    class Meta:
        model = DesignerBooking
        fields = [
            'id', 'user_id', 'company_id', 'designer_id', 'consultation_type', 'scheduled_date',
            'duration_minutes', 'status', 'price', 'meeting_link', 'notes', 'project_files',
            'stripe_payment_intent_id', 'created_at', 'updated_at'
        ]
        read_only_fields = ['stripe_payment_intent_id', 'created_at', 'updated_at']
