from django.conf import settings
from rest_framework import serializers
from .models import FileUpload


class FileUploadSerializer(serializers.ModelSerializer):
    order_id = serializers.IntegerField(source='order.id', read_only=True, allow_null=True)
    booking_id = serializers.IntegerField(source='booking.id', read_only=True, allow_null=True)

    class Meta:
        model = FileUpload
        fields = ['id', 'order_id', 'booking_id', 'file_name', 'file_size', 'file_type', 'file_url',
                  'file_purpose', 'uploaded_at']
        read_only_fields = fields


class UploadRequestSerializer(serializers.Serializer):
    file = serializers.FileField(error_messages={'required': 'No file', 'empty': 'No file'})
    file_purpose = serializers.ChoiceField(choices=FileUpload.PURPOSE_CHOICES, required=False, default='artwork')
    order_id = serializers.IntegerField(required=False, allow_null=True)
    booking_id = serializers.IntegerField(required=False, allow_null=True)

    def validate_file(self, value):
        if value.size > settings.FILE_UPLOAD_MAX_BYTES:
            raise serializers.ValidationError(
                f'File too large (max {settings.FILE_UPLOAD_MAX_BYTES // (1024 * 1024)} MB)'
            )
        return value
