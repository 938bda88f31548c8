from rest_framework import serializers
from .models import Company, Profile


class CompanySerializer(serializers.ModelSerializer):
    class Meta:
        model = Company
        fields = ['id', 'name', 'industry', 'size', 'address', 'phone', 'logo_url', 'billing_address',
                  'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']


class ProfileSerializer(serializers.ModelSerializer):
    user_id = serializers.IntegerField(source='user.id', read_only=True)
    company_id = serializers.IntegerField(source='company.id', read_only=True, default=None)
    company_name = serializers.CharField(source='company.name', read_only=True, default=None)

    class Meta:
        model = Profile
        fields = ['id', 'user_id', 'company_id', 'company_name', 'first_name', 'last_name', 'role', 'phone',
                  'created_at', 'updated_at']
        read_only_fields = ['role', 'created_at', 'updated_at']


class ProfileUpdateSerializer(serializers.Serializer):
    first_name = serializers.CharField(max_length=150, required=False, allow_blank=True)
    last_name = serializers.CharField(max_length=150, required=False, allow_blank=True)
    phone = serializers.CharField(max_length=30, required=False, allow_blank=True)
    company_name = serializers.CharField(max_length=200, required=False, allow_blank=True)
