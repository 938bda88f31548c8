from rest_framework import serializers
from .models import User, Setting, AuditLog


class UserSerializer(serializers.ModelSerializer):
    full_name = serializers.CharField(read_only=True)

    class Meta:
        model = User
        fields = ['id', 'email', 'first_name', 'last_name', 'full_name', 'role', 'company_name',
                  'phone', 'address', 'is_active', 'last_login', 'created_at', 'updated_at']
        read_only_fields = ['role', 'is_active', 'last_login', 'created_at', 'updated_at']


class UserCreateSerializer(serializers.ModelSerializer):
    """Registration payload; role is decided by the view, never by the client"""
    password = serializers.CharField(write_only=True, min_length=6)
    first_name = serializers.CharField(max_length=150)
    last_name = serializers.CharField(max_length=150)

    class Meta:
        model = User
        fields = ['email', 'password', 'first_name', 'last_name', 'company_name', 'phone', 'address']

    def validate_email(self, value):
        return value.lower().strip()

    def create(self, validated_data):
        password = validated_data.pop('password')
        role = validated_data.pop('role', User.ROLE_CUSTOMER)
        address = validated_data.pop('address', None) or {}
        address.setdefault('country', 'US')
        return User.objects.create_user(password=password, role=role, address=address, **validated_data)


class ProfileUpdateSerializer(serializers.Serializer):
    first_name = serializers.CharField(max_length=150, required=False, allow_blank=False)
    last_name = serializers.CharField(max_length=150, required=False, allow_blank=False)
    company_name = serializers.CharField(max_length=200, required=False, allow_blank=True)
    phone = serializers.CharField(max_length=30, required=False, allow_blank=True)
    address = serializers.DictField(required=False)

    def update(self, instance, validated_data):
        for field in ('first_name', 'last_name', 'company_name', 'phone'):
            if field in validated_data:
                setattr(instance, field, validated_data[field])
        if validated_data.get('address'):
            instance.address = {**(instance.address or {}), **validated_data['address']}
        instance.save()
        return instance


class PasswordChangeSerializer(serializers.Serializer):
    current_password = serializers.CharField()
    new_password = serializers.CharField(min_length=6)


class SettingSerializer(serializers.ModelSerializer):
    class Meta:
        model = Setting
        fields = ['id', 'key', 'value', 'description', 'updated_at']


class AuditLogSerializer(serializers.ModelSerializer):
    user_email = serializers.EmailField(source='user.email', read_only=True, default=None)

    class Meta:
        model = AuditLog
        fields = ['id', 'user', 'user_email', 'action', 'model_name', 'object_id', 'object_name',
                  'changes', 'ip_address', 'created_at']
