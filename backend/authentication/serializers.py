from rest_framework import serializers
from django.contrib.auth import authenticate
from .models import User


class UserLiteSerializer(serializers.ModelSerializer):
    """A lightweight serializer for User model, showing only essential info plus computed full_name."""

    full_name = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ['id', 'unique_id', 'email', 'first_name', 'last_name', 'full_name', 'role']

    def get_full_name(self, obj):
        return obj.name


class UserSerializer(serializers.ModelSerializer):
    """A detailed serializer for the User model."""
    admin = UserLiteSerializer(read_only=True)
    super_admin = UserLiteSerializer(read_only=True)

    class Meta:
        model = User
        fields = [
            'id', 'unique_id', 'email', 'first_name', 'last_name', 'role',
            'contact_number', 'location', 'admin', 'super_admin',
            'bio_submitted', 'guarantor_submitted', 'commitment_submitted',
            'overall_verification_status', 'locked', 'is_active',
        ]
        read_only_fields = fields


class UserLoginSerializer(serializers.Serializer):
    """Serializer for user login."""
    email = serializers.EmailField(required=True)
    password = serializers.CharField(required=True, write_only=True, style={'input_type': 'password'})

    def validate(self, attrs):
        email = attrs.get('email')
        password = attrs.get('password')
        user = authenticate(request=self.context.get('request'), email=email, password=password)
        if not user:
            raise serializers.ValidationError("Invalid credentials.", code='authorization')
        if not user.is_active:
            raise serializers.ValidationError("User account is disabled.", code='authorization')
        attrs['user'] = user
        return attrs


class AuthSuccessResponseSerializer(serializers.Serializer):
    token = serializers.CharField()
    user = UserSerializer()
