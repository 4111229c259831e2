from rest_framework import serializers
from .models import User


class UserSerializer(serializers.ModelSerializer):
    """Basic user serializer for profile display."""

    class Meta:
        model = User
        fields = [
            'id',
            'email',
            'display_name',
            'phone_number',
            'role',
            'created_at',
            'last_login',
        ]
        read_only_fields = ['id', 'email', 'role', 'created_at', 'last_login']


class UserLoginSerializer(serializers.Serializer):
    """Serializer for user login."""

    email = serializers.EmailField(required=True)
    password = serializers.CharField(
        required=True,
        write_only=True,
        style={'input_type': 'password'}
    )


class CallerScopeSerializer(serializers.Serializer):
    """Role and scoping ids of the authenticated user."""

    role = serializers.CharField()
    user_id = serializers.UUIDField()
    market_id = serializers.UUIDField(allow_null=True)
    chairman_id = serializers.UUIDField(allow_null=True)
    caretaker_id = serializers.UUIDField(allow_null=True)
    trader_id = serializers.UUIDField(allow_null=True)
    good_boy_id = serializers.UUIDField(allow_null=True)

