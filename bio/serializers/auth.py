import bleach
from rest_framework import serializers


class RegisterSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(min_length=8, write_only=True)
    username = serializers.RegexField(
        r'^[a-zA-Z0-9_-]+$', min_length=3, max_length=50,
        error_messages={'invalid': 'Username can only contain letters, numbers, hyphens, and underscores'},
    )
    inviteKey = serializers.CharField(required=False, allow_blank=True, max_length=50)

    def validate_email(self, v):
        return v.strip().lower()

    def validate_inviteKey(self, v):
        v = bleach.clean((v or '').strip(), strip=True)
        return v or None


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField()

    def validate_email(self, v):
        return v.strip().lower()

    def validate_password(self, v):
        if not v:
            raise serializers.ValidationError('Password is required')
        return v


class LogoutSerializer(serializers.Serializer):
    refresh = serializers.CharField(required=False, allow_blank=True)
