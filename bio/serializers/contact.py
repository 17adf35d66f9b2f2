import bleach
from rest_framework import serializers


class EmergencyContactSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    relationship = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=100)
    phone = serializers.CharField(max_length=32)
    email = serializers.EmailField(required=False, allow_blank=True, allow_null=True)
    priority = serializers.IntegerField(min_value=1, default=1)

    def validate_name(self, v):
        v = bleach.clean((v or '').strip(), strip=True)
        if not v:
            raise serializers.ValidationError('Name is required')
        return v

    def validate_phone(self, v):
        v = bleach.clean((v or '').strip(), strip=True)
        if not v:
            raise serializers.ValidationError('Phone is required')
        return v

    def validate_email(self, v):
        return v or None
