import bleach
from rest_framework import serializers

BLOOD_TYPES = ['A+', 'A-', 'B+', 'B-', 'AB+', 'AB-', 'O+', 'O-', '']
PRIVACY_LEVELS = ['public', 'link_only', 'pin_protected']


class MedicalProfileSerializer(serializers.Serializer):
    """Validates profile input.

    Pass ``partial=True`` for updates.  ``context['has_pin']`` tells the
    serializer whether the stored profile already has a PIN hash, which is
    needed to enforce that ``pin_protected`` always comes with a PIN.
    """
    fullName = serializers.CharField(max_length=255)
    dateOfBirth = serializers.DateField(input_formats=['%Y-%m-%d'])
    bloodType = serializers.ChoiceField(choices=BLOOD_TYPES, required=False, allow_null=True, allow_blank=True)
    medicalConditions = serializers.ListField(child=serializers.CharField(max_length=500), required=False, allow_null=True)
    allergies = serializers.ListField(child=serializers.CharField(max_length=500), required=False, allow_null=True)
    currentMedications = serializers.ListField(child=serializers.CharField(max_length=500), required=False, allow_null=True)
    medicalHistory = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=10000)
    doctorNotes = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=10000)
    privacyLevel = serializers.ChoiceField(choices=PRIVACY_LEVELS, default='link_only')
    pin = serializers.RegexField(
        r'^\d{4}$', required=False, write_only=True,
        error_messages={'invalid': 'PIN must be exactly 4 digits'},
    )

    def validate_fullName(self, v):
        v = bleach.clean((v or '').strip(), strip=True)
        if not v:
            raise serializers.ValidationError('Full name is required')
        return v

    def validate(self, attrs):
        level = attrs.get('privacyLevel')
        if level == 'pin_protected' and not attrs.get('pin') and not self.context.get('has_pin'):
            raise serializers.ValidationError({'pin': 'A 4 digit PIN is required for pin_protected bio pages'})
        return attrs


class PinVerificationSerializer(serializers.Serializer):
    pin = serializers.RegexField(r'^\d{4}$', error_messages={'invalid': 'PIN must be 4 digits'})


class AvatarUploadSerializer(serializers.Serializer):
    avatar = serializers.FileField()
