"""
Public bio page endpoints.

``GET /api/bio/<slug>`` returns the decrypted bio page of open profiles and
asks for a PIN on ``pin_protected`` ones; ``POST /api/bio/<slug>/verify-pin``
submits that PIN.  Both go through :class:`~bio.services.gate.BioAccessGate`,
which logs every attempt.
"""
from __future__ import annotations

from rest_framework.decorators import (
    api_view, authentication_classes, permission_classes, throttle_classes,
)
from rest_framework.exceptions import NotFound, ValidationError
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle

from bio.models import MedicalProfile
from bio.serializers.profile import PinVerificationSerializer
from bio.services.access_log import ClientInfo
from bio.services.codec import get_codec
from bio.services.gate import BioAccessGate


def _profile_by_slug(slug: str) -> MedicalProfile:
    profile = MedicalProfile.objects.select_related('user').filter(user__bio_slug=slug).first()
    if not profile:
        raise NotFound('Bio not found')
    return profile


@api_view(['GET'])
@authentication_classes([])
@permission_classes([AllowAny])
def bio_page(request, slug: str):
    profile = _profile_by_slug(slug)
    payload = BioAccessGate(get_codec()).admit(profile, client=ClientInfo.from_request(request))
    return Response({'ok': True, 'bio': payload})


@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
@throttle_classes([ScopedRateThrottle])
def verify_pin(request, slug: str):
    s = PinVerificationSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    profile = _profile_by_slug(slug)
    if profile.privacy_level != MedicalProfile.PRIVACY_PIN or not profile.pin_hash:
        raise ValidationError({'pin': ['This bio is not PIN protected']})
    payload = BioAccessGate(get_codec()).admit(
        profile, client=ClientInfo.from_request(request), pin=s.validated_data['pin'],
    )
    return Response({'ok': True, 'message': 'PIN verified successfully', 'bio': payload})

verify_pin.cls.throttle_scope = 'pin_verify'
