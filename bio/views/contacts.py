"""
Emergency contacts of the caller's medical profile.
"""
from __future__ import annotations

import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from bio.models import EmergencyContact, MedicalProfile
from bio.serializers.contact import EmergencyContactSerializer
from bio.services.profiles import contacts_for, serialize_contact

logger = logging.getLogger(__name__)


def _profile_or_404(user) -> MedicalProfile:
    profile = MedicalProfile.objects.filter(user=user).first()
    if not profile:
        raise NotFound('Profile not found. Please create a profile first.')
    return profile


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def contacts(request):
    profile = _profile_or_404(request.user)
    if request.method == 'GET':
        rows = contacts_for(profile)
        return Response({'ok': True, 'contacts': [serialize_contact(c, include_id=True) for c in rows]})

    s = EmergencyContactSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    contact = EmergencyContact.objects.create(
        medical_profile=profile,
        name=vd['name'],
        relationship=vd.get('relationship') or None,
        phone=vd['phone'],
        email=vd.get('email'),
        priority=vd.get('priority', 1),
    )
    return Response({
        'ok': True,
        'message': 'Emergency contact added successfully',
        'contact': serialize_contact(contact, include_id=True),
    }, status=status.HTTP_201_CREATED)


@api_view(['PUT', 'DELETE'])
@permission_classes([IsAuthenticated])
def contact_detail(request, pk: int):
    profile = _profile_or_404(request.user)
    contact = EmergencyContact.objects.filter(pk=pk, medical_profile=profile).first()
    if not contact:
        raise NotFound('Emergency contact not found')

    if request.method == 'DELETE':
        contact.delete()
        logger.info("contact %s removed from profile %s", pk, profile.id)
        return Response({'ok': True, 'message': 'Emergency contact deleted successfully'})

    s = EmergencyContactSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    fields = []
    for attr in ('name', 'relationship', 'phone', 'email', 'priority'):
        if attr in vd:
            value = vd[attr]
            if attr == 'relationship':
                value = value or None
            setattr(contact, attr, value)
            fields.append(attr)
    if fields:
        contact.save(update_fields=fields)
    return Response({
        'ok': True,
        'message': 'Emergency contact updated successfully',
        'contact': serialize_contact(contact, include_id=True),
    })
