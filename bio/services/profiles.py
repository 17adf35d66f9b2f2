"""
Medical profile persistence helpers.

Encrypts validated profile input into model columns and turns stored
profiles back into the JSON shapes returned by the API.  Views call these
helpers; only this module knows which column holds which attribute.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

from django.conf import settings
from django.contrib.auth.hashers import make_password

from bio.models import EmergencyContact, MedicalProfile
from bio.services.codec import DecodeResult, FieldKind, MedicalDataCodec

logger = logging.getLogger(__name__)

# API key -> model attribute of each encrypted field
API_FIELD_NAMES = {
    'bloodType': 'blood_type',
    'medicalConditions': 'medical_conditions',
    'allergies': 'allergies',
    'currentMedications': 'current_medications',
    'medicalHistory': 'medical_history',
    'doctorNotes': 'doctor_notes',
}


def bio_url(slug: str) -> str:
    return f"{settings.FRONTEND_URL}/bio/{slug}"


def hash_pin(pin: str) -> str:
    return make_password(pin)


def apply_profile_data(profile: MedicalProfile, data: Dict[str, Any], codec: MedicalDataCodec) -> List[str]:
    """Copy validated API data onto ``profile``, encrypting medical fields.

    Only keys present in ``data`` are touched, so the same helper serves
    create and partial update.  Returns the names of the changed columns.
    """
    changed: List[str] = []
    if 'fullName' in data:
        profile.full_name = data['fullName']
        changed.append('full_name')
    if 'dateOfBirth' in data:
        profile.date_of_birth = data['dateOfBirth']
        changed.append('date_of_birth')
    for api_key, attr in API_FIELD_NAMES.items():
        if api_key not in data:
            continue
        column, kind = MedicalProfile.ENCRYPTED_FIELDS[attr]
        setattr(profile, column, codec.encode_field(data[api_key], kind))
        changed.append(column)
    level = data.get('privacyLevel', profile.privacy_level)
    # a PIN only means something on a pin_protected page
    if data.get('pin') and level == MedicalProfile.PRIVACY_PIN:
        profile.pin_hash = hash_pin(data['pin'])
        changed.append('pin_hash')
    if 'privacyLevel' in data:
        profile.privacy_level = data['privacyLevel']
        changed.append('privacy_level')
    return changed


def decode_profile(profile: MedicalProfile, codec: MedicalDataCodec) -> Tuple[Dict[str, Any], List[str]]:
    """Decrypt every medical field of ``profile``.

    Returns the API-keyed values and the API keys that failed to decode.
    Failed or absent list fields come back as ``[]``, scalars as ``None``.
    """
    values: Dict[str, Any] = {}
    failed: List[str] = []
    for api_key, attr in API_FIELD_NAMES.items():
        column, kind = MedicalProfile.ENCRYPTED_FIELDS[attr]
        result: DecodeResult = codec.decode_field(getattr(profile, column), kind)
        if not result.ok:
            logger.warning(
                "undecodable field %s on profile %s: %s", column, profile.pk, type(result.error).__name__
            )
            failed.append(api_key)
        values[api_key] = result.value_or([] if kind is FieldKind.LIST else None)
    return values, failed


def serialize_contact(contact: EmergencyContact, *, include_id: bool = False) -> dict:
    data = {
        'name': contact.name,
        'relationship': contact.relationship,
        'phone': contact.phone,
        'email': contact.email,
        'priority': contact.priority,
    }
    if include_id:
        data = {'id': contact.id, **data, 'createdAt': contact.created_at.isoformat()}
    return data


def contacts_for(profile: MedicalProfile) -> List[EmergencyContact]:
    return list(EmergencyContact.objects.filter(medical_profile=profile).order_by('priority', 'id'))


def build_bio_payload(profile: MedicalProfile, codec: MedicalDataCodec,
                      contacts: Iterable[EmergencyContact]) -> dict:
    values, _ = decode_profile(profile, codec)
    return {
        'fullName': profile.full_name,
        'dateOfBirth': profile.date_of_birth.isoformat() if profile.date_of_birth else None,
        'avatarUrl': profile.avatar_url,
        **values,
        'emergencyContacts': [serialize_contact(c) for c in contacts],
        'privacyLevel': profile.privacy_level,
    }


def serialize_own_profile(profile: MedicalProfile, codec: MedicalDataCodec) -> dict:
    values, failed = decode_profile(profile, codec)
    slug: Optional[str] = profile.user.bio_slug if profile.user_id else None
    return {
        'id': profile.id,
        'fullName': profile.full_name,
        'dateOfBirth': profile.date_of_birth.isoformat() if profile.date_of_birth else None,
        'avatarUrl': profile.avatar_url,
        **values,
        'privacyLevel': profile.privacy_level,
        'hasPinProtection': profile.has_pin,
        'bioSlug': slug,
        'bioUrl': bio_url(slug) if slug else None,
        'undecodableFields': failed,
        'createdAt': profile.created_at.isoformat(),
        'updatedAt': profile.updated_at.isoformat(),
    }
