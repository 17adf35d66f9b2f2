"""
Medical profile endpoints for the profile owner.

``/api/profile`` creates, reads, updates and deletes the caller's single
medical profile.  Medical attributes are encrypted before they reach the
database and decrypted on read; the read response lists any field that
could not be decrypted in ``undecodableFields`` instead of hiding it.
``/api/profile/avatar`` stores an avatar image in Django's default storage.
"""
from __future__ import annotations

import logging
import uuid

from django.conf import settings
from django.core.files.storage import default_storage
from django.db import IntegrityError, transaction
from rest_framework import status
from rest_framework.decorators import api_view, parser_classes, permission_classes
from rest_framework.exceptions import NotFound, ValidationError
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from bio.exceptions import Conflict
from bio.models import MedicalProfile
from bio.serializers.profile import AvatarUploadSerializer, MedicalProfileSerializer
from bio.services.codec import get_codec
from bio.services.profiles import apply_profile_data, bio_url, serialize_own_profile

logger = logging.getLogger(__name__)

# stored extension comes from the accepted content type, never from the client file name
AVATAR_EXTENSIONS = {
    'image/png': '.png',
    'image/jpeg': '.jpg',
    'image/gif': '.gif',
    'image/webp': '.webp',
}


def _own_profile_or_404(user) -> MedicalProfile:
    profile = MedicalProfile.objects.select_related('user').filter(user=user).first()
    if not profile:
        raise NotFound('Profile not found. Please create one first.')
    return profile


@api_view(['GET', 'POST', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated])
def profile_view(request):
    if request.method == 'POST':
        return _create_profile(request)
    if request.method == 'PUT':
        return _update_profile(request)
    if request.method == 'DELETE':
        deleted, _ = MedicalProfile.objects.filter(user=request.user).delete()
        logger.info("profile of user %s deleted (%s rows)", request.user.id, deleted)
        return Response({'ok': True, 'message': 'Profile deleted successfully'})
    profile = _own_profile_or_404(request.user)
    return Response({'ok': True, 'profile': serialize_own_profile(profile, get_codec())})


def _create_profile(request):
    if MedicalProfile.objects.filter(user=request.user).exists():
        raise Conflict('Profile already exists. Use update endpoint instead.')
    s = MedicalProfileSerializer(data=request.data, context={'has_pin': False})
    s.is_valid(raise_exception=True)
    profile = MedicalProfile(user=request.user)
    apply_profile_data(profile, s.validated_data, get_codec())
    try:
        with transaction.atomic():
            profile.save()
    except IntegrityError:
        raise Conflict('Profile already exists. Use update endpoint instead.')
    logger.info("profile %s created for user %s", profile.id, request.user.id)
    return Response({
        'ok': True,
        'message': 'Medical profile created successfully',
        'profile': {
            'id': profile.id,
            'fullName': profile.full_name,
            'bioUrl': bio_url(request.user.bio_slug),
            'privacyLevel': profile.privacy_level,
        },
    }, status=status.HTTP_201_CREATED)


def _update_profile(request):
    profile = _own_profile_or_404(request.user)
    s = MedicalProfileSerializer(data=request.data, partial=True, context={'has_pin': profile.has_pin})
    s.is_valid(raise_exception=True)
    changed = apply_profile_data(profile, s.validated_data, get_codec())
    if changed:
        profile.save(update_fields=changed + ['updated_at'])
    return Response({
        'ok': True,
        'message': 'Profile updated successfully',
        'profile': {
            'id': profile.id,
            'fullName': profile.full_name,
            'privacyLevel': profile.privacy_level,
            'updatedAt': profile.updated_at.isoformat(),
        },
    })


@api_view(['POST'])
@permission_classes([IsAuthenticated])
@parser_classes([MultiPartParser, FormParser])
def avatar_upload_view(request):
    profile = _own_profile_or_404(request.user)
    s = AvatarUploadSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    upload = s.validated_data['avatar']

    content_type = (getattr(upload, 'content_type', '') or '').lower()
    ext = AVATAR_EXTENSIONS.get(content_type)
    allowed = any(content_type.startswith(t.strip()) for t in settings.AVATAR_ALLOWED_TYPES if t.strip())
    if not ext or not allowed:
        raise ValidationError({'avatar': ['Only image files are allowed']})
    if upload.size > settings.AVATAR_MAX_MB * 1024 * 1024:
        raise ValidationError({'avatar': [f'File exceeds {settings.AVATAR_MAX_MB}MB']})

    path = default_storage.save(f"avatars/{profile.id}/{uuid.uuid4().hex}{ext}", upload)
    profile.avatar_url = request.build_absolute_uri(default_storage.url(path))
    profile.save(update_fields=['avatar_url', 'updated_at'])
    return Response({'ok': True, 'message': 'Avatar uploaded successfully', 'avatarUrl': profile.avatar_url})
