"""
Administrative endpoints.

Only users with the ``admin`` role may call these.  Listings never include
decrypted medical data; profiles are shown by identity fields only.
"""
from __future__ import annotations

import logging
from datetime import timedelta

from django.utils import timezone
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound, ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..models import AccessLog, EmergencyContact, InvitationKey, MedicalProfile, User
from ..permissions import IsAdminRole
from ..serializers.admin import GenerateKeysSerializer, PageQuerySerializer
from ..services.accounts import generate_invitation_keys, serialize_user

logger = logging.getLogger(__name__)


def _page(request):
    q = PageQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    return q.validated_data['limit'], q.validated_data['offset']


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def admin_stats(request):
    since = timezone.now() - timedelta(hours=24)
    recent = AccessLog.objects.filter(accessed_at__gte=since)
    return Response({'ok': True, 'stats': {
        'totalUsers': User.objects.count(),
        'totalProfiles': MedicalProfile.objects.count(),
        'totalContacts': EmergencyContact.objects.count(),
        'pinProtectedProfiles': MedicalProfile.objects.filter(privacy_level=MedicalProfile.PRIVACY_PIN).count(),
        'accessLast24h': recent.count(),
        'deniedLast24h': recent.filter(access_granted=False).count(),
        'unusedKeys': InvitationKey.objects.filter(is_used=False).count(),
    }})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def admin_users(request):
    limit, offset = _page(request)
    qs = User.objects.order_by('-date_joined', '-id')
    rows = [
        {**serialize_user(u, detailed=True), 'hasProfile': hasattr(u, 'medical_profile')}
        for u in qs.select_related('medical_profile')[offset:offset + limit]
    ]
    return Response({'ok': True, 'users': rows, 'total': qs.count(), 'limit': limit, 'offset': offset})


@api_view(['DELETE'])
@permission_classes([IsAuthenticated, IsAdminRole])
def admin_delete_user(request, pk: int):
    if pk == request.user.id:
        raise ValidationError({'userId': ['Cannot delete your own account']})
    deleted, _ = User.objects.filter(pk=pk).delete()
    if not deleted:
        raise NotFound('User not found')
    logger.info("admin %s deleted user %s", request.user.id, pk)
    return Response({'ok': True, 'message': 'User deleted successfully'})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def admin_profiles(request):
    limit, offset = _page(request)
    qs = MedicalProfile.objects.select_related('user').order_by('-created_at', '-id')
    rows = [{
        'id': p.id,
        'userId': p.user_id,
        'email': p.user.email,
        'bioSlug': p.user.bio_slug,
        'fullName': p.full_name,
        'privacyLevel': p.privacy_level,
        'hasPinProtection': p.has_pin,
        'createdAt': p.created_at.isoformat(),
        'updatedAt': p.updated_at.isoformat(),
    } for p in qs[offset:offset + limit]]
    return Response({'ok': True, 'profiles': rows, 'total': qs.count(), 'limit': limit, 'offset': offset})


@api_view(['DELETE'])
@permission_classes([IsAuthenticated, IsAdminRole])
def admin_delete_profile(request, pk: int):
    deleted, _ = MedicalProfile.objects.filter(pk=pk).delete()
    if not deleted:
        raise NotFound('Profile not found')
    logger.info("admin %s deleted profile %s", request.user.id, pk)
    return Response({'ok': True, 'message': 'Profile deleted successfully'})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def admin_generate_keys(request):
    s = GenerateKeysSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    amount = s.validated_data['amount']
    keys = generate_invitation_keys(request.user, amount)
    return Response({'ok': True, 'message': f'{amount} keys generated successfully', 'keys': keys},
                    status=201)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def admin_keys(request):
    limit, offset = _page(request)
    qs = InvitationKey.objects.select_related('created_by', 'used_by').order_by('-created_at', '-id')
    rows = [{
        'id': k.id,
        'keyCode': k.key_code,
        'isUsed': k.is_used,
        'createdBy': k.created_by.email if k.created_by else None,
        'usedBy': k.used_by.email if k.used_by else None,
        'createdAt': k.created_at.isoformat(),
        'usedAt': k.used_at.isoformat() if k.used_at else None,
    } for k in qs[offset:offset + limit]]
    return Response({'ok': True, 'keys': rows, 'total': qs.count(), 'limit': limit, 'offset': offset})
