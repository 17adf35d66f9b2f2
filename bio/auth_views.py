"""
Authentication views.

Registration, email/password login, current-user lookup and JWT refresh /
logout.  Kept apart from ``bio.authentication`` so that DRF can import the
authentication class from settings without importing views.
"""
from __future__ import annotations

import logging

from django.contrib.auth import authenticate
from django.contrib.auth.models import update_last_login
from rest_framework.decorators import api_view, authentication_classes, permission_classes, throttle_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.token_blacklist.models import BlacklistedToken, OutstandingToken
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.views import TokenRefreshView

from bio.models import User
from bio.serializers.auth import LoginSerializer, LogoutSerializer, RegisterSerializer
from bio.services.accounts import issue_tokens, register_user, serialize_user

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------
# Register
# ---------------------------------------------------------------------
@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
@throttle_classes([ScopedRateThrottle])
def register_view(request):
    s = RegisterSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    user = register_user(
        email=vd['email'],
        password=vd['password'],
        username=vd['username'],
        invite_key=vd.get('inviteKey'),
    )
    logger.info("registered user %s", user.id)
    return Response({
        'ok': True,
        'message': 'User registered successfully',
        'user': serialize_user(user),
        **issue_tokens(user),
    }, status=201)

register_view.cls.throttle_scope = 'register'


# ---------------------------------------------------------------------
# Email/password login
# ---------------------------------------------------------------------
@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
@throttle_classes([ScopedRateThrottle])
def login_view(request):
    s = LoginSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data

    account = User.objects.filter(email__iexact=vd['email']).first()
    user = authenticate(request, username=account.username, password=vd['password']) if account else None
    if not user:
        logger.info("failed login from %s", request.META.get('REMOTE_ADDR'))
        return Response({'ok': False, 'error': {'code': 'invalid_credentials',
                                                'message': 'Invalid email or password'}}, status=401)

    update_last_login(None, user)
    return Response({
        'ok': True,
        'message': 'Login successful',
        'user': serialize_user(user),
        **issue_tokens(user),
    })

login_view.cls.throttle_scope = 'login'


# ---------------------------------------------------------------------
# Current user
# ---------------------------------------------------------------------
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def me_view(request):
    return Response({'ok': True, 'user': serialize_user(request.user, detailed=True)})


# ---------------------------------------------------------------------
# JWT: refresh & logout
# ---------------------------------------------------------------------
@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def jwt_refresh_view(request):
    """Return a new access token from a refresh token."""
    view = TokenRefreshView.as_view()
    resp = view(request._request)
    data = dict(resp.data)
    if 'access' in data:
        data['token'] = data.pop('access')
    return Response(data, status=resp.status_code)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def logout_view(request):
    """Blacklist the given refresh token, or every outstanding one of the user."""
    s = LogoutSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    refresh = s.validated_data.get('refresh')
    count = 0
    if refresh:
        try:
            RefreshToken(refresh).blacklist()
            count = 1
        except TokenError as e:
            logger.info("logout with unusable refresh token: %s", e)
    else:
        for token in OutstandingToken.objects.filter(user=request.user):
            _, created = BlacklistedToken.objects.get_or_create(token=token)
            count += int(created)
    return Response({'ok': True, 'message': 'Logout successful', 'blacklisted': count})
