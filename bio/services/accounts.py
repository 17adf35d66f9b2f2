import secrets
import string
from typing import List, Optional

from django.conf import settings
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import ValidationError
from rest_framework_simplejwt.tokens import RefreshToken

from bio.exceptions import Conflict
from bio.models import InvitationKey, User, make_bio_slug
from bio.services.profiles import bio_url

KEY_ALPHABET = string.ascii_uppercase + string.digits


def issue_tokens(user: User) -> dict:
    refresh = RefreshToken.for_user(user)
    return {'token': str(refresh.access_token), 'refresh': str(refresh)}


def serialize_user(user: User, *, detailed: bool = False) -> dict:
    data = {
        'id': user.id,
        'email': user.email,
        'username': user.username,
        'bioSlug': user.bio_slug,
        'bioUrl': bio_url(user.bio_slug),
    }
    if detailed:
        data.update({
            'role': user.role,
            'createdAt': user.date_joined.isoformat(),
            'lastLogin': user.last_login.isoformat() if user.last_login else None,
        })
    return data


def register_user(*, email: str, password: str, username: str, invite_key: Optional[str] = None) -> User:
    if User.objects.filter(email__iexact=email).exists():
        raise Conflict('Email already registered')
    if User.objects.filter(username__iexact=username).exists():
        raise Conflict('Username already taken')
    slug = make_bio_slug(username)
    if User.objects.filter(bio_slug=slug).exists():
        raise Conflict('Bio URL already exists. Please choose a different username.')
    try:
        validate_password(password, User(username=username, email=email))
    except DjangoValidationError as e:
        raise ValidationError({'password': e.messages})

    with transaction.atomic():
        key = None
        if invite_key or settings.REGISTRATION_REQUIRES_INVITE:
            key = (InvitationKey.objects.select_for_update()
                   .filter(key_code=invite_key or '', is_used=False).first())
            if key is None:
                raise ValidationError({'inviteKey': ['Invalid or already used invitation key']})
        user = User.objects.create_user(username=username, email=email, password=password, bio_slug=slug)
        if key is not None:
            key.is_used = True
            key.used_by = user
            key.used_at = timezone.now()
            key.save(update_fields=['is_used', 'used_by', 'used_at'])
    return user


def generate_invitation_keys(admin: User, amount: int) -> List[str]:
    codes = []
    while len(codes) < amount:
        code = 'medi_' + ''.join(secrets.choice(KEY_ALPHABET) for _ in range(8))
        if code not in codes and not InvitationKey.objects.filter(key_code=code).exists():
            codes.append(code)
    InvitationKey.objects.bulk_create([InvitationKey(key_code=c, created_by=admin) for c in codes])
    return codes
