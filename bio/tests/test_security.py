import re

import pytest
from rest_framework.test import APIClient
from rest_framework.throttling import ScopedRateThrottle

from bio.models import EmergencyContact, MedicalProfile

from .conftest import PASSWORD, client_for

pytestmark = pytest.mark.django_db

FIELD_RE = re.compile(r'^[0-9a-f]{32}:[0-9a-f]{32}:[0-9a-f]+$')


def test_medical_fields_are_encrypted_at_rest(member, make_profile):
    make_profile(member, medicalHistory='Kidney transplant 2019', doctorNotes='Immunosuppressed')
    profile = MedicalProfile.objects.get(user=member)
    for column, _ in MedicalProfile.ENCRYPTED_FIELDS.values():
        value = getattr(profile, column)
        if value is None:
            continue
        assert FIELD_RE.match(value), column
    assert 'Kidney' not in profile.medical_history_encrypted
    assert 'Penicillin' not in profile.allergies_encrypted


def test_pin_is_stored_hashed(member, make_profile):
    profile = make_profile(member, privacy_level='pin_protected', pin='4821')
    assert profile.pin_hash and '4821' not in profile.pin_hash


def test_bio_payload_never_exposes_storage_fields(member, make_profile):
    make_profile(member, privacy_level='public')
    body = APIClient().get('/api/bio/alice').data['bio']
    assert not any(k.endswith('Encrypted') or k.endswith('_encrypted') for k in body)
    assert 'pinHash' not in body and 'pin_hash' not in body and 'id' not in body


def test_bio_routes_ignore_authorization_header(member, make_profile):
    make_profile(member, privacy_level='public')
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION='Bearer not-a-jwt')
    assert client.get('/api/bio/alice').status_code == 200


def test_invalid_bearer_is_rejected():
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION='Bearer not-a-jwt')
    r = client.get('/api/auth/me')
    assert r.status_code == 401
    assert r.data['ok'] is False


def test_role_in_register_payload_is_ignored():
    r = APIClient().post('/api/auth/register', {
        'email': 'mallory@example.com', 'password': PASSWORD, 'username': 'mallory', 'role': 'admin',
    }, format='json')
    assert r.status_code == 201
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {r.data['token']}")
    assert client.get('/api/auth/me').data['user']['role'] == 'member'
    assert client.get('/api/admin/stats').status_code == 403


def test_contacts_are_scoped_to_owner(member, make_user, make_profile):
    mallory = make_user('mallory')
    make_profile(mallory, fullName='Mallory')
    victim = make_profile(member)
    contact = EmergencyContact.objects.create(medical_profile=victim, name='Bob', phone='+15550001')

    attacker = client_for(mallory)
    assert attacker.put(f'/api/contacts/{contact.id}', {'phone': '+0'}, format='json').status_code == 404
    assert attacker.delete(f'/api/contacts/{contact.id}').status_code == 404
    assert attacker.get('/api/contacts').data['contacts'] == []
    contact.refresh_from_db()
    assert contact.phone == '+15550001'


def test_profile_endpoints_only_touch_own_profile(member, make_user, make_profile):
    make_profile(member)
    other = client_for(make_user('mallory'))
    assert other.get('/api/profile').status_code == 404
    assert other.delete('/api/profile').status_code == 200
    assert MedicalProfile.objects.filter(user=member).exists()


def test_pin_attempts_are_throttled(member, make_profile, monkeypatch):
    monkeypatch.setattr(ScopedRateThrottle, 'THROTTLE_RATES', {'pin_verify': '3/min'})
    make_profile(member, privacy_level='pin_protected', pin='4821')
    client = APIClient()
    codes = [client.post('/api/bio/alice/verify-pin', {'pin': '0000'}, format='json').status_code
             for _ in range(3)]
    assert codes == [401, 401, 401]
    r = client.post('/api/bio/alice/verify-pin', {'pin': '4821'}, format='json')
    assert r.status_code == 429
    assert r.data['error']['code'] == 'throttled'
    assert 'Retry-After' in r


def test_login_is_throttled(member, monkeypatch):
    monkeypatch.setattr(ScopedRateThrottle, 'THROTTLE_RATES', {'login': '2/min'})
    client = APIClient()
    for _ in range(2):
        client.post('/api/auth/login', {'email': member.email, 'password': 'Wrong-Passphrase!'}, format='json')
    r = client.post('/api/auth/login', {'email': member.email, 'password': PASSWORD}, format='json')
    assert r.status_code == 429


def test_missing_encryption_secret_refuses_to_start(settings):
    from django.apps import apps
    from django.core.exceptions import ImproperlyConfigured

    settings.FIELD_ENCRYPTION_SECRET = ''
    with pytest.raises(ImproperlyConfigured):
        apps.get_app_config('bio').ready()


@pytest.mark.parametrize('cookie', ['expired.or.garbage', 'not-a-jwt'])
def test_stale_token_cookie_does_not_block_recovery(member, cookie):
    client = APIClient()
    client.cookies['token'] = cookie

    r = client.post('/api/auth/login', {'email': member.email, 'password': PASSWORD}, format='json')
    assert r.status_code == 200
    refresh = r.data['refresh']

    assert client.post('/api/auth/refresh', {'refresh': refresh}, format='json').status_code == 200
    r = client.post('/api/auth/register', {
        'email': 'newbie@example.com', 'password': PASSWORD, 'username': 'newbie',
    }, format='json')
    assert r.status_code == 201
    # protected routes still reject the bad cookie
    assert client.get('/api/auth/me').status_code == 401


def test_access_log_is_not_deletable_in_admin(rf, admin_user, member, make_profile):
    from django.contrib import admin as django_admin

    from bio.admin import AccessLogAdmin
    from bio.models import AccessLog

    admin_user.is_staff = admin_user.is_superuser = True
    admin_user.save()
    profile = make_profile(member)
    log = AccessLog.objects.create(medical_profile=profile, access_granted=False)

    model_admin = AccessLogAdmin(AccessLog, django_admin.site)
    request = rf.get('/admin/bio/accesslog/')
    request.user = admin_user
    assert model_admin.has_delete_permission(request) is False
    assert model_admin.has_delete_permission(request, log) is False
    assert model_admin.has_change_permission(request, log) is False
    assert model_admin.has_add_permission(request) is False
    assert 'delete_selected' not in model_admin.get_actions(request)


def test_avatar_extension_follows_content_type(auth_client, member, make_profile, settings, tmp_path):
    from django.core.files.uploadedfile import SimpleUploadedFile

    settings.MEDIA_ROOT = str(tmp_path)
    make_profile(member)
    page = SimpleUploadedFile('x.html', b'<script>alert(1)</script>', content_type='image/png')
    r = auth_client.post('/api/profile/avatar', {'avatar': page}, format='multipart')
    assert r.status_code == 200
    assert r.data['avatarUrl'].endswith('.png')
    assert not list(tmp_path.rglob('*.html'))

    svg = SimpleUploadedFile('x.svg', b'<svg/>', content_type='image/svg+xml')
    assert auth_client.post('/api/profile/avatar', {'avatar': svg}, format='multipart').status_code == 400
