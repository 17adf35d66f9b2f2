from datetime import date

import pytest
from django.core.cache import cache
from rest_framework.test import APIClient

from bio.models import MedicalProfile, User
from bio.services.accounts import issue_tokens
from bio.services.codec import get_codec
from bio.services.profiles import apply_profile_data

PASSWORD = 'Str0ng-Passphrase!'


@pytest.fixture(autouse=True)
def _clear_cache():
    # throttle counters live in the cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def codec():
    return get_codec()


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def make_user(db):
    def _make(username='alice', role='member', **extra):
        return User.objects.create_user(
            username=username, email=f'{username}@example.com', password=PASSWORD, role=role, **extra
        )
    return _make


@pytest.fixture
def member(make_user):
    return make_user('alice')


@pytest.fixture
def admin_user(make_user):
    return make_user('root_admin', role='admin')


def client_for(user):
    c = APIClient()
    c.credentials(HTTP_AUTHORIZATION=f"Bearer {issue_tokens(user)['token']}")
    return c


@pytest.fixture
def auth_client(member):
    return client_for(member)


@pytest.fixture
def admin_client(admin_user):
    return client_for(admin_user)


@pytest.fixture
def make_profile(db, codec):
    def _make(user, privacy_level=MedicalProfile.PRIVACY_LINK_ONLY, pin=None, **data):
        payload = {
            'fullName': 'Alice Example',
            'dateOfBirth': date(1990, 1, 2),
            'bloodType': 'A+',
            'medicalConditions': ['Asthma'],
            'allergies': ['Penicillin'],
            'privacyLevel': privacy_level,
            **data,
        }
        if pin:
            payload['pin'] = pin
        profile = MedicalProfile(user=user)
        apply_profile_data(profile, payload, codec)
        profile.save()
        return profile
    return _make
