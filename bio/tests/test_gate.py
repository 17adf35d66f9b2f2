"""
Tests for the bio access gate.

The first group runs the gate against an unsaved profile with injected
recorder and contacts loader; the second group goes through the database.
"""
from datetime import date

import pytest

from bio.exceptions import AccessDenied, PinRequired
from bio.models import AccessLog, EmergencyContact, MedicalProfile
from bio.services.access_log import ClientInfo
from bio.services.gate import BioAccessGate
from bio.services.profiles import apply_profile_data, hash_pin

CLIENT = ClientInfo(ip='203.0.113.7', user_agent='pytest')


class Recorder:
    def __init__(self, fail=False):
        self.calls = []
        self.fail = fail

    def __call__(self, profile, client, granted):
        self.calls.append(granted)
        if self.fail:
            raise RuntimeError('database unavailable')


class ContactsLoader:
    def __init__(self):
        self.calls = 0

    def __call__(self, profile):
        self.calls += 1
        return [EmergencyContact(name='Bob', relationship='Brother', phone='+4912345', priority=1)]


def _profile(codec, level, pin_hash=None):
    profile = MedicalProfile(full_name='Alice Example', date_of_birth=date(1990, 1, 2))
    apply_profile_data(profile, {'bloodType': 'B+', 'allergies': ['Latex'], 'privacyLevel': level}, codec)
    profile.pin_hash = pin_hash
    return profile


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def loader():
    return ContactsLoader()


@pytest.fixture
def gate(codec, recorder, loader):
    return BioAccessGate(codec, recorder=recorder, contacts_loader=loader)


@pytest.mark.parametrize('level', [MedicalProfile.PRIVACY_PUBLIC, MedicalProfile.PRIVACY_LINK_ONLY])
def test_open_levels_are_granted(gate, codec, recorder, level):
    payload = gate.admit(_profile(codec, level), client=CLIENT)
    assert recorder.calls == [True]
    assert payload['bloodType'] == 'B+'
    assert payload['allergies'] == ['Latex']
    assert payload['medicalConditions'] == []
    assert payload['emergencyContacts'][0]['name'] == 'Bob'
    assert payload['privacyLevel'] == level


def test_open_level_ignores_supplied_pin(gate, codec, recorder):
    gate.admit(_profile(codec, MedicalProfile.PRIVACY_PUBLIC), client=CLIENT, pin='0000')
    assert recorder.calls == [True]


def test_correct_pin_is_granted(gate, codec, recorder):
    profile = _profile(codec, MedicalProfile.PRIVACY_PIN, hash_pin('4821'))
    payload = gate.admit(profile, client=CLIENT, pin='4821')
    assert payload['fullName'] == 'Alice Example'
    assert recorder.calls == [True]


def test_wrong_pin_is_denied_without_payload(gate, codec, recorder, loader):
    profile = _profile(codec, MedicalProfile.PRIVACY_PIN, hash_pin('4821'))
    with pytest.raises(AccessDenied):
        gate.admit(profile, client=CLIENT, pin='0000')
    assert recorder.calls == [False]
    assert loader.calls == 0


def test_missing_pin_requires_pin(gate, codec, recorder, loader):
    profile = _profile(codec, MedicalProfile.PRIVACY_PIN, hash_pin('4821'))
    with pytest.raises(PinRequired) as exc:
        gate.admit(profile, client=CLIENT)
    assert exc.value.extra == {'requiresPin': True}
    assert recorder.calls == [False]
    assert loader.calls == 0


def test_pin_protected_without_stored_hash_fails_closed(codec, recorder, loader):
    checked = []
    gate = BioAccessGate(codec, recorder=recorder, contacts_loader=loader,
                         pin_checker=lambda pin, h: checked.append(pin) or True)
    with pytest.raises(AccessDenied):
        gate.admit(_profile(codec, MedicalProfile.PRIVACY_PIN), client=CLIENT, pin='4821')
    assert checked == []
    assert recorder.calls == [False]


def test_unknown_privacy_level_fails_closed(gate, codec, recorder, loader):
    profile = _profile(codec, MedicalProfile.PRIVACY_PUBLIC)
    profile.privacy_level = 'friends_only'
    with pytest.raises(AccessDenied):
        gate.admit(profile, client=CLIENT)
    assert recorder.calls == [False]
    assert loader.calls == 0


def test_failing_recorder_does_not_change_outcome(codec, loader, caplog):
    recorder = Recorder(fail=True)
    gate = BioAccessGate(codec, recorder=recorder, contacts_loader=loader)
    payload = gate.admit(_profile(codec, MedicalProfile.PRIVACY_LINK_ONLY), client=CLIENT)
    assert payload['bloodType'] == 'B+'
    assert recorder.calls == [True]
    assert 'failed to record access attempt' in caplog.text


def test_undecodable_field_is_served_empty(gate, codec):
    profile = _profile(codec, MedicalProfile.PRIVACY_PUBLIC)
    profile.allergies_encrypted = 'not-a-valid-format'
    payload = gate.admit(profile, client=CLIENT)
    assert payload['allergies'] == []
    assert payload['bloodType'] == 'B+'


def test_pin_is_not_logged(gate, codec, caplog):
    caplog.set_level('DEBUG')
    profile = _profile(codec, MedicalProfile.PRIVACY_PIN, hash_pin('4821'))
    with pytest.raises(AccessDenied):
        gate.admit(profile, client=CLIENT, pin='0000')
    gate.admit(profile, client=CLIENT, pin='4821')
    assert '4821' not in caplog.text
    assert '0000' not in caplog.text


# ---------------------------------------------------------------------
# Database backed
# ---------------------------------------------------------------------
def test_db_gate_writes_one_log_per_decision(codec, member, make_profile):
    profile = make_profile(member, privacy_level=MedicalProfile.PRIVACY_PIN, pin='4821')
    gate = BioAccessGate(codec)

    gate.admit(profile, client=CLIENT, pin='4821')
    with pytest.raises(AccessDenied):
        gate.admit(profile, client=CLIENT, pin='0000')
    with pytest.raises(PinRequired):
        gate.admit(profile, client=CLIENT)

    logs = list(AccessLog.objects.filter(medical_profile=profile).order_by('id'))
    assert [log.access_granted for log in logs] == [True, False, False]
    assert all(log.ip_address == '203.0.113.7' and log.user_agent == 'pytest' for log in logs)


def test_db_gate_lists_contacts_by_priority(codec, member, make_profile):
    profile = make_profile(member, privacy_level=MedicalProfile.PRIVACY_PUBLIC)
    EmergencyContact.objects.create(medical_profile=profile, name='Second', phone='2', priority=2)
    EmergencyContact.objects.create(medical_profile=profile, name='First', phone='1', priority=1)
    payload = BioAccessGate(codec).admit(profile, client=ClientInfo(ip=None))
    assert [c['name'] for c in payload['emergencyContacts']] == ['First', 'Second']
    assert AccessLog.objects.get(medical_profile=profile).ip_address is None


def test_client_info_from_request(rf):
    request = rf.get('/api/bio/x', HTTP_USER_AGENT='A' * 2000, REMOTE_ADDR='198.51.100.1')
    info = ClientInfo.from_request(request)
    assert info.ip == '198.51.100.1'
    assert len(info.user_agent) == 1000
    assert ClientInfo.from_request(rf.get('/')).user_agent == 'unknown'
