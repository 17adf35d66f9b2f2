import json

import pytest

from bio.services.cipher import AuthenticationTagMismatch, CipherConfig, FieldCipher, MalformedCiphertext
from bio.services.codec import DecodeResult, FieldKind, MalformedPayload, MedicalDataCodec


@pytest.fixture(scope='module')
def cipher():
    return FieldCipher(CipherConfig(secret='codec-test-secret', n=2 ** 10))


@pytest.fixture(scope='module')
def codec(cipher):
    return MedicalDataCodec(cipher)


@pytest.mark.parametrize('value', [None, '', []])
def test_empty_values_encode_to_none(codec, value):
    kind = FieldKind.LIST if isinstance(value, list) else FieldKind.SCALAR
    assert codec.encode_field(value, kind) is None


def test_list_roundtrip(codec):
    field = codec.encode_field(['Asthma', 'Épilepsie'], FieldKind.LIST)
    result = codec.decode_field(field, FieldKind.LIST)
    assert result.ok
    assert result.value == ['Asthma', 'Épilepsie']


def test_list_is_stored_as_json_array(codec, cipher):
    field = codec.encode_field(('a', 'b'), FieldKind.LIST)
    assert json.loads(cipher.decrypt(field)) == ['a', 'b']


def test_scalar_that_looks_like_json_stays_a_string(codec):
    field = codec.encode_field('123', FieldKind.SCALAR)
    assert codec.decode_field(field, FieldKind.SCALAR).value == '123'
    field = codec.encode_field('["x"]', FieldKind.SCALAR)
    assert codec.decode_field(field, FieldKind.SCALAR).value == '["x"]'


def test_encode_rejects_wrong_shape(codec):
    with pytest.raises(TypeError):
        codec.encode_field('Asthma', FieldKind.LIST)
    with pytest.raises(TypeError):
        codec.encode_field(['O+'], FieldKind.SCALAR)


@pytest.mark.parametrize('field', [None, ''])
def test_absent_field_decodes_to_none(codec, field):
    result = codec.decode_field(field, FieldKind.LIST)
    assert result.ok and result.value is None
    assert result.value_or([]) == []


def test_malformed_field_is_a_failure(codec):
    result = codec.decode_field('not-a-valid-format', FieldKind.SCALAR)
    assert not result.ok
    assert isinstance(result.error, MalformedCiphertext)
    assert result.value_or('fallback') == 'fallback'


def test_tampered_field_is_a_failure(codec):
    iv, tag, ct = codec.encode_field('O-', FieldKind.SCALAR).split(':')
    tampered = ':'.join([iv, tag[:-2] + ('00' if tag[-2:] != '00' else '01'), ct])
    result = codec.decode_field(tampered, FieldKind.SCALAR)
    assert isinstance(result.error, AuthenticationTagMismatch)


@pytest.mark.parametrize('plaintext', ['plain text', '{"a": 1}', '[1, 2]', '"x"'])
def test_list_field_with_non_list_payload_is_a_failure(codec, cipher, plaintext):
    result = codec.decode_field(cipher.encrypt(plaintext), FieldKind.LIST)
    assert isinstance(result.error, MalformedPayload)


def test_decode_result_helpers():
    assert DecodeResult.success('x').ok
    failed = DecodeResult.failure(ValueError('boom'))
    assert not failed.ok and failed.value is None
