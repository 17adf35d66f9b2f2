"""
Symmetric field cipher for medical data at rest.

Every sensitive profile attribute is stored as an ``EncryptedField`` string
of the form ``iv:authTag:ciphertext`` (each part hex encoded) produced with
AES-256-GCM.  The 32 byte key is derived once, when :class:`FieldCipher` is
constructed, from the configured secret with scrypt and a static salt.  All
records therefore share one key: rotating the secret makes existing
ciphertext unreadable.
"""
from __future__ import annotations

from dataclasses import dataclass

from Crypto.Cipher import AES
from Crypto.Protocol.KDF import scrypt
from Crypto.Random import get_random_bytes

IV_BYTES = 16
TAG_BYTES = 16
KEY_BYTES = 32


class DecryptionError(Exception):
    """An EncryptedField could not be turned back into plaintext."""


class MalformedCiphertext(DecryptionError):
    """The field is not three hex parts with a 16 byte IV and tag."""


class AuthenticationTagMismatch(DecryptionError):
    """GCM tag verification failed: tampered data or a different key."""


@dataclass(frozen=True)
class CipherConfig:
    """Inputs of the key derivation.

    Built once at startup from settings and handed to :class:`FieldCipher`.
    Changing the salt or the scrypt cost parameters makes stored ciphertext
    unreadable.
    """
    secret: str
    salt: str = 'salt'
    n: int = 2 ** 14
    r: int = 8
    p: int = 1

    def __post_init__(self) -> None:
        if not self.secret:
            raise ValueError('field encryption secret must not be empty')

    def derive_key(self) -> bytes:
        return scrypt(self.secret, self.salt, KEY_BYTES, N=self.n, r=self.r, p=self.p)


class FieldCipher:
    """Encrypt and decrypt single strings with a process-wide derived key."""

    __slots__ = ('_key',)

    def __init__(self, config: CipherConfig):
        self._key = config.derive_key()

    def encrypt(self, plaintext: str) -> str:
        iv = get_random_bytes(IV_BYTES)
        cipher = AES.new(self._key, AES.MODE_GCM, nonce=iv, mac_len=TAG_BYTES)
        ciphertext, tag = cipher.encrypt_and_digest(plaintext.encode('utf-8'))
        return f"{iv.hex()}:{tag.hex()}:{ciphertext.hex()}"

    def decrypt(self, field: str) -> str:
        iv, tag, ciphertext = _split_field(field)
        cipher = AES.new(self._key, AES.MODE_GCM, nonce=iv, mac_len=TAG_BYTES)
        try:
            raw = cipher.decrypt_and_verify(ciphertext, tag)
        except ValueError as exc:
            raise AuthenticationTagMismatch('authentication tag mismatch') from exc
        try:
            return raw.decode('utf-8')
        except UnicodeDecodeError as exc:
            raise MalformedCiphertext('decrypted payload is not valid UTF-8') from exc


def _split_field(field: str) -> tuple[bytes, bytes, bytes]:
    if not isinstance(field, str):
        raise MalformedCiphertext('encrypted field must be a string')
    parts = field.split(':')
    if len(parts) != 3:
        raise MalformedCiphertext('expected 3 colon-separated hex parts (iv:authTag:ciphertext)')
    iv_hex, tag_hex, ct_hex = parts
    # the ciphertext part is empty only for an encrypted empty string
    if not iv_hex or not tag_hex:
        raise MalformedCiphertext('iv and authTag must not be empty')
    try:
        iv, tag, ciphertext = bytes.fromhex(iv_hex), bytes.fromhex(tag_hex), bytes.fromhex(ct_hex)
    except ValueError as exc:
        raise MalformedCiphertext('encrypted field parts must be hex encoded') from exc
    if len(iv) != IV_BYTES:
        raise MalformedCiphertext(f'iv must be {IV_BYTES} bytes')
    if len(tag) != TAG_BYTES:
        raise MalformedCiphertext(f'authTag must be {TAG_BYTES} bytes')
    return iv, tag, ciphertext
