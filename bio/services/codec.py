"""
Medical data codec.

Wraps scalar and list values around :class:`~bio.services.cipher.FieldCipher`.
Each encrypted model attribute declares a :class:`FieldKind`, so decoding
never has to guess the stored shape.  Decoding returns a
:class:`DecodeResult` instead of raising; callers decide whether a corrupt
field is shown as empty or reported.
"""
from __future__ import annotations

import enum
import json
from dataclasses import dataclass
from typing import Any, Optional, Sequence, Union

from django.apps import apps

from .cipher import DecryptionError, FieldCipher

FieldValue = Union[str, list, None]


class FieldKind(str, enum.Enum):
    SCALAR = 'scalar'
    LIST = 'list'


class MalformedPayload(Exception):
    """Decrypted text does not have the shape declared for the field."""


@dataclass(frozen=True)
class DecodeResult:
    value: FieldValue = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: FieldValue) -> 'DecodeResult':
        return cls(value=value)

    @classmethod
    def failure(cls, error: Exception) -> 'DecodeResult':
        return cls(error=error)

    def value_or(self, default: Any) -> Any:
        if not self.ok or self.value is None:
            return default
        return self.value


class MedicalDataCodec:
    def __init__(self, cipher: FieldCipher):
        self.cipher = cipher

    def encode_field(self, value: Union[str, Sequence[str], None], kind: FieldKind) -> Optional[str]:
        """Encrypt ``value``; absent or empty values are stored as ``None``."""
        if value is None or len(value) == 0:
            return None
        if kind is FieldKind.LIST:
            if isinstance(value, str):
                raise TypeError('list field expects a sequence of strings, got str')
            return self.cipher.encrypt(json.dumps(list(value), ensure_ascii=False))
        if not isinstance(value, str):
            raise TypeError(f'scalar field expects str, got {type(value).__name__}')
        return self.cipher.encrypt(value)

    def decode_field(self, field: Optional[str], kind: FieldKind) -> DecodeResult:
        if not field:
            return DecodeResult.success(None)
        try:
            text = self.cipher.decrypt(field)
        except DecryptionError as exc:
            return DecodeResult.failure(exc)
        if kind is FieldKind.SCALAR:
            return DecodeResult.success(text)
        try:
            value = json.loads(text)
        except ValueError as exc:
            return DecodeResult.failure(MalformedPayload(f'list field is not JSON: {exc}'))
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            return DecodeResult.failure(MalformedPayload('list field must decode to a list of strings'))
        return DecodeResult.success(value)


def get_codec() -> MedicalDataCodec:
    """Return the codec built by :class:`bio.apps.BioConfig` at startup."""
    return apps.get_app_config('bio').codec
