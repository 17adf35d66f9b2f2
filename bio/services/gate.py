"""
Bio page access gate.

Decides whether a request may see the decrypted bio page of a profile and
records exactly one access attempt per decision.

* ``public`` and ``link_only`` profiles are granted immediately; link_only is
  protected only by the obscurity of its slug.
* ``pin_protected`` profiles need a 4 digit PIN that matches the stored
  one-way hash.  Without a PIN the caller gets :class:`PinRequired`; with a
  wrong PIN (or no stored hash) :class:`AccessDenied`.  Nothing is decrypted
  and no contact is loaded unless access is granted.

Writing the access log is best-effort: a failing recorder is logged and
never changes the outcome returned to the caller.  The gate only reads
``privacy_level``.
"""
from __future__ import annotations

import logging
from typing import Callable, Iterable, Optional

from django.contrib.auth.hashers import check_password

from bio.exceptions import AccessDenied, PinRequired
from bio.models import EmergencyContact, MedicalProfile
from bio.services.access_log import ClientInfo, record_access_attempt
from bio.services.codec import MedicalDataCodec
from bio.services.profiles import build_bio_payload, contacts_for

logger = logging.getLogger(__name__)

Recorder = Callable[[MedicalProfile, ClientInfo, bool], object]
PinChecker = Callable[[str, str], bool]
ContactsLoader = Callable[[MedicalProfile], Iterable[EmergencyContact]]

OPEN_LEVELS = (MedicalProfile.PRIVACY_PUBLIC, MedicalProfile.PRIVACY_LINK_ONLY)


def check_pin(pin: str, pin_hash: str) -> bool:
    # Django hashers compare digests with constant_time_compare
    return check_password(pin, pin_hash)


class BioAccessGate:
    def __init__(self, codec: MedicalDataCodec, recorder: Recorder = record_access_attempt,
                 pin_checker: PinChecker = check_pin, contacts_loader: ContactsLoader = contacts_for):
        self.codec = codec
        self.recorder = recorder
        self.pin_checker = pin_checker
        self.contacts_loader = contacts_loader

    def admit(self, profile: MedicalProfile, *, client: ClientInfo, pin: Optional[str] = None) -> dict:
        """Return the decrypted bio payload or raise ``PinRequired`` / ``AccessDenied``."""
        level = profile.privacy_level
        if level in OPEN_LEVELS:
            self._record(profile, client, True)
            return self._payload(profile)

        if level != MedicalProfile.PRIVACY_PIN:
            # unknown level: fail closed
            logger.error("profile %s has unknown privacy level %r", profile.pk, level)
            self._record(profile, client, False)
            raise AccessDenied()

        if not pin:
            self._record(profile, client, False)
            raise PinRequired()

        granted = bool(profile.pin_hash) and self.pin_checker(pin, profile.pin_hash)
        self._record(profile, client, granted)
        if not granted:
            raise AccessDenied()
        return self._payload(profile)

    def _payload(self, profile: MedicalProfile) -> dict:
        return build_bio_payload(profile, self.codec, self.contacts_loader(profile))

    def _record(self, profile: MedicalProfile, client: ClientInfo, granted: bool) -> None:
        logger.info("bio access %s for profile %s from %s",
                    'granted' if granted else 'denied', profile.pk, client.ip or 'unknown')
        try:
            self.recorder(profile, client, granted)
        except Exception:
            logger.exception("failed to record access attempt for profile %s", profile.pk)
