"""
Database models for the MediBio backend.

A user owns at most one :class:`MedicalProfile`.  Identity fields of the
profile are stored in plaintext; every medical attribute is stored only as
an encrypted ``iv:authTag:ciphertext`` string (see
:mod:`bio.services.cipher`) or ``NULL``.  Bio page views and PIN attempts
are appended to :class:`AccessLog`.
"""
from __future__ import annotations

import re

from django.contrib.auth.models import AbstractUser, UserManager
from django.core.validators import MinValueValidator
from django.db import models

from bio.services.codec import FieldKind

_SLUG_UNSAFE = re.compile(r"[^a-z0-9_-]")


def make_bio_slug(username: str) -> str:
    """Lowercase the username and replace anything outside ``[a-z0-9_-]`` with '-'."""
    return _SLUG_UNSAFE.sub('-', (username or '').lower())


class BioUserManager(UserManager):
    def _create_user(self, username, email, password, **extra_fields):
        extra_fields.setdefault('bio_slug', make_bio_slug(username))
        return super()._create_user(username, email, password, **extra_fields)


class User(AbstractUser):
    """Account owning a bio page.

    ``bio_slug`` is derived from the username at registration and addresses
    the public bio page.
    """
    ROLE_CHOICES = [
        ('member', 'Member'),
        ('admin', 'Administrator'),
    ]
    email = models.EmailField(unique=True)
    bio_slug = models.SlugField(max_length=60, unique=True)
    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default='member')
    updated_at = models.DateTimeField(auto_now=True)

    objects = BioUserManager()

    def __str__(self) -> str:
        return f"{self.username} ({self.role})"


class MedicalProfile(models.Model):
    PRIVACY_PUBLIC = 'public'
    PRIVACY_LINK_ONLY = 'link_only'
    PRIVACY_PIN = 'pin_protected'
    PRIVACY_CHOICES = (
        (PRIVACY_PUBLIC, 'public'),
        (PRIVACY_LINK_ONLY, 'link_only'),
        (PRIVACY_PIN, 'pin_protected'),
    )

    # attribute -> (column, kind).  The kind decides how decrypted text is read back.
    ENCRYPTED_FIELDS = {
        'blood_type': ('blood_type_encrypted', FieldKind.SCALAR),
        'medical_conditions': ('medical_conditions_encrypted', FieldKind.LIST),
        'allergies': ('allergies_encrypted', FieldKind.LIST),
        'current_medications': ('current_medications_encrypted', FieldKind.LIST),
        'medical_history': ('medical_history_encrypted', FieldKind.SCALAR),
        'doctor_notes': ('doctor_notes_encrypted', FieldKind.SCALAR),
    }

    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='medical_profile')
    full_name = models.CharField(max_length=255)
    date_of_birth = models.DateField()
    avatar_url = models.CharField(max_length=512, blank=True, null=True)

    blood_type_encrypted = models.TextField(blank=True, null=True)
    medical_conditions_encrypted = models.TextField(blank=True, null=True)
    allergies_encrypted = models.TextField(blank=True, null=True)
    current_medications_encrypted = models.TextField(blank=True, null=True)
    medical_history_encrypted = models.TextField(blank=True, null=True)
    doctor_notes_encrypted = models.TextField(blank=True, null=True)

    privacy_level = models.CharField(max_length=16, choices=PRIVACY_CHOICES, default=PRIVACY_LINK_ONLY)
    pin_hash = models.CharField(max_length=128, blank=True, null=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"{self.full_name} ({self.privacy_level})"

    @property
    def has_pin(self) -> bool:
        return bool(self.pin_hash)


class EmergencyContact(models.Model):
    medical_profile = models.ForeignKey(MedicalProfile, on_delete=models.CASCADE, related_name='contacts')
    name = models.CharField(max_length=255)
    relationship = models.CharField(max_length=100, blank=True, null=True)
    phone = models.CharField(max_length=32)
    email = models.EmailField(blank=True, null=True)
    priority = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['priority', 'id']
        indexes = [models.Index(fields=['medical_profile', 'priority'], name='bio_contact_priority_idx')]

    def __str__(self) -> str:
        return f"{self.name} (p{self.priority})"


class AccessLog(models.Model):
    """One bio page view or PIN attempt.  Rows are only ever inserted."""
    medical_profile = models.ForeignKey(MedicalProfile, on_delete=models.CASCADE, related_name='access_logs')
    ip_address = models.GenericIPAddressField(blank=True, null=True)
    user_agent = models.TextField(blank=True, default='')
    access_granted = models.BooleanField()
    accessed_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [models.Index(fields=['medical_profile', 'accessed_at'], name='bio_accesslog_profile_idx')]

    def __str__(self) -> str:
        outcome = 'granted' if self.access_granted else 'denied'
        return f"{outcome}:{self.medical_profile_id}@{self.accessed_at:%F %T}"


class InvitationKey(models.Model):
    key_code = models.CharField(max_length=50, unique=True)
    created_by = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='invitation_keys_created'
    )
    used_by = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='invitation_keys_used'
    )
    is_used = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    used_at = models.DateTimeField(blank=True, null=True)

    def __str__(self) -> str:
        return self.key_code
