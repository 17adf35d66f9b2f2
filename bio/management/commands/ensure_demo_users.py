# bio/management/commands/ensure_demo_users.py
from datetime import date

from django.core.management.base import BaseCommand
from django.db import transaction

from bio.models import EmergencyContact, MedicalProfile, User, make_bio_slug
from bio.services.codec import get_codec
from bio.services.profiles import apply_profile_data

DEMO_PASSWORD = "Demo-Passphrase-2024"
DEMO_PIN = "4821"

DEMO_SET = [
    ("demo_admin", "admin@medibio.local", "admin"),
    ("demo_member", "member@medibio.local", "member"),
]

DEMO_PROFILE = {
    'fullName': 'Demo Member',
    'dateOfBirth': date(1985, 4, 12),
    'bloodType': 'O+',
    'medicalConditions': ['Asthma'],
    'allergies': ['Penicillin', 'Peanuts'],
    'currentMedications': ['Salbutamol inhaler'],
    'medicalHistory': 'Appendectomy in 2004.',
    'privacyLevel': MedicalProfile.PRIVACY_PIN,
    'pin': DEMO_PIN,
}


class Command(BaseCommand):
    help = "Ensure demo users exist with a known password and a sample PIN protected profile (idempotent)."

    @transaction.atomic
    def handle(self, *args, **opts):
        for username, email, role in DEMO_SET:
            u, created = User.objects.get_or_create(
                username=username,
                defaults={"email": email, "bio_slug": make_bio_slug(username), "role": role, "is_active": True},
            )
            u.set_password(DEMO_PASSWORD)
            u.role = role
            u.is_active = True
            u.is_staff = role == "admin"
            u.save(update_fields=["password", "role", "is_active", "is_staff"])
            self.stdout.write(self.style.SUCCESS(f"ok: {username} ({role}){' created' if created else ''}"))

        member = User.objects.get(username="demo_member")
        profile = MedicalProfile.objects.filter(user=member).first() or MedicalProfile(user=member)
        apply_profile_data(profile, DEMO_PROFILE, get_codec())
        profile.save()
        if not profile.contacts.exists():
            EmergencyContact.objects.create(
                medical_profile=profile, name='Alex Demo', relationship='Partner', phone='+15550100', priority=1,
            )
        self.stdout.write(self.style.SUCCESS(
            f"ok: bio /api/bio/{member.bio_slug} (pin {DEMO_PIN})"
        ))
        self.stdout.write(self.style.SUCCESS("All demo users ensured."))
