"""
Django admin registrations for the bio models.

Encrypted columns are never shown in list views.  Access log rows are
read-only.
"""
from django.contrib import admin

from .models import AccessLog, EmergencyContact, InvitationKey, MedicalProfile, User


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ('username', 'email', 'bio_slug', 'role', 'is_active', 'date_joined')
    list_filter = ('role', 'is_active')
    search_fields = ('username', 'email', 'bio_slug')


class EmergencyContactInline(admin.TabularInline):
    model = EmergencyContact
    extra = 0


@admin.register(MedicalProfile)
class MedicalProfileAdmin(admin.ModelAdmin):
    list_display = ('id', 'user', 'full_name', 'privacy_level', 'created_at', 'updated_at')
    list_filter = ('privacy_level',)
    search_fields = ('user__username', 'user__email', 'full_name')
    exclude = tuple(column for column, _ in MedicalProfile.ENCRYPTED_FIELDS.values()) + ('pin_hash',)
    inlines = [EmergencyContactInline]


@admin.register(EmergencyContact)
class EmergencyContactAdmin(admin.ModelAdmin):
    list_display = ('name', 'medical_profile', 'relationship', 'phone', 'priority')
    search_fields = ('name', 'phone', 'medical_profile__full_name')


@admin.register(AccessLog)
class AccessLogAdmin(admin.ModelAdmin):
    list_display = ('medical_profile', 'access_granted', 'ip_address', 'accessed_at')
    list_filter = ('access_granted',)
    search_fields = ('medical_profile__user__bio_slug', 'ip_address')
    readonly_fields = ('medical_profile', 'ip_address', 'user_agent', 'access_granted', 'accessed_at')

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(InvitationKey)
class InvitationKeyAdmin(admin.ModelAdmin):
    list_display = ('key_code', 'is_used', 'created_by', 'used_by', 'created_at', 'used_at')
    list_filter = ('is_used',)
    search_fields = ('key_code',)
