"""
URL mappings for the MediBio API.

Trailing slashes are omitted on API routes (``APPEND_SLASH`` is off).
"""
from django.urls import include, path

from .auth_views import jwt_refresh_view, login_view, logout_view, me_view, register_view
from .views import admin, bio, contacts, health, profile

urlpatterns = [
    path('metrics', include('django_prometheus.urls')),
    path('healthz', health.healthz),
    # Authentication
    path('api/auth/register', register_view),
    path('api/auth/login', login_view),
    path('api/auth/refresh', jwt_refresh_view),
    path('api/auth/logout', logout_view),
    path('api/auth/me', me_view),
    # Own medical profile
    path('api/profile', profile.profile_view),
    path('api/profile/avatar', profile.avatar_upload_view),
    # Emergency contacts
    path('api/contacts', contacts.contacts),
    path('api/contacts/<int:pk>', contacts.contact_detail),
    # Public bio pages
    path('api/bio/<slug:slug>', bio.bio_page),
    path('api/bio/<slug:slug>/verify-pin', bio.verify_pin),
    # Admin console
    path('api/admin/stats', admin.admin_stats),
    path('api/admin/users', admin.admin_users),
    path('api/admin/users/<int:pk>', admin.admin_delete_user),
    path('api/admin/profiles', admin.admin_profiles),
    path('api/admin/profiles/<int:pk>', admin.admin_delete_profile),
    path('api/admin/keys', admin.admin_keys),
    path('api/admin/keys/generate', admin.admin_generate_keys),
]
