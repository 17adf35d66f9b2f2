"""
JWT authentication for the API.

Extends simplejwt's ``JWTAuthentication`` so that browser clients which
keep the access token in a ``token`` cookie are authenticated the same way
as clients sending ``Authorization: Bearer <token>``.  Kept in its own
module so that DRF can import it from settings without pulling in views.
"""
from __future__ import annotations

from rest_framework_simplejwt import authentication

TOKEN_COOKIE = 'token'


class JWTAuthentication(authentication.JWTAuthentication):
    """Bearer header first, ``token`` cookie as a fallback."""

    def authenticate(self, request):
        header = self.get_header(request)
        if header is not None:
            return super().authenticate(request)
        raw_token = request.COOKIES.get(TOKEN_COOKIE)
        if not raw_token:
            return None
        validated_token = self.get_validated_token(raw_token.encode())
        return self.get_user(validated_token), validated_token
