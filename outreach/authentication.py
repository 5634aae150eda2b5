"""
Token authentication for the API.

Kept apart from the views so DRF can import the authentication class
from settings without pulling in view modules.
"""
from __future__ import annotations

from rest_framework import authentication


class TokenAuthentication(authentication.TokenAuthentication):
    """``Authorization: Token <key>``; the key is issued by ``login_view``."""

    keyword = 'Token'

    def authenticate_credentials(self, key):
        user, token = super().authenticate_credentials(key)
        # the organization is read on every request by get_auth_context
        if user.organization_id:
            user = type(user).objects.select_related('organization').get(pk=user.pk)
        return user, token
