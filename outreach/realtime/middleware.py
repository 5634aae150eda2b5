"""
Websocket authentication from the same credentials the HTTP API accepts.

Browsers cannot set headers on a websocket handshake, so clients pass
``?token=<drf token>`` or ``?token=<jwt access>`` in the query string.
A valid token replaces ``scope["user"]``; otherwise whatever the session
stack resolved is left in place.
"""
import logging
from urllib.parse import parse_qs

from channels.auth import AuthMiddlewareStack
from channels.db import database_sync_to_async
from channels.middleware import BaseMiddleware
from rest_framework.authtoken.models import Token
from rest_framework.exceptions import AuthenticationFailed
from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError

from outreach.models import User

logger = logging.getLogger(__name__)


def _token_from_scope(scope):
    query = parse_qs(scope.get('query_string', b'').decode('latin-1'))
    values = query.get('token') or []
    return values[0] if values else ''


@database_sync_to_async
def user_for_token(raw):
    token = Token.objects.select_related('user__organization').filter(key=raw).first()
    if token is not None:
        return token.user if token.user.is_active else None
    auth = JWTAuthentication()
    try:
        user = auth.get_user(auth.get_validated_token(raw))
    except (InvalidToken, TokenError, AuthenticationFailed):
        return None
    return User.objects.select_related('organization').filter(pk=user.pk).first()


class TokenAuthMiddleware(BaseMiddleware):

    async def __call__(self, scope, receive, send):
        raw = _token_from_scope(scope)
        if raw:
            user = await user_for_token(raw)
            if user is None:
                logger.info('websocket rejected an invalid token')
            else:
                scope = dict(scope, user=user)
        return await super().__call__(scope, receive, send)


def TokenAuthMiddlewareStack(inner):
    return AuthMiddlewareStack(TokenAuthMiddleware(inner))
