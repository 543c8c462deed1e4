# apps/core/middleware.py

import logging
from urllib.parse import parse_qs

from channels.db import database_sync_to_async
from channels.middleware import BaseMiddleware
from django.contrib.auth import get_user_model
from django.contrib.auth.models import AnonymousUser
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.settings import api_settings
from rest_framework_simplejwt.tokens import AccessToken

logger = logging.getLogger(__name__)
User = get_user_model()


@database_sync_to_async
def get_user_by_token(token):
    """Resolves a simplejwt access token to an active user, or AnonymousUser"""
    try:
        access_token = AccessToken(token)
        user_id = access_token[api_settings.USER_ID_CLAIM]
        return User.objects.get(id=user_id, is_active=True)
    except (TokenError, KeyError, User.DoesNotExist) as e:
        logger.warning(f"❌ WebSocket token rejected: {e}")
        return AnonymousUser()


class JWTAuthMiddleware(BaseMiddleware):
    """
    Populates scope['user'] for websocket connections

    The access token is read from ?token= first, then from an
    "Authorization: Bearer <token>" header.
    """

    async def __call__(self, scope, receive, send):
        if scope['type'] != 'websocket':
            return await super().__call__(scope, receive, send)

        query_params = parse_qs(scope.get('query_string', b'').decode())
        token = query_params.get('token', [None])[0]

        if not token:
            headers = dict(scope.get('headers', []))
            auth_header = headers.get(b'authorization', b'').decode()
            if auth_header.startswith('Bearer '):
                token = auth_header[7:]

        scope = dict(scope, user=await get_user_by_token(token) if token else AnonymousUser())
        return await super().__call__(scope, receive, send)
