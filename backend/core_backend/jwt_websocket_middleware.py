"""
JWT WebSocket Authentication Middleware for Django Channels.

Authenticates WebSocket connections with the same access tokens the REST API
accepts, so consumers see ``scope["user"]`` just like HTTP views see
``request.user``.
"""
import logging
from urllib.parse import parse_qs

import jwt
from channels.db import database_sync_to_async
from channels.middleware import BaseMiddleware
from django.conf import settings
from django.contrib.auth import get_user_model
from django.contrib.auth.models import AnonymousUser

logger = logging.getLogger(__name__)


def _token_from_scope(scope):
    """``?token=`` in the query string wins over the ``access_token`` cookie."""
    query = parse_qs(scope.get("query_string", b"").decode())
    if query.get("token"):
        return query["token"][0]

    headers = dict(scope.get("headers", []))
    cookie_header = headers.get(b"cookie", b"").decode("utf-8")
    cookies = {}
    for cookie in cookie_header.split(";"):
        if "=" in cookie:
            key, value = cookie.strip().split("=", 1)
            cookies[key] = value
    return cookies.get(settings.SIMPLE_JWT.get("AUTH_COOKIE"))


class JWTAuthMiddleware(BaseMiddleware):
    """
    Puts the token's user (or ``AnonymousUser``) in ``scope["user"]``.
    Rejecting anonymous sockets is left to the consumer.
    """

    async def __call__(self, scope, receive, send):
        if scope["type"] == "websocket":
            scope["user"] = await self.get_user_from_jwt(scope)
        return await super().__call__(scope, receive, send)

    async def get_user_from_jwt(self, scope):
        access_token = _token_from_scope(scope)
        if not access_token:
            logger.debug("No JWT access token on WebSocket connection")
            return AnonymousUser()

        jwt_config = settings.SIMPLE_JWT
        try:
            payload = jwt.decode(
                access_token,
                jwt_config.get("SIGNING_KEY", settings.SECRET_KEY),
                algorithms=[jwt_config.get("ALGORITHM", "HS256")],
                options={"verify_signature": True, "verify_exp": True},
            )
        except jwt.ExpiredSignatureError:
            logger.warning("Expired JWT token in WebSocket connection")
            return AnonymousUser()
        except jwt.InvalidTokenError as e:
            logger.warning(f"Invalid JWT token in WebSocket connection: {e}")
            return AnonymousUser()

        if payload.get("token_type", "access") != "access":
            logger.warning("Non-access JWT presented on WebSocket connection")
            return AnonymousUser()

        user_id = payload.get(jwt_config.get("USER_ID_CLAIM", "user_id"))
        if not user_id:
            logger.warning("JWT payload missing user_id")
            return AnonymousUser()

        user = await self._get_active_user(user_id)
        if user is None:
            logger.warning(f"User {user_id} from JWT not found or inactive")
            return AnonymousUser()

        logger.info(f"WebSocket authenticated: user={user.username}, role={user.role}")
        return user

    @database_sync_to_async
    def _get_active_user(self, user_id):
        User = get_user_model()
        return User.objects.filter(pk=user_id, is_active=True).first()
