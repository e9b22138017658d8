"""
Socket.IO connection lifecycle.

Current client convention:
- Socket.IO path: /socket.io/
- Auth: ``authenticate`` event carrying the token, or the token passed at
  connect time as ``auth: { token }`` / ``?token=``
- Panic button: ``trigger`` event (``button_click`` is accepted too)

Connection states are UNAUTHENTICATED -> AUTHENTICATED -> CLOSED and are read
off the registry: unknown sid is closed, sid without identity is
unauthenticated.
"""

from enum import Enum
from typing import Any, Optional
from urllib.parse import parse_qs

from pydantic import ValidationError as PydanticValidationError
from socketio import exceptions as sio_exceptions

from core.exceptions import InvalidToken
from core.logging import get_logger
from core.security import Identity, verify_token
from schemas.panic_event import TriggerPayload
from services.connection_registry import ConnectionRegistry
from services.panic_alert import PanicAlertService

logger = get_logger(__name__)


class ConnectionState(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"
    CLOSED = "closed"


def _extract_token(environ: Any, auth: Any) -> Optional[str]:
    """Pull a token from the connect ``auth`` payload or the query string."""
    if isinstance(auth, dict):
        token = auth.get("token")
        if isinstance(token, str) and token:
            return token

    scope: Any = environ
    if isinstance(environ, dict) and isinstance(environ.get("asgi.scope"), dict):
        scope = environ["asgi.scope"]

    query_string: Any = ""
    if isinstance(scope, dict):
        query_string = scope.get("query_string") or scope.get("QUERY_STRING") or ""
    if isinstance(query_string, (bytes, bytearray)):
        query_string = query_string.decode(errors="ignore")

    token = parse_qs(str(query_string)).get("token", [None])[0]
    return token or None


def _token_from_message(data: Any) -> Optional[str]:
    if isinstance(data, str):
        return data
    if isinstance(data, dict) and isinstance(data.get("token"), str):
        return data["token"]
    return None


class RealtimeGateway:
    """Binds lifecycle handlers to a ``socketio.AsyncServer``."""

    def __init__(self, sio, registry: ConnectionRegistry, alerts: PanicAlertService):
        self.sio = sio
        self.registry = registry
        self.alerts = alerts

        sio.on("connect", self.on_connect)
        sio.on("authenticate", self.on_authenticate)
        sio.on("trigger", self.on_trigger)
        sio.on("button_click", self.on_trigger)
        sio.on("error", self.on_error)
        sio.on("disconnect", self.on_disconnect)

    def state_of(self, sid: str) -> ConnectionState:
        if sid not in self.registry:
            return ConnectionState.CLOSED
        if self.registry.identity_of(sid) is None:
            return ConnectionState.UNAUTHENTICATED
        return ConnectionState.AUTHENTICATED

    async def on_connect(self, sid: str, environ: dict, auth: Any = None):
        identity: Optional[Identity] = None
        token = _extract_token(environ, auth)
        if token:
            try:
                identity = verify_token(token)
            except InvalidToken as e:
                logger.warning("WebSocket connect refused", sid=sid, reason=e.message)
                raise sio_exceptions.ConnectionRefusedError("unauthorized") from e

        self.registry.open(sid)
        if identity is not None:
            self.registry.attach(sid, identity)
            logger.info("User authenticated via WebSocket", sid=sid, user_id=identity.user_id, name=identity.name)
        else:
            logger.info("A user connected", sid=sid)

    async def on_authenticate(self, sid: str, data: Any = None):
        try:
            identity = verify_token(_token_from_message(data))
        except InvalidToken as e:
            logger.error("WebSocket authentication failed", sid=sid, reason=e.message)
            self.registry.remove(sid)
            await self.sio.disconnect(sid)
            return None

        if not self.registry.attach(sid, identity):
            logger.warning("Authentication for closed connection dropped", sid=sid, user_id=identity.user_id)
            return None

        logger.info("User authenticated via WebSocket", sid=sid, user_id=identity.user_id, name=identity.name)
        return {"success": True, "userId": identity.user_id, "name": identity.name}

    async def on_trigger(self, sid: str, data: Any = None):
        identity = self.registry.identity_of(sid)
        if identity is None:
            logger.error("Unauthorized panic button click", sid=sid)
            return None

        try:
            payload = TriggerPayload.model_validate(data if isinstance(data, dict) else {})
        except PydanticValidationError as e:
            logger.error("Invalid panic trigger payload", sid=sid, user_id=identity.user_id, errors=e.errors())
            return None

        report = await self.alerts.trigger(identity, payload)
        if report is None:
            return {"success": False, "message": "Panic event could not be recorded"}
        return {"success": True, "eventId": report.event_id, "notified": report.notified}

    async def on_error(self, sid: str, data: Any = None):
        logger.error("WebSocket error", sid=sid, error=data)

    async def on_disconnect(self, sid: str, reason: Any = None):
        identity = self.registry.remove(sid)
        logger.info(
            "User disconnected",
            sid=sid,
            user_id=identity.user_id if identity else None,
            reason=str(reason) if reason is not None else None,
        )
