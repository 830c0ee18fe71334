"""Socket.IO namespace: connection lifecycle, identity announce and chat sends."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional

import socketio
from pydantic import ValidationError as SchemaValidationError

from hooki.container import Container, get_container
from hooki.domain.chat.router import MESSAGES_READ_EVENT
from hooki.domain.chat.schemas import MarkReadResponse, MessageResponse, SocketMarkRead, SocketSendMessage
from hooki.domain.errors import AuthorizationError, HookiError, ValidationError
from hooki.obs import logging as obs_logging
from hooki.obs import metrics as obs_metrics

logger = logging.getLogger(__name__)


def _header(scope: dict, name: str) -> Optional[str]:
	target = name.encode().lower()
	for key, value in scope.get("headers", []):
		if key.lower() == target:
			return value.decode()
	return None


def _error(exc: HookiError) -> Dict[str, Any]:
	return {"ok": False, "error": exc.reason, "retryable": exc.retryable}


def _user_id_from(payload: Any) -> Optional[str]:
	if isinstance(payload, str):
		return payload.strip() or None
	if isinstance(payload, dict):
		raw = payload.get("userId") or payload.get("user_id")
		if raw:
			return str(raw).strip() or None
	return None


class HookiNamespace(socketio.AsyncNamespace):
	"""Connections start anonymous and receive only global broadcasts.

	After `announce` they also receive events addressed to that user.
	"""

	def __init__(self, namespace: str = "/", container: Callable[[], Container] = get_container) -> None:
		super().__init__(namespace)
		self._container = container

	async def on_connect(self, sid: str, environ: dict, auth: Optional[dict] = None) -> None:
		obs_metrics.socket_connected(self.namespace)
		container = self._container()
		await container.registry.connect(sid)
		scope = environ.get("asgi.scope", environ)
		# Clients may announce during the handshake instead of with a separate event.
		user_id = _user_id_from(auth or {}) or _header(scope, "x-user-id")
		if user_id:
			await container.registry.announce(sid, user_id)
		logger.info("socket_connected", extra={"sid": sid, "announced": bool(user_id)})

	async def on_disconnect(self, sid: str, reason: Any = None) -> None:
		obs_metrics.socket_disconnected(self.namespace)
		user_id = await self._container().registry.remove(sid)
		logger.info("socket_disconnected", extra={"sid": sid, "user": user_id})

	async def on_announce(self, sid: str, payload: Any = None) -> Dict[str, Any]:
		obs_metrics.socket_event(self.namespace, "announce")
		user_id = _user_id_from(payload)
		if not user_id:
			return _error(ValidationError("user_id_required"))
		await self._container().registry.announce(sid, user_id)
		return {"ok": True, "userId": user_id}

	async def on_join_user(self, sid: str, payload: Any = None) -> Dict[str, Any]:
		return await self.on_announce(sid, payload)

	async def on_send_message(self, sid: str, payload: Any = None) -> Dict[str, Any]:
		obs_metrics.socket_event(self.namespace, "send_message")
		container = self._container()
		tokens = obs_logging.bind_context(connection_id=sid, route="socket:send_message")
		try:
			request = SocketSendMessage.model_validate(payload or {})
			sender_id = self._resolve_sender(container, sid, request.sender_id)
			message = await container.router.route(
				request.conversation_id,
				sender_id,
				request.content,
				client_msg_id=request.client_msg_id,
			)
		except SchemaValidationError:
			return _error(ValidationError("invalid_payload"))
		except HookiError as exc:
			return _error(exc)
		finally:
			obs_logging.reset_context(tokens)
		return {"ok": True, "message": MessageResponse.from_model(message).to_wire()}

	async def on_mark_read(self, sid: str, payload: Any = None) -> Dict[str, Any]:
		obs_metrics.socket_event(self.namespace, "mark_read")
		container = self._container()
		try:
			request = SocketMarkRead.model_validate(payload or {})
			reader_id = self._resolve_sender(container, sid, request.reader_id)
			updated = await container.conversations.mark_read(request.conversation_id, reader_id)
			participants = await container.conversations.participants(request.conversation_id)
		except SchemaValidationError:
			return _error(ValidationError("invalid_payload"))
		except HookiError as exc:
			return _error(exc)
		event = MarkReadResponse(conversation_id=request.conversation_id, reader_id=reader_id, updated=updated).to_wire()
		if updated:
			await container.dispatcher.to_users(participants, MESSAGES_READ_EVENT, event)
		return {"ok": True, **event}

	@staticmethod
	def _resolve_sender(container: Container, sid: str, claimed: Optional[str]) -> str:
		"""The payload id, falling back to the announced one; both must agree when present."""
		announced = container.registry.user_for(sid)
		if claimed and announced and claimed != announced:
			raise AuthorizationError("identity_mismatch")
		user_id = claimed or announced
		if not user_id:
			raise ValidationError("sender_required")
		return user_id
