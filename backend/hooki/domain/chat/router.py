"""Message router: persist a chat message, then fan it out to live connections."""

from __future__ import annotations

import logging
from typing import Optional

import ulid

from hooki.domain.errors import AuthorizationError, ValidationError
from hooki.infra.locks import KeyedLock
from hooki.obs import metrics as obs_metrics
from hooki.realtime.dispatch import Dispatcher

from .models import ConversationKey, Message, utcnow
from .schemas import MessageResponse
from .store import ConversationStore

logger = logging.getLogger(__name__)

NEW_MESSAGE_EVENT = "new_message"
MESSAGES_READ_EVENT = "messages_read"


def _clean_content(content: object, max_length: int) -> str:
	if not isinstance(content, str) or not content.strip():
		raise ValidationError("content_required")
	if len(content) > max_length:
		raise ValidationError("content_too_long")
	return content


class MessageRouter:
	"""Single writer per conversation.

	The router holds the conversation's lock from the append through the last
	push, so every connection sees a conversation's messages in append order.
	Other conversations are not blocked.
	"""

	def __init__(
		self,
		conversations: ConversationStore,
		dispatcher: Dispatcher,
		*,
		max_message_length: int = 4000,
	) -> None:
		self._conversations = conversations
		self._dispatcher = dispatcher
		self._max_length = max_message_length
		self._locks = KeyedLock()

	async def route(
		self,
		conversation_id: str,
		sender_id: str,
		content: str,
		*,
		client_msg_id: Optional[str] = None,
	) -> Message:
		body = _clean_content(content, self._max_length)
		sender = str(sender_id or "").strip()
		if not sender:
			raise ValidationError("sender_required")

		ConversationKey.parse(conversation_id)
		async with self._locks(conversation_id):
			participants = await self._conversations.participants(conversation_id)
			if sender not in participants:
				logger.warning(
					"message_rejected",
					extra={"conversation_id": conversation_id, "sender": sender, "error": "not_a_participant"},
				)
				raise AuthorizationError("not_a_participant")

			if client_msg_id:
				existing = await self._conversations.find_by_client_id(conversation_id, client_msg_id)
				if existing is not None:
					obs_metrics.inc_chat_duplicate()
					return existing

			message = Message(
				id=str(ulid.new()),
				conversation_id=conversation_id,
				sender_id=sender,
				content=body,
				created_at=utcnow(),
				client_msg_id=client_msg_id or "",
			)
			if not message.client_msg_id:
				message.client_msg_id = message.id
			stored = await self._conversations.append(conversation_id, message)
			obs_metrics.inc_chat_send()

			payload = MessageResponse.from_model(stored).to_wire()
			# Sender connections get the same event as an echo for optimistic UI reconciliation.
			delivered = await self._dispatcher.to_users(participants, NEW_MESSAGE_EVENT, payload)
			obs_metrics.inc_chat_delivered(delivered)

		logger.info(
			"message_routed",
			extra={"conversation_id": conversation_id, "seq": stored.seq, "delivered": delivered},
		)
		return stored
