"""Ordered, append-only message log per conversation plus list-view summaries."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import List, Optional

from hooki.domain.errors import AuthorizationError, NotFoundError
from hooki.infra.locks import KeyedLock
from hooki.infra.store import DocumentStore
from hooki.obs import metrics as obs_metrics

from .models import Conversation, ConversationKey, Message

logger = logging.getLogger(__name__)

CONVERSATIONS = "conversations"
MESSAGES = "messages"
MESSAGE_TOKENS = "message_tokens"


class ConversationStore:
	"""Conversation documents live in `conversations`, their logs in `messages`.

	Every mutation of one conversation runs under that conversation's lock, so
	`seq` values are gapless and list order equals append order.
	"""

	def __init__(self, store: DocumentStore) -> None:
		self._store = store
		self._locks = KeyedLock()

	async def get(self, conversation_id: str) -> Optional[Conversation]:
		raw = await self._store.get(CONVERSATIONS, conversation_id)
		return Conversation.from_dict(raw) if raw else None

	async def require(self, conversation_id: str) -> Conversation:
		conversation = await self.get(conversation_id)
		if conversation is None:
			raise NotFoundError("conversation_not_found")
		return conversation

	async def participants(self, conversation_id: str) -> tuple[str, str]:
		"""Stored participants, else the pair encoded in a canonical id."""
		conversation = await self.get(conversation_id)
		if conversation is not None:
			return conversation.participants
		return ConversationKey.parse(conversation_id).participants()

	async def ensure(self, key: ConversationKey) -> Conversation:
		async with self._locks(key.conversation_id):
			return await self._load_or_create(key.conversation_id)

	async def _load_or_create(self, conversation_id: str) -> Conversation:
		conversation = await self.get(conversation_id)
		if conversation is not None:
			return conversation
		conversation = Conversation.new(ConversationKey.parse(conversation_id))
		await self._store.put(CONVERSATIONS, conversation_id, conversation.to_dict())
		logger.info("conversation_created", extra={"conversation_id": conversation_id})
		return conversation

	async def append(self, conversation_id: str, message: Message) -> Message:
		"""Persist `message` at the end of the log and return it with its `seq`.

		`created_at` is clamped so timestamps never go backwards within a
		conversation even if the wall clock does.
		"""
		ConversationKey.parse(conversation_id)
		async with self._locks(conversation_id):
			conversation = await self._load_or_create(conversation_id)
			created_at = message.created_at
			if conversation.last_message_at is not None and created_at < conversation.last_message_at:
				created_at = conversation.last_message_at
			# The log itself is the source of truth for seq; the summary may lag a failed write.
			seq = await self._store.length(MESSAGES, conversation_id) + 1
			stored = replace(
				message,
				conversation_id=conversation_id,
				seq=seq,
				created_at=created_at,
			)
			await self._store.append(MESSAGES, conversation_id, stored.to_dict())
			await self._store.put(
				MESSAGE_TOKENS,
				self._token_key(conversation_id, stored.client_msg_id),
				{"seq": stored.seq},
			)
			conversation.last_seq = stored.seq
			conversation.last_sender_id = stored.sender_id
			await self._write_summary(conversation, stored.content, created_at)
			return stored

	async def update_summary(self, conversation_id: str, last_message: str, last_message_at: datetime) -> Conversation:
		ConversationKey.parse(conversation_id)
		async with self._locks(conversation_id):
			conversation = await self.require(conversation_id)
			await self._write_summary(conversation, last_message, last_message_at)
			return conversation

	async def _write_summary(self, conversation: Conversation, text: str, at: datetime) -> None:
		conversation.last_message = text
		conversation.last_message_at = at
		await self._store.put(CONVERSATIONS, conversation.conversation_id, conversation.to_dict())

	async def list(self, conversation_id: str) -> List[Message]:
		"""Full history, oldest first."""
		await self.require(conversation_id)
		rows = await self._store.items(MESSAGES, conversation_id)
		return [Message.from_dict(row) for row in rows]

	async def find_by_client_id(self, conversation_id: str, client_msg_id: str) -> Optional[Message]:
		"""Message previously stored under `client_msg_id`, if any.

		The token index is a shortcut; a message whose token write failed is
		still found by scanning the log.
		"""
		token = await self._store.get(MESSAGE_TOKENS, self._token_key(conversation_id, client_msg_id))
		rows = await self._store.items(MESSAGES, conversation_id)
		if token:
			index = int(token["seq"]) - 1
			if 0 <= index < len(rows) and rows[index].get("client_msg_id") == client_msg_id:
				return Message.from_dict(rows[index])
		for row in rows:
			if row.get("client_msg_id") == client_msg_id:
				return Message.from_dict(row)
		return None

	async def mark_read(self, conversation_id: str, reader_id: str) -> int:
		"""Flag every message not authored by `reader_id` as read; returns how many flipped."""
		ConversationKey.parse(conversation_id)
		async with self._locks(conversation_id):
			conversation = await self.require(conversation_id)
			if not conversation.is_participant(reader_id):
				raise AuthorizationError("not_a_participant")
			rows = await self._store.items(MESSAGES, conversation_id)
			updated = 0
			for index, row in enumerate(rows):
				if row.get("read") or row.get("sender_id") == reader_id:
					continue
				row["read"] = True
				await self._store.set_item(MESSAGES, conversation_id, index, row)
				updated += 1
		obs_metrics.inc_chat_read(updated)
		return updated

	async def conversations_for(self, user_id: str) -> List[Conversation]:
		"""Conversations `user_id` takes part in, most recent activity first."""
		rows = await self._store.query(CONVERSATIONS, lambda doc: user_id in doc.get("participants", ()))
		conversations = [Conversation.from_dict(row) for row in rows]
		conversations.sort(key=lambda item: (item.activity_at(), item.conversation_id), reverse=True)
		return conversations

	@staticmethod
	def _token_key(conversation_id: str, client_msg_id: str) -> str:
		return f"{conversation_id}|{client_msg_id}"
