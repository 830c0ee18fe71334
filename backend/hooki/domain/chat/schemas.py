"""Pydantic schemas for chat and match payloads (REST and socket)."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import AliasChoices, Field

from hooki.domain.common.schemas import WireModel

from .models import Conversation, Match, Message


class SendMessageRequest(WireModel):
	sender_id: str = Field(..., validation_alias=AliasChoices("senderId", "sender_id", "userId", "user_id"))
	content: str
	client_msg_id: Optional[str] = Field(
		default=None,
		validation_alias=AliasChoices("clientMsgId", "client_msg_id"),
		description="Client-generated idempotency token; resends with the same token are not duplicated",
	)


class SocketSendMessage(SendMessageRequest):
	"""`send_message` event body; legacy clients send `matchId`/`userId`."""

	sender_id: Optional[str] = Field(  # type: ignore[assignment]
		default=None,
		validation_alias=AliasChoices("senderId", "sender_id", "userId", "user_id"),
	)
	conversation_id: str = Field(
		...,
		validation_alias=AliasChoices("conversationId", "conversation_id", "matchId", "match_id"),
	)


class MarkReadRequest(WireModel):
	reader_id: str = Field(..., validation_alias=AliasChoices("readerId", "reader_id", "userId", "user_id"))


class SocketMarkRead(WireModel):
	conversation_id: str = Field(..., validation_alias=AliasChoices("conversationId", "conversation_id", "matchId"))
	reader_id: Optional[str] = Field(default=None, validation_alias=AliasChoices("readerId", "reader_id", "userId"))


class MessageResponse(WireModel):
	id: str
	conversation_id: str
	match_id: str
	seq: int
	sender_id: str
	content: str
	created_at: datetime
	read: bool
	client_msg_id: str

	@classmethod
	def from_model(cls, message: Message) -> "MessageResponse":
		return cls(
			id=message.id,
			conversation_id=message.conversation_id,
			match_id=message.conversation_id,
			seq=message.seq,
			sender_id=message.sender_id,
			content=message.content,
			created_at=message.created_at,
			read=message.read,
			client_msg_id=message.client_msg_id,
		)


class MessageListResponse(WireModel):
	conversation_id: str
	items: List[MessageResponse]


class MarkReadResponse(WireModel):
	conversation_id: str
	reader_id: str
	updated: int


class ConversationSummary(WireModel):
	conversation_id: str
	participants: List[str]
	peer_id: Optional[str] = None
	last_message: Optional[str] = None
	last_message_at: Optional[datetime] = None
	last_sender_id: Optional[str] = None
	created_at: datetime

	@classmethod
	def from_model(cls, conversation: Conversation, *, viewer_id: str | None = None) -> "ConversationSummary":
		peer_id = None
		if viewer_id is not None and conversation.is_participant(viewer_id):
			first, second = conversation.participants
			peer_id = second if viewer_id == first else first
		return cls(
			conversation_id=conversation.conversation_id,
			participants=list(conversation.participants),
			peer_id=peer_id,
			last_message=conversation.last_message,
			last_message_at=conversation.last_message_at,
			last_sender_id=conversation.last_sender_id,
			created_at=conversation.created_at,
		)


class MatchCreateRequest(WireModel):
	user_id1: str = Field(..., validation_alias=AliasChoices("userId1", "user_id1"))
	user_id2: str = Field(..., validation_alias=AliasChoices("userId2", "user_id2"))


class MatchResponse(WireModel):
	id: str
	conversation_id: str
	user_id1: str
	user_id2: str
	created_at: datetime

	@classmethod
	def from_model(cls, match: Match) -> "MatchResponse":
		return cls(
			id=match.id,
			conversation_id=match.conversation_id,
			user_id1=match.user_ids[0],
			user_id2=match.user_ids[1],
			created_at=match.created_at,
		)
