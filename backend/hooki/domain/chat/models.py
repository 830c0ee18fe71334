"""Domain models for matches and chat."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping, Optional, Tuple

from hooki.domain.errors import NotFoundError, ValidationError

CONVERSATION_PREFIX = "chat"
_SEPARATOR = ":"


def utcnow() -> datetime:
	return datetime.now(timezone.utc)


def parse_timestamp(value: str | datetime | None) -> Optional[datetime]:
	if value is None or isinstance(value, datetime):
		return value
	return datetime.fromisoformat(value)


def _clean_user_id(raw: object) -> str:
	user_id = str(raw or "").strip()
	if not user_id:
		raise ValidationError("user_id_required")
	if _SEPARATOR in user_id:
		raise ValidationError("invalid_user_id")
	return user_id


@dataclass(slots=True, frozen=True)
class ConversationKey:
	"""Canonical representation of a 1:1 conversation between two users."""

	user_a: str
	user_b: str

	@classmethod
	def from_participants(cls, user_one: str, user_two: str) -> "ConversationKey":
		first, second = _clean_user_id(user_one), _clean_user_id(user_two)
		if first == second:
			raise ValidationError("cannot_match_self")
		ordered = tuple(sorted((first, second)))
		return cls(user_a=ordered[0], user_b=ordered[1])

	@classmethod
	def parse(cls, conversation_id: str) -> "ConversationKey":
		parts = str(conversation_id).split(_SEPARATOR)
		if len(parts) != 3 or parts[0] != CONVERSATION_PREFIX:
			raise NotFoundError("conversation_not_found")
		try:
			key = cls.from_participants(parts[1], parts[2])
		except ValidationError:
			raise NotFoundError("conversation_not_found") from None
		if key.conversation_id != conversation_id:
			raise NotFoundError("conversation_not_found")
		return key

	@property
	def conversation_id(self) -> str:
		return f"{CONVERSATION_PREFIX}{_SEPARATOR}{self.user_a}{_SEPARATOR}{self.user_b}"

	def participants(self) -> Tuple[str, str]:
		return (self.user_a, self.user_b)

	def other(self, user_id: str) -> str:
		return self.user_b if user_id == self.user_a else self.user_a


def conversation_id_for(user_one: str, user_two: str) -> str:
	return ConversationKey.from_participants(user_one, user_two).conversation_id


@dataclass(slots=True)
class Message:
	id: str
	conversation_id: str
	sender_id: str
	content: str
	created_at: datetime
	client_msg_id: str
	seq: int = 0
	read: bool = False

	def to_dict(self) -> dict:
		return {
			"id": self.id,
			"conversation_id": self.conversation_id,
			"seq": self.seq,
			"sender_id": self.sender_id,
			"content": self.content,
			"created_at": self.created_at.isoformat(),
			"client_msg_id": self.client_msg_id,
			"read": self.read,
		}

	@classmethod
	def from_dict(cls, raw: Mapping[str, Any]) -> "Message":
		return cls(
			id=str(raw["id"]),
			conversation_id=str(raw["conversation_id"]),
			seq=int(raw["seq"]),
			sender_id=str(raw["sender_id"]),
			content=str(raw["content"]),
			created_at=parse_timestamp(raw["created_at"]),  # type: ignore[arg-type]
			client_msg_id=str(raw.get("client_msg_id") or raw["id"]),
			read=bool(raw.get("read", False)),
		)


@dataclass(slots=True)
class Conversation:
	conversation_id: str
	participants: Tuple[str, str]
	created_at: datetime
	last_seq: int = 0
	last_message: Optional[str] = None
	last_message_at: Optional[datetime] = None
	last_sender_id: Optional[str] = None

	@classmethod
	def new(cls, key: ConversationKey, created_at: datetime | None = None) -> "Conversation":
		return cls(
			conversation_id=key.conversation_id,
			participants=key.participants(),
			created_at=created_at or utcnow(),
		)

	def is_participant(self, user_id: str) -> bool:
		return user_id in self.participants

	def activity_at(self) -> datetime:
		return self.last_message_at or self.created_at

	def to_dict(self) -> dict:
		return {
			"conversation_id": self.conversation_id,
			"participants": list(self.participants),
			"created_at": self.created_at.isoformat(),
			"last_seq": self.last_seq,
			"last_message": self.last_message,
			"last_message_at": self.last_message_at.isoformat() if self.last_message_at else None,
			"last_sender_id": self.last_sender_id,
		}

	@classmethod
	def from_dict(cls, raw: Mapping[str, Any]) -> "Conversation":
		participants = tuple(str(item) for item in raw["participants"])
		return cls(
			conversation_id=str(raw["conversation_id"]),
			participants=(participants[0], participants[1]),
			created_at=parse_timestamp(raw["created_at"]),  # type: ignore[arg-type]
			last_seq=int(raw.get("last_seq") or 0),
			last_message=raw.get("last_message"),
			last_message_at=parse_timestamp(raw.get("last_message_at")),
			last_sender_id=raw.get("last_sender_id"),
		)


@dataclass(slots=True)
class Match:
	id: str
	user_ids: Tuple[str, str]
	created_at: datetime = field(default_factory=utcnow)

	@property
	def conversation_id(self) -> str:
		return self.id

	def involves(self, user_id: str) -> bool:
		return user_id in self.user_ids

	def to_dict(self) -> dict:
		return {
			"id": self.id,
			"user_ids": list(self.user_ids),
			"created_at": self.created_at.isoformat(),
		}

	@classmethod
	def from_dict(cls, raw: Mapping[str, Any]) -> "Match":
		user_ids = tuple(str(item) for item in raw["user_ids"])
		return cls(
			id=str(raw["id"]),
			user_ids=(user_ids[0], user_ids[1]),
			created_at=parse_timestamp(raw["created_at"]),  # type: ignore[arg-type]
		)
