"""Pydantic schemas for hook endpoints and broadcast events."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import AliasChoices, Field

from hooki.domain.common.schemas import WireModel
from hooki.domain.users.models import UserProfile
from hooki.domain.users.schemas import Location

from .models import Hook, Reply


class HookCreateRequest(WireModel):
	user_id: str = Field(..., min_length=1, validation_alias=AliasChoices("userId", "user_id", "authorId"))
	content: str
	location: Optional[Location] = None
	venue_name: Optional[str] = Field(default=None, validation_alias=AliasChoices("venueName", "venue_name", "venue"))


class LikeRequest(WireModel):
	user_id: str = Field(..., min_length=1, validation_alias=AliasChoices("userId", "user_id"))


class ReplyRequest(WireModel):
	user_id: str = Field(..., min_length=1, validation_alias=AliasChoices("userId", "user_id", "authorId"))
	content: str


class ReplyResponse(WireModel):
	id: str
	user_id: str
	content: str
	created_at: datetime

	@classmethod
	def from_model(cls, reply: Reply) -> "ReplyResponse":
		return cls(id=reply.id, user_id=reply.user_id, content=reply.content, created_at=reply.created_at)


class HookResponse(WireModel):
	id: str
	user_id: str
	content: str
	location: Optional[Location] = None
	venue_name: Optional[str] = None
	likes: List[str] = Field(default_factory=list)
	replies: List[ReplyResponse] = Field(default_factory=list)
	created_at: datetime
	user_name: Optional[str] = None
	user_avatar: Optional[str] = None

	@classmethod
	def from_model(cls, hook: Hook, *, author: UserProfile | None = None, enrich: bool = False) -> "HookResponse":
		location = None
		if hook.location is not None:
			location = Location(latitude=hook.location.latitude, longitude=hook.location.longitude)
		response = cls(
			id=hook.id,
			user_id=hook.user_id,
			content=hook.content,
			location=location,
			venue_name=hook.venue_name,
			likes=list(hook.likes),
			replies=[ReplyResponse.from_model(reply) for reply in hook.replies],
			created_at=hook.created_at,
		)
		if enrich:
			response.user_name = (author.name if author else None) or "Anonymous"
			response.user_avatar = author.avatar if author else None
		return response


class HookLikedEvent(WireModel):
	post_id: str
	hook_id: str
	user_id: str


class HookRepliedEvent(WireModel):
	post_id: str
	hook_id: str
	reply: ReplyResponse
