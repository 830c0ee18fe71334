"""Domain models for hooks (location-tagged posts) and their replies."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, List, Mapping, Optional

from hooki.domain.geo import GeoPoint


def _utcnow() -> datetime:
	return datetime.now(timezone.utc)


@dataclass(slots=True)
class Reply:
	id: str
	user_id: str
	content: str
	created_at: datetime = field(default_factory=_utcnow)

	def to_dict(self) -> dict:
		return {
			"id": self.id,
			"user_id": self.user_id,
			"content": self.content,
			"created_at": self.created_at.isoformat(),
		}

	@classmethod
	def from_dict(cls, raw: Mapping[str, Any]) -> "Reply":
		return cls(
			id=str(raw["id"]),
			user_id=str(raw["user_id"]),
			content=str(raw["content"]),
			created_at=datetime.fromisoformat(raw["created_at"]),
		)


@dataclass(slots=True)
class Hook:
	id: str
	user_id: str
	content: str
	location: Optional[GeoPoint] = None
	venue_name: Optional[str] = None
	likes: List[str] = field(default_factory=list)
	replies: List[Reply] = field(default_factory=list)
	created_at: datetime = field(default_factory=_utcnow)

	def to_dict(self) -> dict:
		"""Stored document; likes and replies live in their own collections."""
		return {
			"id": self.id,
			"user_id": self.user_id,
			"content": self.content,
			"location": self.location.to_dict() if self.location else None,
			"venue_name": self.venue_name,
			"created_at": self.created_at.isoformat(),
		}

	@classmethod
	def from_dict(cls, raw: Mapping[str, Any]) -> "Hook":
		return cls(
			id=str(raw["id"]),
			user_id=str(raw["user_id"]),
			content=str(raw["content"]),
			location=GeoPoint.from_mapping(raw.get("location")),
			venue_name=raw.get("venue_name"),
			created_at=datetime.fromisoformat(raw["created_at"]),
		)
