"""User profile model."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, List, Mapping, Optional

from hooki.domain.geo import GeoPoint


@dataclass(slots=True)
class UserProfile:
	id: str
	name: Optional[str] = None
	email: Optional[str] = None
	avatar: Optional[str] = None
	bio: str = ""
	interests: List[str] = field(default_factory=list)
	photos: List[str] = field(default_factory=list)
	location: Optional[GeoPoint] = None
	created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

	def to_dict(self) -> dict:
		return {
			"id": self.id,
			"name": self.name,
			"email": self.email,
			"avatar": self.avatar,
			"bio": self.bio,
			"interests": list(self.interests),
			"photos": list(self.photos),
			"location": self.location.to_dict() if self.location else None,
			"created_at": self.created_at.isoformat(),
		}

	@classmethod
	def from_dict(cls, raw: Mapping[str, Any]) -> "UserProfile":
		return cls(
			id=str(raw["id"]),
			name=raw.get("name"),
			email=raw.get("email"),
			avatar=raw.get("avatar"),
			bio=raw.get("bio") or "",
			interests=list(raw.get("interests") or []),
			photos=list(raw.get("photos") or []),
			location=GeoPoint.from_mapping(raw.get("location")),
			created_at=datetime.fromisoformat(raw["created_at"]),
		)
