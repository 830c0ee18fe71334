"""Pydantic schemas for user endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import AliasChoices, Field

from hooki.domain.common.schemas import WireModel

from .models import UserProfile


class Location(WireModel):
	latitude: float = Field(..., ge=-90.0, le=90.0)
	longitude: float = Field(..., ge=-180.0, le=180.0)


class UserCreateRequest(WireModel):
	id: str = Field(..., min_length=1)
	email: Optional[str] = None
	name: Optional[str] = None
	avatar: Optional[str] = None


class UserUpdateRequest(WireModel):
	name: Optional[str] = None
	email: Optional[str] = None
	avatar: Optional[str] = None
	bio: Optional[str] = None
	interests: Optional[List[str]] = None
	photos: Optional[List[str]] = None
	location: Optional[Location] = None


class UserResponse(WireModel):
	id: str
	name: Optional[str] = None
	email: Optional[str] = None
	avatar: Optional[str] = None
	bio: str = ""
	interests: List[str] = Field(default_factory=list)
	photos: List[str] = Field(default_factory=list)
	location: Optional[Location] = None
	created_at: datetime

	@classmethod
	def from_model(cls, profile: UserProfile) -> "UserResponse":
		location = None
		if profile.location is not None:
			location = Location(latitude=profile.location.latitude, longitude=profile.location.longitude)
		return cls(
			id=profile.id,
			name=profile.name,
			email=profile.email,
			avatar=profile.avatar,
			bio=profile.bio,
			interests=list(profile.interests),
			photos=list(profile.photos),
			location=location,
			created_at=profile.created_at,
		)


class BlockRequest(WireModel):
	blocked_user_id: str = Field(..., min_length=1, validation_alias=AliasChoices("blockedUserId", "blocked_user_id"))


class ReportRequest(WireModel):
	reported_user_id: str = Field(..., min_length=1, validation_alias=AliasChoices("reportedUserId", "reported_user_id"))
	reason: str = ""


class SuccessResponse(WireModel):
	success: bool = True
