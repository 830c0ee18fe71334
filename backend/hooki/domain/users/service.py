"""User profiles, nearby-user lookup and blocking."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Dict, Iterable, List, Mapping, Optional

from hooki.domain.errors import NotFoundError, ValidationError
from hooki.domain.geo import GeoFilter, GeoPoint, LinearScanFilter
from hooki.infra.store import DocumentStore
from hooki.obs import metrics as obs_metrics

from .models import UserProfile

logger = logging.getLogger(__name__)

USERS = "users"
BLOCKS = "user_blocks"

_UPDATABLE = ("name", "email", "avatar", "bio", "interests", "photos")


class UserService:
	def __init__(
		self,
		store: DocumentStore,
		*,
		geo: GeoFilter | None = None,
		default_radius_m: float = 500.0,
	) -> None:
		self._store = store
		self._geo = geo or LinearScanFilter()
		self._default_radius_m = default_radius_m

	async def create_user(
		self,
		user_id: str,
		*,
		email: Optional[str] = None,
		name: Optional[str] = None,
		avatar: Optional[str] = None,
	) -> UserProfile:
		user_id = str(user_id).strip()
		if not user_id:
			raise ValidationError("user_id_required")
		profile = UserProfile(id=user_id, email=email, name=name, avatar=avatar)
		await self._store.put(USERS, user_id, profile.to_dict())
		return profile

	async def get_user(self, user_id: str) -> UserProfile:
		raw = await self._store.get(USERS, user_id)
		if not raw:
			raise NotFoundError("user_not_found")
		return UserProfile.from_dict(raw)

	async def update_user(self, user_id: str, changes: Mapping[str, Any]) -> UserProfile:
		"""Apply a partial update; keys left out of `changes` keep their value."""
		profile = await self.get_user(user_id)
		fields = {key: changes[key] for key in _UPDATABLE if changes.get(key) is not None}
		if changes.get("location") is not None:
			location = GeoPoint.from_mapping(changes["location"])
			if location is None:
				raise ValidationError("invalid_location")
			fields["location"] = location
		updated = replace(profile, **fields)
		await self._store.put(USERS, user_id, updated.to_dict())
		return updated

	async def profiles_for(self, user_ids: Iterable[str]) -> Dict[str, UserProfile]:
		profiles: Dict[str, UserProfile] = {}
		for user_id in set(user_ids):
			raw = await self._store.get(USERS, user_id)
			if raw:
				profiles[user_id] = UserProfile.from_dict(raw)
		return profiles

	async def nearby_users(
		self,
		lat: float,
		lon: float,
		radius_m: Optional[float] = None,
		*,
		viewer_id: Optional[str] = None,
	) -> List[UserProfile]:
		radius = self._default_radius_m if radius_m is None else radius_m
		rows = await self._store.query(USERS, lambda doc: doc.get("location") is not None)
		candidates = [UserProfile.from_dict(row) for row in rows]
		if viewer_id:
			hidden = set(await self.blocked_by(viewer_id))
			hidden.add(viewer_id)
			candidates = [profile for profile in candidates if profile.id not in hidden]
		nearby = self._geo.within(candidates, lat, lon, radius)
		obs_metrics.inc_proximity_query("users", len(nearby))
		return nearby

	async def block(self, user_id: str, blocked_user_id: str) -> bool:
		if user_id == blocked_user_id:
			raise ValidationError("cannot_block_self")
		added = await self._store.add_member(BLOCKS, user_id, blocked_user_id)
		if added:
			logger.info("user_blocked", extra={"user": user_id, "blocked_user": blocked_user_id})
		return added

	async def blocked_by(self, user_id: str) -> List[str]:
		return await self._store.members(BLOCKS, user_id)

	async def report(self, user_id: str, reported_user_id: str, reason: str) -> None:
		# Reports go to the log stream for manual review; nothing is persisted.
		logger.warning(
			"user_reported",
			extra={"user": user_id, "reported_user": reported_user_id, "reason": reason},
		)
