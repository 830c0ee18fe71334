"""Hook (post) creation, likes, replies and nearby listing with global fan-out."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

import ulid

from hooki.domain.errors import NotFoundError, ValidationError
from hooki.domain.geo import GeoFilter, GeoPoint, LinearScanFilter
from hooki.domain.users.models import UserProfile
from hooki.domain.users.service import UserService
from hooki.infra.store import DocumentStore
from hooki.obs import metrics as obs_metrics
from hooki.realtime.dispatch import Dispatcher

from .models import Hook, Reply
from .schemas import HookLikedEvent, HookRepliedEvent, HookResponse, ReplyResponse

logger = logging.getLogger(__name__)

HOOKS = "hooks"
LIKES = "hook_likes"
REPLIES = "hook_replies"

NEW_POST_EVENT = "new_post"
POST_LIKED_EVENT = "post_liked"
POST_REPLIED_EVENT = "post_replied"


def _require_content(content: object) -> str:
	if not isinstance(content, str) or not content.strip():
		raise ValidationError("content_required")
	return content


class HookService:
	"""Broadcasts are unscoped: every open connection receives them.

	Proximity is applied when a client lists hooks, never at broadcast time.
	"""

	def __init__(
		self,
		store: DocumentStore,
		dispatcher: Dispatcher,
		users: UserService,
		*,
		geo: GeoFilter | None = None,
		default_radius_m: float = 1000.0,
	) -> None:
		self._store = store
		self._dispatcher = dispatcher
		self._users = users
		self._geo = geo or LinearScanFilter()
		self._default_radius_m = default_radius_m

	async def create_post(
		self,
		author_id: str,
		content: str,
		location: Optional[GeoPoint] = None,
		venue_name: Optional[str] = None,
	) -> Hook:
		author = str(author_id or "").strip()
		if not author:
			raise ValidationError("user_id_required")
		hook = Hook(
			id=str(ulid.new()),
			user_id=author,
			content=_require_content(content),
			location=location,
			venue_name=venue_name,
		)
		await self._store.put(HOOKS, hook.id, hook.to_dict())
		obs_metrics.inc_hook_created()
		logger.info("hook_created", extra={"hook_id": hook.id, "has_location": location is not None})
		await self._dispatcher.broadcast(NEW_POST_EVENT, HookResponse.from_model(hook).to_wire())
		return hook

	async def get_post(self, post_id: str) -> Hook:
		raw = await self._store.get(HOOKS, post_id)
		if not raw:
			raise NotFoundError("hook_not_found")
		return await self._hydrate(Hook.from_dict(raw))

	async def _hydrate(self, hook: Hook) -> Hook:
		hook.likes = await self._store.members(LIKES, hook.id)
		hook.replies = [Reply.from_dict(row) for row in await self._store.items(REPLIES, hook.id)]
		return hook

	async def like(self, post_id: str, user_id: str) -> Hook:
		"""Idempotent; only a first like by `user_id` is broadcast."""
		if not await self._store.get(HOOKS, post_id):
			raise NotFoundError("hook_not_found")
		added = await self._store.add_member(LIKES, post_id, user_id)
		obs_metrics.inc_hook_like("new" if added else "duplicate")
		if added:
			event = HookLikedEvent(post_id=post_id, hook_id=post_id, user_id=user_id)
			await self._dispatcher.broadcast(POST_LIKED_EVENT, event.to_wire())
		return await self.get_post(post_id)

	async def reply(self, post_id: str, author_id: str, content: str) -> Reply:
		body = _require_content(content)
		if not str(author_id or "").strip():
			raise ValidationError("user_id_required")
		if not await self._store.get(HOOKS, post_id):
			raise NotFoundError("hook_not_found")
		reply = Reply(id=str(ulid.new()), user_id=author_id, content=body)
		await self._store.append(REPLIES, post_id, reply.to_dict())
		obs_metrics.inc_hook_reply()
		event = HookRepliedEvent(post_id=post_id, hook_id=post_id, reply=ReplyResponse.from_model(reply))
		await self._dispatcher.broadcast(POST_REPLIED_EVENT, event.to_wire())
		return reply

	async def list_nearby(
		self,
		lat: Optional[float] = None,
		lon: Optional[float] = None,
		radius_m: Optional[float] = None,
	) -> List[Hook]:
		"""Newest first. Without an origin every hook is returned."""
		hooks = [Hook.from_dict(row) for row in await self._store.query(HOOKS)]
		if lat is not None and lon is not None:
			radius = self._default_radius_m if radius_m is None else radius_m
			hooks = self._geo.within(hooks, lat, lon, radius)
			obs_metrics.inc_proximity_query("hooks", len(hooks))
		hooks.sort(key=lambda item: (item.created_at, item.id), reverse=True)
		return [await self._hydrate(hook) for hook in hooks]

	async def authors_for(self, hooks: List[Hook]) -> Dict[str, UserProfile]:
		return await self._users.profiles_for(hook.user_id for hook in hooks)
