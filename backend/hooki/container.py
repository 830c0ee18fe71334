"""Service container wiring the store, registry and domain services together."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from hooki.domain.chat.matches import MatchService
from hooki.domain.chat.router import MessageRouter
from hooki.domain.chat.store import ConversationStore
from hooki.domain.geo import GeoFilter, LinearScanFilter
from hooki.domain.hooks.service import HookService
from hooki.domain.users.service import UserService
from hooki.infra.redis import redis_client
from hooki.infra.store import DocumentStore, MemoryStore, RedisStore
from hooki.realtime.dispatch import Dispatcher
from hooki.realtime.registry import IdentityRegistry
from hooki.settings import Settings, settings as default_settings


@dataclass(slots=True)
class Container:
	settings: Settings
	store: DocumentStore
	registry: IdentityRegistry
	dispatcher: Dispatcher
	conversations: ConversationStore
	router: MessageRouter
	matches: MatchService
	users: UserService
	hooks: HookService


def build_store(config: Settings) -> DocumentStore:
	if config.store_backend == "redis":
		return RedisStore(redis_client, prefix=config.store_key_prefix)
	return MemoryStore()


def build_container(
	*,
	store: Optional[DocumentStore] = None,
	config: Optional[Settings] = None,
	geo: Optional[GeoFilter] = None,
) -> Container:
	config = config or default_settings
	store = store or build_store(config)
	geo = geo or LinearScanFilter()
	registry = IdentityRegistry()
	dispatcher = Dispatcher(registry)
	conversations = ConversationStore(store)
	users = UserService(store, geo=geo, default_radius_m=config.users_default_radius_m)
	return Container(
		settings=config,
		store=store,
		registry=registry,
		dispatcher=dispatcher,
		conversations=conversations,
		router=MessageRouter(conversations, dispatcher, max_message_length=config.chat_max_message_length),
		matches=MatchService(store, conversations, dispatcher),
		users=users,
		hooks=HookService(store, dispatcher, users, geo=geo, default_radius_m=config.hooks_default_radius_m),
	)


_container: Optional[Container] = None


def get_container() -> Container:
	global _container
	if _container is None:
		_container = build_container()
	return _container


def set_container(container: Optional[Container]) -> None:
	global _container
	_container = container
