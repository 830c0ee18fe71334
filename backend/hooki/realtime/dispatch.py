"""Push events to live connections resolved through the identity registry."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Iterable, Optional, Protocol

from hooki.domain.errors import TransientDeliveryError
from hooki.obs import metrics as obs_metrics
from hooki.realtime.registry import IdentityRegistry

logger = logging.getLogger(__name__)

NAMESPACE = "/"


class Emitter(Protocol):
	def __call__(self, event: str, data: Any = None, *, to: Optional[str] = None) -> Awaitable[Any]:
		...


_namespace = None


def set_namespace(namespace) -> None:
	"""Register the Socket.IO namespace used when no emitter is bound explicitly."""
	global _namespace
	_namespace = namespace


async def _emit_via_namespace(event: str, data: Any = None, *, to: Optional[str] = None) -> None:
	if _namespace is None:
		return
	await _namespace.emit(event, data, to=to)


class Dispatcher:
	"""Fans one event out to a set of connections, one push per connection.

	A failed push is logged and dropped: it never propagates to the caller and
	is never retried, so a dead connection cannot fail a persisted write.
	"""

	def __init__(self, registry: IdentityRegistry, emit: Optional[Emitter] = None) -> None:
		self._registry = registry
		self._emit: Emitter = emit or _emit_via_namespace

	@property
	def registry(self) -> IdentityRegistry:
		return self._registry

	def bind(self, emit: Emitter) -> None:
		self._emit = emit

	async def _deliver(self, connection: str, event: str, payload: Any) -> None:
		try:
			await self._emit(event, payload, to=connection)
		except asyncio.CancelledError:
			raise
		except Exception as exc:
			raise TransientDeliveryError(connection, event) from exc

	async def push(self, connection: str, event: str, payload: Any) -> bool:
		try:
			await self._deliver(connection, event, payload)
		except TransientDeliveryError as failure:
			obs_metrics.inc_delivery_failure(event)
			logger.warning(
				"delivery_dropped",
				extra={"sid": failure.connection, "event": failure.event, "error": repr(failure.__cause__)},
			)
			return False
		obs_metrics.socket_event(NAMESPACE, event)
		return True

	async def to_users(self, user_ids: Iterable[str], event: str, payload: Any) -> int:
		"""Push to every connection of every user, sequentially; returns successful pushes."""
		connections: list[str] = []
		seen: set[str] = set()
		for user_id in user_ids:
			for connection in sorted(self._registry.connections_for(user_id)):
				if connection not in seen:
					seen.add(connection)
					connections.append(connection)
		delivered = 0
		for connection in connections:
			if await self.push(connection, event, payload):
				delivered += 1
		return delivered

	async def broadcast(self, event: str, payload: Any) -> int:
		"""Push to every open connection, announced or anonymous."""
		connections = self._registry.open_connections()
		if not connections:
			return 0
		results = await asyncio.gather(*(self.push(connection, event, payload) for connection in connections))
		return sum(1 for ok in results if ok)
