"""Identity registry binding live socket connections to user ids."""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, FrozenSet, Optional, Set

from hooki.obs import metrics as obs_metrics

logger = logging.getLogger(__name__)


class IdentityRegistry:
	"""Tracks open connections and which user, if any, each one announced.

	A user may hold several connections (multi-device). A connection holds at
	most one user; announcing again rebinds it. Unknown connections are no-ops
	everywhere since disconnects race with lookups and sends.
	"""

	def __init__(self) -> None:
		self._lock = asyncio.Lock()
		self._open: Set[str] = set()
		self._user_by_connection: Dict[str, str] = {}
		self._connections_by_user: Dict[str, Set[str]] = {}

	async def connect(self, connection: str) -> None:
		async with self._lock:
			self._open.add(connection)

	async def announce(self, connection: str, user_id: str) -> Optional[str]:
		"""Bind `connection` to `user_id`; returns the previously bound user, if any."""
		async with self._lock:
			self._open.add(connection)
			previous = self._user_by_connection.get(connection)
			if previous == user_id:
				return previous
			if previous is not None:
				self._unbind(connection, previous)
			self._user_by_connection[connection] = user_id
			self._connections_by_user.setdefault(user_id, set()).add(connection)
			obs_metrics.set_announced_users(len(self._connections_by_user))
		logger.info("connection_announced", extra={"sid": connection, "user": user_id, "previous_user": previous})
		return previous

	async def remove(self, connection: str) -> Optional[str]:
		"""Forget `connection` entirely. Safe to call more than once."""
		async with self._lock:
			self._open.discard(connection)
			user_id = self._user_by_connection.pop(connection, None)
			if user_id is not None:
				self._unbind(connection, user_id)
			obs_metrics.set_announced_users(len(self._connections_by_user))
		return user_id

	def _unbind(self, connection: str, user_id: str) -> None:
		connections = self._connections_by_user.get(user_id)
		if connections is None:
			return
		connections.discard(connection)
		if not connections:
			del self._connections_by_user[user_id]

	def connections_for(self, user_id: str) -> FrozenSet[str]:
		return frozenset(self._connections_by_user.get(user_id, ()))

	def user_for(self, connection: str) -> Optional[str]:
		return self._user_by_connection.get(connection)

	def open_connections(self) -> FrozenSet[str]:
		return frozenset(self._open)

	def online_users(self) -> FrozenSet[str]:
		return frozenset(self._connections_by_user)

	def is_open(self, connection: str) -> bool:
		return connection in self._open
