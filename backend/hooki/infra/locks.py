"""Per-key asyncio locks."""

from __future__ import annotations

import asyncio
from typing import Dict


class KeyedLock:
	"""Hands out one `asyncio.Lock` per key.

	Keys are never evicted, so callers only ask for locks on ids they have
	already validated; conversations and posts are never deleted.
	"""

	def __init__(self) -> None:
		self._locks: Dict[str, asyncio.Lock] = {}

	def __call__(self, key: str) -> asyncio.Lock:
		lock = self._locks.get(key)
		if lock is None:
			lock = asyncio.Lock()
			self._locks[key] = lock
		return lock

	def __len__(self) -> int:
		return len(self._locks)
