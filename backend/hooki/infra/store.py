"""Document store abstraction injected into the chat and hook services.

Documents are JSON-compatible dicts grouped in named collections. Besides plain
documents the store keeps append-only logs (message history, replies) and
ordered sets with idempotent membership (likes, blocks).
"""

from __future__ import annotations

import copy
import json
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Callable, Dict, List, Optional, Protocol, Tuple

from redis.exceptions import RedisError

from hooki.domain.errors import StoreUnavailableError
from hooki.infra.redis import RedisProxy
from hooki.obs import metrics as obs_metrics

logger = logging.getLogger(__name__)

Document = Dict[str, Any]
Predicate = Callable[[Document], bool]


class DocumentStore(Protocol):
	async def get(self, collection: str, key: str) -> Optional[Document]:
		...

	async def put(self, collection: str, key: str, document: Document) -> None:
		...

	async def query(self, collection: str, predicate: Optional[Predicate] = None) -> List[Document]:
		...

	async def append(self, collection: str, key: str, item: Document) -> int:
		"""Append to the log under `key` and return the new log length."""
		...

	async def items(self, collection: str, key: str) -> List[Document]:
		...

	async def length(self, collection: str, key: str) -> int:
		...

	async def set_item(self, collection: str, key: str, index: int, item: Document) -> None:
		...

	async def add_member(self, collection: str, key: str, member: str) -> bool:
		"""Add `member` to the set under `key`; False when it was already present."""
		...

	async def members(self, collection: str, key: str) -> List[str]:
		...

	async def ping(self) -> bool:
		...


class MemoryStore:
	"""Process-local store. Only valid for a single-instance deployment."""

	def __init__(self) -> None:
		self._documents: Dict[str, Dict[str, Document]] = {}
		self._logs: Dict[Tuple[str, str], List[Document]] = {}
		self._sets: Dict[Tuple[str, str], List[str]] = {}

	async def get(self, collection: str, key: str) -> Optional[Document]:
		document = self._documents.get(collection, {}).get(key)
		return copy.deepcopy(document) if document is not None else None

	async def put(self, collection: str, key: str, document: Document) -> None:
		self._documents.setdefault(collection, {})[key] = copy.deepcopy(document)

	async def query(self, collection: str, predicate: Optional[Predicate] = None) -> List[Document]:
		documents = self._documents.get(collection, {}).values()
		return [copy.deepcopy(doc) for doc in documents if predicate is None or predicate(doc)]

	async def append(self, collection: str, key: str, item: Document) -> int:
		log = self._logs.setdefault((collection, key), [])
		log.append(copy.deepcopy(item))
		return len(log)

	async def items(self, collection: str, key: str) -> List[Document]:
		return copy.deepcopy(self._logs.get((collection, key), []))

	async def length(self, collection: str, key: str) -> int:
		return len(self._logs.get((collection, key), []))

	async def set_item(self, collection: str, key: str, index: int, item: Document) -> None:
		log = self._logs.get((collection, key))
		if log is None or not 0 <= index < len(log):
			raise IndexError(f"{collection}/{key}[{index}]")
		log[index] = copy.deepcopy(item)

	async def add_member(self, collection: str, key: str, member: str) -> bool:
		values = self._sets.setdefault((collection, key), [])
		if member in values:
			return False
		values.append(member)
		return True

	async def members(self, collection: str, key: str) -> List[str]:
		return list(self._sets.get((collection, key), []))

	async def ping(self) -> bool:
		return True


class RedisStore:
	"""Redis-backed store.

	Layout per collection ``c`` (with prefix ``p``):
	- documents: hash ``p:c`` field = key, value = JSON
	- logs: list ``p:c:log:key`` (RPUSH keeps append order)
	- sets: sorted set ``p:c:set:key`` scored from the counter ``p:c:seq:key``;
	  a single ``ZADD NX`` records membership and order together
	"""

	def __init__(self, client: RedisProxy, *, prefix: str = "hooki") -> None:
		self._client = client
		self._prefix = prefix

	def _doc_key(self, collection: str) -> str:
		return f"{self._prefix}:{collection}"

	def _log_key(self, collection: str, key: str) -> str:
		return f"{self._prefix}:{collection}:log:{key}"

	def _set_key(self, collection: str, key: str) -> str:
		return f"{self._prefix}:{collection}:set:{key}"

	def _counter_key(self, collection: str, key: str) -> str:
		return f"{self._prefix}:{collection}:seq:{key}"

	@asynccontextmanager
	async def _guard(self, op: str) -> AsyncIterator[None]:
		try:
			yield
		except (RedisError, OSError) as exc:
			obs_metrics.inc_store_error(op)
			logger.error("store_operation_failed", extra={"op": op, "error": exc.__class__.__name__})
			raise StoreUnavailableError() from exc

	async def get(self, collection: str, key: str) -> Optional[Document]:
		async with self._guard("get"):
			raw = await self._client.hget(self._doc_key(collection), key)
		return json.loads(raw) if raw else None

	async def put(self, collection: str, key: str, document: Document) -> None:
		async with self._guard("put"):
			await self._client.hset(self._doc_key(collection), key, json.dumps(document))

	async def query(self, collection: str, predicate: Optional[Predicate] = None) -> List[Document]:
		async with self._guard("query"):
			raw_values = await self._client.hvals(self._doc_key(collection))
		documents = [json.loads(raw) for raw in raw_values]
		return [doc for doc in documents if predicate is None or predicate(doc)]

	async def append(self, collection: str, key: str, item: Document) -> int:
		async with self._guard("append"):
			return int(await self._client.rpush(self._log_key(collection, key), json.dumps(item)))

	async def items(self, collection: str, key: str) -> List[Document]:
		async with self._guard("items"):
			raw_values = await self._client.lrange(self._log_key(collection, key), 0, -1)
		return [json.loads(raw) for raw in raw_values]

	async def length(self, collection: str, key: str) -> int:
		async with self._guard("length"):
			return int(await self._client.llen(self._log_key(collection, key)))

	async def set_item(self, collection: str, key: str, index: int, item: Document) -> None:
		async with self._guard("set_item"):
			await self._client.lset(self._log_key(collection, key), index, json.dumps(item))

	async def add_member(self, collection: str, key: str, member: str) -> bool:
		async with self._guard("add_member"):
			score = await self._client.incr(self._counter_key(collection, key))
			added = await self._client.zadd(self._set_key(collection, key), {member: score}, nx=True)
		return bool(added)

	async def members(self, collection: str, key: str) -> List[str]:
		async with self._guard("members"):
			return list(await self._client.zrange(self._set_key(collection, key), 0, -1))

	async def ping(self) -> bool:
		async with self._guard("ping"):
			return bool(await self._client.ping())
