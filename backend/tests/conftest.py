import sys
from pathlib import Path

import pytest
import pytest_asyncio
from fakeredis.aioredis import FakeRedis
from httpx import ASGITransport, AsyncClient

# Ensure backend package is importable when tests run from repo root
BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
	sys.path.insert(0, str(BACKEND_ROOT))

from hooki.container import build_container, set_container
from hooki.infra.redis import redis_client, set_redis_client
from hooki.infra.store import MemoryStore
from hooki.main import app
from hooki.realtime import dispatch


class EmitRecorder:
	"""Stands in for `namespace.emit`; records (connection, event, payload) triples."""

	def __init__(self) -> None:
		self.calls: list[tuple[str, str, dict]] = []
		self.fail_for: set[str] = set()

	async def __call__(self, event, data=None, *, to=None):
		if to in self.fail_for:
			raise ConnectionResetError(f"connection {to} is closed")
		self.calls.append((to, event, data))

	def events(self, name: str) -> list[tuple[str, dict]]:
		return [(to, data) for to, event, data in self.calls if event == name]

	def to(self, connection: str) -> list[tuple[str, dict]]:
		return [(event, data) for to, event, data in self.calls if to == connection]


@pytest.fixture
def emitter():
	return EmitRecorder()


@pytest.fixture
def container(emitter):
	built = build_container(store=MemoryStore())
	built.dispatcher.bind(emitter)
	set_container(built)
	try:
		yield built
	finally:
		set_container(None)


@pytest_asyncio.fixture
async def fake_redis():
	original = redis_client.client
	client = FakeRedis(decode_responses=True)
	set_redis_client(client)
	try:
		yield client
	finally:
		set_redis_client(original)
		await client.flushall()


@pytest.fixture(autouse=True)
def reset_namespace():
	yield
	dispatch.set_namespace(None)


@pytest_asyncio.fixture
async def api_client(container):
	transport = ASGITransport(app=app)
	async with AsyncClient(transport=transport, base_url="http://testserver") as client:
		yield client
