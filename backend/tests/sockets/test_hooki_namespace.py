from unittest.mock import AsyncMock

import pytest
import socketio

from hooki.container import build_container
from hooki.domain.chat.models import conversation_id_for
from hooki.infra.store import MemoryStore
from hooki.realtime import dispatch
from hooki.realtime.sockets import HookiNamespace

CID = conversation_id_for("alice", "bob")


def _scope(*headers: tuple[bytes, bytes]) -> dict:
	return {"asgi.scope": {"headers": list(headers)}}


@pytest.fixture
def namespace(container):
	server = socketio.AsyncServer(async_mode="asgi")
	ns = HookiNamespace(container=lambda: container)
	server.register_namespace(ns)
	return ns


async def _connect(namespace, sid: str, user_id: str | None = None) -> None:
	await namespace.trigger_event("connect", sid, _scope())
	if user_id:
		ack = await namespace.trigger_event("announce", sid, user_id)
		assert ack == {"ok": True, "userId": user_id}


@pytest.mark.asyncio
async def test_connect_is_anonymous(namespace, container):
	await namespace.trigger_event("connect", "sid-1", _scope())

	assert container.registry.is_open("sid-1")
	assert container.registry.user_for("sid-1") is None


@pytest.mark.asyncio
async def test_connect_can_announce_through_auth_or_header(namespace, container):
	await namespace.trigger_event("connect", "sid-1", _scope(), {"userId": "alice"})
	await namespace.trigger_event("connect", "sid-2", _scope((b"x-user-id", b"bob")))

	assert container.registry.user_for("sid-1") == "alice"
	assert container.registry.user_for("sid-2") == "bob"


@pytest.mark.asyncio
async def test_announce_accepts_object_payload_and_legacy_event(namespace, container):
	await namespace.trigger_event("connect", "sid-1", _scope())
	await namespace.trigger_event("connect", "sid-2", _scope())

	assert await namespace.trigger_event("announce", "sid-1", {"userId": "alice"}) == {"ok": True, "userId": "alice"}
	assert await namespace.trigger_event("join_user", "sid-2", "alice") == {"ok": True, "userId": "alice"}
	assert container.registry.connections_for("alice") == frozenset({"sid-1", "sid-2"})


@pytest.mark.asyncio
async def test_announce_without_user_is_rejected(namespace):
	await namespace.trigger_event("connect", "sid-1", _scope())
	ack = await namespace.trigger_event("announce", "sid-1", {})
	assert ack == {"ok": False, "error": "user_id_required", "retryable": False}


@pytest.mark.asyncio
async def test_disconnect_unbinds(namespace, container):
	await _connect(namespace, "sid-1", "alice")
	await namespace.trigger_event("disconnect", "sid-1")
	await namespace.trigger_event("disconnect", "sid-1")

	assert container.registry.connections_for("alice") == frozenset()
	assert not container.registry.is_open("sid-1")


@pytest.mark.asyncio
async def test_hi_scenario_over_sockets_then_rest(namespace, container, emitter, api_client):
	await _connect(namespace, "sid-a", "alice")
	await _connect(namespace, "sid-b", "bob")

	ack = await namespace.trigger_event("send_message", "sid-a", {"conversationId": CID, "content": "hi"})

	assert ack["ok"] is True
	assert ack["message"]["senderId"] == "alice"
	pushed = [payload for event, payload in emitter.to("sid-b") if event == "new_message"]
	assert len(pushed) == 1
	assert pushed[0]["content"] == "hi"
	assert pushed[0]["conversationId"] == CID

	response = await api_client.get(f"/conversations/{CID}/messages")
	assert response.status_code == 200
	items = response.json()["items"]
	assert [item["content"] for item in items] == ["hi"]


@pytest.mark.asyncio
async def test_send_message_accepts_legacy_field_names(namespace, emitter):
	await _connect(namespace, "sid-a", "alice")

	ack = await namespace.trigger_event("send_message", "sid-a", {"matchId": CID, "userId": "alice", "content": "yo"})

	assert ack["ok"] is True
	assert ack["message"]["matchId"] == CID


@pytest.mark.asyncio
async def test_send_message_rejects_impersonation(namespace, container):
	await _connect(namespace, "sid-m", "mallory")

	ack = await namespace.trigger_event("send_message", "sid-m", {"conversationId": CID, "senderId": "alice", "content": "hi"})

	assert ack == {"ok": False, "error": "identity_mismatch", "retryable": False}
	assert await container.conversations.get(CID) is None


@pytest.mark.asyncio
async def test_send_message_from_non_participant(namespace):
	await _connect(namespace, "sid-m", "mallory")

	ack = await namespace.trigger_event("send_message", "sid-m", {"conversationId": CID, "content": "hi"})

	assert ack["ok"] is False
	assert ack["error"] == "not_a_participant"


@pytest.mark.asyncio
async def test_send_message_requires_identity_and_valid_payload(namespace):
	await _connect(namespace, "sid-1")

	assert (await namespace.trigger_event("send_message", "sid-1", {"conversationId": CID, "content": "hi"}))["error"] == "sender_required"
	assert (await namespace.trigger_event("send_message", "sid-1", {"content": "hi"}))["error"] == "invalid_payload"


@pytest.mark.asyncio
async def test_mark_read_notifies_participants(namespace, container, emitter):
	await _connect(namespace, "sid-a", "alice")
	await _connect(namespace, "sid-b", "bob")
	await namespace.trigger_event("send_message", "sid-a", {"conversationId": CID, "content": "one"})

	ack = await namespace.trigger_event("mark_read", "sid-b", {"conversationId": CID})

	assert ack == {"ok": True, "conversationId": CID, "readerId": "bob", "updated": 1}
	assert [to for to, _ in emitter.events("messages_read")] == ["sid-a", "sid-b"]

	again = await namespace.trigger_event("mark_read", "sid-b", {"conversationId": CID})
	assert again["updated"] == 0
	assert len(emitter.events("messages_read")) == 2


@pytest.mark.asyncio
async def test_default_dispatcher_emits_through_registered_namespace():
	container = build_container(store=MemoryStore())
	server = socketio.AsyncServer(async_mode="asgi")
	ns = HookiNamespace(container=lambda: container)
	server.register_namespace(ns)
	ns.emit = AsyncMock()
	dispatch.set_namespace(ns)

	await _connect(ns, "sid-a", "alice")
	await _connect(ns, "sid-b", "bob")
	await ns.trigger_event("send_message", "sid-a", {"conversationId": CID, "content": "hi"})

	targets = [call.kwargs["to"] for call in ns.emit.await_args_list if call.args[0] == "new_message"]
	assert targets == ["sid-a", "sid-b"]
