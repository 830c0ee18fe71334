import pytest

from hooki.domain.chat.models import conversation_id_for

CID = conversation_id_for("alice", "bob")


@pytest.mark.asyncio
async def test_create_match_then_existing(api_client, container, emitter):
	await container.registry.announce("sid-b", "bob")

	created = await api_client.post("/matches", json={"userId1": "alice", "userId2": "bob"})
	existing = await api_client.post("/matches", json={"userId1": "bob", "userId2": "alice"})

	assert created.status_code == 201
	assert created.json()["id"] == CID
	assert created.json()["conversationId"] == CID
	assert existing.status_code == 200
	assert existing.json()["id"] == CID
	assert [to for to, _ in emitter.events("new_match")] == ["sid-b"]

	listed = await api_client.get("/matches/bob")
	assert [item["id"] for item in listed.json()] == [CID]


@pytest.mark.asyncio
async def test_self_match_is_rejected(api_client):
	response = await api_client.post("/matches", json={"userId1": "alice", "userId2": "alice"})
	assert response.status_code == 422
	assert response.json()["detail"] == "cannot_match_self"


@pytest.mark.asyncio
async def test_send_and_list_messages_over_rest(api_client, container, emitter):
	await container.registry.announce("sid-b", "bob")

	sent = await api_client.post(f"/conversations/{CID}/messages", json={"senderId": "alice", "content": "hi", "clientMsgId": "c-1"})
	resent = await api_client.post(f"/conversations/{CID}/messages", json={"senderId": "alice", "content": "hi", "clientMsgId": "c-1"})
	reply = await api_client.post(f"/conversations/{CID}/messages", json={"userId": "bob", "content": "hey"})

	assert sent.status_code == 201
	assert resent.json()["id"] == sent.json()["id"]
	assert reply.json()["seq"] == 2

	listed = await api_client.get(f"/conversations/{CID}/messages")
	body = listed.json()
	assert body["conversationId"] == CID
	assert [(item["seq"], item["content"]) for item in body["items"]] == [(1, "hi"), (2, "hey")]
	assert [payload["content"] for _, payload in emitter.events("new_message")] == ["hi", "hey"]


@pytest.mark.asyncio
async def test_offline_recipient_message_is_persisted(api_client, container, emitter):
	await container.registry.announce("sid-b", "bob")
	await container.registry.remove("sid-b")

	sent = await api_client.post(f"/conversations/{CID}/messages", json={"senderId": "alice", "content": "hi"})

	assert sent.status_code == 201
	assert emitter.calls == []
	listed = await api_client.get(f"/conversations/{CID}/messages")
	assert [item["content"] for item in listed.json()["items"]] == ["hi"]


@pytest.mark.asyncio
async def test_send_errors(api_client):
	outsider = await api_client.post(f"/conversations/{CID}/messages", json={"senderId": "mallory", "content": "hi"})
	assert outsider.status_code == 403
	assert outsider.json()["detail"] == "not_a_participant"

	unknown = await api_client.get("/conversations/lobby/messages")
	assert unknown.status_code == 404

	never_used = await api_client.get(f"/conversations/{CID}/messages")
	assert never_used.status_code == 404


@pytest.mark.asyncio
async def test_mark_read_and_conversation_list(api_client, container, emitter):
	await container.registry.announce("sid-a", "alice")
	await api_client.post(f"/conversations/{CID}/messages", json={"senderId": "alice", "content": "one"})
	await api_client.post(f"/conversations/{CID}/messages", json={"senderId": "alice", "content": "two"})

	read = await api_client.post(f"/conversations/{CID}/read", json={"readerId": "bob"})
	assert read.json() == {"conversationId": CID, "readerId": "bob", "updated": 2}
	assert [to for to, _ in emitter.events("messages_read")] == ["sid-a"]

	forbidden = await api_client.post(f"/conversations/{CID}/read", json={"readerId": "mallory"})
	assert forbidden.status_code == 403

	summaries = (await api_client.get("/users/bob/conversations")).json()
	assert summaries[0]["conversationId"] == CID
	assert summaries[0]["peerId"] == "alice"
	assert summaries[0]["lastMessage"] == "two"
