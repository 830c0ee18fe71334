import asyncio

import pytest

from hooki.domain.chat.models import conversation_id_for
from hooki.domain.errors import AuthorizationError, NotFoundError, ValidationError

CID = conversation_id_for("alice", "bob")


async def _online(container, **connections):
    for sid, user_id in connections.items():
        await container.registry.announce(sid, user_id)


@pytest.mark.asyncio
async def test_hi_reaches_recipient_and_echoes_to_sender(container, emitter):
    await _online(container, sid_a="alice", sid_b="bob")

    message = await container.router.route(CID, "alice", "hi")

    received = emitter.events("new_message")
    assert [to for to, _ in received] == ["sid_a", "sid_b"]
    for _, payload in received:
        assert payload["content"] == "hi"
        assert payload["conversationId"] == CID
        assert payload["seq"] == 1
        assert payload["id"] == message.id


@pytest.mark.asyncio
async def test_offline_recipient_still_persisted(container, emitter):
    await _online(container, sid_a="alice", sid_b="bob")
    await container.registry.remove("sid_b")

    await container.router.route(CID, "alice", "are you there?")

    history = await container.conversations.list(CID)
    assert [item.content for item in history] == ["are you there?"]
    assert emitter.to("sid_b") == []


@pytest.mark.asyncio
async def test_multi_device_recipient_gets_every_connection(container, emitter):
    await _online(container, phone="alice", tablet="alice", laptop="bob")

    await container.router.route(CID, "bob", "ping")

    assert [event for event, _ in emitter.to("phone")] == ["new_message"]
    assert [event for event, _ in emitter.to("tablet")] == ["new_message"]


@pytest.mark.asyncio
async def test_non_participant_is_rejected_and_nothing_persisted(container, emitter):
    await _online(container, sid_m="mallory", sid_b="bob")

    with pytest.raises(AuthorizationError) as excinfo:
        await container.router.route(CID, "mallory", "let me in")

    assert excinfo.value.reason == "not_a_participant"
    assert await container.conversations.get(CID) is None
    assert emitter.calls == []


@pytest.mark.asyncio
@pytest.mark.parametrize("content, reason", [("", "content_required"), ("   ", "content_required"), ("x" * 4001, "content_too_long")])
async def test_invalid_content_rejected(container, content, reason):
    with pytest.raises(ValidationError) as excinfo:
        await container.router.route(CID, "alice", content)
    assert excinfo.value.reason == reason
    assert await container.conversations.get(CID) is None


@pytest.mark.asyncio
async def test_unknown_conversation_id_is_not_found(container):
    with pytest.raises(NotFoundError):
        await container.router.route("general", "alice", "hello")


@pytest.mark.asyncio
async def test_rejected_ids_leave_no_locks_behind(container):
    for index in range(200):
        with pytest.raises(NotFoundError):
            await container.router.route(f"junk-{index}", "alice", "hello")

    assert len(container.router._locks) == 0
    assert len(container.conversations._locks) == 0


@pytest.mark.asyncio
async def test_delivery_failure_does_not_fail_send(container, emitter):
    await _online(container, sid_a="alice", sid_b="bob")
    emitter.fail_for.add("sid_b")

    message = await container.router.route(CID, "alice", "still here")

    assert message.seq == 1
    assert [item.id for item in await container.conversations.list(CID)] == [message.id]
    assert [to for to, _ in emitter.events("new_message")] == ["sid_a"]


@pytest.mark.asyncio
async def test_client_msg_id_makes_resend_idempotent(container, emitter):
    await _online(container, sid_a="alice", sid_b="bob")

    first = await container.router.route(CID, "alice", "once", client_msg_id="tok-1")
    again = await container.router.route(CID, "alice", "once", client_msg_id="tok-1")

    assert again.id == first.id
    assert len(await container.conversations.list(CID)) == 1
    assert len(emitter.events("new_message")) == 2


@pytest.mark.asyncio
async def test_concurrent_senders_keep_one_order_everywhere(container, emitter):
    await _online(container, sid_a="alice", sid_b="bob")

    async def burst(sender: str) -> None:
        for index in range(10):
            await container.router.route(CID, sender, f"{sender}-{index}")

    await asyncio.gather(burst("alice"), burst("bob"))

    history = await container.conversations.list(CID)
    assert [item.seq for item in history] == list(range(1, 21))
    for sender in ("alice", "bob"):
        own = [item.content for item in history if item.sender_id == sender]
        assert own == [f"{sender}-{index}" for index in range(10)]

    for sid in ("sid_a", "sid_b"):
        pushed = [payload["seq"] for event, payload in emitter.to(sid) if event == "new_message"]
        assert pushed == list(range(1, 21))


@pytest.mark.asyncio
async def test_separate_conversations_do_not_share_a_log(container):
    other = conversation_id_for("alice", "carol")

    await asyncio.gather(
        container.router.route(CID, "alice", "to bob"),
        container.router.route(other, "alice", "to carol"),
    )

    assert [item.content for item in await container.conversations.list(CID)] == ["to bob"]
    assert [item.content for item in await container.conversations.list(other)] == ["to carol"]
