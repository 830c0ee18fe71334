from datetime import timedelta

import pytest

from hooki.domain.chat.models import ConversationKey, Message, conversation_id_for, utcnow
from hooki.domain.chat.store import ConversationStore
from hooki.domain.errors import AuthorizationError, NotFoundError, StoreUnavailableError, ValidationError
from hooki.infra.store import MemoryStore


def _message(conversation_id: str, sender: str, content: str, *, created_at=None, token: str | None = None) -> Message:
    return Message(
        id=f"m-{content}",
        conversation_id=conversation_id,
        sender_id=sender,
        content=content,
        created_at=created_at or utcnow(),
        client_msg_id=token or f"c-{content}",
    )


@pytest.mark.parametrize(
    "first, second",
    [("alice", "bob"), ("bob", "alice"), ("user-2", "user-10"), ("Z", "a")],
)
def test_conversation_id_is_order_independent(first, second):
    assert conversation_id_for(first, second) == conversation_id_for(second, first)


def test_conversation_id_round_trips_through_parse():
    key = ConversationKey.from_participants("bob", "alice")
    assert key.conversation_id == "chat:alice:bob"
    assert ConversationKey.parse(key.conversation_id) == key
    assert key.other("alice") == "bob"


@pytest.mark.parametrize("raw", ["alice:bob", "chat:bob:alice", "chat:alice:alice", "dm:alice:bob", "chat:a:b:c"])
def test_unparseable_ids_are_not_found(raw):
    with pytest.raises(NotFoundError):
        ConversationKey.parse(raw)


def test_invalid_participants_are_rejected():
    with pytest.raises(ValidationError):
        ConversationKey.from_participants("alice", "alice")
    with pytest.raises(ValidationError):
        ConversationKey.from_participants("al:ice", "bob")
    with pytest.raises(ValidationError):
        ConversationKey.from_participants("", "bob")


@pytest.mark.asyncio
async def test_append_assigns_gapless_seq_in_order():
    conversations = ConversationStore(MemoryStore())
    cid = conversation_id_for("alice", "bob")

    for index, sender in enumerate(["alice", "bob", "alice"]):
        stored = await conversations.append(cid, _message(cid, sender, f"msg-{index}"))
        assert stored.seq == index + 1

    history = await conversations.list(cid)
    assert [item.content for item in history] == ["msg-0", "msg-1", "msg-2"]
    assert [item.seq for item in history] == [1, 2, 3]


@pytest.mark.asyncio
async def test_created_at_never_goes_backwards():
    conversations = ConversationStore(MemoryStore())
    cid = conversation_id_for("alice", "bob")
    later = utcnow()
    earlier = later - timedelta(minutes=5)

    first = await conversations.append(cid, _message(cid, "alice", "first", created_at=later))
    second = await conversations.append(cid, _message(cid, "bob", "second", created_at=earlier))

    assert second.created_at == first.created_at


@pytest.mark.asyncio
async def test_summary_tracks_last_message():
    conversations = ConversationStore(MemoryStore())
    cid = conversation_id_for("alice", "bob")

    await conversations.append(cid, _message(cid, "alice", "hello"))
    await conversations.append(cid, _message(cid, "bob", "hey there"))

    conversation = await conversations.require(cid)
    assert conversation.participants == ("alice", "bob")
    assert conversation.last_message == "hey there"
    assert conversation.last_sender_id == "bob"
    assert conversation.last_seq == 2


@pytest.mark.asyncio
async def test_update_summary_overrides_preview():
    conversations = ConversationStore(MemoryStore())
    cid = conversation_id_for("alice", "bob")
    await conversations.ensure(ConversationKey.parse(cid))

    at = utcnow()
    updated = await conversations.update_summary(cid, "[photo]", at)

    assert updated.last_message == "[photo]"
    assert (await conversations.require(cid)).last_message_at == at


@pytest.mark.asyncio
async def test_list_unknown_conversation_is_not_found():
    conversations = ConversationStore(MemoryStore())
    with pytest.raises(NotFoundError):
        await conversations.list(conversation_id_for("alice", "bob"))


@pytest.mark.asyncio
async def test_mark_read_flips_only_peer_messages_and_is_idempotent():
    conversations = ConversationStore(MemoryStore())
    cid = conversation_id_for("alice", "bob")
    await conversations.append(cid, _message(cid, "alice", "one"))
    await conversations.append(cid, _message(cid, "alice", "two"))
    await conversations.append(cid, _message(cid, "bob", "three"))

    assert await conversations.mark_read(cid, "bob") == 2
    assert await conversations.mark_read(cid, "bob") == 0

    history = await conversations.list(cid)
    assert [item.read for item in history] == [True, True, False]


@pytest.mark.asyncio
async def test_mark_read_requires_participant():
    conversations = ConversationStore(MemoryStore())
    cid = conversation_id_for("alice", "bob")
    await conversations.append(cid, _message(cid, "alice", "one"))

    with pytest.raises(AuthorizationError):
        await conversations.mark_read(cid, "mallory")


@pytest.mark.asyncio
async def test_find_by_client_id():
    conversations = ConversationStore(MemoryStore())
    cid = conversation_id_for("alice", "bob")
    await conversations.append(cid, _message(cid, "alice", "one", token="tok-1"))
    await conversations.append(cid, _message(cid, "bob", "two", token="tok-2"))

    found = await conversations.find_by_client_id(cid, "tok-2")
    assert found is not None and found.content == "two"
    assert await conversations.find_by_client_id(cid, "tok-3") is None


class _TokenWriteFailsOnce(MemoryStore):
    def __init__(self) -> None:
        super().__init__()
        self.fail_next_token = False

    async def put(self, collection, key, document):
        if collection == "message_tokens" and self.fail_next_token:
            self.fail_next_token = False
            raise StoreUnavailableError()
        await super().put(collection, key, document)


@pytest.mark.asyncio
async def test_partial_append_failure_keeps_seq_gapless_and_resend_finds_message():
    backing = _TokenWriteFailsOnce()
    conversations = ConversationStore(backing)
    cid = conversation_id_for("alice", "bob")
    await conversations.append(cid, _message(cid, "alice", "one", token="tok-1"))

    backing.fail_next_token = True
    with pytest.raises(StoreUnavailableError):
        await conversations.append(cid, _message(cid, "bob", "two", token="tok-2"))
    await conversations.append(cid, _message(cid, "alice", "three", token="tok-3"))

    history = await conversations.list(cid)
    assert [item.seq for item in history] == [1, 2, 3]
    assert (await conversations.require(cid)).last_seq == 3
    resent = await conversations.find_by_client_id(cid, "tok-2")
    assert resent is not None and resent.seq == 2 and resent.content == "two"


@pytest.mark.asyncio
async def test_invalid_ids_do_not_allocate_locks():
    conversations = ConversationStore(MemoryStore())
    for index in range(50):
        with pytest.raises(NotFoundError):
            await conversations.mark_read(f"junk-{index}", "alice")
        with pytest.raises(NotFoundError):
            await conversations.append(f"junk-{index}", _message("x", "alice", "hi"))

    assert len(conversations._locks) == 0

@pytest.mark.asyncio
async def test_conversations_for_sorted_by_latest_activity():
    conversations = ConversationStore(MemoryStore())
    with_bob = conversation_id_for("alice", "bob")
    with_carol = conversation_id_for("alice", "carol")
    base = utcnow()

    await conversations.append(with_bob, _message(with_bob, "bob", "old", created_at=base))
    await conversations.append(with_carol, _message(with_carol, "carol", "new", created_at=base + timedelta(seconds=5)))
    await conversations.ensure(ConversationKey.from_participants("dave", "erin"))

    listed = await conversations.conversations_for("alice")
    assert [item.conversation_id for item in listed] == [with_carol, with_bob]
