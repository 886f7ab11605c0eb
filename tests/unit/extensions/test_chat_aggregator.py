"""Tests for streaming chat aggregation."""

import asyncio

import pytest

from intake_bridge.constants import CHAT_APOLOGY_MESSAGE
from intake_bridge.core.models import Property
from intake_bridge.exceptions import ConversationBusyError
from intake_bridge.extensions.chat import (
    ChatAggregator,
    ChatEntry,
    ChatPhase,
    Transcript,
    default_system_instruction,
    property_context_instruction,
)

pytestmark = pytest.mark.unit


@pytest.mark.asyncio
async def test_chunks_fold_into_single_reply(fake_adapter):
    updates = []
    chat = ChatAggregator(fake_adapter(["Hel", "lo ", "world"]), on_update=updates.append)

    entry = await chat.send("Hi")

    assert entry == ChatEntry(role="model", text="Hello world")
    assert chat.transcript == (
        ChatEntry(role="user", text="Hi"),
        ChatEntry(role="model", text="Hello world"),
    )
    assert chat.phase is ChatPhase.SETTLED
    # One publish when the reply opens, then one per chunk
    assert [u[-1].text for u in updates] == ["", "Hel", "Hello ", "Hello world"]


@pytest.mark.asyncio
async def test_empty_chunks_are_skipped(fake_adapter):
    updates = []
    chat = ChatAggregator(fake_adapter(["", "A", "", "B"]), on_update=updates.append)
    await chat.send("x")
    assert chat.transcript[-1].text == "AB"
    assert len(updates) == 3


@pytest.mark.asyncio
async def test_blank_message_is_ignored(fake_adapter):
    adapter = fake_adapter(["never"])
    chat = ChatAggregator(adapter)
    assert await chat.send("   ") is None
    assert chat.transcript == ()
    assert adapter.sessions == []
    assert chat.phase is ChatPhase.IDLE


@pytest.mark.asyncio
async def test_stream_error_becomes_apology(fake_adapter):
    chat = ChatAggregator(fake_adapter(["partial "], error=RuntimeError("stream cut")))

    entry = await chat.send("Hi")

    assert entry.text == CHAT_APOLOGY_MESSAGE
    assert len(chat.transcript) == 2
    assert chat.phase is ChatPhase.SETTLED


@pytest.mark.asyncio
async def test_session_open_error_becomes_apology():
    class BrokenAdapter:
        def open_chat(self, system_instruction=None):
            raise RuntimeError("no key")

        async def generate_text(self, prompt):
            return None

    entry = await ChatAggregator(BrokenAdapter()).send("Hi")
    assert entry.text == CHAT_APOLOGY_MESSAGE


@pytest.mark.asyncio
async def test_send_while_streaming_is_rejected():
    release = asyncio.Event()

    class SlowSession:
        async def send_message_stream(self, message):
            yield "a"
            await release.wait()
            yield "b"

    class SlowAdapter:
        def open_chat(self, system_instruction=None):
            return SlowSession()

        async def generate_text(self, prompt):
            return None

    chat = ChatAggregator(SlowAdapter())
    first = asyncio.create_task(chat.send("first"))
    while not chat.transcript or chat.transcript[-1].text != "a":
        await asyncio.sleep(0)

    assert chat.phase is ChatPhase.STREAMING
    with pytest.raises(ConversationBusyError):
        await chat.send("second")

    release.set()
    entry = await first
    assert entry.text == "ab"
    assert [e.role for e in chat.transcript] == ["user", "model"]


@pytest.mark.asyncio
async def test_session_is_reused_across_sends(fake_adapter):
    adapter = fake_adapter(["ok"])
    chat = ChatAggregator(adapter)
    await chat.send("one")
    await chat.send("two")

    assert len(adapter.sessions) == 1
    assert adapter.sessions[0][1].messages == ["one", "two"]
    assert len(chat.transcript) == 4


@pytest.mark.asyncio
async def test_change_context_opens_fresh_session_and_keeps_history(fake_adapter):
    adapter = fake_adapter(["ok"])
    chat = ChatAggregator(adapter, system_instruction="base")
    await chat.send("one")

    prop = Property(id="kv-1", name="Park Place", address="1 Park Pl")
    chat.change_context(property_context_instruction(prop))
    await chat.send("two")

    assert [instr for instr, _ in adapter.sessions] == [
        "base",
        "User is currently viewing Property: Park Place at 1 Park Pl.",
    ]
    assert len(chat.transcript) == 4


@pytest.mark.asyncio
async def test_listener_errors_do_not_break_stream(fake_adapter):
    def bad_listener(snapshot):
        raise ValueError("ui gone")

    chat = ChatAggregator(fake_adapter(["a", "b"]), on_update=bad_listener)
    entry = await chat.send("x")
    assert entry.text == "ab"


def test_default_instruction_names_company():
    assert "Acme Remodeling" in default_system_instruction("Acme Remodeling")
    assert property_context_instruction(None) == "User has not selected a property yet."


def test_transcript_enforces_single_in_flight_reply():
    transcript = Transcript()
    transcript.append(ChatEntry(role="user", text="q"))
    transcript.open_reply()

    with pytest.raises(RuntimeError):
        transcript.open_reply()
    with pytest.raises(RuntimeError):
        transcript.append(ChatEntry(role="user", text="again"))

    transcript.extend_reply("a")
    transcript.settle()
    with pytest.raises(RuntimeError):
        transcript.extend_reply("late")
    assert transcript.snapshot()[-1].text == "a"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "chunks",
    [
        ["Hello world"],
        ["Hel", "lo ", "world"],
        list("Hello world"),
        ["H", "", "ello", " ", "", "world"],
    ],
)
async def test_final_text_is_concatenation_for_any_partition(chunks, fake_adapter):
    chat = ChatAggregator(fake_adapter(chunks))
    entry = await chat.send("go")
    assert entry.text == "Hello world"
