"""Tests for the google-genai adapter using a mocked SDK client."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from intake_bridge.adapters import ChatSession, GenerationAdapter, GoogleGenAIAdapter
from intake_bridge.exceptions import ConfigurationError

pytestmark = pytest.mark.unit


async def _aiter(items):
    for item in items:
        yield item


def _mock_client():
    client = MagicMock()
    chat = MagicMock()
    chat.send_message_stream = AsyncMock(
        return_value=_aiter(
            [SimpleNamespace(text="Hi"), SimpleNamespace(text=None), SimpleNamespace(text=" there")]
        )
    )
    client.aio.chats.create.return_value = chat
    client.aio.models.generate_content = AsyncMock(
        return_value=SimpleNamespace(text="draft text")
    )
    return client


def test_adapter_satisfies_protocol():
    adapter = GoogleGenAIAdapter("key", client=_mock_client())
    assert isinstance(adapter, GenerationAdapter)
    assert isinstance(adapter.open_chat(), ChatSession)


@pytest.mark.asyncio
async def test_chat_stream_yields_only_text_chunks():
    client = _mock_client()
    adapter = GoogleGenAIAdapter("key", model="gemini-2.5-flash", client=client)

    session = adapter.open_chat("Be brief")
    chunks = [c async for c in session.send_message_stream("hello")]

    assert chunks == ["Hi", " there"]
    kwargs = client.aio.chats.create.call_args.kwargs
    assert kwargs["model"] == "gemini-2.5-flash"
    assert kwargs["config"].system_instruction == "Be brief"


def test_open_chat_without_instruction_passes_no_config():
    client = _mock_client()
    GoogleGenAIAdapter("key", client=client).open_chat()
    assert client.aio.chats.create.call_args.kwargs["config"] is None


@pytest.mark.asyncio
async def test_generate_text_returns_response_text():
    client = _mock_client()
    adapter = GoogleGenAIAdapter("key", model="m", client=client)

    assert await adapter.generate_text("prompt") == "draft text"
    client.aio.models.generate_content.assert_awaited_once_with(model="m", contents="prompt")


def test_missing_key_fails_on_first_use_not_construction():
    adapter = GoogleGenAIAdapter(None)
    with pytest.raises(ConfigurationError):
        adapter.open_chat()
