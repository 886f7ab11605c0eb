"""Gemini adapter built on the ``google-genai`` SDK."""

from __future__ import annotations

from collections.abc import AsyncIterator
import logging
from typing import Any

from google import genai
from google.genai import types

from intake_bridge.constants import DEFAULT_MODEL
from intake_bridge.exceptions import ConfigurationError

log = logging.getLogger(__name__)


class GeminiChatSession:
    """Wraps an SDK async chat; yields only the non-empty text of each chunk."""

    def __init__(self, chat: Any) -> None:
        self._chat = chat

    async def send_message_stream(self, message: str) -> AsyncIterator[str]:
        stream = await self._chat.send_message_stream(message)
        async for chunk in stream:
            text = chunk.text
            if text:
                yield text


class GoogleGenAIAdapter:
    """Real generation adapter.

    The SDK client is created lazily on first use, so constructing the adapter
    never fails for a missing key; the first call does.
    """

    def __init__(
        self,
        api_key: str | None,
        *,
        model: str = DEFAULT_MODEL,
        client: genai.Client | None = None,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._client = client

    @property
    def model(self) -> str:
        return self._model

    def _get_client(self) -> genai.Client:
        if self._client is None:
            if not self._api_key:
                raise ConfigurationError(
                    "Gemini API key missing. Set INTAKE_GEMINI_API_KEY."
                )
            self._client = genai.Client(api_key=self._api_key)
            log.debug("Gemini client initialized for model '%s'", self._model)
        return self._client

    def open_chat(self, system_instruction: str | None = None) -> GeminiChatSession:
        config = (
            types.GenerateContentConfig(system_instruction=system_instruction)
            if system_instruction
            else None
        )
        chat = self._get_client().aio.chats.create(model=self._model, config=config)
        return GeminiChatSession(chat)

    async def generate_text(self, prompt: str) -> str | None:
        response = await self._get_client().aio.models.generate_content(
            model=self._model,
            contents=prompt,
        )
        return response.text
