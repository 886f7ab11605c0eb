"""Provider-neutral protocols for the text-generation service.

The chat aggregator and draft generator depend on these protocols only, so
neither imports a provider SDK and both can be exercised with in-memory fakes.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Protocol, runtime_checkable


@runtime_checkable
class ChatSession(Protocol):
    """A conversation that keeps its own history provider-side."""

    def send_message_stream(self, message: str) -> AsyncIterator[str]:
        """Yield the reply as text chunks, in the order they were produced."""
        ...


@runtime_checkable
class GenerationAdapter(Protocol):
    """Opens chat sessions and runs one-shot generations."""

    def open_chat(self, system_instruction: str | None = None) -> ChatSession: ...

    async def generate_text(self, prompt: str) -> str | None:
        """Return the generated text, or ``None`` when the reply carried none."""
        ...
