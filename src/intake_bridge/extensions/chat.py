"""Streaming chat aggregation.

Folds the incremental text chunks of one reply into a single transcript
entry and republishes the transcript after every chunk. Each send walks an
explicit state machine::

    IDLE -> SENDING -> STREAMING -> SETTLED
                ^                      |
                +----------------------+   (next send)

The transcript enforces the one-reply-in-flight invariant itself: entries
are immutable values, and only the tail opened by :meth:`Transcript.open_reply`
may be replaced until :meth:`Transcript.settle` is called.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import StrEnum
import logging
from typing import TYPE_CHECKING, Literal

from intake_bridge.constants import CHAT_APOLOGY_MESSAGE, DEFAULT_BRAND_NAME
from intake_bridge.exceptions import ConversationBusyError
from intake_bridge.telemetry import TelemetryContext

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from intake_bridge.adapters.base import ChatSession, GenerationAdapter
    from intake_bridge.core.models import Property
    from intake_bridge.telemetry import TelemetryContextProtocol

logger = logging.getLogger(__name__)

Role = Literal["user", "model"]


def default_system_instruction(company: str = DEFAULT_BRAND_NAME) -> str:
    return (
        f"You are a helpful assistant for {company}. Your goal is to assist "
        "property managers in understanding our services (Countertops, Cabinets, "
        "Tile, Make-Ready) and filling out the service request survey. "
        "Be professional, concise, and helpful."
    )


def property_context_instruction(prop: Property | None) -> str:
    if prop is None:
        return "User has not selected a property yet."
    return f"User is currently viewing Property: {prop.name} at {prop.address}."


class ChatPhase(StrEnum):
    IDLE = "idle"
    SENDING = "sending"
    STREAMING = "streaming"
    SETTLED = "settled"


@dataclass(frozen=True, slots=True)
class ChatEntry:
    role: Role
    text: str


class Transcript:
    """Ordered conversation history with at most one in-flight reply."""

    def __init__(self) -> None:
        self._entries: list[ChatEntry] = []
        self._in_flight = False

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[ChatEntry]:
        return iter(self.snapshot())

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    def snapshot(self) -> tuple[ChatEntry, ...]:
        return tuple(self._entries)

    def append(self, entry: ChatEntry) -> None:
        if self._in_flight:
            raise RuntimeError("Cannot append while a reply is in flight")
        self._entries.append(entry)

    def open_reply(self) -> None:
        if self._in_flight:
            raise RuntimeError("A reply is already in flight")
        self._entries.append(ChatEntry(role="model", text=""))
        self._in_flight = True

    def extend_reply(self, chunk: str) -> ChatEntry:
        tail = self._require_tail()
        self._entries[-1] = replace(tail, text=tail.text + chunk)
        return self._entries[-1]

    def replace_reply(self, text: str) -> ChatEntry:
        tail = self._require_tail()
        self._entries[-1] = replace(tail, text=text)
        return self._entries[-1]

    def settle(self) -> ChatEntry:
        tail = self._require_tail()
        self._in_flight = False
        return tail

    def _require_tail(self) -> ChatEntry:
        if not self._in_flight:
            raise RuntimeError("No reply is in flight")
        return self._entries[-1]


class ChatAggregator:
    """Drives one conversation against a :class:`GenerationAdapter`.

    Args:
        adapter: Opens provider chat sessions.
        system_instruction: Instruction for the first session.
        on_update: Called with a transcript snapshot after every change.
            Listener errors are logged and do not affect the stream.
    """

    def __init__(
        self,
        adapter: GenerationAdapter,
        *,
        system_instruction: str | None = None,
        on_update: Callable[[tuple[ChatEntry, ...]], None] | None = None,
        telemetry: TelemetryContextProtocol | None = None,
    ) -> None:
        self._adapter = adapter
        self._system_instruction = system_instruction or default_system_instruction()
        self._on_update = on_update
        self._tele = telemetry or TelemetryContext()
        self._session: ChatSession | None = None
        self._transcript = Transcript()
        self._phase = ChatPhase.IDLE

    @property
    def phase(self) -> ChatPhase:
        return self._phase

    @property
    def transcript(self) -> tuple[ChatEntry, ...]:
        return self._transcript.snapshot()

    def change_context(self, system_instruction: str) -> None:
        """Use a fresh session with ``system_instruction`` for later sends.

        A reply already streaming keeps its original session and finishes
        normally. History stays in the transcript.
        """
        self._system_instruction = system_instruction
        self._session = None

    async def send(self, message: str) -> ChatEntry | None:
        """Send ``message`` and stream the reply into the transcript.

        Returns the settled reply entry, or ``None`` for a blank message.
        Stream failures never raise; the reply becomes a fixed apology.

        Raises:
            ConversationBusyError: A previous reply is still streaming.
        """
        if not message.strip():
            return None
        if self._phase in (ChatPhase.SENDING, ChatPhase.STREAMING):
            raise ConversationBusyError("A reply is still streaming")

        self._phase = ChatPhase.SENDING
        self._transcript.append(ChatEntry(role="user", text=message))
        self._transcript.open_reply()
        self._phase = ChatPhase.STREAMING
        self._publish()

        chunks = 0
        try:
            with self._tele("chat.send"):
                session = self._current_session()
                async for chunk in session.send_message_stream(message):
                    if not chunk:
                        continue
                    self._transcript.extend_reply(chunk)
                    chunks += 1
                    self._publish()
        except Exception as e:
            logger.error("Chat stream failed after %d chunk(s): %s", chunks, e, exc_info=True)
            self._transcript.replace_reply(CHAT_APOLOGY_MESSAGE)
            self._publish()
        finally:
            entry = self._transcript.settle()
            self._phase = ChatPhase.SETTLED
            self._tele.count("chat.chunks", chunks)

        return entry

    def _current_session(self) -> ChatSession:
        if self._session is None:
            self._session = self._adapter.open_chat(self._system_instruction)
        return self._session

    def _publish(self) -> None:
        if self._on_update is None:
            return
        try:
            self._on_update(self._transcript.snapshot())
        except Exception as e:
            logger.error("Transcript listener failed: %s", e, exc_info=True)
