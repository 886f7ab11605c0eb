"""Conversational extensions."""

from .chat import (
    ChatAggregator,
    ChatEntry,
    ChatPhase,
    Transcript,
    default_system_instruction,
    property_context_instruction,
)

__all__ = [  # noqa: RUF022
    "ChatAggregator",
    "ChatEntry",
    "ChatPhase",
    "Transcript",
    "default_system_instruction",
    "property_context_instruction",
]
