"""Text-generation adapters."""

from .base import ChatSession, GenerationAdapter
from .gemini import GeminiChatSession, GoogleGenAIAdapter

__all__ = [
    "ChatSession",
    "GeminiChatSession",
    "GenerationAdapter",
    "GoogleGenAIAdapter",
]
