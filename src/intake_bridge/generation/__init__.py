"""One-shot text generation."""

from .draft import DraftGenerator, build_context

__all__ = ["DraftGenerator", "build_context"]
