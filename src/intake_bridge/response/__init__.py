"""Interpretation of raw backend responses."""

from .classifier import classify, decode, snippet, unwrap

__all__ = ["classify", "decode", "snippet", "unwrap"]
