"""Core value types shared by every layer."""
