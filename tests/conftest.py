"""
Global test configuration with support for different test types.
"""

from collections.abc import AsyncIterator
import json
import logging
import os
from typing import Any
from unittest.mock import AsyncMock

import pytest

from intake_bridge.config import FrozenConfig
from intake_bridge.pipeline.fallback import FallbackCoordinator

# --- Environment Isolation (Autouse) ---


@pytest.fixture(autouse=True)
def isolate_intake_env(request, monkeypatch):
    """Ensure a clean INTAKE_* environment for each test.

    Escape hatch: @pytest.mark.allow_env_pollution keeps the current env.
    """
    if request.node.get_closest_marker("allow_env_pollution"):
        return

    for key in list(os.environ.keys()):
        if key.startswith("INTAKE_"):
            monkeypatch.delenv(key, raising=False)
    # Avoid DEBUG toggles enabling telemetry
    monkeypatch.delenv("DEBUG", raising=False)


@pytest.fixture(autouse=True)
def neutral_project_config(request, monkeypatch, tmp_path):
    """Point the pyproject lookup at a file that does not exist.

    Prevents the repository's own pyproject.toml from leaking into config tests.
    """
    if request.node.get_closest_marker("allow_real_project_config"):
        return
    monkeypatch.setenv(
        "INTAKE_BRIDGE_PYPROJECT_PATH", str(tmp_path / "no_such_pyproject.toml")
    )


# --- Logging Fixtures ---
@pytest.fixture(scope="session", autouse=True)
def quiet_noisy_libraries():
    """Sets the log level for noisy external libraries to WARNING."""
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


# --- Test Environment Markers ---
def pytest_configure(config):
    """Configure custom markers for test organization."""
    markers = [
        "unit: Fast, isolated unit tests",
        "contract: Behavioural guarantees of public operations",
        "integration: Component integration tests with mocked backends",
        "allow_env_pollution: Keep INTAKE_* variables from the real environment",
        "allow_real_project_config: Read the real pyproject.toml",
    ]
    for marker in markers:
        config.addinivalue_line("markers", marker)


# --- Fakes ---


class ScriptedTransport:
    """Transport fake that replays scripted outcomes in order.

    Each outcome is either a raw response body (``str``), a JSON-able object
    (encoded on the fly) or an exception instance to raise.
    """

    def __init__(self, *outcomes: Any, blind_error: Exception | None = None):
        self._outcomes = list(outcomes)
        self._blind_error = blind_error
        self.calls: list[dict[str, Any]] = []
        self.blind_calls: list[dict[str, Any]] = []

    def queue(self, *outcomes: Any) -> None:
        self._outcomes.extend(outcomes)

    async def send(self, url, body, *, params=None):
        self.calls.append({"url": url, "body": json.loads(body), "params": params})
        if not self._outcomes:
            raise AssertionError("ScriptedTransport ran out of outcomes")
        outcome = self._outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        if isinstance(outcome, str):
            return outcome
        return json.dumps(outcome)

    async def send_blind(self, url, body):
        self.blind_calls.append({"url": url, "body": json.loads(body)})
        if self._blind_error is not None:
            raise self._blind_error


class FakeChatSession:
    """Chat session fake yielding scripted chunks, optionally failing midway."""

    def __init__(self, chunks, error: Exception | None = None):
        self._chunks = list(chunks)
        self._error = error
        self.messages: list[str] = []

    async def send_message_stream(self, message: str) -> AsyncIterator[str]:
        self.messages.append(message)
        for chunk in self._chunks:
            yield chunk
        if self._error is not None:
            raise self._error


class FakeGenerationAdapter:
    """Generation adapter fake; records every session it opens."""

    def __init__(self, chunks=(), *, error: Exception | None = None, text=None):
        self.chunks = chunks
        self.error = error
        self.text = text
        self.sessions: list[tuple[str | None, FakeChatSession]] = []
        self.prompts: list[str] = []

    def open_chat(self, system_instruction=None):
        session = FakeChatSession(self.chunks, self.error)
        self.sessions.append((system_instruction, session))
        return session

    async def generate_text(self, prompt):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.text


# --- Core Fixtures ---

API_URL = "https://script.google.com/macros/s/test-deployment/exec"


@pytest.fixture
def api_url():
    return API_URL


@pytest.fixture
def frozen_config(tmp_path):
    """Frozen configuration pointing at a fake endpoint and a temp recovery file."""
    return FrozenConfig(
        api_url=API_URL,
        fallback_delay_seconds=0.8,
        recovery_path=tmp_path / "recovery.json",
    )


@pytest.fixture
def fake_sleep():
    return AsyncMock()


@pytest.fixture
def make_coordinator(fake_sleep):
    """Build a coordinator over a transport with instant, recorded sleeps."""

    def _make(transport, **kwargs):
        kwargs.setdefault("sleep", fake_sleep)
        kwargs.setdefault("clock", lambda: 1_700_000_000.0)
        return FallbackCoordinator(transport, delay_seconds=0.8, **kwargs)

    return _make


@pytest.fixture
def scripted_transport():
    return ScriptedTransport


@pytest.fixture
def fake_adapter():
    return FakeGenerationAdapter
