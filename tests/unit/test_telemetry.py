"""Tests for the telemetry context."""

import logging

import pytest

from intake_bridge.core.types import Action, RequestEnvelope
from intake_bridge.exceptions import NetworkError
from intake_bridge.telemetry import InMemoryReporter, LoggingReporter, TelemetryContext

pytestmark = pytest.mark.unit


def test_disabled_by_default_returns_shared_noop():
    assert TelemetryContext(InMemoryReporter()) is TelemetryContext()


def test_enabled_context_records_nested_scopes(monkeypatch):
    monkeypatch.setenv("INTAKE_TELEMETRY", "1")
    reporter = InMemoryReporter()
    tele = TelemetryContext(reporter)

    with tele("outer"), tele("inner"):
        tele.count("hits", 2)

    assert set(reporter.timings) == {"outer", "outer.inner"}
    assert list(reporter.metrics["outer.inner.hits"]) == [2]
    assert "outer.inner" in reporter.get_report()


def test_failing_reporter_does_not_break_caller(monkeypatch):
    monkeypatch.setenv("INTAKE_TELEMETRY", "1")

    class Broken:
        def record_timing(self, scope, duration, **metadata):
            raise RuntimeError("reporter down")

        def record_metric(self, scope, value, **metadata):
            raise RuntimeError("reporter down")

    tele = TelemetryContext(Broken())
    with tele("scope"):
        tele.metric("m", 1)


@pytest.mark.asyncio
async def test_fallback_is_counted(monkeypatch, scripted_transport, make_coordinator):
    monkeypatch.setenv("INTAKE_TELEMETRY", "1")
    reporter = InMemoryReporter()
    coordinator = make_coordinator(
        scripted_transport(NetworkError("down")), telemetry=TelemetryContext(reporter)
    )

    await coordinator.execute("https://x.test", RequestEnvelope(Action.GET_COMPANY_DATA), {})

    assert "backend.execute" in reporter.timings
    assert "backend.execute.backend.fallback" in reporter.metrics


def test_logging_reporter_writes_debug_lines(monkeypatch, caplog):
    monkeypatch.setenv("INTAKE_TELEMETRY", "1")
    tele = TelemetryContext(LoggingReporter())

    with caplog.at_level(logging.DEBUG, logger="intake_bridge.telemetry"), tele("chat.send"):
        tele.count("chat.chunks", 3)

    assert "chat.send.chat.chunks = 3" in caplog.text
    assert "chat.send took" in caplog.text


def test_empty_scope_name_is_rejected(monkeypatch):
    monkeypatch.setenv("INTAKE_TELEMETRY", "1")
    tele = TelemetryContext(InMemoryReporter())
    with pytest.raises(ValueError), tele(""):
        pass
