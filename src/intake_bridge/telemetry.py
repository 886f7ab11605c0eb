"""Opt-in timings and counters for backend calls, fallbacks and chat streams.

Nothing is recorded unless ``INTAKE_TELEMETRY=1`` (or ``DEBUG=1``) is set and
a reporter is passed in; otherwise every component shares one inert context.
Scope names nest through a context variable, so two operations awaited
concurrently each see only their own enclosing scopes.
"""

from collections import defaultdict, deque
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
import logging
import os
import time
from types import TracebackType
from typing import Any, Protocol, Self, runtime_checkable

log = logging.getLogger(__name__)

_active_scopes: ContextVar[tuple[str, ...]] = ContextVar("intake_active_scopes", default=())


def telemetry_enabled() -> bool:
    return "1" in (os.getenv("INTAKE_TELEMETRY"), os.getenv("DEBUG"))


@runtime_checkable
class TelemetryReporter(Protocol):
    """Receives finished scope timings and point metrics."""

    def record_timing(self, scope: str, duration: float, **metadata: Any) -> None: ...  # noqa: D102
    def record_metric(self, scope: str, value: Any, **metadata: Any) -> None: ...  # noqa: D102


@dataclass(frozen=True, slots=True)
class _InertTelemetry:
    """Shared stand-in used while telemetry is off."""

    def __call__(self, name: str, **metadata: Any) -> Self:  # noqa: ARG002
        return self

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        return None

    def metric(self, name: str, value: Any, **metadata: Any) -> None:
        pass

    def count(self, name: str, increment: int = 1, **metadata: Any) -> None:
        pass


class _RecordingTelemetry:
    """Fans scope timings and metrics out to every reporter."""

    __slots__ = ("_reporters",)

    def __init__(self, *reporters: TelemetryReporter):
        self._reporters = reporters

    @contextmanager
    def __call__(self, name: str, **metadata: Any) -> Iterator[Self]:
        if not isinstance(name, str) or not name:
            raise ValueError("Telemetry scope name must be a non-empty string")

        outer = _active_scopes.get()
        token = _active_scopes.set((*outer, name))
        started = time.perf_counter()
        try:
            yield self
        finally:
            elapsed = time.perf_counter() - started
            _active_scopes.reset(token)
            path = ".".join((*outer, name))
            self._emit("record_timing", path, elapsed, metadata)

    def metric(self, name: str, value: Any, **metadata: Any) -> None:
        path = ".".join((*_active_scopes.get(), name))
        self._emit("record_metric", path, value, metadata)

    def count(self, name: str, increment: int = 1, **metadata: Any) -> None:
        self.metric(name, increment, kind="counter", **metadata)

    def _emit(self, method: str, path: str, value: Any, metadata: dict[str, Any]) -> None:
        for reporter in self._reporters:
            try:
                getattr(reporter, method)(path, value, **metadata)
            except Exception as e:
                # A broken reporter must never fail the backend call it observes
                log.error(
                    "Reporter %s failed on %s: %s",
                    type(reporter).__name__,
                    path,
                    e,
                    exc_info=True,
                )


_INERT = _InertTelemetry()

type TelemetryContextProtocol = _RecordingTelemetry | _InertTelemetry


def TelemetryContext(*reporters: TelemetryReporter) -> TelemetryContextProtocol:  # noqa: N802
    """Return a recording context, or the shared inert one when disabled."""
    if reporters and telemetry_enabled():
        return _RecordingTelemetry(*reporters)
    return _INERT


class InMemoryReporter:
    """Keeps the most recent samples per scope for inspection in tests and demos."""

    def __init__(self, max_samples: int = 500):
        self.timings: defaultdict[str, deque[float]] = defaultdict(
            lambda: deque(maxlen=max_samples)
        )
        self.metrics: defaultdict[str, deque[Any]] = defaultdict(
            lambda: deque(maxlen=max_samples)
        )

    def record_timing(self, scope: str, duration: float, **metadata: Any) -> None:  # noqa: ARG002
        self.timings[scope].append(duration)

    def record_metric(self, scope: str, value: Any, **metadata: Any) -> None:  # noqa: ARG002
        self.metrics[scope].append(value)

    def get_report(self) -> str:
        lines = ["scope | samples | value"]
        for scope in sorted(self.timings):
            samples = self.timings[scope]
            mean_ms = 1000 * sum(samples) / len(samples)
            lines.append(f"{scope} | {len(samples)} | {mean_ms:.1f} ms avg")
        for scope in sorted(self.metrics):
            values = self.metrics[scope]
            numeric = sum(v for v in values if isinstance(v, int | float))
            lines.append(f"{scope} | {len(values)} | {numeric} total")
        return "\n".join(lines)


class LoggingReporter:
    """Writes every sample to a logger at DEBUG."""

    def __init__(self, logger: logging.Logger | None = None):
        self._logger = logger or log

    def record_timing(self, scope: str, duration: float, **metadata: Any) -> None:
        self._logger.debug("%s took %.3fs %s", scope, duration, metadata or "")

    def record_metric(self, scope: str, value: Any, **metadata: Any) -> None:
        self._logger.debug("%s = %r %s", scope, value, metadata or "")
