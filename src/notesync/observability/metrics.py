"""Metrics hook protocol and no-op default implementation.

notesync emits counters, timings and gauges at the remote-call boundary
and at each intent's completion.  By default a :class:`NoopMetricsHook`
is used; pass any object satisfying :class:`MetricsHook` as
``NoteSyncConfig.metrics`` to route them to a real backend.

Emitted metric names:

* ``notesync.requests_total``       -- counter (tags: method, status)
* ``notesync.retries_total``        -- counter (tags: method, reason)
* ``notesync.request_duration_ms``  -- timing
* ``notesync.intent_total``         -- counter (tags: intent, outcome)
* ``notesync.rollbacks_total``      -- counter
* ``notesync.notes_count``          -- gauge, after each refresh
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class MetricsHook(Protocol):
    """Protocol that any metrics backend must satisfy.

    All methods accept an optional *tags* dict of string keys and values.
    """

    def increment(
        self,
        name: str,
        value: int = 1,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Increment a counter metric."""
        ...

    def timing(
        self,
        name: str,
        ms: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Record a duration in milliseconds."""
        ...

    def gauge(
        self,
        name: str,
        value: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Set a gauge metric to an absolute value."""
        ...


class NoopMetricsHook:
    """Default backend that discards every data point."""

    __slots__ = ()

    def increment(
        self,
        name: str,
        value: int = 1,
        tags: dict[str, str] | None = None,
    ) -> None:
        pass

    def timing(
        self,
        name: str,
        ms: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        pass

    def gauge(
        self,
        name: str,
        value: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        pass
