"""Last-error slot and per-operation busy flags."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from notesync.models import BusyFlags

BUSY_KINDS: tuple[str, ...] = ("listing", "saving", "deleting")


class ErrorReporter:
    """Holds the most recent failure message and the busy flags.

    There is exactly one error slot: a new failure overwrites the previous
    one and any success clears it.  Busy flags are backed by in-flight
    counters, so a flag stays set while *any* call of its kind is pending.
    """

    __slots__ = ("_in_flight", "last_error")

    def __init__(self) -> None:
        self.last_error: str | None = None
        self._in_flight: dict[str, int] = dict.fromkeys(BUSY_KINDS, 0)

    def report(self, message: str) -> None:
        self.last_error = message

    def clear(self) -> None:
        self.last_error = None

    def is_busy(self, kind: str) -> bool:
        return self._in_flight[self._check_kind(kind)] > 0

    def flags(self) -> BusyFlags:
        return BusyFlags(
            listing=self._in_flight["listing"] > 0,
            saving=self._in_flight["saving"] > 0,
            deleting=self._in_flight["deleting"] > 0,
        )

    @contextmanager
    def busy(self, kind: str) -> Iterator[None]:
        """Mark *kind* busy for the duration of the ``with`` block.

        The flag is released in ``finally``, so a failed or cancelled call
        never leaves a control disabled.
        """
        kind = self._check_kind(kind)
        self._in_flight[kind] += 1
        try:
            yield
        finally:
            self._in_flight[kind] -= 1

    @staticmethod
    def _check_kind(kind: str) -> str:
        if kind not in BUSY_KINDS:
            raise ValueError(f"Unknown busy kind {kind!r}; expected one of {BUSY_KINDS}")
        return kind
