"""Error hierarchy for the notesync engine.

Every error raised by the remote layer inherits from :class:`NoteSyncError`.
Each carries a machine-readable ``code`` (from :class:`ErrorCode`), a
human-readable ``message``, an optional structured ``context`` dict, and an
optional ``cause`` (chained exception).

These types never escape :class:`~notesync.engine.SyncEngine`: each intent
catches them and collapses them into the single user-facing message held by
:class:`~notesync.reporter.ErrorReporter`.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

# ---------------------------------------------------------------------------
# Error code enum
# ---------------------------------------------------------------------------

class ErrorCode(str, Enum):
    """Machine-readable error codes for every error the remote layer raises."""

    TRANSPORT_FAILURE = "TRANSPORT_FAILURE"
    REMOTE_REJECTION = "REMOTE_REJECTION"
    DECODE_ERROR = "DECODE_ERROR"


# ---------------------------------------------------------------------------
# Base error
# ---------------------------------------------------------------------------

class NoteSyncError(Exception):
    """Base exception for all notesync errors.

    Parameters
    ----------
    code:
        A value from :class:`ErrorCode` (or any string) identifying the
        error category.
    message:
        A developer-friendly description of what went wrong.
    context:
        Arbitrary structured data providing extra diagnostic detail.
    cause:
        The underlying exception, if this error wraps another.
    """

    def __init__(
        self,
        code: str,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.code: str = code
        self.message: str = message
        self.context: dict[str, Any] = context or {}
        self.cause: Exception | None = cause
        super().__init__(message)
        if cause is not None:
            self.__cause__ = cause

    def __repr__(self) -> str:
        ctx = f", context={self.context!r}" if self.context else ""
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r}{ctx})"

    def __reduce__(self) -> tuple[Any, ...]:
        return (
            _rebuild_error,
            (type(self), self.code, self.message, self.context, self.cause),
        )


def _rebuild_error(
    cls: type[NoteSyncError],
    code: str,
    message: str,
    context: dict[str, Any],
    cause: Exception | None,
) -> NoteSyncError:
    err = Exception.__new__(cls)
    NoteSyncError.__init__(err, code, message, context, cause)
    return err


# ---------------------------------------------------------------------------
# Remote call errors
# ---------------------------------------------------------------------------

class NoteSyncTransportError(NoteSyncError):
    """The request never completed (timeout, DNS, connection reset).

    Context keys: ``method``, ``path``, ``attempt``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.TRANSPORT_FAILURE,
            message=message,
            context=context,
            cause=cause,
        )


class NoteSyncRemoteRejection(NoteSyncError):
    """The server answered with a non-2xx status.

    Context keys: ``status_code``, ``method``, ``path``, ``body``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.REMOTE_REJECTION,
            message=message,
            context=context,
            cause=cause,
        )

    @property
    def status_code(self) -> int | None:
        """HTTP status of the rejected response."""
        return self.context.get("status_code")


class NoteSyncDecodeError(NoteSyncError):
    """A 2xx response body was not a valid note payload.

    Context keys: ``field``, ``value``, ``reason``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.DECODE_ERROR,
            message=message,
            context=context,
            cause=cause,
        )
