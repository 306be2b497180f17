"""notesync.notes_api -- remote collaborator for the sync engine.

This sub-package provides:

* :mod:`.retries` -- Retry decision logic and exponential backoff.
* :mod:`.transport` -- Async HTTP transport with retries and metrics.
* :mod:`.notes` -- Notes resource wrapper returning decoded notes.
"""

from __future__ import annotations

from .notes import AsyncNotesAPI
from .retries import compute_backoff, should_retry
from .transport import AsyncNotesTransport

__all__ = [
    "AsyncNotesAPI",
    "AsyncNotesTransport",
    "compute_backoff",
    "should_retry",
]
