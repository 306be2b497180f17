"""notesync: local state reconciliation for a remote note collection.

Public re-exports
-----------------

* **Session:** :class:`NotesSession`
* **Engine:** :class:`SyncEngine`, :class:`NoteStore`,
  :class:`SelectionManager`, :class:`ErrorReporter`
* **Configuration:** :class:`NoteSyncConfig`
* **Errors:** Every :class:`NoteSyncError` subclass and :class:`ErrorCode`
* **Models:** :class:`Note`, :class:`PendingId`, :class:`SessionSnapshot`,
  :class:`BusyFlags`

Usage::

    from notesync import NotesSession

    async with NotesSession(base_url="http://localhost:3001") as session:
        await session.engine.create()
        print(session.engine.snapshot())
"""

from __future__ import annotations

# ── Configuration ───────────────────────────────────────────────────────
from notesync.config import NoteSyncConfig

# ── Engine ──────────────────────────────────────────────────────────────
from notesync.engine import SyncEngine

# ── Errors ──────────────────────────────────────────────────────────────
from notesync.errors import (
    ErrorCode,
    NoteSyncDecodeError,
    NoteSyncError,
    NoteSyncRemoteRejection,
    NoteSyncTransportError,
)

# ── Models ──────────────────────────────────────────────────────────────
from notesync.models import (
    BusyFlags,
    Note,
    NoteId,
    PendingId,
    SessionSnapshot,
    is_pending,
)
from notesync.reporter import ErrorReporter
from notesync.selection import SelectionManager

# ── Session ─────────────────────────────────────────────────────────────
from notesync.session import NotesSession
from notesync.store import NoteStore

# ── Public surface ──────────────────────────────────────────────────────

__all__ = [
    # Session
    "NotesSession",
    # Engine
    "SyncEngine",
    "NoteStore",
    "SelectionManager",
    "ErrorReporter",
    # Configuration
    "NoteSyncConfig",
    # Errors
    "NoteSyncError",
    "ErrorCode",
    "NoteSyncTransportError",
    "NoteSyncRemoteRejection",
    "NoteSyncDecodeError",
    # Models
    "Note",
    "NoteId",
    "PendingId",
    "SessionSnapshot",
    "BusyFlags",
    "is_pending",
]
