"""State-reconciliation engine.

:class:`SyncEngine` turns user intents into remote calls and keeps the
local reflection of the collection consistent with their outcomes:

* ``refresh`` replaces the collection with the server's.
* ``create`` inserts a draft optimistically, then confirms it or rolls
  back with a full resync.
* ``save`` overwrites a note with the server's copy; failures keep the
  local edits.
* ``delete`` removes a note only once the server confirmed it.

Everything runs on one event loop.  State is mutated only in synchronous
steps between awaits and re-read after each await, so no step observes a
half-applied mutation and no locking is needed.  Remote failures are
caught inside the intent that issued them and end up as the single
message held by :class:`ErrorReporter`; nothing propagates further.
"""

from __future__ import annotations

import asyncio
import itertools
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from notesync.config import NoteSyncConfig
from notesync.errors import NoteSyncDecodeError, NoteSyncError, NoteSyncRemoteRejection
from notesync.models import Note, NoteId, PendingId, SessionSnapshot, is_pending
from notesync.observability import NoopMetricsHook, get_logger
from notesync.reporter import ErrorReporter
from notesync.selection import SelectionManager
from notesync.store import NoteStore

log = get_logger("notesync.engine")

_T = TypeVar("_T")

Listener = Callable[[SessionSnapshot], None]

_INTENT_LABELS: dict[str, str] = {
    "refresh": "load notes",
    "create": "create note",
    "save": "save note",
    "delete": "delete note",
}


def failure_message(intent: str, exc: NoteSyncError) -> str:
    """Collapse a remote error into the user-facing banner text."""
    if isinstance(exc, NoteSyncRemoteRejection):
        detail = str(exc.status_code)
    elif isinstance(exc, NoteSyncDecodeError):
        detail = "invalid response"
    else:
        detail = "network error"
    return f"Failed to {_INTENT_LABELS[intent]} ({detail})"


class SyncEngine:
    """Keeps a local note collection in step with a remote one.

    Parameters
    ----------
    api:
        The remote collaborator; an :class:`~notesync.notes_api.AsyncNotesAPI`
        or anything exposing the same four coroutines.
    config:
        Engine configuration.  Defaults to :class:`NoteSyncConfig()`.
    """

    def __init__(self, api: Any, config: NoteSyncConfig | None = None) -> None:
        self._api = api
        self._config = config if config is not None else NoteSyncConfig()
        self._metrics = (
            self._config.metrics if self._config.metrics is not None else NoopMetricsHook()
        )
        self._store = NoteStore()
        self._selection = SelectionManager()
        self._reporter = ErrorReporter()
        self._pending_tokens = itertools.count(1)
        self._save_sequence = itertools.count(1)
        self._latest_save: dict[NoteId, int] = {}
        self._listeners: list[Listener] = []

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @property
    def store(self) -> NoteStore:
        return self._store

    @property
    def selection(self) -> SelectionManager:
        return self._selection

    @property
    def reporter(self) -> ErrorReporter:
        return self._reporter

    @property
    def notes(self) -> tuple[Note, ...]:
        return self._store.list()

    @property
    def selected_id(self) -> NoteId | None:
        return self._selection.current()

    @property
    def error(self) -> str | None:
        return self._reporter.last_error

    def selected_note(self) -> Note | None:
        selected = self._selection.current()
        return None if selected is None else self._store.get(selected)

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            notes=self._store.list(),
            selected_id=self._selection.current(),
            error=self._reporter.last_error,
            busy=self._reporter.flags(),
        )

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call *listener* with a fresh snapshot after every state change.

        An exception raised by a listener is logged and does not interrupt
        the intent that triggered the notification.  Returns a callable
        that removes the listener again.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ------------------------------------------------------------------
    # Local intents
    # ------------------------------------------------------------------

    def select(self, note_id: NoteId | None) -> bool:
        """Make *note_id* the active note; ``False`` if it is not in the collection."""
        if note_id is not None and note_id not in self._store:
            return False
        self._selection.select(note_id)
        self._notify()
        return True

    def edit_title(self, note_id: NoteId, value: str) -> bool:
        """Apply a typed title locally.  Never touches the network or the error."""
        changed = self._store.update_fields(note_id, title=value)
        if changed:
            self._notify()
        return changed

    def edit_content(self, note_id: NoteId, value: str) -> bool:
        """Apply typed content locally.  Never touches the network or the error."""
        changed = self._store.update_fields(note_id, content=value)
        if changed:
            self._notify()
        return changed

    # ------------------------------------------------------------------
    # Remote intents
    # ------------------------------------------------------------------

    async def refresh(self) -> bool:
        """Replace the collection with the server's.

        On failure the current (possibly stale) collection stays as is.
        """
        return await self._refresh(clear_error=True)

    async def create(self) -> Note | None:
        """Create a note, showing a draft immediately.

        The draft is inserted at the head and selected before the remote
        call is issued.  On success it is swapped for the server's note.
        On failure the draft is removed, the error is set and the whole
        collection is reloaded from the server.

        Returns
        -------
        Note | None
            The confirmed note, or ``None`` after a rollback.
        """
        pending_id = PendingId(next(self._pending_tokens))
        draft = Note.draft(pending_id, title=self._config.draft_title)
        self._store.upsert_front(draft)
        self._selection.select(pending_id)
        self._notify()

        try:
            created: Note = await self._remote(
                "saving", lambda: self._api.create_note(draft.title, draft.content),
            )
        except NoteSyncError as exc:
            self._store.remove_by_id(pending_id)
            self._selection.reconcile_after_removal(pending_id, self._store.ids())
            self._fail("create", exc, pending_id=str(pending_id))
            self._metrics.increment("notesync.rollbacks_total")
            log.info(
                "Draft rolled back; resynchronising",
                extra={"extra_fields": {"intent": "create", "pending_id": str(pending_id)}},
            )
            await self._refresh(clear_error=False)
            return None

        if not self._store.replace(pending_id, created) and created.id not in self._store:
            # A refresh dropped the draft while the call was in flight.
            self._store.upsert_front(created)
        self._selection.reconcile_after_replace(pending_id, created.id)
        self._succeed("create")
        return created

    async def save(self, note_id: NoteId, title: str, content: str) -> bool:
        """Send *title*/*content* for *note_id* and apply the server's copy.

        Failure leaves the collection untouched, so unsaved local edits
        stay visible for a retry.
        """
        if is_pending(note_id):
            self._reject_pending("save", note_id)
            return False

        sequence = next(self._save_sequence)
        self._latest_save[note_id] = sequence

        try:
            saved: Note = await self._remote(
                "saving", lambda: self._api.update_note(note_id, title, content),
            )
        except NoteSyncError as exc:
            self._fail("save", exc, note_id=str(note_id))
            return False

        if (
            self._config.save_ordering == "last_issued"
            and self._latest_save.get(note_id) != sequence
        ):
            log.debug(
                "Discarding superseded save response",
                extra={"extra_fields": {"intent": "save", "note_id": str(note_id)}},
            )
        else:
            self._store.replace(note_id, saved)
        self._succeed("save")
        return True

    async def delete(self, note_id: NoteId) -> bool:
        """Delete *note_id* once the server confirms it.

        The note stays visible until then.  If it was selected, the head of
        the remaining collection becomes selected (or nothing).
        """
        if is_pending(note_id):
            self._reject_pending("delete", note_id)
            return False

        try:
            await self._remote("deleting", lambda: self._api.delete_note(note_id))
        except NoteSyncError as exc:
            self._fail("delete", exc, note_id=str(note_id))
            return False

        self._store.remove_by_id(note_id)
        self._selection.reconcile_after_removal(note_id, self._store.ids())
        self._latest_save.pop(note_id, None)
        self._succeed("delete")
        return True

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _refresh(self, *, clear_error: bool) -> bool:
        try:
            notes: list[Note] = await self._remote("listing", self._api.list_notes)
        except NoteSyncError as exc:
            self._fail("refresh", exc)
            return False

        self._store.reset(notes)
        self._selection.reconcile_after_reset(self._store.ids())
        self._latest_save = {
            note_id: seq for note_id, seq in self._latest_save.items() if note_id in self._store
        }
        self._metrics.gauge("notesync.notes_count", len(self._store))
        if clear_error:
            self._succeed("refresh")
        else:
            self._metrics.increment(
                "notesync.intent_total", tags={"intent": "refresh", "outcome": "success"},
            )
            self._notify()
        return True

    async def _remote(self, kind: str, call: Callable[[], Awaitable[_T]]) -> _T:
        """Issue *call* and await it with the *kind* busy flag held."""
        try:
            with self._reporter.busy(kind):
                self._notify()
                return await call()
        except asyncio.CancelledError:
            self._notify()
            raise

    def _succeed(self, intent: str) -> None:
        self._reporter.clear()
        self._metrics.increment(
            "notesync.intent_total", tags={"intent": intent, "outcome": "success"},
        )
        self._notify()

    def _fail(self, intent: str, exc: NoteSyncError, **fields: str) -> None:
        message = failure_message(intent, exc)
        self._reporter.report(message)
        self._metrics.increment(
            "notesync.intent_total", tags={"intent": intent, "outcome": "failure"},
        )
        log.warning(
            "Intent failed",
            extra={
                "extra_fields": {
                    "intent": intent,
                    "error": message,
                    "code": exc.code,
                    "detail": exc.message,
                    **fields,
                }
            },
        )
        self._notify()

    def _reject_pending(self, intent: str, note_id: NoteId) -> None:
        self._reporter.report(f"Failed to {_INTENT_LABELS[intent]} (not yet created)")
        self._metrics.increment(
            "notesync.intent_total", tags={"intent": intent, "outcome": "failure"},
        )
        log.warning(
            "Intent on unconfirmed note",
            extra={"extra_fields": {"intent": intent, "note_id": str(note_id)}},
        )
        self._notify()

    def _notify(self) -> None:
        if not self._listeners:
            return
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                log.exception(
                    "Listener raised",
                    extra={"extra_fields": {"listener": getattr(listener, "__qualname__", repr(listener))}},
                )
