"""Ordered note collection and its mutation primitives.

:class:`NoteStore` owns the list of notes in display order.  None of its
operations raise for a missing id: remote state may already have diverged
locally (a note deleted through another path, a draft dropped by a
refresh), so callers treat absence as "nothing to do".  This keeps the
engine idempotent when a reconciliation step is replayed.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from notesync.models import Note, NoteId
from notesync.observability import get_logger

log = get_logger("notesync.store")

_EDITABLE_FIELDS: frozenset[str] = frozenset({"title", "content"})


class NoteStore:
    """Ordered collection of :class:`Note` values with unique ids.

    Parameters
    ----------
    notes:
        Optional initial contents, in display order.
    """

    __slots__ = ("_notes",)

    def __init__(self, notes: Iterable[Note] = ()) -> None:
        self._notes: list[Note] = []
        self.reset(notes)

    # -- reads -------------------------------------------------------------

    def list(self) -> tuple[Note, ...]:
        """Read-only snapshot of the collection in display order."""
        return tuple(self._notes)

    def ids(self) -> list[NoteId]:
        return [note.id for note in self._notes]

    def get(self, note_id: NoteId) -> Note | None:
        index = self._index_of(note_id)
        return None if index is None else self._notes[index]

    def __len__(self) -> int:
        return len(self._notes)

    def __iter__(self) -> Iterator[Note]:
        return iter(tuple(self._notes))

    def __contains__(self, note_id: object) -> bool:
        return any(note.id == note_id for note in self._notes)

    # -- mutations ---------------------------------------------------------

    def reset(self, notes: Iterable[Note]) -> None:
        """Replace the whole collection, keeping the first of any duplicate ids."""
        seen: set[NoteId] = set()
        fresh: list[Note] = []
        for note in notes:
            if note.id in seen:
                log.warning(
                    "Dropping duplicate note id",
                    extra={"extra_fields": {"op": "reset", "note_id": str(note.id)}},
                )
                continue
            seen.add(note.id)
            fresh.append(note)
        self._notes = fresh

    def upsert_front(self, note: Note) -> None:
        """Insert *note* at the head, or replace in place if its id exists."""
        index = self._index_of(note.id)
        if index is None:
            self._notes.insert(0, note)
        else:
            self._notes[index] = note

    def replace(self, note_id: NoteId, new_note: Note) -> bool:
        """Swap the note at *note_id* for *new_note*, keeping its position.

        Returns ``False`` (and changes nothing) if *note_id* is absent.  If
        *new_note* carries a different id that is already held by another
        entry, that other entry is dropped so ids stay unique.
        """
        index = self._index_of(note_id)
        if index is None:
            return False
        if new_note.id != note_id:
            clash = self._index_of(new_note.id)
            if clash is not None:
                del self._notes[clash]
                if clash < index:
                    index -= 1
        self._notes[index] = new_note
        return True

    def remove_by_id(self, note_id: NoteId) -> bool:
        """Remove the note at *note_id*; ``False`` if it was absent."""
        index = self._index_of(note_id)
        if index is None:
            return False
        del self._notes[index]
        return True

    def update_fields(self, note_id: NoteId, **patch: str) -> bool:
        """Merge *patch* (``title`` and/or ``content``) into the note at *note_id*.

        Raises
        ------
        TypeError
            If *patch* names a field other than ``title`` or ``content``.
        """
        unknown = set(patch) - _EDITABLE_FIELDS
        if unknown:
            raise TypeError(f"update_fields() got unexpected fields: {sorted(unknown)}")
        index = self._index_of(note_id)
        if index is None:
            return False
        self._notes[index] = self._notes[index].evolve(**patch)
        return True

    # -- internals ---------------------------------------------------------

    def _index_of(self, note_id: NoteId) -> int | None:
        for index, note in enumerate(self._notes):
            if note.id == note_id:
                return index
        return None
