"""Active-note tracking and the re-selection policy.

The policy is expressed once here: when the selected note disappears, the
head of what remains becomes the selection, or nothing if the collection is
empty.  The engine applies it identically for delete confirmations, create
rollbacks and refreshes.
"""

from __future__ import annotations

from collections.abc import Sequence

from notesync.models import NoteId


class SelectionManager:
    """Owns the id of the currently active note, or ``None``."""

    __slots__ = ("_current",)

    def __init__(self, current: NoteId | None = None) -> None:
        self._current: NoteId | None = current

    def current(self) -> NoteId | None:
        return self._current

    def select(self, note_id: NoteId | None) -> None:
        """Set the selection unconditionally; existence is the caller's concern."""
        self._current = note_id

    def clear(self) -> None:
        self._current = None

    def reconcile_after_removal(
        self,
        removed_id: NoteId,
        remaining_in_order: Sequence[NoteId],
    ) -> None:
        """Move off *removed_id* if it was selected."""
        if self._current == removed_id:
            self._current = remaining_in_order[0] if remaining_in_order else None

    def reconcile_after_replace(self, old_id: NoteId, new_id: NoteId) -> None:
        """Follow an id change, e.g. a draft confirmed by the server."""
        if self._current == old_id:
            self._current = new_id

    def reconcile_after_reset(self, remaining_in_order: Sequence[NoteId]) -> None:
        """Repair the selection after the collection was replaced wholesale.

        With nothing selected, the head (if any) becomes selected.  A
        selection that no longer exists is handled as a removal.
        """
        if self._current is None:
            if remaining_in_order:
                self._current = remaining_in_order[0]
        elif self._current not in remaining_in_order:
            self.reconcile_after_removal(self._current, remaining_in_order)
