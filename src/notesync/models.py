"""Data models for the notesync engine.

A note's identity is a tagged variant: confirmed notes carry the plain
``int`` id assigned by the server, while optimistic drafts carry a
:class:`PendingId` until their create call settles.  The two never compare
equal, so a placeholder can not collide with a server id whatever the
server's id space looks like.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Union

from notesync.errors import NoteSyncDecodeError


@dataclass(frozen=True)
class PendingId:
    """Placeholder identity of a note whose create call has not settled.

    Attributes
    ----------
    token:
        Locally unique counter value, issued by the engine that created
        the draft.
    """

    token: int

    def __str__(self) -> str:
        return f"pending-{self.token}"


NoteId = Union[int, PendingId]
"""Identity of a note: a server id or a local placeholder."""


def is_pending(note_id: NoteId | None) -> bool:
    """Return ``True`` if *note_id* is a local placeholder."""
    return isinstance(note_id, PendingId)


def _parse_timestamp(raw: Any, field_name: str) -> datetime | None:
    if raw is None or raw == "":
        return None
    if not isinstance(raw, str):
        raise NoteSyncDecodeError(
            message=f"Note field {field_name!r} must be an ISO-8601 string",
            context={"field": field_name, "value": raw},
        )
    try:
        return datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError as exc:
        raise NoteSyncDecodeError(
            message=f"Note field {field_name!r} is not a valid timestamp: {raw!r}",
            context={"field": field_name, "value": raw, "reason": str(exc)},
            cause=exc,
        ) from exc


@dataclass(frozen=True)
class Note:
    """One user note.

    Notes are immutable; edits produce a new instance via :meth:`evolve`
    so that every other note in a collection keeps its identity.

    Attributes
    ----------
    id:
        Server id, or a :class:`PendingId` for an unconfirmed draft.
    title:
        User-editable title, may be empty.
    content:
        User-editable body, may be empty.
    created_at:
        Server creation time; ``None`` on drafts.
    updated_at:
        Server modification time; ``None`` on drafts and stale after
        local edits until the next save.
    """

    id: NoteId
    title: str = ""
    content: str = ""
    created_at: datetime | None = field(default=None, compare=False)
    updated_at: datetime | None = field(default=None, compare=False)

    @property
    def is_pending(self) -> bool:
        return is_pending(self.id)

    def evolve(self, **changes: Any) -> Note:
        """Return a copy of this note with *changes* applied."""
        return dataclasses.replace(self, **changes)

    def to_payload(self) -> dict[str, str]:
        """Request body for create/update calls."""
        return {"title": self.title, "content": self.content}

    @classmethod
    def draft(cls, pending_id: PendingId, title: str = "", content: str = "") -> Note:
        """Build an optimistic draft carrying *pending_id*."""
        return cls(id=pending_id, title=title, content=content)

    @classmethod
    def from_dict(cls, data: Any) -> Note:
        """Decode a note object returned by the server.

        Raises
        ------
        NoteSyncDecodeError
            If *data* is not an object, the id is not a non-negative
            integer, a text field is not a string, or a timestamp can not
            be parsed.
        """
        if not isinstance(data, dict):
            raise NoteSyncDecodeError(
                message="Note payload must be a JSON object",
                context={"value": data},
            )

        note_id = data.get("id")
        # bool is an int subclass; reject it explicitly.
        if not isinstance(note_id, int) or isinstance(note_id, bool) or note_id < 0:
            raise NoteSyncDecodeError(
                message=f"Note id must be a non-negative integer, got {note_id!r}",
                context={"field": "id", "value": note_id},
            )

        texts: dict[str, str] = {}
        for name in ("title", "content"):
            value = data.get(name)
            if value is None:
                value = ""
            if not isinstance(value, str):
                raise NoteSyncDecodeError(
                    message=f"Note field {name!r} must be a string",
                    context={"field": name, "value": value},
                )
            texts[name] = value

        return cls(
            id=note_id,
            title=texts["title"],
            content=texts["content"],
            created_at=_parse_timestamp(data.get("created_at"), "created_at"),
            updated_at=_parse_timestamp(data.get("updated_at"), "updated_at"),
        )


@dataclass(frozen=True)
class BusyFlags:
    """Per-kind in-flight indicators, used to disable UI controls."""

    listing: bool = False
    saving: bool = False
    deleting: bool = False


@dataclass(frozen=True)
class SessionSnapshot:
    """Immutable view of everything a UI layer renders.

    Attributes
    ----------
    notes:
        The collection in display order.
    selected_id:
        The active note's id, or ``None``.
    error:
        The most recent failure message, or ``None``.
    busy:
        Current :class:`BusyFlags`.
    """

    notes: tuple[Note, ...]
    selected_id: NoteId | None
    error: str | None
    busy: BusyFlags

    @property
    def selected_note(self) -> Note | None:
        if self.selected_id is None:
            return None
        for note in self.notes:
            if note.id == self.selected_id:
                return note
        return None
