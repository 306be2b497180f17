"""Notes endpoint wrapper.

:class:`AsyncNotesAPI` maps the four remote calls onto the REST resource
rooted at ``config.notes_path`` and decodes responses into
:class:`~notesync.models.Note` values.  All HTTP concerns (retries,
status handling) are delegated to the transport.
"""

from __future__ import annotations

from notesync.config import NoteSyncConfig
from notesync.errors import NoteSyncDecodeError
from notesync.models import Note

from .transport import AsyncNotesTransport


class AsyncNotesAPI:
    """Asynchronous wrapper for the notes resource.

    Parameters
    ----------
    transport:
        A configured :class:`AsyncNotesTransport` instance.
    config:
        Supplies ``notes_path``.
    """

    def __init__(self, transport: AsyncNotesTransport, config: NoteSyncConfig) -> None:
        self._transport = transport
        self._path = config.notes_path.rstrip("/") or "/"

    def _item_path(self, note_id: int) -> str:
        return f"{self._path}/{note_id}"

    async def list_notes(self) -> list[Note]:
        """Fetch the full collection in server order.

        Raises
        ------
        NoteSyncDecodeError
            If the body is not a JSON array of note objects.
        """
        data = await self._transport.request("GET", self._path)
        if not isinstance(data, list):
            raise NoteSyncDecodeError(
                message="List response must be a JSON array",
                context={"value": data},
            )
        return [Note.from_dict(item) for item in data]

    async def create_note(self, title: str, content: str) -> Note:
        """Create a note; returns it with its server id and timestamps."""
        data = await self._transport.request(
            "POST", self._path, json={"title": title, "content": content},
        )
        return Note.from_dict(data)

    async def update_note(self, note_id: int, title: str, content: str) -> Note:
        """Overwrite a note's fields; returns the server's authoritative copy."""
        data = await self._transport.request(
            "PUT", self._item_path(note_id), json={"title": title, "content": content},
        )
        return Note.from_dict(data)

    async def delete_note(self, note_id: int) -> None:
        """Delete a note.  Any 2xx counts as success; the body is ignored."""
        await self._transport.request("DELETE", self._item_path(note_id))
