"""Per-session wiring of config, transport, API and engine.

:class:`NotesSession` is the explicit object a UI layer holds on to.  Each
instance owns its own HTTP client and engine state, so several sessions
(or test cases) never share anything.

Usage::

    import asyncio
    from notesync import NotesSession

    async def main():
        async with NotesSession(base_url="http://localhost:3001") as session:
            engine = session.engine
            note = await engine.create()
            engine.edit_title(note.id, "Groceries")
            await engine.save(note.id, "Groceries", "")

    asyncio.run(main())
"""

from __future__ import annotations

from typing import Any

from notesync.config import NoteSyncConfig
from notesync.engine import SyncEngine
from notesync.notes_api.notes import AsyncNotesAPI
from notesync.notes_api.transport import AsyncNotesTransport


class NotesSession:
    """Owns one engine and the HTTP client behind it.

    Parameters
    ----------
    autoload:
        When used as an async context manager, load the collection on
        entry.
    **kwargs:
        Forwarded to :class:`NoteSyncConfig`.
    """

    def __init__(self, *, autoload: bool = True, **kwargs: Any) -> None:
        self._config = NoteSyncConfig(**kwargs)
        self._autoload = autoload
        self._transport = AsyncNotesTransport(self._config)
        self._api = AsyncNotesAPI(self._transport, self._config)
        self._engine = SyncEngine(self._api, self._config)

    @property
    def config(self) -> NoteSyncConfig:
        return self._config

    @property
    def engine(self) -> SyncEngine:
        return self._engine

    async def start(self) -> bool:
        """Perform the initial load; ``False`` if it failed (see ``engine.error``)."""
        return await self._engine.refresh()

    async def close(self) -> None:
        """Close the underlying HTTP client and release resources."""
        await self._transport.close()

    async def __aenter__(self) -> NotesSession:
        if self._autoload:
            await self.start()
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()
