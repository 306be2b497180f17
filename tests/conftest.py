"""Shared test fixtures for the notesync test suite."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone

import pytest

from notesync.config import NoteSyncConfig
from notesync.engine import SyncEngine
from notesync.errors import NoteSyncError
from notesync.models import Note

_EPOCH = datetime(2026, 1, 1, tzinfo=timezone.utc)


class FakeNotesAPI:
    """In-memory stand-in for :class:`AsyncNotesAPI`.

    ``fail[op] = exc`` makes the next calls of *op* raise *exc*;
    ``gates[op] = asyncio.Event()`` holds calls of *op* until the event is
    set.  Ops are ``list``, ``create``, ``update`` and ``delete``.
    """

    def __init__(self, notes: list[Note] | None = None) -> None:
        self.server: list[Note] = list(notes or [])
        self.next_id = 100
        self.fail: dict[str, NoteSyncError] = {}
        self.gates: dict[str, asyncio.Event] = {}
        self.calls: list[tuple] = []

    async def _enter(self, op: str, *args: object) -> None:
        self.calls.append((op, *args))
        gate = self.gates.get(op)
        if gate is not None:
            await gate.wait()
        error = self.fail.get(op)
        if error is not None:
            raise error

    async def list_notes(self) -> list[Note]:
        await self._enter("list")
        return list(self.server)

    async def create_note(self, title: str, content: str) -> Note:
        await self._enter("create", title, content)
        note = Note(
            id=self.next_id, title=title, content=content,
            created_at=_EPOCH, updated_at=_EPOCH,
        )
        self.next_id += 1
        self.server.insert(0, note)
        return note

    async def update_note(self, note_id: int, title: str, content: str) -> Note:
        await self._enter("update", note_id, title, content)
        note = Note(
            id=note_id, title=title, content=content,
            created_at=_EPOCH, updated_at=datetime.now(timezone.utc),
        )
        self.server = [note if n.id == note_id else n for n in self.server]
        return note

    async def delete_note(self, note_id: int) -> None:
        await self._enter("delete", note_id)
        self.server = [n for n in self.server if n.id != note_id]


def make_note(note_id: int, title: str = "", content: str = "") -> Note:
    return Note(id=note_id, title=title, content=content, created_at=_EPOCH, updated_at=_EPOCH)


@pytest.fixture
def config() -> NoteSyncConfig:
    """Default test configuration."""
    return NoteSyncConfig()


@pytest.fixture
def api() -> FakeNotesAPI:
    """Fake backend holding two notes, newest first."""
    return FakeNotesAPI([make_note(2, "b", "second"), make_note(1, "a", "first")])


@pytest.fixture
def engine(api: FakeNotesAPI, config: NoteSyncConfig) -> SyncEngine:
    """Engine wired to the fake backend; nothing loaded yet."""
    return SyncEngine(api, config)
