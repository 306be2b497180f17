"""Property-based tests for the store and the engine using Hypothesis.

Arbitrary sequences of operations must keep ids unique, keep the selection
pointing at an existing note, and never touch notes other than the one an
operation targets.
"""

from __future__ import annotations

import asyncio

from hypothesis import given, settings
from hypothesis import strategies as st

from conftest import FakeNotesAPI, make_note
from notesync.engine import SyncEngine
from notesync.errors import NoteSyncRemoteRejection
from notesync.models import Note, PendingId
from notesync.store import NoteStore

# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------

_ids = st.one_of(
    st.integers(min_value=0, max_value=8),
    st.builds(PendingId, st.integers(min_value=1, max_value=3)),
)

_store_ops = st.lists(
    st.one_of(
        st.tuples(st.just("upsert"), _ids, st.text(max_size=3)),
        st.tuples(st.just("replace"), _ids, _ids),
        st.tuples(st.just("remove"), _ids),
        st.tuples(st.just("update"), _ids, st.text(max_size=3)),
    ),
    max_size=30,
)


def _apply(store: NoteStore, op: tuple) -> None:
    kind = op[0]
    if kind == "upsert":
        store.upsert_front(Note(id=op[1], title=op[2]))
    elif kind == "replace":
        store.replace(op[1], Note(id=op[2]))
    elif kind == "remove":
        store.remove_by_id(op[1])
    else:
        store.update_fields(op[1], title=op[2])


class TestStoreProperties:
    @given(ops=_store_ops)
    def test_ids_stay_unique(self, ops):
        store = NoteStore()
        for op in ops:
            _apply(store, op)
            ids = store.ids()
            assert len(ids) == len(set(ids))

    @given(ops=_store_ops, target=_ids, title=st.text(max_size=5))
    def test_update_leaves_other_notes_identical(self, ops, target, title):
        store = NoteStore()
        for op in ops:
            _apply(store, op)
        before = store.list()
        store.update_fields(target, title=title)
        after = store.list()
        assert len(before) == len(after)
        for old, new in zip(before, after):
            if old.id != target:
                assert new is old

    @given(ops=_store_ops, victim=_ids)
    def test_remove_preserves_relative_order(self, ops, victim):
        store = NoteStore()
        for op in ops:
            _apply(store, op)
        expected = [i for i in store.ids() if i != victim]
        store.remove_by_id(victim)
        assert store.ids() == expected


_intents = st.lists(
    st.one_of(
        st.tuples(st.just("refresh"), st.booleans()),
        st.tuples(st.just("create"), st.booleans()),
        st.tuples(st.just("save"), st.booleans(), st.integers(0, 5)),
        st.tuples(st.just("delete"), st.booleans(), st.integers(0, 5)),
        st.tuples(st.just("select"), st.integers(0, 5)),
    ),
    max_size=15,
)


async def _run_intents(intents: list[tuple]) -> None:
    api = FakeNotesAPI([make_note(i) for i in range(3)])
    engine = SyncEngine(api)
    for intent in intents:
        kind, *args = intent
        fail = args[0] if kind != "select" else False
        op = {"refresh": "list", "create": "create", "save": "update", "delete": "delete"}.get(kind)
        if op is not None:
            if fail:
                api.fail[op] = NoteSyncRemoteRejection("x", context={"status_code": 500})
            else:
                api.fail.pop(op, None)

        ids = [i for i in engine.store.ids() if isinstance(i, int)]
        if kind == "refresh":
            await engine.refresh()
        elif kind == "create":
            await engine.create()
        elif kind == "save" and ids:
            await engine.save(ids[args[1] % len(ids)], "t", "c")
        elif kind == "delete" and ids:
            await engine.delete(ids[args[1] % len(ids)])
        elif kind == "select" and ids:
            engine.select(ids[args[0] % len(ids)])

        store_ids = engine.store.ids()
        assert len(store_ids) == len(set(store_ids))
        assert engine.selected_id is None or engine.selected_id in store_ids
        assert not any(isinstance(i, PendingId) for i in store_ids)
        assert engine.reporter.flags().saving is False


class TestEngineProperties:
    @settings(max_examples=50, deadline=None)
    @given(intents=_intents)
    def test_sequential_intents_keep_invariants(self, intents):
        asyncio.run(_run_intents(intents))
