import asyncio

import pytest

from import_engine.batch import (
    BatchImporter,
    Completed,
    Idle,
    ImportProgress,
    ImportStage,
    ImportStateError,
    Paused,
)


def _importer(store, events=None):
    return BatchImporter(
        store.insert, store.discard,
        on_progress=events.append if events is not None else None,
    )


def test_full_run_reports_progress_per_row(store_factory, make_rows):
    """Test that an uninterrupted run commits everything with 1..N progress."""
    store = store_factory()
    events = []
    importer = _importer(store, events)

    state = asyncio.run(importer.start(make_rows(5)))

    assert state == Completed(imported_count=5, total=5)
    assert [e.current for e in events] == [1, 2, 3, 4, 5]
    assert events[-1] == ImportProgress(current=5, total=5, percent=100)
    assert store.titles == [f"Item {i}" for i in range(1, 6)]
    assert importer.committed_count == 5


def test_cancel_pauses_at_row_boundary(store_factory, make_rows):
    """Test that a cancel during row 3 of 5 pauses with 3 committed."""
    store = store_factory(cancel_after=3)
    importer = _importer(store)

    state = asyncio.run(importer.start(make_rows(5)))

    assert isinstance(state, Paused)
    assert state.committed_count == 3
    assert state.total == 5
    assert state.remaining == 2
    assert importer.progress == ImportProgress(current=3, total=5, percent=60)
    assert len(store.committed) == 3


def test_pause_requested_from_progress_listener(store_factory, make_rows):
    """Test request_cancel() while the run is going."""
    store = store_factory()

    def on_progress(p):
        if p.current == 2:
            assert importer.request_cancel() is True

    importer = BatchImporter(store.insert, store.discard, on_progress=on_progress)
    state = asyncio.run(importer.start(make_rows(6)))

    assert state == Paused(committed_count=2, total=6, inserted_ids=("id-1", "id-2"))


def test_resume_continues_global_progress(store_factory, make_rows):
    """Test that resuming after 4 of 10 reports 5..10 and commits the rest once."""
    store = store_factory(cancel_after=4)
    events = []
    importer = _importer(store, events)
    rows = make_rows(10)

    state = asyncio.run(importer.start(rows))
    assert state.committed_count == 4
    assert [e.current for e in events] == [1, 2, 3, 4]

    events.clear()
    store.cancel_after = None
    state = asyncio.run(importer.resume())

    assert state == Completed(imported_count=10, total=10)
    assert [e.current for e in events] == [5, 6, 7, 8, 9, 10]
    assert all(e.total == 10 for e in events)
    assert store.titles == [r.title for r in rows]
    assert len(importer.inserted_ids) == 10


def test_pause_twice_then_resume(store_factory, make_rows):
    store = store_factory(cancel_after=2)
    importer = _importer(store)

    asyncio.run(importer.start(make_rows(6)))
    store.cancel_after = 4
    state = asyncio.run(importer.resume())
    assert state.committed_count == 4

    store.cancel_after = None
    state = asyncio.run(importer.resume())
    assert state == Completed(imported_count=6, total=6)
    assert len(store.committed) == 6


def test_keep_imported(store_factory, make_rows):
    store = store_factory(cancel_after=4)
    importer = _importer(store)
    asyncio.run(importer.start(make_rows(10)))

    state = importer.keep_imported()

    assert state == Completed(imported_count=4, total=10, partial=True)
    assert state.left_out == 6
    assert store.discarded == []


def test_discard_all_removes_exactly_committed_rows(store_factory, make_rows):
    """Test that discard deletes the 4 committed rows and nothing else."""
    store = store_factory(cancel_after=4)
    importer = _importer(store)
    asyncio.run(importer.start(make_rows(10)))

    state = asyncio.run(importer.discard_all())

    assert store.discarded == ["id-1", "id-2", "id-3", "id-4"]
    assert store.committed == []
    assert state == Completed(imported_count=0, total=10, partial=True)
    assert importer.inserted_ids == ()
    assert importer.committed_count == 0


def test_discard_failure_still_completes(store_factory, make_rows):
    """Test that a failing discard is logged and the session still ends."""
    store = store_factory(cancel_after=2, fail_discard=True)
    importer = _importer(store)
    asyncio.run(importer.start(make_rows(5)))

    state = asyncio.run(importer.discard_all())

    assert state == Completed(imported_count=0, total=5, partial=True)
    assert importer.stage == ImportStage.COMPLETED


def test_discard_without_capability(make_rows, store_factory):
    store = store_factory(cancel_after=1)
    importer = BatchImporter(store.insert)
    asyncio.run(importer.start(make_rows(3)))

    state = asyncio.run(importer.discard_all())
    assert state.imported_count == 0
    assert len(store.committed) == 1


def test_insert_failure_completes_with_error(store_factory, make_rows):
    """Test that an insert failure ends the session with the error attached."""
    store = store_factory(fail_at=3)
    importer = _importer(store)

    state = asyncio.run(importer.start(make_rows(5)))

    assert isinstance(state, Completed)
    assert state.failed
    assert state.errors == ("database unavailable",)
    assert state.imported_count == 2


def test_resume_with_nothing_left(store_factory, make_rows):
    """Test that a cancel on the last row leaves nothing to resume."""
    store = store_factory(cancel_after=3)
    importer = _importer(store)
    state = asyncio.run(importer.start(make_rows(3)))
    assert state == Paused(committed_count=3, total=3, inserted_ids=("id-1", "id-2", "id-3"))

    state = asyncio.run(importer.resume())

    assert state == Completed(imported_count=3, total=3)
    assert store.insert_calls == 1


def test_invalid_transitions(store_factory, make_rows):
    store = store_factory()
    importer = _importer(store)

    assert importer.request_cancel() is False
    with pytest.raises(ImportStateError):
        asyncio.run(importer.resume())
    with pytest.raises(ImportStateError):
        importer.keep_imported()
    with pytest.raises(ImportStateError):
        asyncio.run(importer.discard_all())
    with pytest.raises(ImportStateError):
        asyncio.run(importer.start([]))

    asyncio.run(importer.start(make_rows(2)))
    with pytest.raises(ImportStateError):
        asyncio.run(importer.start(make_rows(2)))
    assert importer.request_cancel() is False


def test_reset_clears_session(store_factory, make_rows):
    store = store_factory(cancel_after=2)
    importer = _importer(store)
    asyncio.run(importer.start(make_rows(4)))

    importer.reset()

    assert importer.state == Idle()
    assert importer.committed_count == 0
    assert importer.inserted_ids == ()
    assert importer.progress == ImportProgress()
    assert not importer.cancel_flag.is_set()


def test_reset_during_run_drops_result(store_factory, make_rows):
    """Test that closing mid-run stops the run and ignores its outcome."""
    store = store_factory()

    def on_progress(p):
        if p.current == 2:
            importer.reset()

    importer = BatchImporter(store.insert, store.discard, on_progress=on_progress)
    state = asyncio.run(importer.start(make_rows(5)))

    assert state == Idle()
    assert importer.inserted_ids == ()
    assert len(store.committed) == 2
