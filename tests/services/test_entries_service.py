import asyncio

import pytest

from db import get_session, init_db
from import_engine.batch import BatchImporter, Completed, Paused
from import_engine.report import ImportedRow, Status
from services.entries_service import (
    EntriesService,
    make_discard_operation,
    make_insert_operation,
)


@pytest.fixture(autouse=True)
def _memory_db():
    init_db("sqlite://")


@pytest.fixture
def session():
    s = get_session()
    yield s
    s.close()


def test_insert_one_maps_every_field(session):
    """Test that an imported row is stored with all of its fields."""
    row = ImportedRow(
        title="Hades", status=Status.COMPLETED, rating=9.5, platform="PC",
        genres=("Roguelike", "Ação"), extra={"ano": "2020"},
    )
    entry = EntriesService.insert_one(session, "GAME", row)
    session.commit()

    data = entry.to_dict()
    assert len(data["id"]) == 32
    assert data["media_type"] == "GAME"
    assert data["status"] == "COMPLETED"
    assert data["rating"] == 9.5
    assert data["genres"] == ["Roguelike", "Ação"]
    assert data["extra"] == {"ano": "2020"}
    assert data["author"] == ""


def test_absent_genres_stay_null(session):
    entry = EntriesService.insert_one(session, "BOOK", ImportedRow(title="Dune"))
    session.commit()
    assert entry.genres_json is None
    assert entry.to_dict()["genres"] is None


def test_count_and_list_by_type(session):
    for title in ("Matrix", "Alien"):
        EntriesService.insert_one(session, "MOVIE", ImportedRow(title=title))
    EntriesService.insert_one(session, "BOOK", ImportedRow(title="Dune"))
    session.commit()

    assert EntriesService.count(session) == 3
    assert EntriesService.count(session, "MOVIE") == 2
    movies = EntriesService.list_entries(session, "MOVIE")
    assert sorted(e.title for e in movies) == ["Alien", "Matrix"]
    assert len(EntriesService.list_entries(session, limit=1)) == 1


def test_delete_many(session):
    ids = [EntriesService.insert_one(session, "MOVIE", ImportedRow(title=t)).id
           for t in ("A", "B", "C")]
    session.commit()

    assert EntriesService.delete_many(session, []) == 0
    assert EntriesService.delete_many(session, ids[:2]) == 2
    session.commit()
    assert [e.title for e in EntriesService.list_entries(session)] == ["C"]


def test_unknown_media_type_is_rejected():
    with pytest.raises(ValueError):
        make_insert_operation("PODCAST")


def test_insert_operation_commits_each_row():
    """Test the database-backed insert capability end to end."""
    importer = BatchImporter(make_insert_operation("movie"), make_discard_operation())
    rows = [ImportedRow(title=f"Film {i}") for i in range(4)]

    state = asyncio.run(importer.start(rows))

    assert state == Completed(imported_count=4, total=4)
    s = get_session()
    try:
        assert EntriesService.count(s, "MOVIE") == 4
    finally:
        s.close()


def test_discard_operation_removes_only_session_rows(session):
    """Test that discarding a paused import leaves older entries alone."""
    EntriesService.insert_one(session, "SERIES", ImportedRow(title="Lost"))
    session.commit()

    def on_progress(p):
        if p.current == 2:
            importer.request_cancel()

    importer = BatchImporter(
        make_insert_operation("SERIES"), make_discard_operation(), on_progress=on_progress,
    )
    state = asyncio.run(importer.start([ImportedRow(title=t) for t in ("Dark", "Fargo", "Succession")]))
    assert isinstance(state, Paused)
    assert EntriesService.count(session, "SERIES") == 3

    asyncio.run(importer.discard_all())

    assert [e.title for e in EntriesService.list_entries(session, "SERIES")] == ["Lost"]
