import pytest

from import_engine.batch import run_sequential_insert
from import_engine.report import ImportedRow
from main import create_app


@pytest.fixture
def app():
    """Return an app bound to a fresh in-memory database."""
    app = create_app("sqlite://")
    app.config["TESTING"] = True
    yield app


@pytest.fixture
def client(app):
    """Return a Flask test client."""
    return app.test_client()


class FakeStore:
    """
    In-memory stand-in for the insert and discard capabilities.

    cancel_after=N sets the cancel flag while the N-th row (counted
    over the store's lifetime) is being committed; fail_at=N makes the
    N-th insert raise.
    """

    def __init__(self, cancel_after=None, fail_at=None, fail_discard=False):
        self.committed = []
        self.discarded = []
        self.run_progress = []
        self.cancel_after = cancel_after
        self.fail_at = fail_at
        self.fail_discard = fail_discard
        self.insert_calls = 0

    async def insert(self, rows, on_progress, cancel_flag):
        self.insert_calls += 1

        async def insert_one(row):
            if self.fail_at is not None and len(self.committed) + 1 == self.fail_at:
                raise RuntimeError("database unavailable")
            new_id = f"id-{len(self.committed) + 1}"
            self.committed.append((new_id, row))
            if self.cancel_after is not None and len(self.committed) == self.cancel_after:
                cancel_flag.set()
            return new_id

        def report(progress):
            self.run_progress.append(progress)
            on_progress(progress)

        return await run_sequential_insert(rows, insert_one, report, cancel_flag)

    async def discard(self, ids):
        if self.fail_discard:
            raise RuntimeError("delete failed")
        self.discarded.extend(ids)
        self.committed = [(i, r) for i, r in self.committed if i not in set(ids)]

    @property
    def titles(self):
        return [r.title for _, r in self.committed]


@pytest.fixture
def store_factory():
    """Build FakeStore instances with per-test behaviour."""
    return FakeStore


@pytest.fixture
def make_rows():
    def _make(n, prefix="Item"):
        return [ImportedRow(title=f"{prefix} {i + 1}") for i in range(n)]
    return _make
