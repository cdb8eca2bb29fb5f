"""Service test fixtures - file-backed SQLite data source + wired services.

Invariants:
    - Every test gets a fresh database file under tmp_path
    - Services are built through the same bootstrap the app uses
    - "today" is a FakeClock the test can move forward

Design Decisions:
    - SQLite file, not :memory:: the pooled engine needs several real
      connections for the concurrency tests
    - Isolation level left to the driver (SQLite has no READ COMMITTED)
"""

from datetime import date, timedelta

import pytest

from library.bootstrap import build_services
from library.core.entities import BookDraft, MemberDraft
from library.db.base import Base
from library.infrastructure.database import DataSource
import library.models  # noqa: F401

START_DATE = date(2024, 3, 10)


class FakeClock:
    """Callable stand-in for date.today()."""

    def __init__(self, today: date = START_DATE):
        self.today = today

    def __call__(self) -> date:
        return self.today

    def advance(self, days: int) -> None:
        self.today += timedelta(days=days)


@pytest.fixture
async def data_source(tmp_path):
    source = DataSource(
        f"sqlite+aiosqlite:///{tmp_path / 'library.db'}",
        pool_size=5,
        isolation_level=None,
    )
    async with source.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield source
    await source.dispose()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def services(data_source, clock):
    return build_services(data_source, default_loan_days=14, clock=clock)


@pytest.fixture
def member_draft():
    def _make(n: int = 1, **overrides) -> MemberDraft:
        data = {
            "name": f"Member {n}",
            "email": f"member{n}@example.com",
            "phone": f"555-01{n:02d}",
        }
        data.update(overrides)
        return MemberDraft(**data)
    return _make


@pytest.fixture
def book_draft():
    def _make(n: int = 1, **overrides) -> BookDraft:
        data = {
            "title": f"Book {n}",
            "author": f"Author {n}",
            "isbn": f"978-0-00-0000{n:02d}-0",
            "genre": "Novela",
            "publication_year": 1990 + n,
        }
        data.update(overrides)
        return BookDraft(**data)
    return _make


@pytest.fixture
async def member(services, member_draft):
    return await services.members.create(member_draft(1))


@pytest.fixture
async def book(services, book_draft):
    return await services.books.create(book_draft(1))
