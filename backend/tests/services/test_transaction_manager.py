"""Transaction Manager - commit, rollback, error translation and release.

Invariants:
    - Unit result committed only when the unit returns
    - LibraryError and foreign exceptions propagate unchanged after rollback
    - IntegrityError surfaces as IntegrityConflictError, acquire failure as DatabaseError
    - A failing rollback is attached to the original error, which is still raised
    - The session is closed on every path
"""

import pytest

from library.core.entities import Member
from library.core.errors import (
    BusinessRuleError, DatabaseError, IntegrityConflictError,
)
from library.infrastructure.database import DataSource
from library.infrastructure.transactions import TransactionManager
from library.repositories.member_repository import SqlMemberRepository

members = SqlMemberRepository()


def _member(n: int, email: str | None = None) -> Member:
    return Member(
        name=f"Member {n}", email=email or f"m{n}@example.com", phone="555",
    )


async def _count(tx: TransactionManager) -> int:
    async with tx.transaction() as db:
        return len(await members.find_all(db))


@pytest.fixture
def tx(data_source):
    return TransactionManager(data_source)


def test_data_source_is_required():
    with pytest.raises(ValueError):
        TransactionManager(None)


async def test_run_in_transaction_commits_and_returns_result(tx):
    async def unit(db):
        return await members.save(db, _member(1))

    saved = await tx.run_in_transaction(unit)

    assert saved.id is not None
    assert await _count(tx) == 1


async def test_library_error_rolls_back_and_propagates_unchanged(tx):
    error = BusinessRuleError("nope")

    async def unit(db):
        await members.save(db, _member(1))
        raise error

    with pytest.raises(BusinessRuleError) as exc:
        await tx.run_in_transaction(unit)

    assert exc.value is error
    assert await _count(tx) == 0


async def test_foreign_exception_rolls_back_and_propagates(tx):
    async def unit(db):
        await members.save(db, _member(1))
        raise KeyError("boom")

    with pytest.raises(KeyError):
        await tx.run_in_transaction_void(unit)
    assert await _count(tx) == 0


async def test_integrity_error_becomes_integrity_conflict(tx):
    async def unit(db):
        await members.save(db, _member(1, "same@example.com"))
        await members.save(db, _member(2, "same@example.com"))

    with pytest.raises(IntegrityConflictError) as exc:
        await tx.run_in_transaction_void(unit)

    assert exc.value.http_status == 409
    assert exc.value.__cause__ is not None
    assert await _count(tx) == 0


async def test_run_all_is_all_or_nothing(tx):
    async def first(db):
        await members.save(db, _member(1))

    async def second(db):
        raise BusinessRuleError("second unit fails")

    with pytest.raises(BusinessRuleError):
        await tx.run_all_in_transaction([first, second])
    assert await _count(tx) == 0


async def test_run_all_commits_every_unit(tx):
    async def first(db):
        await members.save(db, _member(1))

    async def second(db):
        await members.save(db, _member(2))

    await tx.run_all_in_transaction([first, second])
    assert await _count(tx) == 2


async def test_none_units_rejected(tx):
    with pytest.raises(ValueError):
        await tx.run_in_transaction(None)
    with pytest.raises(ValueError):
        await tx.run_in_transaction_void(None)
    with pytest.raises(ValueError):
        await tx.run_all_in_transaction([None])


async def test_unreachable_database_is_acquire_error(tmp_path):
    source = DataSource(
        f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'dir' / 'x.db'}",
        isolation_level=None,
    )
    tx = TransactionManager(source)

    with pytest.raises(DatabaseError) as exc:
        async with tx.transaction():
            pass

    assert exc.value.operation == "acquire"
    assert exc.value.http_status == 503
    await source.dispose()


class _FailingRollbackSession:
    def __init__(self):
        self.closed = False

    async def connection(self):
        return None

    async def commit(self):
        raise AssertionError("commit must not run")

    async def rollback(self):
        raise RuntimeError("connection lost during rollback")

    async def close(self):
        self.closed = True


class _StubDataSource:
    def __init__(self, session):
        self._session = session

    def new_session(self):
        return self._session


async def test_failed_rollback_is_attached_to_original_error():
    session = _FailingRollbackSession()
    tx = TransactionManager(_StubDataSource(session))

    async def unit(db):
        raise BusinessRuleError("original failure")

    with pytest.raises(BusinessRuleError) as exc:
        await tx.run_in_transaction(unit)

    assert "connection lost" in exc.value.context.rollback_error
    assert any("Rollback also failed" in note for note in exc.value.__notes__)
    assert session.closed
