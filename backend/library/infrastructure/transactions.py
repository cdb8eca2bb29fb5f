"""Transaction Manager - runs a unit of work on one pooled connection, atomically.

Invariants:
    - Exactly one connection per unit, checked out before the unit starts
    - Commit only if the unit returns; rollback on any exception it raises,
      LibraryError (validation/conflict) included
    - The connection is released on every exit path, rollback failure included
    - LibraryError propagates unchanged; IntegrityError becomes IntegrityConflictError;
      other SQLAlchemy errors become DatabaseError chained to the driver error
    - A failed rollback is logged and attached to the original error, never raised in its place
    - No retries

Design Decisions:
    - transaction() is the scoped-acquisition primitive; run_in_transaction* wrap it
      for callers that prefer passing a unit-of-work coroutine function
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable, Sequence, TypeVar

from sqlalchemy.exc import (
    DBAPIError, IntegrityError, OperationalError, SQLAlchemyError,
)
from sqlalchemy.ext.asyncio import AsyncSession

from library.core.errors import (
    DatabaseError, ErrorContext, IntegrityConflictError, LibraryError,
)
from library.infrastructure.database import DataSource

logger = logging.getLogger(__name__)

T = TypeVar("T")
UnitOfWork = Callable[[AsyncSession], Awaitable[T]]
VoidUnitOfWork = Callable[[AsyncSession], Awaitable[None]]


class TransactionManager:
    """Commit-or-rollback boundary around repository calls."""

    def __init__(self, data_source: DataSource):
        if data_source is None:
            raise ValueError("data_source is required")
        self._data_source = data_source

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[AsyncSession]:
        """Yield a session bound to one connection; commit on exit, rollback on error."""
        session = self._data_source.new_session()
        try:
            await self._acquire(session)
            operation = "execute"
            try:
                yield session
                operation = "commit"
                await session.commit()
                logger.debug("Transaction committed")
            except LibraryError as e:
                await self._rollback(session, e)
                raise
            except IntegrityError as e:
                error = IntegrityConflictError(ErrorContext(
                    operation=operation, debug_info={"detail": str(e.orig)},
                ))
                await self._rollback(session, error)
                raise error from e
            except OperationalError as e:
                error = DatabaseError("Connection or operational error", operation)
                await self._rollback(session, error)
                raise error from e
            except DBAPIError as e:
                error = DatabaseError("Database driver error", operation)
                await self._rollback(session, error)
                raise error from e
            except SQLAlchemyError as e:
                error = DatabaseError("Database operation failed", operation)
                await self._rollback(session, error)
                raise error from e
            except BaseException as e:
                await self._rollback(session, e)
                raise
        finally:
            await self._release(session)

    async def run_in_transaction(self, unit: UnitOfWork[T]) -> T:
        """Run unit(session) in one transaction and return its result."""
        if unit is None:
            raise ValueError("unit of work cannot be None")
        async with self.transaction() as db:
            return await unit(db)

    async def run_in_transaction_void(self, unit: VoidUnitOfWork) -> None:
        if unit is None:
            raise ValueError("unit of work cannot be None")
        async with self.transaction() as db:
            await unit(db)

    async def run_all_in_transaction(self, units: Sequence[VoidUnitOfWork]) -> None:
        """Run several units in order on the same connection; all commit or none do."""
        if units is None or any(unit is None for unit in units):
            raise ValueError("units of work cannot be None")
        async with self.transaction() as db:
            for unit in units:
                await unit(db)

    # ─── Helpers ────────────────────────────────────────────────

    @staticmethod
    async def _acquire(session: AsyncSession) -> None:
        try:
            await session.connection()
        except (SQLAlchemyError, OSError) as e:
            logger.error(
                f"Could not acquire a pooled connection: {e}",
                extra={"operation": "acquire"},
            )
            raise DatabaseError("Could not acquire a connection", "acquire") from e
        logger.debug("Transaction started")

    @staticmethod
    async def _rollback(session: AsyncSession, cause: BaseException) -> None:
        try:
            await session.rollback()
        except Exception as rollback_error:
            logger.error(
                f"Rollback failed after {type(cause).__name__}: {rollback_error}",
                exc_info=rollback_error,
                extra={"operation": "rollback"},
            )
            if isinstance(cause, LibraryError):
                cause.context.rollback_error = repr(rollback_error)
            cause.add_note(f"Rollback also failed: {rollback_error!r}")
            return
        logger.warning(
            f"Transaction rolled back: {cause}",
            extra={"error_code": getattr(cause, "code", None)},
        )

    @staticmethod
    async def _release(session: AsyncSession) -> None:
        try:
            await session.close()
        except Exception as e:
            logger.error(
                f"Failed to release connection: {e}",
                exc_info=True, extra={"operation": "release"},
            )
