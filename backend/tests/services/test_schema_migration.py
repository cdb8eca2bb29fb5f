"""Schema Migration - 001_library_schema applied to a fresh SQLite file.

Invariants:
    - uq_prestamos_libro_abierto is partial: closed loans never block a new one
    - A second open loan of the same book is rejected by the store
"""

import importlib.util
from pathlib import Path

import pytest
from alembic.migration import MigrationContext
from alembic.operations import Operations
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import create_async_engine

MIGRATION = (
    Path(__file__).resolve().parents[2] / "alembic" / "versions" / "001_library_schema.py"
)


def _load_migration():
    spec = importlib.util.spec_from_file_location("library_schema_001", MIGRATION)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def _upgrade(sync_conn) -> None:
    migration = _load_migration()
    with Operations.context(MigrationContext.configure(sync_conn)):
        migration.upgrade()


@pytest.fixture
async def migrated_engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'migrated.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(_upgrade)
    yield engine
    await engine.dispose()


async def _seed(conn) -> None:
    await conn.execute(text(
        "INSERT INTO usuarios (id, nombre, email, telefono, fecha_registro) "
        "VALUES (1, 'Ana', 'ana@example.com', '555', '2024-03-10')"
    ))
    await conn.execute(text(
        "INSERT INTO libros (id, titulo, autor, isbn, genero, disponible) "
        "VALUES (1, 'Rayuela', 'Cortázar', '978-84-376-0494-7', 'Novela', 1)"
    ))


def _loan(status: str) -> str:
    return (
        "INSERT INTO prestamos (usuario_id, libro_id, fecha_prestamo, "
        "fecha_devolucion_esperada, estado) "
        f"VALUES (1, 1, '2024-03-10', '2024-03-24', '{status}')"
    )


async def test_open_loan_index_is_partial(migrated_engine):
    async with migrated_engine.begin() as conn:
        result = await conn.execute(text(
            "SELECT sql FROM sqlite_master WHERE name = 'uq_prestamos_libro_abierto'"
        ))
        assert "WHERE" in result.scalar_one()


async def test_book_can_be_lent_again_after_returns(migrated_engine):
    async with migrated_engine.begin() as conn:
        await _seed(conn)
        await conn.execute(text(_loan("DEVUELTO")))
        await conn.execute(text(_loan("DEVUELTO")))
        await conn.execute(text(_loan("ACTIVO")))
        count = await conn.execute(text("SELECT COUNT(*) FROM prestamos"))
        assert count.scalar_one() == 3


async def test_second_open_loan_rejected(migrated_engine):
    async with migrated_engine.begin() as conn:
        await _seed(conn)
        await conn.execute(text(_loan("ACTIVO")))

    with pytest.raises(IntegrityError):
        async with migrated_engine.begin() as conn:
            await conn.execute(text(_loan("VENCIDO")))
