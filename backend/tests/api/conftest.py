"""API test fixtures - app wired to a SQLite data source through app.state.

Invariants:
    - The real app object and routers are used; only app.state is swapped
    - Lifespan is not run (ASGITransport), so no scheduler is started
"""

from datetime import date

import pytest
from httpx import ASGITransport, AsyncClient

from library.bootstrap import build_services
from library.db.base import Base
from library.infrastructure.database import DataSource
from library.main import app
import library.models  # noqa: F401

TODAY = date(2024, 3, 10)


@pytest.fixture
async def api_data_source(tmp_path):
    source = DataSource(
        f"sqlite+aiosqlite:///{tmp_path / 'api.db'}", pool_size=5, isolation_level=None,
    )
    async with source.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield source
    await source.dispose()


@pytest.fixture
async def client(api_data_source):
    app.state.data_source = api_data_source
    app.state.services = build_services(api_data_source, clock=lambda: TODAY)
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c
    del app.state.services
    del app.state.data_source
