"""Library API - FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map LibraryError -> structured JSON responses
    - CORS configured from settings (not hardcoded)
    - DataSource and services created once in the lifespan and stored on app.state
    - Overdue sweep runs once at startup (if enabled) and then on its schedule;
      the scheduler is stopped before the pool is disposed

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - A failed startup sweep is logged and does not block the API from serving
"""

import logging
from contextlib import asynccontextmanager
from datetime import timedelta

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from library.api.error_handlers import register_error_handlers
from library.api.routes import books, health, loans, members
from library.bootstrap import build_data_source, build_services
from library.config import get_settings
from library.core.errors import LibraryError
from library.infrastructure.observability import setup_logging
from library.services.overdue_sweep import OverdueSweepJob

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    data_source = build_data_source(settings)
    services = build_services(
        data_source, default_loan_days=settings.loan_default_days,
    )
    app.state.data_source = data_source
    app.state.services = services

    if settings.sweep_on_startup:
        try:
            await services.loans.sweep_overdue()
        except LibraryError as e:
            logger.error(
                f"Startup overdue sweep failed: {e.message}",
                extra={"error_code": e.code},
            )

    sweep_job = None
    if settings.sweep_enabled:
        sweep_job = OverdueSweepJob(
            services.loans,
            interval=timedelta(hours=settings.sweep_interval_hours),
        )
        sweep_job.start()

    logger.info("Library API started")
    yield
    logger.info("Library API shutting down")
    if sweep_job is not None:
        await sweep_job.stop()
    await data_source.dispose()


app = FastAPI(
    title="Library API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(members.router)
app.include_router(books.router)
app.include_router(loans.router)

register_error_handlers(app)
