"""Route Dependencies - hand the process-wide services and data source to handlers.

Invariants:
    - Both objects are created in the lifespan and stored on app.state
    - Handlers never construct services or sessions themselves
"""

from fastapi import Request

from library.bootstrap import LibraryServices
from library.infrastructure.database import DataSource


def get_services(request: Request) -> LibraryServices:
    services = getattr(request.app.state, "services", None)
    if services is None:
        raise RuntimeError("Services not initialized")
    return services


def get_data_source(request: Request) -> DataSource | None:
    return getattr(request.app.state, "data_source", None)
