"""Infrastructure Layer - connection pool, transactions and logging setup.

Invariants:
    - Infrastructure never imports from services/ or api/
    - All SQLAlchemy exceptions leave this layer as LibraryError subclasses
"""
