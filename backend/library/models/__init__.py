"""ORM Models - SQLAlchemy declarative rows for usuarios, libros, prestamos.

Invariants:
    - All models inherit from Base (db/base.py)
    - Attribute names are English; column names match the existing Spanish schema

Design Decisions:
    - One file per table for locality
    - All models imported here so Base.metadata is complete before create_all / alembic
"""

from library.models.member import MemberModel  # noqa: F401
from library.models.book import BookModel  # noqa: F401
from library.models.loan import LoanModel  # noqa: F401
