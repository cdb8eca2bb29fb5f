"""Repositories - SQLAlchemy implementations of core/repository_protocols.py.

Invariants:
    - Every method works on the AsyncSession it is handed; none commits or rolls back
    - Rows are converted to core entity records before leaving this package
"""
