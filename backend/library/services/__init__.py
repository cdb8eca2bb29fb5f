"""Services Layer - member, book and loan use-cases plus the overdue sweep scheduler.

Invariants:
    - Every write is one TransactionManager unit
    - Services receive repositories and the TransactionManager explicitly

Design Decisions:
    - One service per aggregate for locality
"""
