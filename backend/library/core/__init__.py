"""Core Layer - entities, errors, validation and the loan state machine. No IO.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, repositories/ or models/
    - Functions are deterministic: the current date is always an argument
"""
