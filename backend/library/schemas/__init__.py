"""Pydantic Schemas - request/response contracts for the HTTP API.

Invariants:
    - Schemas check shape and bounds at the boundary; business validation stays in core/
    - Every request schema converts to a core draft via to_draft()
"""
