"""Core Layer - pure domain logic, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, models/ or db/
    - Token, bundle and rendering functions are deterministic given their inputs

Design Decisions:
    - Functional core separated from imperative shell (ADR: impureim sandwich)
"""
