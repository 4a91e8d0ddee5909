"""Core Layer - origin admission, client IP resolution and user-agent parsing.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - No IO: everything here is a pure function or an immutable value
"""
