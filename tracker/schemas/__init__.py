"""Pydantic Schemas - wire and storage shapes of an event.

Invariants:
    - Schemas validate at the system boundary (request body, provider responses)
"""
