"""Infrastructure Layer - database pool, event store, geolocation client, logging.

Invariants:
    - Every external call is bounded by a timeout and maps failures to core/errors.py types
"""
