"""API Layer - FastAPI routes, dependencies, admission middleware and error handlers.

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - Thin routes delegate to services/
"""
