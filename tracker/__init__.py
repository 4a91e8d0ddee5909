"""Tracker - telemetry ingestion API.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
