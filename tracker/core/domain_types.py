"""Domain Types - enums and rich types shared by the admission engine and the pipeline.

Invariants:
    - Exactly three environment tiers, strictest first: production, staging, development
    - Any unknown or empty tier string resolves to DEVELOPMENT
    - IngestionStage values name the per-request pipeline states
"""

from enum import Enum
from typing import NewType


ClientIp = NewType("ClientIp", str)
Origin = NewType("Origin", str)


class EnvironmentTier(str, Enum):
    """Deployment tier: selects which origin matching strategy is active."""
    PRODUCTION = "production"
    STAGING = "staging"
    DEVELOPMENT = "development"

    @classmethod
    def from_env(cls, value: str | None) -> "EnvironmentTier":
        normalized = (value or "").strip().lower()
        for tier in cls:
            if tier.value == normalized:
                return tier
        return cls.DEVELOPMENT


class IngestionStage(str, Enum):
    """Linear per-request states of the event ingestion pipeline."""
    RECEIVED = "received"
    BOUND = "bound"
    ENRICHED = "enriched"
    SKIPPED = "skipped"
    SERIALIZED = "serialized"
    PERSISTED = "persisted"
    ACKNOWLEDGED = "acknowledged"
    REJECTED = "rejected"
