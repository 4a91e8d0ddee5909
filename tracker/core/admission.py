"""Origin Admission Engine - pure allow/deny decision plus access-control headers.

Invariants:
    - Pure: no IO, no mutation of the policy, safe for concurrent use
    - Matching order: exact literal, then pattern rules, then deny
    - Allow-Origin always echoes the caller's origin, never "*"
    - Decisions are immutable, header mappings included; DENIED is shared
    - A denied request gets no access-control headers at all
    - Absent or blank Origin is not a cross-origin request: never admitted,
      never decorated
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from tracker.core.domain_types import Origin
from tracker.core.origin_policy import OriginPolicy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AdmissionDecision:
    admitted: bool
    headers: Mapping[str, str] = field(
        default_factory=lambda: MappingProxyType({}),
    )
    matched_by: str | None = None


DENIED = AdmissionDecision(admitted=False)


class AdmissionEngine:
    """Evaluates an OriginPolicy against request origins."""

    def __init__(self, policy: OriginPolicy):
        self.policy = policy

    def match(self, origin: str) -> str | None:
        """Return how the origin was admitted ("all", "exact", "pattern") or None."""
        if self.policy.allow_all_origins:
            return "all"

        for allowed in self.policy.exact_origins:
            if allowed.strip() == origin:
                logger.debug(f"CORS: exact match found for '{origin}'")
                return "exact"

        for rule in self.policy.pattern_rules:
            if rule.matches(origin):
                logger.debug(f"CORS: pattern '{rule.source}' matched '{origin}'")
                return "pattern"

        logger.info(f"CORS: no match found for origin '{origin}'")
        return None

    def decide(
        self, origin: str | None, method: str, is_preflight: bool = False,
    ) -> AdmissionDecision:
        if origin is None or not origin.strip():
            return DENIED
        origin = Origin(origin.strip())

        matched_by = self.match(origin)
        if matched_by is None:
            return DENIED

        if is_preflight:
            headers = self.preflight_headers(origin)
        else:
            headers = self.response_headers(origin)
        return AdmissionDecision(
            admitted=True, headers=MappingProxyType(headers), matched_by=matched_by,
        )

    def _origin_headers(self, origin: str) -> dict[str, str]:
        headers = {
            "Access-Control-Allow-Origin": origin,
            "Vary": "Origin",
        }
        if self.policy.allow_credentials:
            headers["Access-Control-Allow-Credentials"] = "true"
        return headers

    def response_headers(self, origin: str) -> dict[str, str]:
        headers = self._origin_headers(origin)
        if self.policy.expose_headers:
            headers["Access-Control-Expose-Headers"] = ", ".join(
                self.policy.expose_headers,
            )
        return headers

    def preflight_headers(self, origin: str) -> dict[str, str]:
        headers = self._origin_headers(origin)
        headers["Access-Control-Allow-Methods"] = ", ".join(self.policy.allow_methods)
        headers["Access-Control-Allow-Headers"] = ", ".join(self.policy.allow_headers)
        headers["Access-Control-Max-Age"] = str(self.policy.max_age_seconds)
        return headers
