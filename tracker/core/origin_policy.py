"""Origin Policy - immutable CORS configuration built once at startup.

Invariants:
    - OriginPolicy is frozen; every collection in it is a tuple
    - Pattern rules are compiled once, here, and are always matched with
      fullmatch (whole-origin anchoring, never substring)
    - Empty entries never become rules; malformed regular expressions are
      dropped with a warning so they can never match

Pattern rule syntax (ALLOWED_PATTERNS, comma-separated):
    - ``regex:<expression>``: free-form regular expression
    - anything else: a literal origin. Regex metacharacters are escaped and an
      optional dynamic-subdomain slot ``{label}--{number}.`` is accepted right
      after ``://``. ``https://app.example.com`` therefore admits both itself
      and ``https://preview--42.app.example.com``.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Literal

from tracker.config import Settings
from tracker.core.domain_types import EnvironmentTier

logger = logging.getLogger(__name__)

REGEX_PREFIX = "regex:"
SCHEME_SEPARATOR = "://"
DYNAMIC_SUBDOMAIN_SLOT = r"(?:[A-Za-z0-9-]+--\d+\.)?"

DEFAULT_MAX_AGE_SECONDS = 12 * 60 * 60

FULL_ALLOW_METHODS = ("GET", "POST", "PUT", "DELETE", "OPTIONS", "HEAD")
FULL_ALLOW_HEADERS = (
    "Accept",
    "Accept-Language",
    "Content-Type",
    "Content-Length",
    "Accept-Encoding",
    "X-CSRF-Token",
    "Authorization",
    "Cache-Control",
    "X-Requested-With",
    "Origin",
    "sentry-trace",
    "baggage",
)
FULL_EXPOSE_HEADERS = ("Content-Length",)

STAGING_ALLOW_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS")
STAGING_ALLOW_HEADERS = ("Origin", "Content-Length", "Content-Type")


@dataclass(frozen=True)
class PatternRule:
    """One compiled allowed-origin pattern."""
    source: str
    kind: Literal["literal", "regex"]
    regex: re.Pattern

    def matches(self, origin: str) -> bool:
        return self.regex.fullmatch(origin) is not None


@dataclass(frozen=True)
class OriginPolicy:
    """Process-wide admission configuration. Never mutated after construction."""
    tier: EnvironmentTier
    exact_origins: tuple[str, ...] = ()
    pattern_rules: tuple[PatternRule, ...] = ()
    allow_methods: tuple[str, ...] = FULL_ALLOW_METHODS
    allow_headers: tuple[str, ...] = FULL_ALLOW_HEADERS
    expose_headers: tuple[str, ...] = FULL_EXPOSE_HEADERS
    allow_credentials: bool = True
    max_age_seconds: int = DEFAULT_MAX_AGE_SECONDS
    allow_all_origins: bool = field(default=False)


def split_entries(raw: str | None) -> list[str]:
    """Split a comma-separated setting, trimming and skipping empty entries."""
    if not raw:
        return []
    return [part.strip() for part in raw.split(",") if part.strip()]


def literal_to_regex(literal: str) -> str:
    """Escape a literal origin and insert the dynamic-subdomain slot after the scheme."""
    scheme, sep, rest = literal.partition(SCHEME_SEPARATOR)
    if not sep:
        return DYNAMIC_SUBDOMAIN_SLOT + re.escape(literal)
    return re.escape(scheme) + SCHEME_SEPARATOR + DYNAMIC_SUBDOMAIN_SLOT + re.escape(rest)


def compile_pattern_rule(entry: str) -> PatternRule | None:
    """Compile one ALLOWED_PATTERNS entry, or return None if it must be skipped."""
    entry = entry.strip()
    if not entry:
        return None

    if entry.startswith(REGEX_PREFIX):
        expression = entry[len(REGEX_PREFIX):].strip()
        if not expression:
            return None
        kind = "regex"
    else:
        expression = literal_to_regex(entry)
        kind = "literal"

    try:
        compiled = re.compile(expression)
    except re.error as e:
        logger.warning(f"CORS: ignoring malformed pattern '{entry}': {e}")
        return None
    return PatternRule(source=entry, kind=kind, regex=compiled)


def compile_pattern_rules(entries: list[str]) -> tuple[PatternRule, ...]:
    rules = []
    for entry in entries:
        rule = compile_pattern_rule(entry)
        if rule is not None:
            rules.append(rule)
    return tuple(rules)


def build_origin_policy(
    tier: EnvironmentTier,
    allowed_origins: str = "",
    allowed_patterns: str = "",
    max_age_seconds: int = DEFAULT_MAX_AGE_SECONDS,
) -> OriginPolicy:
    """Build the policy for a tier from raw comma-separated configuration."""
    if tier is EnvironmentTier.PRODUCTION:
        return OriginPolicy(
            tier=tier,
            exact_origins=tuple(split_entries(allowed_origins)),
            pattern_rules=compile_pattern_rules(split_entries(allowed_patterns)),
            max_age_seconds=max_age_seconds,
        )
    if tier is EnvironmentTier.STAGING:
        return OriginPolicy(
            tier=tier,
            allow_methods=STAGING_ALLOW_METHODS,
            allow_headers=STAGING_ALLOW_HEADERS,
            expose_headers=(),
            allow_credentials=False,
            max_age_seconds=max_age_seconds,
            allow_all_origins=True,
        )
    return OriginPolicy(
        tier=EnvironmentTier.DEVELOPMENT,
        max_age_seconds=max_age_seconds,
        allow_all_origins=True,
    )


def origin_policy_from_settings(settings: Settings) -> OriginPolicy:
    tier = EnvironmentTier.from_env(settings.env)
    policy = build_origin_policy(
        tier,
        allowed_origins=settings.allowed_origins,
        allowed_patterns=settings.allowed_patterns,
        max_age_seconds=settings.cors_max_age_seconds,
    )
    logger.info(
        f"CORS: tier={policy.tier.value} exact={len(policy.exact_origins)} "
        f"patterns={len(policy.pattern_rules)}",
    )
    return policy
