"""User-Agent Parsing - total, best-effort breakdown of a raw User-Agent header.

Invariants:
    - parse_user_agent never raises: any parser failure yields an all-empty
      UserAgentRecord that still carries the raw string
    - Empty input short-circuits to the empty record
    - "Other" (the parser's unknown family) is reported as ""
"""

import logging

from user_agents import parse

from tracker.schemas.event import UserAgentRecord

logger = logging.getLogger(__name__)

_UNKNOWN_FAMILY = "Other"


def _family(value: str | None) -> str:
    if not value or value == _UNKNOWN_FAMILY:
        return ""
    return value


def parse_user_agent(raw: str | None) -> UserAgentRecord:
    raw = raw or ""
    if not raw.strip():
        return UserAgentRecord(string=raw)

    try:
        ua = parse(raw)
        return UserAgentRecord(
            name=_family(ua.browser.family),
            version=ua.browser.version_string or "",
            os=_family(ua.os.family),
            os_version=ua.os.version_string or "",
            device=_family(ua.device.family),
            mobile=bool(ua.is_mobile),
            tablet=bool(ua.is_tablet),
            desktop=bool(ua.is_pc),
            bot=bool(ua.is_bot),
            string=raw,
        )
    except Exception as e:
        logger.debug(f"User-agent parse failed, storing empty record: {e}")
        return UserAgentRecord(string=raw)
