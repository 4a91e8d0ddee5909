"""Event Schemas - wire shape of /record_event and the stored JSON document.

Invariants:
    - JSON keys are the capitalised names clients already send (Cookie, Page,
      Event_name, Deep, ...) and are matched exactly; the snake_case Python
      attribute names never bind from a request body
    - Binding is strict: a JSON number is never coerced into a string field and
      only true/false bind to Deep; null binds like a missing key
    - Unknown keys are ignored; IpData / UserAgentData are never read from
      the request body
    - The stored document always carries every key, with IpData null and
      UserAgentData all-empty when the event was not enriched
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class EventSubmission(BaseModel):
    """Caller-supplied part of an event, bound from the request body."""

    model_config = ConfigDict(strict=True, extra="ignore")

    cookie: str = Field("", alias="Cookie")
    referrer: str = Field("", alias="Referrer")
    page: str = Field("", alias="Page")
    event_name: str = Field("", alias="Event_name")
    user_id: str | None = Field(None, alias="UserID")
    size: str = Field("", alias="Size")
    language: str = Field("", alias="Language")
    deep: bool = Field(False, alias="Deep")
    details: dict[str, Any] | None = Field(None, alias="Details")
    # Type-checked on bind, always overwritten from the request itself
    ip: str = Field("", alias="Ip")
    user_agent: str = Field("", alias="UserAgent")

    @field_validator(
        "cookie", "referrer", "page", "event_name", "size", "language",
        "ip", "user_agent",
        mode="before",
    )
    @classmethod
    def null_string_is_empty(cls, v):
        return "" if v is None else v

    @field_validator("deep", mode="before")
    @classmethod
    def null_deep_is_false(cls, v):
        return False if v is None else v


class CountryFlag(BaseModel):
    emoji: str
    unicode: str


class Continent(BaseModel):
    code: str
    name: str


class GeoRecord(BaseModel):
    """IP geolocation / ownership record as returned by ipinfo.io.

    The country_* / isEU / continent fields are derived locally from
    ``country`` (see core/country_details.py), the same way the ipinfo SDKs
    decorate every lookup.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    ip: str | None = None
    hostname: str | None = None
    city: str | None = None
    region: str | None = None
    country: str | None = None
    loc: str | None = None
    org: str | None = None
    postal: str | None = None
    timezone: str | None = None
    bogon: bool | None = None

    country_name: str | None = None
    is_eu: bool | None = Field(None, alias="isEU")
    country_flag: CountryFlag | None = None
    country_flag_url: str | None = None
    continent: Continent | None = None


class UserAgentRecord(BaseModel):
    """Structured user-agent breakdown. All-empty when nothing was parsed."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field("", alias="Name")
    version: str = Field("", alias="Version")
    os: str = Field("", alias="OS")
    os_version: str = Field("", alias="OSVersion")
    device: str = Field("", alias="Device")
    mobile: bool = Field(False, alias="Mobile")
    tablet: bool = Field(False, alias="Tablet")
    desktop: bool = Field(False, alias="Desktop")
    bot: bool = Field(False, alias="Bot")
    string: str = Field("", alias="String")


class EnrichedEvent(EventSubmission):
    """Full event as persisted: submission plus server-derived fields."""

    ip_data: GeoRecord | None = Field(None, alias="IpData")
    user_agent_data: UserAgentRecord = Field(
        default_factory=UserAgentRecord, alias="UserAgentData",
    )

    @classmethod
    def from_submission(
        cls, submission: EventSubmission, ip: str, user_agent: str,
    ) -> "EnrichedEvent":
        fields = submission.model_dump(by_alias=True)
        fields.update(Ip=ip, UserAgent=user_agent)
        return cls.model_validate(fields)
