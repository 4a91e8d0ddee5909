"""IpInfo Client - IP geolocation lookups against the ipinfo.io JSON API.

Invariants:
    - Every lookup is bounded by the client timeout (connect + read)
    - All failures mapped to GeolocationError with a reason:
      invalid_ip | timeout | rate_limit | http_status | connection_error | invalid_response
    - No retries: a failed lookup is reported once and the caller degrades
    - Successful records carry the derived country fields
      (core/country_details.py)

Design Decisions:
    - One shared httpx.AsyncClient per process (connection reuse), created and
      closed by the FastAPI lifespan
    - Token sent as a bearer header; an empty token uses the anonymous tier
"""

import logging
from ipaddress import ip_address

import httpx

from tracker.core.country_details import with_country_details
from tracker.core.errors import ErrorContext, GeolocationError
from tracker.schemas.event import GeoRecord

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://ipinfo.io"


class IpInfoClient:
    """Geolocator backed by ipinfo.io."""

    def __init__(
        self,
        token: str = "",
        base_url: str = DEFAULT_BASE_URL,
        timeout_seconds: float = 2.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = http_client or httpx.AsyncClient(
            base_url=base_url,
            headers=headers,
            timeout=httpx.Timeout(timeout_seconds),
        )
        if http_client is not None:
            self._client.headers.update(headers)

    async def lookup(self, ip: str) -> GeoRecord:
        context = ErrorContext(client_ip=ip)
        try:
            normalized = str(ip_address(ip.strip()))
        except ValueError:
            raise GeolocationError(
                f"'{ip}' is not an IP address", "invalid_ip", context=context,
            )

        try:
            response = await self._client.get(f"/{normalized}/json")
            response.raise_for_status()
            payload = response.json()
            if not isinstance(payload, dict):
                raise ValueError("expected a JSON object")
            record = with_country_details(GeoRecord.model_validate(payload))
        except httpx.TimeoutException as e:
            raise GeolocationError(str(e) or "request timed out", "timeout", context=context)
        except httpx.HTTPStatusError as e:
            reason = (
                "rate_limit" if e.response.status_code == 429 else "http_status"
            )
            raise GeolocationError(
                f"ipinfo returned {e.response.status_code}", reason, context=context,
            )
        except httpx.HTTPError as e:
            raise GeolocationError(str(e), "connection_error", context=context)
        except ValueError as e:
            # json.JSONDecodeError and pydantic.ValidationError are both ValueErrors
            raise GeolocationError(str(e), "invalid_response", context=context)

        logger.debug(
            "Geolocation lookup succeeded", extra={"client_ip": normalized},
        )
        return record

    async def close(self) -> None:
        await self._client.aclose()


# Singleton (initialized on startup)
geolocator: IpInfoClient | None = None


def init_geolocator(**kwargs) -> IpInfoClient:
    global geolocator
    geolocator = IpInfoClient(**kwargs)
    return geolocator


async def close_geolocator() -> None:
    global geolocator
    if geolocator is not None:
        await geolocator.close()
        geolocator = None
