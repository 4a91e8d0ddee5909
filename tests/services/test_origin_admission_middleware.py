"""Origin admission on the real app - headers, pre-flight short-circuit, tiers.

Tests cover:
    - Production: exact and pattern origins admitted, others get no headers
    - Admitted pre-flight answers 204 with methods, headers and max-age
    - Denied pre-flight falls through to the router (no access-control headers)
    - Staging and development reflect any origin
    - Requests without Origin are never decorated
"""

import pytest
from httpx import ASGITransport, AsyncClient

from tracker.config import Settings
from tracker.main import create_app

ALLOWED = "https://shop.example.com"
PATTERN = "https://app.example.com"


def _client(**settings) -> AsyncClient:
    app = create_app(Settings(**settings))
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


@pytest.fixture
async def production_client():
    async with _client(
        env="production",
        allowed_origins=f" {ALLOWED} , ,https://admin.example.com",
        allowed_patterns=f"{PATTERN},regex:https://[a-z]+\\.example\\.org,regex:([",
    ) as c:
        yield c


def _preflight_headers(origin: str) -> dict[str, str]:
    return {
        "Origin": origin,
        "Access-Control-Request-Method": "POST",
        "Access-Control-Request-Headers": "Content-Type",
    }


# --- Production ----------------------------------------------------------------

async def test_exact_origin_gets_allow_origin_and_credentials(production_client):
    res = await production_client.get("/", headers={"Origin": ALLOWED})

    assert res.status_code == 200
    assert res.headers["access-control-allow-origin"] == ALLOWED
    assert res.headers["access-control-allow-credentials"] == "true"
    assert res.headers["access-control-expose-headers"] == "Content-Length"
    assert "Origin" in res.headers["vary"]


@pytest.mark.parametrize("origin", [
    "https://app.example.com",
    "https://preview--42.app.example.com",
    "https://blog.example.org",
])
async def test_pattern_origins_are_admitted(production_client, origin):
    res = await production_client.get("/", headers={"Origin": origin})

    assert res.headers["access-control-allow-origin"] == origin


@pytest.mark.parametrize("origin", [
    "https://evil.example.net",
    "https://preview-42.app.example.com",
    "https://app.example.com.evil.net",
    "https://evil.app.example.com",
    "http://app.example.com",
])
async def test_unknown_origins_get_no_headers(production_client, origin):
    res = await production_client.get("/", headers={"Origin": origin})

    assert res.status_code == 200
    assert "access-control-allow-origin" not in res.headers
    assert "access-control-allow-credentials" not in res.headers


async def test_admitted_preflight_short_circuits(production_client):
    res = await production_client.options(
        "/record_event", headers=_preflight_headers(ALLOWED),
    )

    assert res.status_code == 204
    assert res.content == b""
    assert res.headers["access-control-allow-origin"] == ALLOWED
    assert "POST" in res.headers["access-control-allow-methods"]
    assert "Content-Type" in res.headers["access-control-allow-headers"]
    assert res.headers["access-control-max-age"] == str(12 * 60 * 60)


async def test_denied_preflight_has_no_admission_headers(production_client):
    res = await production_client.options(
        "/record_event", headers=_preflight_headers("https://evil.example.net"),
    )

    assert res.status_code != 204
    assert "access-control-allow-origin" not in res.headers
    assert "access-control-allow-methods" not in res.headers


async def test_request_without_origin_is_untouched(production_client):
    res = await production_client.get("/")

    assert res.status_code == 200
    assert res.json() == {"message": "Server is running"}
    assert "access-control-allow-origin" not in res.headers


# --- Staging / development -----------------------------------------------------

async def test_staging_reflects_any_origin_without_credentials():
    async with _client(env="staging") as c:
        res = await c.get("/", headers={"Origin": "https://anything.test"})

    assert res.headers["access-control-allow-origin"] == "https://anything.test"
    assert "access-control-allow-credentials" not in res.headers


async def test_staging_preflight_uses_default_methods():
    async with _client(env="staging") as c:
        res = await c.options("/", headers=_preflight_headers("https://anything.test"))

    assert res.status_code == 204
    assert "PATCH" in res.headers["access-control-allow-methods"]


@pytest.mark.parametrize("env", ["development", "", "qa"])
async def test_development_reflects_any_origin_with_credentials(env):
    async with _client(env=env) as c:
        res = await c.get("/", headers={"Origin": "http://localhost:3000"})

    assert res.headers["access-control-allow-origin"] == "http://localhost:3000"
    assert res.headers["access-control-allow-credentials"] == "true"
