"""CORS header tests: uniform headers on every response, OPTIONS short-circuit."""

import pytest
from fastapi.testclient import TestClient

import character_api.main as main
from character_api.cors import cors_headers

EXPECTED = {
    "access-control-allow-origin": "*",
    "access-control-allow-methods": "GET, POST, PUT, DELETE, OPTIONS",
    "access-control-allow-headers": "Content-Type, Authorization",
}


def _assert_cors(resp):
    for name, value in EXPECTED.items():
        assert resp.headers.get(name) == value


def test_defaults_match_expected_headers():
    assert {k.lower(): v for k, v in cors_headers().items()} == EXPECTED


@pytest.mark.parametrize(
    "path", ["/characters", "/characters/1", "/characters/abc", "/anything"]
)
def test_options_preflight_is_empty_200(path):
    client = TestClient(main.app)
    r = client.options(path)
    assert r.status_code == 200
    assert r.content == b""
    _assert_cors(r)


def test_preflight_with_browser_headers():
    client = TestClient(main.app)
    r = client.options(
        "/characters",
        headers={
            "Origin": "http://localhost:5173",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "Content-Type",
        },
    )
    assert r.status_code == 200
    _assert_cors(r)


@pytest.mark.asyncio
async def test_cors_headers_on_success_and_error_responses(test_client):
    _assert_cors(await test_client.get("/characters"))
    _assert_cors(await test_client.get("/characters/404404"))
    _assert_cors(await test_client.post("/characters", content=b"{bad"))
    _assert_cors(await test_client.delete("/characters/1"))
