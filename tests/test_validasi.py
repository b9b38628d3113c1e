"""
Test the player-ID lookup proxy.
"""

import httpx
import pytest

from topup.config import settings
from topup.main import app, setup_state
from topup.services.validasi import PlayerLookup, country_name, lookup_player

LOOKUP_URL = "https://lookup.test/check"


def lookup_returning(response: httpx.Response) -> PlayerLookup:
    return PlayerLookup(LOOKUP_URL, timeout=1.0, transport=httpx.MockTransport(lambda request: response))


def test_country_name():
    assert country_name("MM") == "Myanmar"
    assert country_name("id") == "Indonesia"
    assert country_name("XX") == "Unknown"
    assert country_name(None) == "Unknown"


@pytest.mark.asyncio
async def test_lookup_player_maps_fields():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen.update(request.url.params)
        return httpx.Response(200, json={"in-game-nickname": "Ko Ko", "country": "MM"})

    result = await lookup_player("123", "456", LOOKUP_URL, transport=httpx.MockTransport(handler))

    assert result == {"nickname": "Ko Ko", "country": "Myanmar"}
    assert seen == {"id": "123", "serverid": "456"}


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [b"[]", b"[\"Ko Ko\"]", b"null", b"\"Ko Ko\""])
async def test_lookup_player_rejects_non_object_json(body):
    lookup = lookup_returning(httpx.Response(200, content=body, headers={"Content-Type": "application/json"}))

    with pytest.raises(ValueError):
        await lookup.lookup("123", "456")


@pytest.mark.asyncio
async def test_setup_state_wires_player_lookup(log):
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json={}))

    setup_state(app, log, validasi_transport=transport)

    assert app.state.player_lookup.base_url == settings.VALIDASI_URL
    assert app.state.player_lookup.timeout == settings.VALIDASI_TIMEOUT
    assert app.state.player_lookup.transport is transport


@pytest.mark.asyncio
async def test_validasi_requires_both_params(client):
    response = await client.get("/api/validasi", params={"id": "123"})

    assert response.status_code == 400
    assert response.json() == {"error": "Missing id or serverid"}


@pytest.mark.asyncio
async def test_validasi_proxies_lookup(client):
    app.state.player_lookup = lookup_returning(
        httpx.Response(200, json={"in-game-nickname": "Ko Ko", "country": "TH"})
    )

    response = await client.get("/api/validasi", params={"id": "123", "serverid": "456"})

    assert response.status_code == 200
    assert response.json() == {"nickname": "Ko Ko", "country": "Thailand"}


@pytest.mark.asyncio
async def test_validasi_upstream_failure(client):
    app.state.player_lookup = lookup_returning(httpx.Response(500, text="boom"))

    response = await client.get("/api/validasi", params={"id": "123", "serverid": "456"})

    assert response.status_code == 502
    assert response.json() == {"error": "Validation service error"}


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [b"[]", b"null"])
async def test_validasi_non_object_response(client, body):
    app.state.player_lookup = lookup_returning(httpx.Response(200, content=body, headers={"Content-Type": "application/json"}))

    response = await client.get("/api/validasi", params={"id": "123", "serverid": "456"})

    assert response.status_code == 502
    assert response.json() == {"error": "Validation service error"}


@pytest.mark.asyncio
async def test_validasi_not_configured(client):
    response = await client.get("/api/validasi", params={"id": "123", "serverid": "456"})

    assert response.status_code == 500
    assert response.json() == {"error": "Validation service not configured"}
