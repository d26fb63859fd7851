import hashlib
import hmac

import httpx
import pytest
import pytest_asyncio

from main import create_app

API_KEY_HEADER = {"X-API-Key": "local-service-key"}


@pytest_asyncio.fixture
async def client(settings, engine, http_server):
    settings.three_commas_base_url = http_server.base_url
    app = create_app(settings, engine=engine, configure_logging=False)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver", headers=API_KEY_HEADER) as client:
        yield client


class TestAccountDetails:
    @pytest.mark.asyncio
    async def test_signed_lookup(self, client, http_server, settings):
        http_server.route(
            "GET", "/public/api/ver1/accounts/987",
            (200, {"id": 987, "name": "Binance for user-owner", "account_type": "binance", "market_code": "binance"}),
        )

        response = await client.get("/api/v1/binance/account/987")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["account"]["id"] == 987
        assert body["account"]["market_code"] == "binance"
        sent = http_server.requests[0]
        expected = hmac.new(
            settings.three_commas_api_secret.encode(), b"/public/api/ver1/accounts/987", hashlib.sha256
        ).hexdigest()
        assert sent["headers"]["Signature"] == expected

    @pytest.mark.asyncio
    async def test_unknown_account(self, client, http_server):
        http_server.route("GET", "/public/api/ver1/accounts/5", (404, {"error": "record_not_found"}))

        response = await client.get("/api/v1/binance/account/5")

        assert response.status_code == 502
        assert response.json()["error"] == {"error": "record_not_found"}


class TestConnectionCheck:
    @pytest.mark.asyncio
    async def test_counts_accounts_and_bots(self, client, http_server):
        http_server.route("GET", "/public/api/ver1/accounts", (200, [
            {"id": 1, "name": "Main", "account_type": "binance"},
            {"id": 2, "name": "Paper", "account_type": "paper_trading"},
        ]))
        http_server.route("GET", "/public/api/ver1/bots", (200, [
            {"id": 10, "name": "A", "is_enabled": True},
            {"id": 11, "name": "B", "is_enabled": False},
            {"id": 12, "name": "C", "is_enabled": True},
        ]))

        response = await client.get("/api/v1/binance/test-3commas")

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "3Commas connection test successful"
        assert (body["accounts"]["total"], body["accounts"]["binance"]) == (2, 1)
        assert (body["bots"]["total"], body["bots"]["active"]) == (3, 2)
        assert [request["raw_path"] for request in http_server.requests] == [
            "/public/api/ver1/accounts",
            "/public/api/ver1/bots",
        ]

    @pytest.mark.asyncio
    async def test_rejected_key(self, client, http_server):
        http_server.route("GET", "/public/api/ver1/accounts", (401, {"error": "signature_invalid"}))

        response = await client.get("/api/v1/binance/test-3commas")

        assert response.status_code == 502
        body = response.json()
        assert body["success"] is False
        assert body["error"] == {"error": "signature_invalid"}
        assert len(http_server.requests) == 1
