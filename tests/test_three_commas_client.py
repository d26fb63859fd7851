import hashlib
import hmac
import json

import pytest

from src.errors import RemoteRejected, RemoteUnreachable
from src.three_commas import RemoteBotRequest, ThreeCommasClient

from fakes import slow


def make_request(**overrides) -> RemoteBotRequest:
    fields = dict(
        name="My Bot",
        account_id=31337,
        pairs="USDT_BTC",
        strategy="long",
        bot_type="simple",
        profit_currency="quote_currency",
        base_order_volume=100.0,
        safety_order_volume=100.0,
        max_safety_orders=5,
        safety_order_step_percentage=2.0,
        take_profit=2.5,
        take_profit_type="total",
        start_order_type="market",
    )
    fields.update(overrides)
    return RemoteBotRequest(**fields)


def signature_for(settings, message: bytes) -> str:
    return hmac.new(settings.three_commas_api_secret.encode(), message, hashlib.sha256).hexdigest()


@pytest.fixture
def client(settings, http_server):
    settings.three_commas_base_url = http_server.base_url
    return ThreeCommasClient(settings)


class TestSignedTransport:
    @pytest.mark.asyncio
    async def test_transmitted_body_is_byte_identical_to_signed_body(self, client, http_server, settings):
        http_server.route("POST", "/public/api/ver1/bots/create_bot", (201, {"id": 12345, "name": "My Bot"}))
        request = make_request(note="ünïcode ✓")

        remote_bot = await client.create_bot(request)

        sent = http_server.requests[0]
        assert remote_bot.id == 12345
        assert sent["body"] == request.model_dump_json().encode("utf-8")
        expected = signature_for(settings, b"/public/api/ver1/bots/create_bot" + sent["body"])
        assert sent["headers"]["Signature"] == expected
        assert sent["headers"]["Apikey"] == settings.three_commas_api_key
        assert sent["headers"]["Content-Type"] == "application/json"

    @pytest.mark.asyncio
    async def test_remote_schema_defaults_are_sent(self, client, http_server):
        http_server.route("POST", "/public/api/ver1/bots/create_bot", (200, {"id": 1}))

        await client.create_bot(make_request(active=False))

        payload = json.loads(http_server.requests[0]["body"])
        assert payload["martingale_volume_coefficient"] == 1.0
        assert payload["martingale_step_coefficient"] == 1.0
        assert payload["base_order_volume_type"] == "quote_currency"
        assert payload["strategy_list"] == [{"strategy": "nonstop"}]
        assert payload["active"] is False

    @pytest.mark.asyncio
    async def test_query_string_is_signed_as_sent(self, client, http_server, settings):
        http_server.route("GET", "/public/api/ver1/deals", (200, []))

        await client.get_deals(12345, limit=10, offset=20)

        sent = http_server.requests[0]
        assert sent["raw_path"] == "/public/api/ver1/deals?bot_id=12345&limit=10&offset=20"
        assert sent["headers"]["Signature"] == signature_for(settings, sent["raw_path"].encode())

    @pytest.mark.asyncio
    async def test_bodyless_action_signs_path_only(self, client, http_server, settings):
        await client.pause_bot(12345)

        sent = http_server.requests[0]
        assert sent["method"] == "POST"
        assert sent["path"] == "/public/api/ver1/bots/12345/pause"
        assert sent["body"] == b""
        assert sent["headers"]["Signature"] == signature_for(settings, b"/public/api/ver1/bots/12345/pause")

    @pytest.mark.asyncio
    async def test_list_bots_omits_absent_account_filter(self, client, http_server):
        http_server.route("GET", "/public/api/ver1/bots", (200, [{"id": 1}, {"id": 2}]))

        bots = await client.list_bots()

        assert [bot.id for bot in bots] == [1, 2]
        assert http_server.requests[0]["raw_path"] == "/public/api/ver1/bots"


class TestEndpoints:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("call, method, path", [
        (lambda c: c.start_new_deal(9), "POST", "/public/api/ver1/bots/9/start_new_deal"),
        (lambda c: c.panic_sell(9), "POST", "/public/api/ver1/bots/9/panic_sell"),
        (lambda c: c.delete_bot(9), "DELETE", "/public/api/ver1/bots/9"),
    ])
    async def test_action_routes(self, client, http_server, call, method, path):
        await call(client)
        assert (http_server.requests[0]["method"], http_server.requests[0]["path"]) == (method, path)

    @pytest.mark.asyncio
    async def test_get_and_update_bot(self, client, http_server):
        http_server.route("GET", "/public/api/ver1/bots/9", (200, {"id": 9, "is_enabled": True, "extra": "x"}))
        http_server.route("PATCH", "/public/api/ver1/bots/9/update", (200, {"id": 9, "name": "Renamed"}))

        fetched = await client.get_bot(9)
        updated = await client.update_bot(9, make_request(name="Renamed"))

        assert fetched.is_enabled is True
        assert updated.name == "Renamed"
        assert json.loads(http_server.requests[1]["body"])["name"] == "Renamed"

    @pytest.mark.asyncio
    async def test_deals_are_parsed(self, client, http_server):
        http_server.route("GET", "/public/api/ver1/deals", (200, [
            {"id": 1, "bot_id": 9, "created_at": "2024-01-01T00:00:00Z",
             "closed_at": "2024-01-01T01:00:00Z", "final_profit": "1.5"},
        ]))

        deals = await client.get_deals(9)

        assert deals[0].profit == 1.5
        assert deals[0].is_completed


class TestFailureMapping:
    @pytest.mark.asyncio
    async def test_http_error_becomes_remote_rejected_with_body(self, client, http_server):
        body = {"error": "access_denied", "error_description": "Api key doesn't have enough permissions"}
        http_server.route("POST", "/public/api/ver1/bots/9/pause", (403, body))

        with pytest.raises(RemoteRejected) as exc_info:
            await client.pause_bot(9)

        assert exc_info.value.upstream_status == 403
        assert exc_info.value.body == body

    @pytest.mark.asyncio
    async def test_server_error_becomes_remote_rejected(self, client, http_server):
        http_server.route("GET", "/public/api/ver1/bots/9", (500, {"error": "internal"}))

        with pytest.raises(RemoteRejected) as exc_info:
            await client.get_bot(9)
        assert exc_info.value.upstream_status == 500

    @pytest.mark.asyncio
    async def test_timeout_becomes_remote_unreachable(self, client, http_server, settings):
        http_server.route("POST", "/public/api/ver1/bots/9/panic_sell", slow(settings.remote_timeout_seconds * 3))

        with pytest.raises(RemoteUnreachable):
            await client.panic_sell(9)

    @pytest.mark.asyncio
    async def test_connection_failure_becomes_remote_unreachable(self, settings):
        settings.three_commas_base_url = "http://127.0.0.1:9"
        with pytest.raises(RemoteUnreachable):
            await ThreeCommasClient(settings).pause_bot(1)

    @pytest.mark.asyncio
    async def test_response_without_id_is_rejected_at_boundary(self, client, http_server):
        http_server.route("POST", "/public/api/ver1/bots/create_bot", (200, {"name": "no id"}))

        with pytest.raises(RemoteRejected) as exc_info:
            await client.create_bot(make_request())
        assert exc_info.value.body["error"] == "malformed_response"
