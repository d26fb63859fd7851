import httpx
import pytest
import pytest_asyncio

from main import create_app
from src.errors import InvalidCredentials
from src.exchange.credential_validator import CredentialValidationResult

from fakes import OTHER_USER_ID, OWNER_ID, rejected, unreachable

API_KEY_HEADER = {"X-API-Key": "local-service-key"}

BOT_PAYLOAD = {
    "user_id": OWNER_ID,
    "bot_name": "My Bot",
    "pair": "USDT_BTC",
    "direction": "long",
    "bot_type": "single",
    "profit_currency": "quote",
    "base_order_size": 100,
    "start_order_type": "market",
    "take_profit_type": "total",
    "target_profit_percent": 2.5,
    "max_safety_orders": 5,
}


class FakeCredentialValidator:
    def __init__(self):
        self.valid = True

    async def validate(self, api_key, api_secret):
        if not self.valid:
            raise InvalidCredentials("Binance API validation failed", details={"status": 401, "body": {"code": -2015}})
        return CredentialValidationResult(passed=True, permission_level="full", can_read=True, can_trade=True)


@pytest.fixture
def validator():
    return FakeCredentialValidator()


@pytest_asyncio.fixture
async def client(settings, remote, validator, engine):
    app = create_app(settings, remote_client=remote, credential_validator=validator, engine=engine,
                     configure_logging=False)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver", headers=API_KEY_HEADER) as client:
        yield client


async def create_bot(client, **overrides):
    response = await client.post("/api/v1/bots/create", json={**BOT_PAYLOAD, **overrides})
    assert response.status_code == 201, response.text
    return response.json()["data"]


@pytest.mark.asyncio
async def test_health_is_public(client):
    response = await client.get("/api/v1/health", headers={"X-API-Key": ""})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["data"]["status"] == "healthy"
    assert "X-Request-ID" in response.headers


@pytest.mark.asyncio
async def test_missing_api_key_is_rejected(client):
    response = await client.get(f"/api/v1/bots/user/{OWNER_ID}", headers={"X-API-Key": "wrong"})

    assert response.status_code == 401
    assert response.json()["success"] is False


@pytest.mark.asyncio
async def test_create_and_list(client, owner):
    bot = await create_bot(client)

    assert bot["status"] == "running"
    assert bot["three_commas_bot_id"] == 12345
    assert bot["total_value"] == 600

    response = await client.get(f"/api/v1/bots/user/{OWNER_ID}")
    body = response.json()
    assert body["success"] is True
    assert body["statusCode"] == 200
    assert body["total"] == 1
    assert body["data"][0]["id"] == bot["id"]


@pytest.mark.asyncio
async def test_invalid_body_never_reaches_remote(client, remote, owner):
    response = await client.post("/api/v1/bots/create", json={**BOT_PAYLOAD, "base_order_size": 0})

    assert response.status_code == 422
    body = response.json()
    assert body["success"] is False
    assert body["error"]["detail"][0]["loc"][-1] == "base_order_size"
    assert remote.count("create_bot") == 0


@pytest.mark.asyncio
async def test_duplicate_name_is_a_conflict(client, owner):
    await create_bot(client)

    response = await client.post("/api/v1/bots/create", json=BOT_PAYLOAD)

    assert response.status_code == 409
    assert response.json()["success"] is False


@pytest.mark.asyncio
async def test_remote_rejection_surfaces_upstream_body(client, remote, owner):
    remote.fail("create_bot", rejected(422, "record_invalid"))

    response = await client.post("/api/v1/bots/create", json=BOT_PAYLOAD)

    assert response.status_code == 502
    assert response.json()["error"]["error"] == "record_invalid"


@pytest.mark.asyncio
async def test_unreachable_remote_is_a_gateway_timeout(client, remote, owner):
    remote.fail("create_bot", unreachable())

    response = await client.post("/api/v1/bots/create", json=BOT_PAYLOAD)

    assert response.status_code == 504


@pytest.mark.asyncio
async def test_lifecycle_over_http(client, remote, owner):
    bot = await create_bot(client)
    action = {"user_id": OWNER_ID}

    response = await client.post(f"/api/v1/bots/pause/{bot['id']}", json=action)
    assert response.json()["data"]["status"] == "paused"

    response = await client.post(f"/api/v1/bots/pause/{bot['id']}", json=action)
    assert response.status_code == 400
    assert response.json()["message"] == "Bot is not currently running"

    response = await client.post(f"/api/v1/bots/start/{bot['id']}", json=action)
    assert response.json()["data"]["status"] == "running"

    response = await client.post(f"/api/v1/bots/emergency-stop/{bot['id']}", json=action)
    assert response.json()["data"]["status"] == "stopped"

    response = await client.request("DELETE", f"/api/v1/bots/delete/{bot['id']}", json=action)
    assert response.status_code == 200

    response = await client.get(f"/api/v1/bots/{bot['id']}", params={"user_id": OWNER_ID})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_foreign_bot_looks_missing(client, owner, other_user):
    bot = await create_bot(client)

    response = await client.post(f"/api/v1/bots/pause/{bot['id']}", json={"user_id": OTHER_USER_ID})

    assert response.status_code == 404
    assert response.json()["message"] == "Bot not found or access denied"


@pytest.mark.asyncio
async def test_duplicate_and_update(client, remote, owner):
    bot = await create_bot(client)

    response = await client.post(f"/api/v1/bots/duplicate/{bot['id']}", json={"user_id": OWNER_ID})
    assert response.status_code == 201
    copy = response.json()["data"]
    assert copy["status"] == "paused"
    assert copy["config_version"] == 2
    assert copy["name"] == "My Bot (copy)"

    response = await client.patch(
        f"/api/v1/bots/{copy['id']}", json={"user_id": OWNER_ID, "target_profit_percent": 4.0}
    )
    assert response.json()["data"]["target_profit_percent"] == 4.0


@pytest.mark.asyncio
async def test_summary(client, owner):
    await create_bot(client)

    response = await client.get("/api/v1/bots/summary", params={"user_id": OWNER_ID})

    assert response.status_code == 200
    assert response.json()["data"]["summary"]["running_bots"] == 1


@pytest.mark.asyncio
async def test_connect_status_disconnect(client, remote):
    response = await client.post(
        "/api/v1/binance/connect",
        json={"user_id": "new-user", "api_key": "k" * 64, "api_secret": "s" * 64},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["three_commas_account_id"] == 987
    assert body["permission_level"] == "full"
    assert remote.calls["create_account"][0][0].name == "Binance for new-user"

    response = await client.get("/api/v1/binance/status", params={"user_id": "new-user", "verify": True})
    status = response.json()["data"]
    assert status["connected"] is True
    assert status["credentials_valid"] is True

    response = await client.post("/api/v1/binance/disconnect", json={"user_id": "new-user"})
    assert response.json()["success"] is True

    response = await client.get("/api/v1/binance/status", params={"user_id": "new-user"})
    assert response.json()["data"]["connected"] is False


@pytest.mark.asyncio
async def test_connect_with_invalid_credentials(client, remote, validator):
    validator.valid = False

    response = await client.post(
        "/api/v1/binance/connect",
        json={"user_id": "new-user", "api_key": "k" * 64, "api_secret": "s" * 64},
    )

    assert response.status_code == 400
    assert response.json()["error"] == {"status": 401, "body": {"code": -2015}}
    assert remote.count("create_account") == 0
