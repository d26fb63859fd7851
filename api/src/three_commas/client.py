"""
3Commas Client

Typed operations against the 3Commas public API. Each method issues exactly
one signed HTTP call bounded by the configured timeout and either returns the
decoded payload or raises RemoteRejected / RemoteUnreachable. Retry policy
belongs to the caller.
"""

import asyncio
import json
import logging
from typing import Any, List, Optional, Type, TypeVar
from urllib.parse import urlencode

import aiohttp
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from yarl import URL

from ..errors import RemoteRejected, RemoteUnreachable
from ..settings import Settings
from .models import RemoteAccount, RemoteAccountRequest, RemoteBot, RemoteBotRequest, RemoteDeal
from .signer import RequestSigner, SignedRequest

logger = logging.getLogger("api")

ModelT = TypeVar("ModelT", bound=BaseModel)


class ThreeCommasClient:
    """
    Signed client for the 3Commas bot and account endpoints

    Responsibilities:
    - Serialize request models once and sign the exact bytes that are sent
    - Map HTTP errors to RemoteRejected, transport failures to RemoteUnreachable
    - Validate response shapes at the boundary
    """

    def __init__(self, settings: Settings):
        self.base_url = settings.three_commas_base_url.rstrip("/")
        self.api_key = settings.three_commas_api_key
        self.signer = RequestSigner(settings.three_commas_api_prefix, settings.three_commas_api_secret)
        self.timeout = aiohttp.ClientTimeout(total=settings.remote_timeout_seconds)

    def _get_headers(self, signed: SignedRequest) -> dict:
        return {
            "Apikey": self.api_key,
            "Signature": signed.signature,
            "Content-Type": "application/json",
        }

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[dict] = None,
        payload: Optional[BaseModel] = None,
    ) -> Any:
        query_string = urlencode({k: v for k, v in (params or {}).items() if v is not None})
        body = payload.model_dump_json() if payload is not None else ""
        signed = self.signer.sign(path, query_string, body)

        # encoded=True keeps the query byte-identical to what was signed
        url = URL(f"{self.base_url}{signed.full_path}", encoded=True)
        logger.debug(f"📤 [3Commas] {method} {signed.full_path} (body {len(signed.body_bytes)} bytes)")

        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                async with session.request(
                    method,
                    url,
                    data=signed.body_bytes if signed.body else None,
                    headers=self._get_headers(signed),
                ) as response:
                    text = await response.text()
                    data = _decode(text)
                    if response.status >= 400:
                        logger.warning(f"❌ [3Commas] {method} {path} rejected with {response.status}: {data}")
                        raise RemoteRejected(response.status, data, path)
                    return data
        except asyncio.TimeoutError as e:
            logger.warning(f"⏱️ [3Commas] {method} {path} timed out")
            raise RemoteUnreachable(e, path) from e
        except aiohttp.ClientError as e:
            logger.warning(f"❌ [3Commas] {method} {path} failed: {e}")
            raise RemoteUnreachable(e, path) from e

    # =================== BOTS ===================

    async def create_bot(self, request: RemoteBotRequest) -> RemoteBot:
        data = await self._request("POST", "/ver1/bots/create_bot", payload=request)
        return _parse(RemoteBot, data, "/ver1/bots/create_bot")

    async def get_bot(self, bot_id: int) -> RemoteBot:
        path = f"/ver1/bots/{bot_id}"
        return _parse(RemoteBot, await self._request("GET", path), path)

    async def list_bots(self, account_id: Optional[int] = None) -> List[RemoteBot]:
        data = await self._request("GET", "/ver1/bots", params={"account_id": account_id})
        return _parse_list(RemoteBot, data, "/ver1/bots")

    async def update_bot(self, bot_id: int, request: RemoteBotRequest) -> RemoteBot:
        path = f"/ver1/bots/{bot_id}/update"
        return _parse(RemoteBot, await self._request("PATCH", path, payload=request), path)

    async def delete_bot(self, bot_id: int) -> Any:
        return await self._request("DELETE", f"/ver1/bots/{bot_id}")

    async def pause_bot(self, bot_id: int) -> Any:
        return await self._request("POST", f"/ver1/bots/{bot_id}/pause")

    async def start_new_deal(self, bot_id: int) -> Any:
        return await self._request("POST", f"/ver1/bots/{bot_id}/start_new_deal")

    async def panic_sell(self, bot_id: int) -> Any:
        return await self._request("POST", f"/ver1/bots/{bot_id}/panic_sell")

    async def get_deals(self, bot_id: int, limit: int = 50, offset: int = 0) -> List[RemoteDeal]:
        data = await self._request(
            "GET", "/ver1/deals", params={"bot_id": bot_id, "limit": limit, "offset": offset}
        )
        return _parse_list(RemoteDeal, data, "/ver1/deals")

    # =================== ACCOUNTS ===================

    async def create_account(self, request: RemoteAccountRequest) -> RemoteAccount:
        logger.info(f"📤 [3Commas] Creating account: {request.redacted()}")
        data = await self._request("POST", "/ver1/accounts/new", payload=request)
        return _parse(RemoteAccount, data, "/ver1/accounts/new")

    async def list_accounts(self) -> List[RemoteAccount]:
        return _parse_list(RemoteAccount, await self._request("GET", "/ver1/accounts"), "/ver1/accounts")

    async def get_account(self, account_id: int) -> RemoteAccount:
        path = f"/ver1/accounts/{account_id}"
        return _parse(RemoteAccount, await self._request("GET", path), path)


def _decode(text: str) -> Any:
    if not text:
        return None
    try:
        return json.loads(text)
    except ValueError:
        return text


def _parse(model: Type[ModelT], data: Any, path: str) -> ModelT:
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        raise RemoteRejected(
            502, {"error": "malformed_response", "detail": e.errors(include_url=False, include_context=False), "body": data}, path
        ) from e


def _parse_list(model: Type[ModelT], data: Any, path: str) -> List[ModelT]:
    if not isinstance(data, list):
        raise RemoteRejected(502, {"error": "malformed_response", "body": data}, path)
    return [_parse(model, item, path) for item in data]
