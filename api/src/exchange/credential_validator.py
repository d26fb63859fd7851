"""
Exchange credential validation.

Exchange API keys are often scoped with restricted permissions, so a single
account-info call would reject valid keys. Validation walks down three tiers
and records the highest one that succeeded:

    full    -> signed GET /api/v3/account
    basic   -> GET /api/v3/ping with the API key header
    minimal -> unauthenticated GET /api/v3/time

Only a failure of every tier is reported as InvalidCredentials.
"""

import asyncio
import hashlib
import hmac
import logging
import time
from dataclasses import dataclass
from typing import Any, Optional

import aiohttp

from ..errors import InvalidCredentials
from ..settings import Settings

logger = logging.getLogger("api")

MIN_CREDENTIAL_LENGTH = 20


def sign_query(query: str, secret: str) -> str:
    return hmac.new(secret.encode("utf-8"), query.encode("utf-8"), hashlib.sha256).hexdigest()


@dataclass
class CredentialValidationResult:
    passed: bool
    permission_level: str = "unknown"
    can_read: bool = False
    can_trade: bool = False


class _TierFailed(Exception):
    def __init__(self, detail: Any):
        super().__init__(str(detail))
        self.detail = detail


class ExchangeCredentialValidator:
    def __init__(self, settings: Settings):
        self.base_url = settings.binance_base_url.rstrip("/")
        self.timeout_seconds = settings.exchange_timeout_seconds

    async def validate(self, api_key: str, api_secret: str) -> CredentialValidationResult:
        if not api_key or len(api_key) < MIN_CREDENTIAL_LENGTH:
            raise InvalidCredentials("Invalid API key format - too short")
        if not api_secret or len(api_secret) < MIN_CREDENTIAL_LENGTH:
            raise InvalidCredentials("Invalid API secret format - too short")

        try:
            account = await self._account_info(api_key, api_secret)
            logger.info("✅ Full Binance API access verified")
            return CredentialValidationResult(
                passed=True,
                permission_level="full",
                can_read=True,
                can_trade=bool(account.get("canTrade", False)),
            )
        except _TierFailed as account_error:
            logger.warning(f"⚠️ Account API failed ({account_error}), trying simpler validation...")
            first_error = account_error.detail

        try:
            await self._get("/api/v3/ping", headers={"X-MBX-APIKEY": api_key}, timeout=min(5.0, self.timeout_seconds))
            logger.info("✅ Basic Binance API access verified")
            return CredentialValidationResult(passed=True, permission_level="basic", can_read=True)
        except _TierFailed as ping_error:
            logger.warning(f"⚠️ Ping with API key failed ({ping_error}), trying server time...")

        try:
            await self._get("/api/v3/time", timeout=min(5.0, self.timeout_seconds))
            logger.info("✅ Minimal Binance API access verified")
            return CredentialValidationResult(passed=True, permission_level="minimal")
        except _TierFailed as time_error:
            logger.error(f"❌ All Binance API validation attempts failed ({time_error})")

        raise InvalidCredentials("Binance API validation failed", details=first_error)

    async def _account_info(self, api_key: str, api_secret: str) -> dict:
        query = f"timestamp={int(time.time() * 1000)}"
        signature = sign_query(query, api_secret)
        data = await self._get(
            f"/api/v3/account?{query}&signature={signature}",
            headers={"X-MBX-APIKEY": api_key},
            timeout=self.timeout_seconds,
        )
        if not isinstance(data, dict) or "makerCommission" not in data:
            raise _TierFailed({"error": "unexpected account response", "body": data})
        return data

    async def _get(self, path_and_query: str, headers: Optional[dict] = None, timeout: float = 5.0) -> Any:
        try:
            async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=timeout)) as session:
                async with session.get(f"{self.base_url}{path_and_query}", headers=headers) as response:
                    try:
                        data = await response.json(content_type=None)
                    except ValueError:
                        data = await response.text()
                    if response.status != 200:
                        raise _TierFailed({"status": response.status, "body": data})
                    return data
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise _TierFailed({"error": str(e) or type(e).__name__}) from e
