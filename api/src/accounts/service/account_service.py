import logging
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ...errors import InvalidCredentials, NotFoundError
from ...exchange import CredentialCipher, ExchangeCredentialValidator
from ...three_commas.models import RemoteAccountRequest
from ..dto import ConnectExchangeDto
from ..repository import UserRepository, user_repository
from ..responses import (
    AccountDetailsResponse, ConnectExchangeResponse, ConnectionCheckResponse, ExchangeStatusResponse,
    RemoteAccountsOverview, RemoteBotsOverview,
)

logger = logging.getLogger("api")


class AccountService:
    """
    Links a user's Binance credentials to a 3Commas account

    Credentials are validated against Binance first, then registered on
    3Commas; only after both succeed are they encrypted and stored.
    """

    def __init__(
        self,
        client,
        validator: ExchangeCredentialValidator,
        cipher: CredentialCipher,
        users: UserRepository = user_repository,
    ):
        self.client = client
        self.validator = validator
        self.cipher = cipher
        self.users = users

    async def connect_exchange(self, db: AsyncSession, dto: ConnectExchangeDto) -> ConnectExchangeResponse:
        logger.info(f"🔍 Validating Binance API credentials for user: {dto.user_id}")
        validation = await self.validator.validate(dto.api_key, dto.api_secret)
        logger.info(
            f"✅ Binance API validation passed with {validation.permission_level} permissions for user: {dto.user_id}"
        )

        request = RemoteAccountRequest(
            name=dto.account_name or f"Binance for {dto.user_id}",
            api_key=dto.api_key,
            secret=dto.api_secret,
        )
        account = await self.client.create_account(request)
        logger.info(f"✅ 3Commas account creation successful for user: {dto.user_id}")

        await self.users.upsert_credentials(
            db,
            dto.user_id,
            encrypted_api_key=self.cipher.encrypt(dto.api_key),
            encrypted_api_secret=self.cipher.encrypt(dto.api_secret),
            three_commas_account_id=account.id,
        )
        return ConnectExchangeResponse(
            three_commas_account_id=account.id,
            permission_level=validation.permission_level,
            can_trade=validation.can_trade,
            note=f"Connection established with {validation.permission_level} permissions",
        )

    async def get_status(self, db: AsyncSession, user_id: str, verify: bool = False) -> ExchangeStatusResponse:
        user = await self.users.get_by_external_id(db, user_id)
        if user is None or not user.has_exchange_credentials:
            return ExchangeStatusResponse(connected=False)

        status = ExchangeStatusResponse(connected=True, three_commas_account_id=user.three_commas_account_id)
        if verify:
            api_key = self.cipher.decrypt(user.binance_api_key)
            api_secret = self.cipher.decrypt(user.binance_api_secret)
            try:
                validation = await self.validator.validate(api_key, api_secret)
                status.credentials_valid = True
                status.permission_level = validation.permission_level
            except InvalidCredentials as e:
                logger.warning(f"⚠️ Stored Binance credentials for {user_id} no longer validate: {e.message}")
                status.credentials_valid = False
        return status

    async def disconnect_exchange(self, db: AsyncSession, user_id: str) -> None:
        user = await self.users.get_by_external_id(db, user_id)
        if user is None:
            raise NotFoundError("User not found")
        await self.users.clear_credentials(db, user)
        logger.info(f"🔌 Binance disconnected for user: {user_id}")

    async def list_remote_accounts(self, account_type: Optional[str] = "binance") -> List[dict]:
        accounts = await self.client.list_accounts()
        if account_type:
            accounts = [account for account in accounts if account.account_type == account_type]
        return [account.model_dump() for account in accounts]

    async def get_account_details(self, account_id: int) -> AccountDetailsResponse:
        account = await self.client.get_account(account_id)
        return AccountDetailsResponse(account=account.model_dump())

    async def check_connection(self) -> ConnectionCheckResponse:
        """List accounts and bots to prove the 3Commas key and signature are accepted"""
        logger.info("🧪 Testing 3Commas API connection...")
        accounts = await self.client.list_accounts()
        bots = await self.client.list_bots()
        logger.info(f"✅ 3Commas connection OK: {len(accounts)} accounts, {len(bots)} bots")

        return ConnectionCheckResponse(
            accounts=RemoteAccountsOverview(
                total=len(accounts),
                binance=sum(1 for account in accounts if account.account_type == "binance"),
                data=[account.model_dump() for account in accounts],
            ),
            bots=RemoteBotsOverview(
                total=len(bots),
                active=sum(1 for bot in bots if bot.is_enabled),
                data=[bot.model_dump() for bot in bots],
            ),
        )
