from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from database.models import User

from ...storage import storage_errors


class UserRepository:
    """Users and their embedded exchange credentials"""

    async def get_by_external_id(self, db: AsyncSession, user_id: str) -> Optional[User]:
        async with storage_errors(db, "load user"):
            result = await db.execute(select(User).filter(User.user_id == user_id))
            return result.scalars().first()

    async def upsert_credentials(
        self,
        db: AsyncSession,
        user_id: str,
        encrypted_api_key: str,
        encrypted_api_secret: str,
        three_commas_account_id: int,
    ) -> User:
        user = await self.get_by_external_id(db, user_id)
        async with storage_errors(db, "store exchange credentials"):
            if user is None:
                user = User(user_id=user_id)
                db.add(user)
            user.binance_api_key = encrypted_api_key
            user.binance_api_secret = encrypted_api_secret
            user.three_commas_account_id = three_commas_account_id
            await db.commit()
            await db.refresh(user)
        return user

    async def clear_credentials(self, db: AsyncSession, user: User) -> User:
        user.binance_api_key = None
        user.binance_api_secret = None
        user.three_commas_account_id = None
        async with storage_errors(db, "clear exchange credentials"):
            await db.commit()
            await db.refresh(user)
        return user


# Create repository instance
user_repository = UserRepository()
