"""Persistence of the stream-server login and the selected profile."""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..db_models import Account

logger = logging.getLogger(__name__)


class AccountStore:
    """Reads and writes the locally remembered account."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def load(self, user_id: str | None = None) -> Account | None:
        """Return the account for ``user_id`` or the most recently updated one."""

        async with self._session_factory() as session:
            if user_id:
                return await session.get(Account, user_id)
            result = await session.execute(
                select(Account).order_by(Account.updated_at.desc()).limit(1)
            )
            return result.scalars().first()

    async def save_login(self, user_id: str, password: str) -> Account:
        """Remember the credentials used to log in."""

        user_id = (user_id or "").strip()
        if not user_id or not password:
            raise ValueError("User ID and password are required")

        async with self._session_factory() as session:
            account = await session.get(Account, user_id)
            if account is None:
                account = Account(user_id=user_id, password=password)
                session.add(account)
            else:
                account.password = password
            await session.commit()
            await session.refresh(account)
        logger.info("Stored login for user %s", user_id)
        return account

    async def store_token(self, user_id: str, token: str | None) -> Account:
        async with self._session_factory() as session:
            account = await session.get(Account, user_id)
            if account is None:
                raise KeyError(f"No stored login for user {user_id}")
            account.token = token
            await session.commit()
            await session.refresh(account)
        return account

    async def select_profile(self, user_id: str, profile_id: str) -> Account:
        """Remember ``profile_id`` as the active profile of ``user_id``."""

        async with self._session_factory() as session:
            account = await session.get(Account, user_id)
            if account is None:
                raise KeyError(f"No stored login for user {user_id}")
            account.selected_profile_id = profile_id
            await session.commit()
            await session.refresh(account)
        logger.info("Selected profile %s for user %s", profile_id, user_id)
        return account
