"""Account storage — same adapter split as the goal store."""

from __future__ import annotations

from typing import Any, Protocol

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from goalplan.accounts.models import Account


class AccountStore(Protocol):
    async def get(self, account_id: str) -> Account | None: ...

    async def get_by_username(self, username: str) -> Account | None: ...

    async def get_by_email(self, email: str) -> Account | None: ...

    async def add(self, account: Account) -> Account: ...

    async def save(self, account: Account) -> Account: ...


class MemoryAccountStore:
    def __init__(self) -> None:
        self._accounts: dict[str, Account] = {}

    async def get(self, account_id: str) -> Account | None:
        return self._accounts.get(account_id)

    async def get_by_username(self, username: str) -> Account | None:
        return next((a for a in self._accounts.values() if a.username == username), None)

    async def get_by_email(self, email: str) -> Account | None:
        email = email.lower()
        return next((a for a in self._accounts.values() if a.email and a.email.lower() == email), None)

    async def add(self, account: Account) -> Account:
        self._accounts[account.id] = account
        return account

    async def save(self, account: Account) -> Account:
        self._accounts[account.id] = account
        return account


_FIELDS = tuple(Account.model_fields)
_COLUMNS = ", ".join(_FIELDS)


class SqlAccountStore:
    def __init__(self, sessions: async_sessionmaker[AsyncSession]) -> None:
        self._sessions = sessions

    async def _fetch(self, where: str, params: dict[str, Any]) -> Account | None:
        async with self._sessions() as session:
            result = await session.execute(
                text(f"SELECT {_COLUMNS} FROM accounts WHERE {where} LIMIT 1"),
                params,
            )
            row = result.fetchone()
            if row is None:
                return None
            return Account.model_validate(dict(zip(result.keys(), row)))

    async def get(self, account_id: str) -> Account | None:
        return await self._fetch("id = :id", {"id": account_id})

    async def get_by_username(self, username: str) -> Account | None:
        return await self._fetch("username = :username", {"username": username})

    async def get_by_email(self, email: str) -> Account | None:
        return await self._fetch("LOWER(email) = :email", {"email": email.lower()})

    async def add(self, account: Account) -> Account:
        placeholders = ", ".join(f":{f}" for f in _FIELDS)
        async with self._sessions() as session:
            await session.execute(
                text(f"INSERT INTO accounts ({_COLUMNS}) VALUES ({placeholders})"),
                account.model_dump(),
            )
            await session.commit()
        return account

    async def save(self, account: Account) -> Account:
        assignments = ", ".join(f"{f} = :{f}" for f in _FIELDS if f != "id")
        async with self._sessions() as session:
            await session.execute(
                text(f"UPDATE accounts SET {assignments} WHERE id = :id"),
                account.model_dump(),
            )
            await session.commit()
        return account
