"""Registration and login with failed-attempt lockout."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta, timezone

from goalplan.accounts.models import Account, RegisterRequest
from goalplan.accounts.security import hash_password, verify_password
from goalplan.accounts.store import AccountStore
from goalplan.exceptions import (
    AccountExistsError,
    AccountLockedError,
    InvalidCredentialsError,
)

logger = logging.getLogger(__name__)


def is_email(identifier: str) -> bool:
    return "@" in identifier


class AccountService:
    def __init__(
        self,
        store: AccountStore,
        max_failed_attempts: int = 5,
        lockout_minutes: int = 30,
    ) -> None:
        self.store = store
        self.max_failed_attempts = max_failed_attempts
        self.lockout = timedelta(minutes=lockout_minutes)

    async def register(self, data: RegisterRequest) -> Account:
        if await self.store.get_by_username(data.username) is not None:
            raise AccountExistsError("Username already exists")
        if data.email and await self.store.get_by_email(data.email) is not None:
            raise AccountExistsError("Email already registered")

        now = datetime.now(timezone.utc)
        account = Account(
            id=str(uuid.uuid4()),
            username=data.username,
            email=data.email.lower() if data.email else None,
            full_name=data.full_name,
            password_hash=hash_password(data.password),
            created_at=now,
            updated_at=now,
        )
        await self.store.add(account)
        logger.info("Registered account %s", account.id)
        return account

    async def _find(self, identifier: str) -> Account | None:
        identifier = identifier.strip()
        if is_email(identifier):
            return await self.store.get_by_email(identifier)
        return await self.store.get_by_username(identifier)

    async def authenticate(self, identifier: str, password: str, now: datetime | None = None) -> Account:
        """Verify credentials; lock the account after too many failures.

        Raises InvalidCredentialsError or AccountLockedError.
        """
        now = now or datetime.now(timezone.utc)
        account = await self._find(identifier)
        if account is None:
            raise InvalidCredentialsError()

        if account.locked_until is not None:
            if now < account.locked_until:
                raise AccountLockedError(account.locked_until)
            # Lock expired
            account = account.model_copy(update={"locked_until": None, "failed_login_attempts": 0})

        if not verify_password(password, account.password_hash):
            failures = account.failed_login_attempts + 1
            if failures >= self.max_failed_attempts:
                locked_until = now + self.lockout
                await self.store.save(
                    account.model_copy(
                        update={"failed_login_attempts": failures, "locked_until": locked_until, "updated_at": now}
                    )
                )
                logger.warning("Account %s locked until %s", account.id, locked_until.isoformat())
                raise AccountLockedError(locked_until)
            await self.store.save(account.model_copy(update={"failed_login_attempts": failures, "updated_at": now}))
            raise InvalidCredentialsError(self.max_failed_attempts - failures)

        account = account.model_copy(
            update={"failed_login_attempts": 0, "locked_until": None, "last_login_at": now, "updated_at": now}
        )
        await self.store.save(account)
        return account
