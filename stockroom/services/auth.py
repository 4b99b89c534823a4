"""Account registration, login and token verification."""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone

from starlette.concurrency import run_in_threadpool

from ..core.config import AppSettings
from ..core.errors import ConflictError, NotFoundError, UnauthorizedError, ValidationError
from ..core.security import TokenPayload, decode_token, hash_password, issue_access_token, verify_password
from ..schemas.auth import AccountRecord
from ..storage.base import AccountStore

logger = logging.getLogger(__name__)

NAME_PATTERN = re.compile(r"[A-Za-z0-9_ ]+")
PASSWORD_PATTERN = re.compile(r"[A-Za-z0-9_]{8,}")

NAME_RULE = "Name can only contain letters, numbers, spaces, and underscores."
PASSWORD_RULE = (
    "Password must be at least 8 characters long and contain only letters, numbers, and underscores."
)


def validate_name(name: str) -> None:
    if not isinstance(name, str) or not NAME_PATTERN.fullmatch(name):
        raise ValidationError(NAME_RULE)


def validate_password(password: str) -> None:
    if not isinstance(password, str) or not PASSWORD_PATTERN.fullmatch(password):
        raise ValidationError(PASSWORD_RULE)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class AuthService:
    def __init__(self, accounts: AccountStore, settings: AppSettings) -> None:
        self.accounts = accounts
        self.settings = settings

    async def register(self, name: str, password: str) -> AccountRecord:
        validate_name(name)
        validate_password(password)
        if await self.accounts.get_by_name(name) is not None:
            raise ConflictError("User already exists")
        # bcrypt is CPU bound; keep it off the event loop.
        password_hash = await run_in_threadpool(hash_password, password, self.settings.BCRYPT_ROUNDS)
        account = await self.accounts.create(name, password_hash)
        logger.info("account.registered", extra={"extra_data": {"account_id": account.id}})
        return account

    async def login(self, name: str, password: str) -> str:
        """Check credentials and return a signed access token.

        The last-login timestamp is written before the token is minted. If that
        write fails the ``StoreError`` propagates and no token is issued.
        """

        account = await self.accounts.get_by_name(name)
        if account is None:
            raise NotFoundError("User not found")
        if not await run_in_threadpool(verify_password, password, account.password_hash):
            raise UnauthorizedError("Invalid password")
        await self.accounts.set_last_login(account.id, _utcnow())
        token = issue_access_token(account.id, self.settings.JWT_SECRET, self.settings.JWT_TTL_SECONDS)
        logger.info("account.logged_in", extra={"extra_data": {"account_id": account.id}})
        return token

    def authenticate(self, token: str) -> TokenPayload:
        try:
            return decode_token(token, self.settings.JWT_SECRET)
        except ValueError as exc:
            raise UnauthorizedError(str(exc)) from exc
