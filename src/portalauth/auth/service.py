"""Entry points used by the rest of the application."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

from ..config.settings import AuthSettings
from .credentials import Credential
from .driver import AuthenticationDriver
from .result import AuthResult
from .transport import ClientFactory

if TYPE_CHECKING:
    from ..config.accounts import AccountConfig

logger = logging.getLogger(__name__)


async def authenticate(
    account_ref: str,
    credential: Credential,
    settings: AuthSettings | None = None,
    *,
    cancel_event: asyncio.Event | None = None,
    timeout: float | None = None,
    client_factory: ClientFactory | None = None,
) -> AuthResult:
    """Log in once with a fresh session.

    Sessions are never cached: every call starts a new attempt with its own
    client and cookie jar.
    """
    driver = AuthenticationDriver(
        credential,
        settings,
        client_factory=client_factory,
        cancel_event=cancel_event,
        timeout=timeout,
    )
    return await driver.run(account_ref)


async def authenticate_account(
    account: AccountConfig,
    settings: AuthSettings | None = None,
    **kwargs,
) -> AuthResult:
    """Log in a configured account."""
    return await authenticate(account.name, account.credential(), settings, **kwargs)


async def authenticate_many(
    accounts: Iterable[AccountConfig],
    settings: AuthSettings | None = None,
    **kwargs,
) -> dict[str, AuthResult]:
    """Run independent attempts for several accounts concurrently."""
    accounts = list(accounts)
    results = await asyncio.gather(
        *(authenticate_account(account, settings, **kwargs) for account in accounts)
    )
    for account, result in zip(accounts, results):
        logger.info("%s: %s", account.name, result.summary())
    ok = sum(1 for r in results if r.success)
    logger.info("Authenticated %d of %d accounts", ok, len(accounts))
    return {account.name: result for account, result in zip(accounts, results)}
