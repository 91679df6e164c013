"""Outcome of a login attempt."""

from __future__ import annotations

from dataclasses import dataclass

import httpx

from .errors import AuthError, AuthErrorKind


@dataclass
class AuthResult:
    """The only artifact handed to callers.

    On success ``session`` is the still-open client and the caller owns it:
    use ``async with result:`` or call ``aclose()`` once done. On failure the
    session has already been closed and is None.
    """

    success: bool
    account_id: str | None = None
    session: httpx.AsyncClient | None = None
    error: AuthError | None = None
    steps: int = 0
    last_url: str = ""
    success_signal: str = ""

    @property
    def error_kind(self) -> AuthErrorKind | None:
        return self.error.kind if self.error else None

    @property
    def identifier_missing(self) -> bool:
        return self.success and self.error_kind == AuthErrorKind.IDENTIFIER_NOT_FOUND

    async def aclose(self) -> None:
        if self.session is not None and not self.session.is_closed:
            await self.session.aclose()

    async def __aenter__(self) -> AuthResult:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    def summary(self) -> str:
        if self.success:
            account = self.account_id or "unknown"
            return f"authenticated (account={account}, steps={self.steps}, signal={self.success_signal})"
        return f"failed: {self.error}"
