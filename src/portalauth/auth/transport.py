"""Per-attempt HTTP transport with cancellation support."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import httpx

from .errors import AttemptCancelledError, NetworkError

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/124.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
}

ClientFactory = Callable[[], httpx.AsyncClient]


@dataclass
class PageResponse:
    """Represents a fetched page after redirects."""

    url: str
    status_code: int
    body: str
    content_type: str = ""

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300


def default_client_factory(timeout: float = 30.0) -> ClientFactory:
    """Factory producing a fresh client with its own cookie jar."""

    def factory() -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=timeout,
            follow_redirects=True,
            headers=DEFAULT_HEADERS,
        )

    return factory


class AttemptTransport:
    """HTTP client owned by exactly one login attempt.

    Every request races against the caller's cancel event and the attempt
    deadline. Transport failures surface as NetworkError.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        cancel_event: asyncio.Event | None = None,
        deadline: float | None = None,
    ):
        self.client = client
        self.cancel_event = cancel_event
        self.deadline = deadline

    @property
    def is_closed(self) -> bool:
        return self.client.is_closed

    async def aclose(self) -> None:
        if not self.client.is_closed:
            await self.client.aclose()

    def _remaining(self) -> float | None:
        if self.deadline is None:
            return None
        return self.deadline - asyncio.get_running_loop().time()

    def check_cancelled(self) -> None:
        """Raise AttemptCancelledError if the cancel signal or deadline fired."""
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise AttemptCancelledError("Attempt cancelled by caller")
        remaining = self._remaining()
        if remaining is not None and remaining <= 0:
            raise AttemptCancelledError("Attempt deadline exceeded")

    async def request(
        self,
        method: str,
        url: str,
        data: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> PageResponse:
        """Make an HTTP request, following redirects."""
        self.check_cancelled()
        request = asyncio.ensure_future(
            self.client.request(method=method, url=url, data=data, params=params)
        )
        waiters: set[asyncio.Future] = {request}
        cancel_wait = None
        if self.cancel_event is not None:
            cancel_wait = asyncio.ensure_future(self.cancel_event.wait())
            waiters.add(cancel_wait)

        try:
            done, _ = await asyncio.wait(
                waiters, timeout=self._remaining(), return_when=asyncio.FIRST_COMPLETED
            )
        except BaseException:
            request.cancel()
            raise
        finally:
            if cancel_wait is not None and not cancel_wait.done():
                cancel_wait.cancel()

        if request not in done:
            request.cancel()
            try:
                await request
            except (asyncio.CancelledError, httpx.HTTPError):
                pass
            self.check_cancelled()
            raise AttemptCancelledError("Attempt deadline exceeded")

        try:
            response = request.result()
        except httpx.HTTPError as e:
            raise NetworkError(f"{method} {url} failed: {e}", last_url=url) from e

        return PageResponse(
            url=str(response.url),
            status_code=response.status_code,
            body=response.text,
            content_type=response.headers.get("content-type", ""),
        )

    async def get(self, url: str, params: dict[str, Any] | None = None) -> PageResponse:
        """Make a GET request."""
        return await self.request("GET", url, params=params)

    async def post(self, url: str, data: dict[str, Any] | None = None) -> PageResponse:
        """Make a POST request."""
        return await self.request("POST", url, data=data)
