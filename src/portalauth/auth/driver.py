"""Authentication driver: the bounded multi-page login state machine."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from bs4 import BeautifulSoup

from ..config.settings import AuthSettings
from ..utils.debug import debug_print, debug_step
from .credentials import Credential, describe_credential
from .diagnostics import log_dead_end, log_page_information
from .errors import (
    AttemptCancelledError,
    AuthError,
    FormNotFoundError,
    IdentifierNotFoundError,
    StepsExhaustedError,
)
from .form import FormDescriptor, extract_form_from_soup, parse_html
from .identifier import DEFAULT_IDENTIFIER_STRATEGIES, IdentifierStrategy, resolve_identifier
from .navigator import find_continue_link
from .result import AuthResult
from .state import AuthenticationState
from .strategies import build_strategies, select_strategy
from .submitter import submit_form
from .transport import AttemptTransport, ClientFactory, default_client_factory
from .verifier import (
    is_login_path,
    is_on_target,
    page_success_reason,
    check_api_access,
    url_matches_success,
)

logger = logging.getLogger(__name__)

JSON_ACCEPT = "application/json, text/plain, */*"


@dataclass(frozen=True)
class StepOutcome:
    """State after one iteration, plus the success signal if one fired."""

    state: AuthenticationState
    signal: str | None = None


class AuthenticationDriver:
    """Drives one login attempt from the initial GET to a verdict.

    Each call to ``run`` builds a fresh client and state; nothing is shared
    between attempts, so drivers may run concurrently.
    """

    def __init__(
        self,
        credential: Credential,
        settings: AuthSettings | None = None,
        *,
        client_factory: ClientFactory | None = None,
        cancel_event: asyncio.Event | None = None,
        timeout: float | None = None,
        identifier_strategies: tuple[IdentifierStrategy, ...] = DEFAULT_IDENTIFIER_STRATEGIES,
    ):
        self.settings = settings or AuthSettings()
        self.credential = credential
        self.client_factory = client_factory or default_client_factory(self.settings.timeout)
        self.cancel_event = cancel_event
        self.timeout = timeout
        self.identifier_strategies = identifier_strategies
        self._strategies = build_strategies(
            credential, self.settings.identity_aliases, self.settings.secret_aliases
        )
        self._secret_names = set(self.settings.secret_aliases)

    async def run(self, account_ref: str = "") -> AuthResult:
        """Run one attempt. Expected failures come back as a failed AuthResult."""
        label = account_ref or self.credential.username
        logger.info("Starting %s login for %s", describe_credential(self.credential), label)

        client = self.client_factory()
        deadline = None
        if self.timeout is not None:
            deadline = asyncio.get_running_loop().time() + self.timeout
        transport = AttemptTransport(client, self.cancel_event, deadline)

        try:
            state, signal = await self._login(transport)
            logger.info("Login successful for %s (%s)", label, signal)
            client.headers["Accept"] = JSON_ACCEPT
            account_id, identifier_error = await self._resolve_identifier(transport, state)
        except AuthError as e:
            await transport.aclose()
            logger.error("Login failed for %s: %s", label, e)
            debug_print("result", "Login failed", Kind=e.kind.value, URL=e.last_url, Step=e.step)
            return AuthResult(success=False, error=e, steps=e.step, last_url=e.last_url)
        except BaseException:
            await transport.aclose()
            raise

        debug_print("result", "Login succeeded", Signal=signal, Account=account_id, Steps=state.step)
        return AuthResult(
            success=True,
            account_id=account_id,
            session=client,
            error=identifier_error,
            steps=state.step,
            last_url=state.current_url,
            success_signal=signal,
        )

    async def _resolve_identifier(
        self, transport: AttemptTransport, state: AuthenticationState
    ) -> tuple[str | None, AuthError | None]:
        context = {"last_url": state.current_url, "step": state.step, "last_check": "identifier"}
        try:
            account_id = await resolve_identifier(transport, self.settings, self.identifier_strategies)
        except AttemptCancelledError as e:
            raise e.with_context(**context)
        except AuthError as e:
            logger.warning("Identifier lookup failed: %s", e)
            return None, IdentifierNotFoundError(f"Identifier lookup failed: {e.message}", **context)
        if account_id is None:
            return None, IdentifierNotFoundError("No account identifier on page or API", **context)
        return account_id, None

    async def _login(self, transport: AttemptTransport) -> tuple[AuthenticationState, str]:
        settings = self.settings
        logger.debug("Initial URL: %s", settings.login_url)
        try:
            response = await transport.get(settings.login_url)
        except AuthError as e:
            raise e.with_context(last_url=settings.login_url, step=0, last_check="initial_get")
        logger.debug("Initial response status: %s, URL: %s", response.status_code, response.url)

        state = AuthenticationState(current_url=response.url, content=response.body)
        while state.step < settings.max_steps:
            outcome = await self._step(transport, state)
            if outcome.signal:
                return outcome.state, outcome.signal
            state = outcome.state.next_step()

        logger.warning("Login failed after %d steps", settings.max_steps)
        raise StepsExhaustedError(
            f"No verdict after {settings.max_steps} steps",
            last_url=state.current_url,
            step=state.step,
            last_check=state.last_check,
        )

    async def _step(self, transport: AttemptTransport, state: AuthenticationState) -> StepOutcome:
        settings = self.settings
        logger.debug("===== STEP %d =====", state.step)
        logger.debug("Current URL: %s", state.current_url)
        logger.debug("Content length: %d chars", len(state.content))
        debug_step(state.step, state.current_url, len(state.content), state.credentials_submitted)

        url = state.current_url
        try:
            transport.check_cancelled()

            if state.credentials_submitted and is_on_target(url, settings) and not is_login_path(url, settings):
                state = state.checked("api_access")
                logger.debug("Back on %s after credential submission", settings.target_domain)
                if await check_api_access(transport, settings):
                    logger.info("Authentication confirmed via API access")
                    return StepOutcome(state, "api_access")
                logger.warning(
                    "On %s but API access failed - may need another redirect", settings.target_domain
                )

            soup = parse_html(state.content)
            log_page_information(soup)

            state = state.checked("page_heuristics")
            reason = page_success_reason(soup, url, state.step, settings)
            if reason:
                return StepOutcome(state, reason)

            state = state.checked("form")
            descriptor = extract_form_from_soup(soup, url, settings.form_action_keywords)
            if descriptor is not None:
                return await self._submit(transport, state, soup, descriptor)

            state = state.checked("continue_link")
            link = find_continue_link(soup, url, settings.continue_link_marker)
            if link:
                logger.debug("Following continue link to: %s", link)
                response = await transport.get(link)
                logger.debug("After following link - status: %s, URL: %s", response.status_code, response.url)
                return StepOutcome(state.advance(response.url, response.body))

            messages = log_dead_end(soup)
            detail = f": {messages[0]}" if messages else ""
            raise FormNotFoundError(f"No form or continue link on page{detail}")
        except AuthError as e:
            raise e.with_context(last_url=url, step=state.step, last_check=state.last_check)

    async def _submit(
        self,
        transport: AttemptTransport,
        state: AuthenticationState,
        soup: BeautifulSoup,
        descriptor: FormDescriptor,
    ) -> StepOutcome:
        settings = self.settings
        submitted = state.credentials_submitted
        if descriptor.has_field(settings.identity_aliases):
            logger.debug("Submitting credentials for user: %s", self.credential.username)
            submitted = True

        # One strategy per submission; MappingIncompleteError stops us before any POST.
        strategy = select_strategy(self._strategies, soup)
        overrides = strategy.apply(soup, descriptor) if strategy else {}

        state = state.checked("submit")
        try:
            response = await submit_form(
                transport,
                descriptor,
                overrides,
                settings.preset_fields,
                secret_names=self._secret_names,
                strategy=strategy.name if strategy else None,
            )
            state = state.advance(response.url, response.body, credentials_submitted=submitted)

            if submitted and is_on_target(response.url, settings):
                state = state.checked("api_check_after_submit")
                logger.debug("Returned to %s after credentials, verifying", settings.target_domain)
                if await check_api_access(transport, settings):
                    return StepOutcome(state, "api_access")
        except AuthError as e:
            raise e.with_context(last_url=state.current_url, step=state.step, last_check=state.last_check)

        state = state.checked("success_url")
        if url_matches_success(response.url, settings):
            return StepOutcome(state, "success_url")
        return StepOutcome(state)
