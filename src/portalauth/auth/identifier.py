"""Post-login account identifier resolution."""

from __future__ import annotations

import json
import logging
import re
import time
from collections.abc import Awaitable, Callable

from ..config.settings import AuthSettings
from .transport import AttemptTransport

logger = logging.getLogger(__name__)

PERSON_ID_RE = re.compile(r'"personid":(\d+)')
NAME_RE = re.compile(r'"fornavn":"([^"]*)","efternavn":"([^"]*)"')

IdentifierStrategy = Callable[[AttemptTransport, AuthSettings], Awaitable[str | None]]


def extract_identifier_from_page(content: str) -> str | None:
    """Identifier embedded in inline script state, if present."""
    match = PERSON_ID_RE.search(content)
    if not match:
        return None
    name = NAME_RE.search(content)
    if name:
        # Diagnostic only.
        logger.info("Confirmed authenticated as: %s %s", name.group(1), name.group(2))
    return match.group(1)


def extract_identifier_from_json(body: str, keys: tuple[str, ...]) -> str | None:
    """First non-empty top-level value among ``keys``."""
    try:
        data = json.loads(body)
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None
    for key in keys:
        value = data.get(key)
        if value is not None and str(value).strip():
            return str(value)
    return None


async def identifier_from_page(transport: AttemptTransport, settings: AuthSettings) -> str | None:
    response = await transport.get(settings.identifier_page_url)
    identifier = extract_identifier_from_page(response.body)
    if identifier:
        logger.info("Extracted account ID from page context: %s", identifier)
    return identifier


async def identifier_from_api(transport: AttemptTransport, settings: AuthSettings) -> str | None:
    response = await transport.get(settings.identifier_api_url(), params={"_": int(time.time())})
    if not response.is_success:
        logger.debug("Identifier API returned %s", response.status_code)
        return None
    identifier = extract_identifier_from_json(response.body, settings.identifier_keys)
    if identifier:
        logger.info("Extracted account ID from API: %s", identifier)
    return identifier


DEFAULT_IDENTIFIER_STRATEGIES: tuple[IdentifierStrategy, ...] = (
    identifier_from_page,
    identifier_from_api,
)


async def resolve_identifier(
    transport: AttemptTransport,
    settings: AuthSettings,
    strategies: tuple[IdentifierStrategy, ...] = DEFAULT_IDENTIFIER_STRATEGIES,
) -> str | None:
    """Try each strategy in order; None means authenticated but identifier unknown."""
    for strategy in strategies:
        identifier = await strategy(transport, settings)
        if identifier:
            return identifier
        logger.info("Identifier strategy %s found nothing", strategy.__name__)
    logger.warning("Could not extract account ID from any source")
    return None
