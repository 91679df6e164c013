"""Success detection: URL patterns, page context and API probing."""

from __future__ import annotations

import json
import logging
import time

from bs4 import BeautifulSoup

from ..config.settings import AuthSettings
from .transport import AttemptTransport

logger = logging.getLogger(__name__)


def url_matches_success(url: str, settings: AuthSettings) -> bool:
    """Primary check: the resolved URL contains the success fragment (scheme-agnostic)."""
    matched = settings.success_fragment in url
    if matched:
        logger.debug("Login check: SUCCESS - URL matches success pattern")
    else:
        logger.debug("Login check: current URL doesn't match success URL")
    return matched


def is_on_target(url: str, settings: AuthSettings) -> bool:
    return settings.target_domain in url


def is_login_path(url: str, settings: AuthSettings) -> bool:
    return any(marker in url for marker in settings.login_path_markers)


def looks_like_json(body: str) -> bool:
    """True if ``body`` parses as a JSON object or array."""
    text = body.lstrip()
    if not text.startswith(("{", "[")):
        return False
    try:
        json.loads(text)
    except ValueError:
        return False
    return True


async def check_api_access(transport: AttemptTransport, settings: AuthSettings) -> bool:
    """Secondary check: the first post-login-only endpoint returning JSON proves the session.

    Endpoints are tried in order, stopping at the first success. They never submit
    credentials.
    """
    logger.debug("Verifying authentication status")
    for endpoint in settings.api_check_urls():
        logger.debug("Testing endpoint: %s", endpoint)
        response = await transport.get(endpoint, params={"_": int(time.time())})
        logger.debug("Response: %s (%d chars)", response.status_code, len(response.body))
        if response.is_success and looks_like_json(response.body):
            logger.debug("Valid JSON response received")
            return True

    logger.warning("All authentication verification endpoints failed")
    return False


def page_success_reason(soup: BeautifulSoup, url: str, step: int, settings: AuthSettings) -> str | None:
    """Heuristic success check on the current page.

    Applies only once the URL is back on the target domain and outside the
    login/landing pages. Then either an account-context marker in an inline
    script, or having passed ``benefit_of_doubt_after`` steps, counts as
    success. Returns the name of the signal that fired.
    """
    if not is_on_target(url, settings):
        return None
    on_success_path = any(marker in url for marker in settings.success_path_markers)
    on_landing = any(marker in url for marker in settings.landing_path_markers)
    if not on_success_path and on_landing:
        return None

    logger.debug("Possible success - URL indicates we're back on %s", settings.target_domain)

    for script in soup.find_all("script"):
        text = script.get_text() or ""
        if any(marker in text for marker in settings.account_context_markers):
            logger.info("Found account context in script - authentication successful")
            return "account_context"

    if step > settings.benefit_of_doubt_after:
        # Empirical: after enough redirects the portal is usually authenticated.
        logger.warning(
            "After %d steps back on %s without proof - assuming success",
            step,
            settings.target_domain,
        )
        return "benefit_of_doubt"

    return None
