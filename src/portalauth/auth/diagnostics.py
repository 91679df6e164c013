"""Page diagnostics for triaging a login flow from the logs."""

from __future__ import annotations

import logging

from bs4 import BeautifulSoup

from .form import attr

logger = logging.getLogger(__name__)

SCRIPT_PREVIEW_LENGTH = 200
REDIRECT_HINTS = ("window.location", "redirect", "submit")
LOGIN_LINK_HINTS = ("login", "Login", "auth")


def page_title(soup: BeautifulSoup) -> str:
    title = soup.find("title")
    return title.get_text(strip=True) if title else ""


def error_messages(soup: BeautifulSoup) -> list[str]:
    """Text of elements styled as errors or alerts."""
    messages = []
    for element in soup.find_all(True):
        classes = attr(element, "class")
        if "error" in classes or "alert" in classes:
            text = element.get_text(" ", strip=True)
            if text:
                messages.append(text)
    return messages


def log_page_information(soup: BeautifulSoup) -> None:
    """Log title and form structure; for form-less pages, redirect hints."""
    logger.debug("Page title: %s", page_title(soup) or "No title found")

    forms = soup.find_all("form")
    if not forms:
        logger.debug("No forms found on this page")
        _log_script_redirects(soup)
        _log_login_links(soup)
        _log_meta_refresh(soup)
        return

    logger.debug("Found %d form(s) on page", len(forms))
    for form in forms:
        logger.debug(
            "Form: action='%s', method='%s', id='%s', name='%s'",
            attr(form, "action"),
            attr(form, "method"),
            attr(form, "id"),
            attr(form, "name"),
        )
        for element in form.find_all("input"):
            input_type = attr(element, "type", "text")
            if input_type != "hidden":
                logger.debug(
                    "Input: name='%s', type='%s', id='%s'",
                    attr(element, "name"),
                    input_type,
                    attr(element, "id"),
                )


def _log_script_redirects(soup: BeautifulSoup) -> None:
    for script in soup.find_all("script"):
        text = script.get_text() or ""
        if any(hint in text for hint in REDIRECT_HINTS):
            logger.debug("Found potential JavaScript redirect/submit")
            preview = text if len(text) <= SCRIPT_PREVIEW_LENGTH else text[:SCRIPT_PREVIEW_LENGTH] + "..."
            logger.debug("Script preview: %s", preview)


def _log_login_links(soup: BeautifulSoup) -> None:
    links = [
        a for a in soup.find_all("a", href=True) if any(hint in attr(a, "href") for hint in LOGIN_LINK_HINTS)
    ]
    if links:
        logger.debug("Found %d login-related link(s)", len(links))
        for link in links:
            logger.debug("Link: href='%s', text='%s'", attr(link, "href"), link.get_text(strip=True))


def _log_meta_refresh(soup: BeautifulSoup) -> None:
    for meta in soup.find_all("meta"):
        if attr(meta, "http-equiv").lower() == "refresh":
            logger.debug("Meta refresh found: %s", attr(meta, "content"))
            return


def log_dead_end(soup: BeautifulSoup) -> list[str]:
    """Warn about a page with neither form nor continue link. Returns error texts."""
    messages = error_messages(soup)
    for message in messages:
        logger.warning("Possible error message: %s", message)

    for button in soup.find_all("button"):
        text = button.get_text(strip=True)
        if "Log" in text or "Uni" in text:
            logger.debug("Found login button: %s", text)
            break

    logger.warning(
        "Dead end: title=%r, forms=%d, errors=%d",
        page_title(soup),
        len(soup.find_all("form")),
        len(messages),
    )
    return messages
