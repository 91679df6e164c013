"""Alternative navigation for pages that offer a link instead of a form."""

from __future__ import annotations

from urllib.parse import urljoin

from bs4 import BeautifulSoup

from .form import attr


def find_continue_link(soup: BeautifulSoup, page_url: str, marker: str) -> str | None:
    """Absolute URL of the first anchor whose href contains ``marker``."""
    if not marker:
        return None
    for anchor in soup.find_all("a", href=True):
        href = attr(anchor, "href").strip()
        if marker in href:
            return urljoin(page_url, href)
    return None
