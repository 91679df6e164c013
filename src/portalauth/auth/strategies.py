"""Credential strategies: compute field overrides for the current page."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Union

from bs4 import BeautifulSoup, Tag

from .credentials import Credential, FixedSecret, PictureSequence
from .errors import MappingIncompleteError
from .form import FormDescriptor, attr

logger = logging.getLogger(__name__)

PICTURE_CLASS = "js-icon"
PICTURE_CODE_ATTR = "data-passw"
PICTURE_SLOT_CLASS = "js-set-passw"

DEFAULT_IDENTITY_ALIASES = ("username", "j_username", "user", "login")
DEFAULT_SECRET_ALIASES = ("password", "j_password", "pass", "pwd")


def fixed_secret_overrides(
    descriptor: FormDescriptor,
    username: str,
    secret: str | None,
    identity_aliases: tuple[str, ...] = DEFAULT_IDENTITY_ALIASES,
    secret_aliases: tuple[str, ...] = DEFAULT_SECRET_ALIASES,
) -> dict[str, str]:
    """Map identity-alias fields to ``username`` and secret-alias fields to ``secret``.

    Matching is exact on the lowercased field name. A ``secret`` of None
    leaves secret fields untouched.
    """
    identity = {a.lower() for a in identity_aliases}
    secrets = {a.lower() for a in secret_aliases}
    overrides: dict[str, str] = {}
    for name in descriptor.fields:
        lower = name.lower()
        if lower in identity:
            overrides[name] = username
        elif lower in secrets and secret is not None:
            overrides[name] = secret
    return overrides


def _picture_elements(soup: BeautifulSoup) -> list[Tag]:
    return [
        tag
        for tag in soup.find_all(True)
        if PICTURE_CLASS in attr(tag, "class") and tag.has_attr(PICTURE_CODE_ATTR)
    ]


def _picture_label(tag: Tag) -> str:
    label = attr(tag, "title").strip()
    if not label:
        img = tag.find("img")
        if img is not None:
            label = attr(img, "alt").strip()
    return label.lower()


def find_carrier_field(soup: BeautifulSoup, secret_aliases: tuple[str, ...] = DEFAULT_SECRET_ALIASES) -> str | None:
    """Name of the secret field that is not a conventional password input."""
    wanted = {a.lower() for a in secret_aliases}
    for element in soup.find_all("input"):
        name = attr(element, "name").strip()
        if name.lower() in wanted and attr(element, "type", "text").lower() != "password":
            return name
    return None


def detect_picture_page(soup: BeautifulSoup, secret_aliases: tuple[str, ...] = DEFAULT_SECRET_ALIASES) -> bool:
    """True only when pictures, a non-password carrier field and a slot region are all present."""
    has_pictures = bool(_picture_elements(soup))
    has_carrier = find_carrier_field(soup, secret_aliases) is not None
    has_slots = any(PICTURE_SLOT_CLASS in attr(tag, "class") for tag in soup.find_all(True))
    return has_pictures and has_carrier and has_slots


def parse_picture_mapping(soup: BeautifulSoup) -> dict[str, str]:
    """Label -> session code for every picture on the page. Labels are lowercased."""
    mapping: dict[str, str] = {}
    for tag in _picture_elements(soup):
        label = _picture_label(tag)
        code = attr(tag, PICTURE_CODE_ATTR).strip()
        if label and code:
            mapping[label] = code
    return mapping


def derive_picture_secret(mapping: dict[str, str], ordered_labels: tuple[str, ...] | list[str]) -> str:
    """Concatenate the codes of ``ordered_labels`` in order.

    Raises MappingIncompleteError with the positions the page does not offer.
    """
    missing = [pos for pos, label in enumerate(ordered_labels, 1) if label.strip().lower() not in mapping]
    if missing:
        raise MappingIncompleteError(missing, len(mapping))
    return "".join(mapping[label.strip().lower()] for label in ordered_labels)


@dataclass(frozen=True)
class FixedSecretStrategy:
    """Injects the username and, when known, a typed secret."""

    username: str
    secret: str | None
    identity_aliases: tuple[str, ...] = DEFAULT_IDENTITY_ALIASES
    secret_aliases: tuple[str, ...] = DEFAULT_SECRET_ALIASES

    name = "fixed_secret"

    def __repr__(self) -> str:
        return f"FixedSecretStrategy(username={self.username!r})"

    def detect(self, soup: BeautifulSoup) -> bool:
        return True

    def apply(self, soup: BeautifulSoup, descriptor: FormDescriptor) -> dict[str, str]:
        return fixed_secret_overrides(
            descriptor, self.username, self.secret, self.identity_aliases, self.secret_aliases
        )


@dataclass(frozen=True)
class PictureSequenceStrategy:
    """Resolves an ordered picture sequence against the page's session codes."""

    username: str
    ordered_labels: tuple[str, ...]
    identity_aliases: tuple[str, ...] = DEFAULT_IDENTITY_ALIASES
    secret_aliases: tuple[str, ...] = DEFAULT_SECRET_ALIASES

    name = "picture_sequence"

    def __repr__(self) -> str:
        return f"PictureSequenceStrategy(username={self.username!r})"

    def detect(self, soup: BeautifulSoup) -> bool:
        return detect_picture_page(soup, self.secret_aliases)

    def apply(self, soup: BeautifulSoup, descriptor: FormDescriptor) -> dict[str, str]:
        # Codes are reassigned every session; always parse them from this page.
        mapping = parse_picture_mapping(soup)
        logger.debug("Found %d pictures: %s", len(mapping), ", ".join(sorted(mapping)))
        secret = derive_picture_secret(mapping, self.ordered_labels)
        logger.debug("Built secret from %d picture labels", len(self.ordered_labels))

        identity_field = descriptor.find_field(self.identity_aliases) or "username"
        carrier_field = find_carrier_field(soup, self.secret_aliases) or "password"
        return {identity_field: self.username, carrier_field: secret}


Strategy = Union[PictureSequenceStrategy, FixedSecretStrategy]


def build_strategies(
    credential: Credential,
    identity_aliases: tuple[str, ...] = DEFAULT_IDENTITY_ALIASES,
    secret_aliases: tuple[str, ...] = DEFAULT_SECRET_ALIASES,
) -> list[Strategy]:
    """Strategies for one attempt, in priority order."""
    if isinstance(credential, PictureSequence):
        return [
            PictureSequenceStrategy(
                credential.username, credential.ordered_labels, identity_aliases, secret_aliases
            ),
            # Non-picture pages (identity entry, provider choice) still need the username.
            FixedSecretStrategy(credential.username, None, identity_aliases, secret_aliases),
        ]
    if isinstance(credential, FixedSecret):
        return [FixedSecretStrategy(credential.username, credential.value, identity_aliases, secret_aliases)]
    raise TypeError(f"Unsupported credential type: {type(credential).__name__}")


def select_strategy(strategies: list[Strategy], soup: BeautifulSoup) -> Strategy | None:
    """First strategy that claims the page."""
    for strategy in strategies:
        if strategy.detect(soup):
            return strategy
    return None
