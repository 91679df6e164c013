"""Login form extraction."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

from .errors import ActionMissingError

DEFAULT_ACTION_KEYWORDS = ("login", "auth")


class FieldKind(str, Enum):
    """How a form field is presented to the user."""

    HIDDEN = "hidden"
    TEXT = "text"
    PASSWORD = "password"
    SUBMIT = "submit"
    SELECT = "select"


_INPUT_KINDS = {
    "hidden": FieldKind.HIDDEN,
    "password": FieldKind.PASSWORD,
    "submit": FieldKind.SUBMIT,
    "image": FieldKind.SUBMIT,
    "button": FieldKind.SUBMIT,
}


@dataclass(frozen=True)
class FormDescriptor:
    """A form's submission target and current field values.

    ``fields`` preserves document order. When a name repeats, the last
    occurrence wins.
    """

    action_url: str
    fields: dict[str, str] = field(default_factory=dict)
    kinds: dict[str, FieldKind] = field(default_factory=dict)

    def has_field(self, names: tuple[str, ...] | list[str]) -> bool:
        """True if any field name matches one of ``names`` case-insensitively."""
        return self.find_field(names) is not None

    def find_field(self, names: tuple[str, ...] | list[str]) -> str | None:
        """First field (in document order) whose name matches one of ``names``."""
        wanted = {n.lower() for n in names}
        for name in self.fields:
            if name.lower() in wanted:
                return name
        return None

    def with_overrides(self, overrides: dict[str, str]) -> FormDescriptor:
        """New descriptor with ``overrides`` merged over the current values."""
        merged = dict(self.fields)
        kinds = dict(self.kinds)
        for name, value in overrides.items():
            if not name or not name.strip():
                continue
            merged[name] = value
            kinds.setdefault(name, FieldKind.TEXT)
        return FormDescriptor(self.action_url, merged, kinds)


def attr(tag: Tag, name: str, default: str = "") -> str:
    """Get attribute value from a BeautifulSoup tag as a string.

    BeautifulSoup returns multi-valued attributes (``class``) as lists.
    """
    value = tag.get(name)
    if value is None:
        return default
    if isinstance(value, list):
        return " ".join(str(v) for v in value)
    return str(value)


def parse_html(html: str) -> BeautifulSoup:
    return BeautifulSoup(html or "", "html.parser")


def select_login_form(soup: BeautifulSoup, keywords: tuple[str, ...] = DEFAULT_ACTION_KEYWORDS) -> Tag | None:
    """Return a login form, preferring one whose action looks login-related."""
    forms = soup.find_all("form")
    for candidate in forms:
        action = attr(candidate, "action").lower()
        if any(keyword.lower() in action for keyword in keywords):
            return candidate
    return forms[0] if forms else None


def _select_value(select: Tag) -> str:
    option = select.find("option", selected=True) or select.find("option")
    if option is None:
        return ""
    value = option.get("value")
    if value is None:
        return option.get_text(strip=True)
    return str(value)


def collect_fields(form: Tag) -> tuple[dict[str, str], dict[str, FieldKind]]:
    """Collect named input/select values and the first named submit button."""
    values: dict[str, str] = {}
    kinds: dict[str, FieldKind] = {}
    button_taken = False

    for element in form.find_all(["input", "select", "button"]):
        name = attr(element, "name").strip()
        if not name:
            continue

        if element.name == "select":
            values[name] = _select_value(element)
            kinds[name] = FieldKind.SELECT
        elif element.name == "button":
            # Only the button that would be clicked is submitted.
            if button_taken or attr(element, "type", "submit").lower() != "submit":
                continue
            button_taken = True
            values[name] = attr(element, "value")
            kinds[name] = FieldKind.SUBMIT
        else:
            input_type = attr(element, "type", "text").lower()
            values[name] = attr(element, "value")
            kinds[name] = _INPUT_KINDS.get(input_type, FieldKind.TEXT)

    return values, kinds


def extract_form(
    html: str,
    page_url: str,
    keywords: tuple[str, ...] = DEFAULT_ACTION_KEYWORDS,
) -> FormDescriptor | None:
    """Extract the authentication form from ``html``.

    Returns None when the page has no form. Raises ActionMissingError when
    the chosen form has no action attribute.
    """
    return extract_form_from_soup(parse_html(html), page_url, keywords)


def extract_form_from_soup(
    soup: BeautifulSoup,
    page_url: str,
    keywords: tuple[str, ...] = DEFAULT_ACTION_KEYWORDS,
) -> FormDescriptor | None:
    form = select_login_form(soup, keywords)
    if form is None:
        return None

    action = attr(form, "action").strip()
    if not action:
        raise ActionMissingError("Form has no action attribute", last_url=page_url)

    fields, kinds = collect_fields(form)
    return FormDescriptor(
        action_url=urljoin(page_url, action),
        fields=fields,
        kinds=kinds,
    )
