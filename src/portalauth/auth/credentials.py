"""Credential variants supplied to a login attempt."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union


@dataclass(frozen=True, slots=True)
class FixedSecret:
    """Username plus a typed password."""

    username: str
    value: str = field(repr=False)

    def __repr__(self) -> str:
        return f"FixedSecret(username={self.username!r}, value='***')"


@dataclass(frozen=True, slots=True)
class PictureSequence:
    """Username plus an ordered list of picture labels.

    The labels are resolved to session codes on the login page itself, so the
    actual secret only exists for the duration of one submission.
    """

    username: str
    ordered_labels: tuple[str, ...] = field(repr=False)

    def __post_init__(self) -> None:
        # Accept any sequence from config but keep the value hashable/immutable.
        object.__setattr__(self, "ordered_labels", tuple(self.ordered_labels))

    def __repr__(self) -> str:
        return f"PictureSequence(username={self.username!r}, ordered_labels=<{len(self.ordered_labels)} labels>)"


Credential = Union[FixedSecret, PictureSequence]


def describe_credential(credential: Credential) -> str:
    """Short, log-safe description of the credential kind."""
    if isinstance(credential, PictureSequence):
        return "pictogram"
    return "standard"
