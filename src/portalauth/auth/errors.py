"""Typed failures for a login attempt."""

from __future__ import annotations

from enum import Enum


class AuthErrorKind(str, Enum):
    """Failure categories reported by an attempt."""

    FORM_NOT_FOUND = "form_not_found"
    ACTION_MISSING = "action_missing"
    MAPPING_INCOMPLETE = "mapping_incomplete"
    STEPS_EXHAUSTED = "steps_exhausted"
    CANCELLED = "cancelled"
    NETWORK_ERROR = "network_error"
    IDENTIFIER_NOT_FOUND = "identifier_not_found"


class AuthError(Exception):
    """Base class for login attempt failures.

    Carries enough context to triage a failed attempt without re-running it:
    the last URL visited, the step index and the last check that ran.
    Credential values are never stored here.
    """

    kind: AuthErrorKind = AuthErrorKind.FORM_NOT_FOUND

    def __init__(
        self,
        message: str,
        *,
        last_url: str = "",
        step: int = 0,
        last_check: str = "",
    ) -> None:
        super().__init__(message)
        self.message = message
        self.last_url = last_url
        self.step = step
        self.last_check = last_check

    def with_context(self, *, last_url: str, step: int, last_check: str) -> AuthError:
        """Fill in attempt context that was unknown where the error was raised."""
        if not self.last_url:
            self.last_url = last_url
        if not self.step:
            self.step = step
        if not self.last_check:
            self.last_check = last_check
        return self

    def __str__(self) -> str:
        parts = [self.message]
        if self.last_url:
            parts.append(f"url={self.last_url}")
        parts.append(f"step={self.step}")
        if self.last_check:
            parts.append(f"check={self.last_check}")
        return " | ".join(parts)


class FormNotFoundError(AuthError):
    """No submittable form and no continue link on the current page."""

    kind = AuthErrorKind.FORM_NOT_FOUND


class ActionMissingError(AuthError):
    """A form was found but has no submission target."""

    kind = AuthErrorKind.ACTION_MISSING


class MappingIncompleteError(AuthError):
    """One or more configured picture labels are absent from the page.

    Only 1-based sequence positions are kept. The labels themselves are part
    of the credential and never end up in messages or logs.
    """

    kind = AuthErrorKind.MAPPING_INCOMPLETE

    def __init__(self, positions: list[int], offered: int, **context) -> None:
        super().__init__(
            f"{len(positions)} picture label(s) not on page, sequence position(s) "
            f"{', '.join(str(p) for p in positions)} ({offered} pictures offered)",
            **context,
        )
        self.positions = positions
        self.offered = offered


class StepsExhaustedError(AuthError):
    """The step bound was reached without a verdict."""

    kind = AuthErrorKind.STEPS_EXHAUSTED


class AttemptCancelledError(AuthError):
    """The caller's cancel signal or deadline fired."""

    kind = AuthErrorKind.CANCELLED


class NetworkError(AuthError):
    """Transport-level failure. Never retried here."""

    kind = AuthErrorKind.NETWORK_ERROR


class IdentifierNotFoundError(AuthError):
    """Authenticated, but no account identifier could be resolved."""

    kind = AuthErrorKind.IDENTIFIER_NOT_FOUND
