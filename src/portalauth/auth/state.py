"""Per-attempt authentication state."""

from __future__ import annotations

from dataclasses import dataclass, replace


@dataclass(frozen=True, slots=True)
class AuthenticationState:
    """Snapshot of one attempt, threaded through the loop by return value."""

    current_url: str
    content: str
    step: int = 0
    credentials_submitted: bool = False
    last_check: str = "start"

    def advance(self, url: str, content: str, **changes) -> AuthenticationState:
        """State for the next page."""
        return replace(self, current_url=url, content=content, **changes)

    def checked(self, name: str) -> AuthenticationState:
        return replace(self, last_check=name)

    def next_step(self) -> AuthenticationState:
        return replace(self, step=self.step + 1)
