"""Step-by-step debug output for a login attempt.

Enabled per thread by the CLI ``--debug`` flag and rendered with rich on
stderr, so it never mixes with command output.
"""

import threading
from typing import Any

from rich.console import Console
from rich.pretty import Pretty
from rich.table import Table

_debug_state = threading.local()

REDACTED = "***"
MAX_VALUE_LENGTH = 100


def set_debug_enabled(enabled: bool) -> None:
    """Set debug mode for the current thread/session."""
    _debug_state.enabled = enabled


def is_debug_enabled() -> bool:
    return getattr(_debug_state, "enabled", False)


def redact_fields(values: dict[str, Any], secret_names: set[str]) -> dict[str, Any]:
    """Copy of ``values`` with every secret field masked."""
    lowered = {name.lower() for name in secret_names}
    return {key: (REDACTED if key.lower() in lowered else value) for key, value in values.items()}


def _render_value(value: Any) -> Any:
    if isinstance(value, dict):
        return Pretty(value)
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value)
    text = str(value)
    if len(text) > MAX_VALUE_LENGTH:
        return f"{text[:MAX_VALUE_LENGTH]}... ({len(text)} chars)"
    return text


def debug_print(category: str, message: str, **data: Any) -> None:
    """Print a headline plus a key/value grid when debug mode is on.

    Args:
        category: Debug category (step, form, result)
        message: Headline
        **data: Details; None values are skipped
    """
    if not is_debug_enabled():
        return
    console = Console(stderr=True)
    console.print(f"[DEBUG:{category}] {message}", style="bold cyan")

    details = Table.grid(padding=(0, 1))
    details.add_column(style="dim")
    details.add_column()
    for key, value in data.items():
        if value is not None:
            details.add_row(f"  {key}:", _render_value(value))
    if details.row_count:
        console.print(details)


def debug_step(step: int, url: str, content_length: int, credentials_submitted: bool) -> None:
    """Log the start of a driver step in debug mode."""
    debug_print(
        "step",
        f"Step {step}",
        URL=url,
        Content=f"{content_length} chars",
        Credentials="submitted" if credentials_submitted else None,
    )


def debug_submission(
    action_url: str,
    payload: dict[str, str],
    secret_names: set[str],
    strategy: str | None,
) -> None:
    """Log a form submission in debug mode, masking secret fields.

    Args:
        action_url: Form target
        payload: Field values about to be posted
        secret_names: Field names whose values must never be shown
        strategy: Credential strategy that produced the overrides, if any
    """
    if not is_debug_enabled():
        return
    debug_print(
        "form",
        f"POST {action_url}",
        Strategy=strategy,
        Fields=redact_fields(payload, secret_names),
    )
