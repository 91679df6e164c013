"""Account definitions read from the global config file."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ..auth.credentials import Credential, FixedSecret, PictureSequence
from .env_loader import ConfigError, load_global_config

AUTH_TYPES = ("standard", "pictogram")


@dataclass(frozen=True)
class AccountConfig:
    """One portal account as configured by the user."""

    name: str
    username: str
    auth_type: str = "standard"
    password: str = field(default="", repr=False)
    pictogram_sequence: tuple[str, ...] = field(default=(), repr=False)

    def credential(self) -> Credential:
        """Build the credential variant this account logs in with."""
        if self.auth_type == "pictogram":
            return PictureSequence(self.username, self.pictogram_sequence)
        return FixedSecret(self.username, self.password)


def parse_account(raw: dict[str, Any]) -> AccountConfig:
    """Validate one ``accounts:`` entry."""
    if not isinstance(raw, dict):
        raise ConfigError("Each account entry must be a mapping")

    name = str(raw.get("name") or "").strip()
    if not name:
        raise ConfigError("Account name is required")

    username = str(raw.get("username") or "").strip()
    if not username:
        raise ConfigError(f"Account '{name}': username is required")

    auth_type = str(raw.get("auth_type") or "standard").strip().lower()
    if auth_type not in AUTH_TYPES:
        raise ConfigError(f"Account '{name}': auth_type must be one of {', '.join(AUTH_TYPES)}")

    if auth_type == "pictogram":
        sequence = raw.get("pictogram_sequence") or []
        if isinstance(sequence, str):
            sequence = [part for part in sequence.split(",")]
        labels = tuple(str(label).strip() for label in sequence)
        if not labels or any(not label for label in labels):
            raise ConfigError(f"Account '{name}': pictogram_sequence needs one or more non-blank labels")
        return AccountConfig(name=name, username=username, auth_type=auth_type, pictogram_sequence=labels)

    password = str(raw.get("password") or "")
    if not password.strip():
        raise ConfigError(f"Account '{name}': password is required for standard auth")
    return AccountConfig(name=name, username=username, auth_type=auth_type, password=password)


def load_accounts(path: Path | None = None) -> list[AccountConfig]:
    """Load and validate every configured account."""
    raw_accounts = load_global_config(path).get("accounts") or []
    if not isinstance(raw_accounts, list):
        raise ConfigError("'accounts' must be a list")

    accounts = [parse_account(raw) for raw in raw_accounts]
    seen: set[str] = set()
    for account in accounts:
        key = account.name.lower()
        if key in seen:
            raise ConfigError(f"Duplicate account name: {account.name}")
        seen.add(key)
    return accounts


def find_account(name: str, path: Path | None = None) -> AccountConfig:
    """Look up a configured account by name (case-insensitive)."""
    for account in load_accounts(path):
        if account.name.lower() == name.lower():
            return account
    raise ConfigError(f"No account named '{name}' in config")
