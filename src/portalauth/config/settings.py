"""Typed settings consumed by the authentication driver."""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any

from .env_loader import ConfigError, load_global_config
from .getters import get_config

DEFAULT_BASE_URL = "https://www.minuddannelse.net"


@dataclass(frozen=True)
class AuthSettings:
    """Target portal description and loop tuning.

    Defaults describe the MinUddannelse portal behind the UniLogin broker.
    """

    login_url: str = f"{DEFAULT_BASE_URL}/KmdIdentity/Login?domainHint=unilogin-idp-prod&toFa=False"
    success_url: str = f"{DEFAULT_BASE_URL}/Node/"
    target_domain: str = "minuddannelse.net"
    api_base_url: str = DEFAULT_BASE_URL
    api_check_paths: tuple[str, ...] = (
        "/api/stamdata/elev/getElev",
        "/api/stamdata/getProfiles",
        "/api/stamdata/bruger/getBruger",
    )
    identifier_page_url: str = f"{DEFAULT_BASE_URL}/node/minuge"
    identifier_api_path: str = "/api/stamdata/elev/getElev"
    identifier_keys: tuple[str, ...] = ("id", "elevId", "personid", "ChildId")
    continue_link_marker: str = "unilogin-idp-prod"
    login_path_markers: tuple[str, ...] = ("Login",)
    landing_path_markers: tuple[str, ...] = ("Login", "Forside")
    success_path_markers: tuple[str, ...] = ("/Node/", "/portal/")
    account_context_markers: tuple[str, ...] = ("currentUser", "bruger", "elev")
    form_action_keywords: tuple[str, ...] = ("login", "auth")
    identity_aliases: tuple[str, ...] = ("username", "j_username", "user", "login")
    secret_aliases: tuple[str, ...] = ("password", "j_password", "pass", "pwd")
    preset_fields: dict[str, str] = field(default_factory=lambda: {"selectedIdp": "uni_idp"})
    max_steps: int = 10
    benefit_of_doubt_after: int = 5
    timeout: float = 30.0

    def __post_init__(self) -> None:
        if self.max_steps < 1:
            raise ConfigError("max_steps must be at least 1")
        if self.timeout <= 0:
            raise ConfigError("timeout must be positive")

    @property
    def success_fragment(self) -> str:
        """Success URL without its scheme, for substring matching."""
        return self.success_url.replace("https://", "").replace("http://", "")

    def api_check_urls(self) -> list[str]:
        base = self.api_base_url.rstrip("/")
        return [f"{base}{path}" for path in self.api_check_paths]

    def identifier_api_url(self) -> str:
        return f"{self.api_base_url.rstrip('/')}{self.identifier_api_path}"


ENV_OVERRIDES: dict[str, str] = {
    "PORTALAUTH_LOGIN_URL": "login_url",
    "PORTALAUTH_SUCCESS_URL": "success_url",
    "PORTALAUTH_TARGET_DOMAIN": "target_domain",
    "PORTALAUTH_API_BASE_URL": "api_base_url",
    "PORTALAUTH_MAX_STEPS": "max_steps",
    "PORTALAUTH_TIMEOUT": "timeout",
}


def _coerce(name: str, value: Any, template: Any) -> Any:
    if isinstance(template, tuple):
        if isinstance(value, str):
            return tuple(part.strip() for part in value.split(",") if part.strip())
        if isinstance(value, list):
            return tuple(str(v) for v in value)
    elif isinstance(template, dict):
        if isinstance(value, dict):
            return {str(k): str(v) for k, v in value.items()}
    elif isinstance(template, (int, float)):
        try:
            return type(template)(value)
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"Invalid value for {name}: {value!r}") from exc
    else:
        return str(value)
    raise ConfigError(f"Invalid value for {name}: {value!r}")


def settings_from_mapping(data: dict[str, Any], base: AuthSettings | None = None) -> AuthSettings:
    """Apply a mapping of field overrides (e.g. the YAML ``auth:`` section)."""
    base = base or AuthSettings()
    known = {f.name for f in fields(AuthSettings)}
    changes: dict[str, Any] = {}
    for key, value in data.items():
        if key not in known:
            raise ConfigError(f"Unknown auth setting: {key}")
        changes[key] = _coerce(key, value, getattr(base, key))
    return replace(base, **changes)


def load_settings(env_path: Path | None = None) -> AuthSettings:
    """
    Build settings with priority:
    1. Environment variables / .env file
    2. Global config file ``auth:`` section
    3. Defaults
    """
    settings = AuthSettings()

    auth_section = load_global_config().get("auth") or {}
    if not isinstance(auth_section, dict):
        raise ConfigError("'auth' section in config.yml must be a mapping")
    if auth_section:
        settings = settings_from_mapping(auth_section, settings)

    env_changes: dict[str, Any] = {}
    for env_key, attr in ENV_OVERRIDES.items():
        value = get_config(env_key, env_path=env_path, use_global=False)
        if value:
            env_changes[attr] = value
    if env_changes:
        settings = settings_from_mapping(env_changes, settings)

    return settings
