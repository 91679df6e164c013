"""
Configuration management for portalauth.

Supports multiple configuration sources in order of priority:
1. Environment variables (highest priority)
2. Local .env file
3. Global config file (~/.portalauth/config.yml)
4. Default values (lowest priority)
"""

from .accounts import AccountConfig, find_account, load_accounts, parse_account
from .env_loader import (
    ConfigError,
    expand_env_vars,
    global_config_path,
    load_env_file,
    load_global_config,
)
from .getters import get_config
from .settings import AuthSettings, load_settings, settings_from_mapping

__all__ = [
    # accounts
    "AccountConfig",
    "find_account",
    "load_accounts",
    "parse_account",
    # env_loader
    "ConfigError",
    "expand_env_vars",
    "global_config_path",
    "load_env_file",
    "load_global_config",
    # getters
    "get_config",
    # settings
    "AuthSettings",
    "load_settings",
    "settings_from_mapping",
]
