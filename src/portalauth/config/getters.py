"""Configuration value getters."""

import os
from pathlib import Path
from typing import Any

from .env_loader import load_env_file, load_global_config


def get_config(
    key: str,
    default: Any = None,
    *,
    env_path: Path | None = None,
    use_global: bool = True,
) -> Any:
    """
    Get configuration value with priority:
    1. Environment variable
    2. .env file (defaults to ./.env)
    3. Global config file
    4. Default value

    Args:
        key: Configuration key
        default: Default value if not found
        env_path: Optional .env file to consult
        use_global: Whether to fall back to the global config file

    Returns:
        Configuration value or default
    """
    # 1. Check environment variable
    env_value = os.environ.get(key)
    if env_value:
        return env_value

    # 2. Check .env file
    file_values = load_env_file(env_path or Path.cwd() / ".env")
    if file_values.get(key):
        return file_values[key]

    # 3. Check global config
    if use_global:
        global_config = load_global_config()
        if key in global_config:
            return global_config[key]

    # 4. Return default
    return default
