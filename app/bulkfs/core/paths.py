"""XDG-compliant path management for bulkfs.

bulkfs keeps no state; the only file it reads is an optional
configuration file.

XDG defaults:
- Config: ~/.config/bulkfs/
"""

import os
from pathlib import Path

# Application identifier for directory naming
APP_NAME = "bulkfs"


def _get_xdg_dir(env_var: str, default_subdir: str) -> Path:
    """Get XDG directory respecting environment variable override.

    Args:
        env_var: XDG environment variable name (e.g., "XDG_CONFIG_HOME").
        default_subdir: Default subdirectory under home (e.g., ".config").

    Returns:
        Path to the application-specific directory.
    """
    base = os.environ.get(env_var)
    if base:
        return Path(base) / APP_NAME
    return Path.home() / default_subdir / APP_NAME


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Returns:
        Path to ~/.config/bulkfs/ (or XDG_CONFIG_HOME/bulkfs/).
    """
    return _get_xdg_dir("XDG_CONFIG_HOME", ".config")


def get_config_path() -> Path:
    """Get the configuration file path.

    Returns:
        Path to ~/.config/bulkfs/config.toml.
    """
    return get_config_dir() / "config.toml"

