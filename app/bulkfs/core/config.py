"""User configuration for bulkfs.

Defaults for the worker pool size, strict failure handling and the
progress bar can be stored in ~/.config/bulkfs/config.toml. Command-line
flags always take precedence over file values. A missing file means
built-in defaults.
"""

import os
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from bulkfs.core.paths import get_config_path

# Upper bound for the worker pool, shared by the config file and --workers
MAX_WORKERS = 1024


class BulkfsConfig(BaseModel):
    """Configuration for bulk operations.

    Attributes:
        workers: Worker pool size. None means the logical CPU count.
        strict: Report per-entry failures, exit non-zero on any failure, and
            keep the move source when the fallback copy was incomplete.
        bar: Show the progress bar without passing --bar.
    """

    model_config = ConfigDict(extra="forbid")

    workers: Annotated[
        int | None,
        Field(ge=1, le=MAX_WORKERS, description="Worker pool size (None = CPU count)"),
    ] = None
    strict: Annotated[
        bool,
        Field(description="Surface per-entry failures"),
    ] = False
    bar: Annotated[
        bool,
        Field(description="Show progress bar by default"),
    ] = False


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigParseError(ConfigError):
    """Raised when the config file cannot be parsed."""


def load_config(path: Path | None = None) -> BulkfsConfig:
    """Load configuration from a TOML file.

    Args:
        path: Path to the config file. If None, uses the default config path.

    Returns:
        Validated BulkfsConfig. Defaults if the file does not exist.

    Raises:
        ConfigParseError: If the TOML syntax is invalid.
        ConfigError: If the file cannot be read or fails validation.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        return BulkfsConfig()

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML syntax in {config_path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config {config_path}: {e}") from e

    try:
        return BulkfsConfig.model_validate(data)
    except (ValueError, ValidationError) as e:
        raise ConfigError(f"Invalid config content in {config_path}: {e}") from e


def save_config(config: BulkfsConfig, path: Path | None = None) -> Path:
    """Save configuration to a TOML file.

    The file is written to a temporary file first and moved into place
    with os.replace().

    Args:
        config: The BulkfsConfig to save.
        path: Destination path. If None, uses the default config path.

    Returns:
        Path where the config was saved.

    Raises:
        ConfigError: If the file cannot be written.
    """
    config_path = path or get_config_path()
    data = _config_to_dict(config)

    tmp_path: Path | None = None
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with NamedTemporaryFile(
            mode="wb",
            dir=config_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(tmp_path, config_path)
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ConfigError(f"Failed to write config {config_path}: {e}") from e

    return config_path


def _config_to_dict(config: BulkfsConfig) -> dict[str, object]:
    """Convert BulkfsConfig to a dictionary for TOML serialization.

    TOML has no null, so an unset worker count is omitted.
    """
    result: dict[str, object] = {"strict": config.strict, "bar": config.bar}
    if config.workers is not None:
        result["workers"] = config.workers
    return result
