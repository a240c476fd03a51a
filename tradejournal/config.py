"""Configuration for the trading journal.

Configuration is an explicit ``JournalConfig`` passed into every store
and engine constructor. ``load_config`` builds one from the optional
TOML file and the ``TRADEJOURNAL_HOME`` environment variable.
"""

import os
import sys
from pathlib import Path
from typing import Optional

import toml
from pydantic import BaseModel, Field, ValidationError as PydanticValidationError

from tradejournal.errors import ConfigError, describe_validation_error

CONFIG_PATH = Path.home() / ".config" / "tradejournal" / "config.toml"
HOME_ENV_VAR = "TRADEJOURNAL_HOME"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def default_base_dir(platform: Optional[str] = None) -> Path:
    """Platform-appropriate base directory for journal data."""
    platform = platform or sys.platform
    home = Path.home()
    if platform == "win32":
        return home / "AppData" / "Local" / "TradingJournal"
    if platform == "darwin":
        return home / "Library" / "Application Support" / "TradingJournal"
    return home / ".trading-journal"


class JournalConfig(BaseModel):
    """Where the journal lives and how it behaves."""

    base_dir: Path = Field(default_factory=default_base_dir, description="Base directory")
    compression_level: int = Field(default=9, ge=1, le=9, description="ZIP deflate level")
    log_level: str = Field(default="WARNING", description="Logging level")

    model_config = {"frozen": True}

    @property
    def data_dir(self) -> Path:
        return self.base_dir / "data"

    @property
    def trades_dir(self) -> Path:
        return self.data_dir / "trades"

    @property
    def theses_dir(self) -> Path:
        return self.data_dir / "theses"

    @property
    def backups_dir(self) -> Path:
        return self.data_dir / "backups"

    @property
    def screenshots_dir(self) -> Path:
        return self.data_dir / "screenshots"


def load_config(path: Optional[Path] = None) -> JournalConfig:
    """Load configuration.

    Args:
        path: TOML file to read. Defaults to ``~/.config/tradejournal/config.toml``;
            a missing default file is not an error.

    Returns:
        The resulting configuration.

    Raises:
        ConfigError: If the file is unreadable, not TOML, or has invalid values.
    """
    explicit = path is not None
    path = path or CONFIG_PATH

    raw: dict = {}
    if path.exists():
        try:
            raw = toml.load(path)
        except (OSError, toml.TomlDecodeError) as e:
            raise ConfigError(f"Could not read config {path}: {e}") from e
    elif explicit:
        raise ConfigError(f"Config file not found: {path}")

    values: dict = {}
    storage = raw.get("storage", {})
    if storage.get("base_dir"):
        values["base_dir"] = Path(storage["base_dir"]).expanduser()
    backup = raw.get("backup", {})
    if "compression_level" in backup:
        values["compression_level"] = backup["compression_level"]
    logging_section = raw.get("logging", {})
    if "level" in logging_section:
        level = str(logging_section["level"]).upper()
        if level not in LOG_LEVELS:
            raise ConfigError(f"Invalid logging level: {logging_section['level']}")
        values["log_level"] = level

    env_home = os.environ.get(HOME_ENV_VAR)
    if env_home:
        values["base_dir"] = Path(env_home).expanduser()

    try:
        return JournalConfig(**values)
    except PydanticValidationError as e:
        raise ConfigError(f"Invalid config: {describe_validation_error(e)}") from e


def create_template_config(path: Optional[Path] = None) -> Path:
    """Write a template configuration file.

    Returns:
        Path of the written file.
    """
    path = path or CONFIG_PATH
    path.parent.mkdir(parents=True, exist_ok=True)

    template = {
        "storage": {
            "base_dir": str(default_base_dir()),
        },
        "backup": {
            "compression_level": 9,  # 1 (fastest) to 9 (smallest)
        },
        "logging": {
            "level": "WARNING",
        },
    }

    with open(path, "w") as f:
        toml.dump(template, f)

    return path
