"""Configuration management using Pydantic and YAML."""

from pathlib import Path

import yaml
from pydantic import BaseModel, Field

from .constants import DEFAULT_HOTLIST_DIR, DEFAULT_TIME_QUANTUM_S
from .database import default_db_path


class IndexConfig(BaseModel):
    """Reference index configuration."""

    country: str = ""
    name: str = ""
    directory: Path = Path(DEFAULT_HOTLIST_DIR)
    db_path: Path | None = None

    def resolve_path(self) -> Path:
        """Explicit ``db_path``, or the conventional path of the radio."""
        if self.db_path is not None:
            return self.db_path
        return default_db_path(self.country, self.name, self.directory)


class MatchingConfig(BaseModel):
    """Matching configuration."""

    time_quantum_s: float = Field(gt=0, default=DEFAULT_TIME_QUANTUM_S)
    legacy_std: bool = False
    batch_seconds: float = Field(gt=0, default=2.0)


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    file: str = "hotlist.log"


class HotlistConfig(BaseModel):
    """Main application configuration."""

    index: IndexConfig = Field(default_factory=IndexConfig)
    matching: MatchingConfig = Field(default_factory=MatchingConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def load_config(config_path: Path | None = None) -> HotlistConfig:
    """Load configuration from YAML file.

    Args:
        config_path: Path to config file. If None, uses default location.

    Returns:
        HotlistConfig instance

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If config file is invalid
    """
    if config_path is None:
        # Try multiple locations
        possible_paths = [
            Path(__file__).parent.parent / "config" / "config.yaml",
            Path.home() / ".config" / "hotlist" / "config.yaml",
            Path.home() / ".hotlist" / "config.yaml",
        ]

        for path in possible_paths:
            if path.exists():
                config_path = path
                break
        else:
            # Use default from package
            config_path = possible_paths[0]

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        data = yaml.safe_load(f)

    return HotlistConfig(**(data or {}))
