"""Tests for configuration module."""

from pathlib import Path

import pytest

from hotlist.config import (
    HotlistConfig,
    IndexConfig,
    LoggingConfig,
    MatchingConfig,
    load_config,
)
from hotlist.constants import DEFAULT_TIME_QUANTUM_S


class TestIndexConfig:
    """Test IndexConfig."""

    def test_conventional_path(self) -> None:
        config = IndexConfig(country="France", name="RTL")
        assert config.resolve_path() == Path("predictor-db/hotlist/France_RTL.sqlite")

    def test_explicit_path_wins(self) -> None:
        config = IndexConfig(country="France", name="RTL", db_path=Path("/data/h.sqlite"))
        assert config.resolve_path() == Path("/data/h.sqlite")


class TestMatchingConfig:
    """Test MatchingConfig validation."""

    def test_default_values(self) -> None:
        config = MatchingConfig()
        assert config.time_quantum_s == pytest.approx(DEFAULT_TIME_QUANTUM_S)
        assert config.legacy_std is False
        assert config.batch_seconds == 2.0

    def test_quantum_must_be_positive(self) -> None:
        with pytest.raises(ValueError):
            MatchingConfig(time_quantum_s=0)

    def test_batch_seconds_must_be_positive(self) -> None:
        with pytest.raises(ValueError):
            MatchingConfig(batch_seconds=-1)


class TestLoggingConfig:
    """Test LoggingConfig."""

    def test_default_values(self) -> None:
        config = LoggingConfig()
        assert config.level == "INFO"
        assert config.file == "hotlist.log"


class TestLoadConfig:
    """Test YAML loading."""

    def test_load_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text(
            "index:\n"
            "  country: Belgium\n"
            "  name: Nostalgie\n"
            "matching:\n"
            "  time_quantum_s: 0.5\n"
            "  legacy_std: true\n"
            "logging:\n"
            "  level: DEBUG\n"
        )

        config = load_config(path)

        assert isinstance(config, HotlistConfig)
        assert config.index.resolve_path().name == "Belgium_Nostalgie.sqlite"
        assert config.matching.time_quantum_s == 0.5
        assert config.matching.legacy_std is True
        assert config.logging.level == "DEBUG"

    def test_empty_yaml_gives_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("")
        assert load_config(path) == HotlistConfig()

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.yaml")

    def test_invalid_values(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("matching:\n  time_quantum_s: -3\n")
        with pytest.raises(ValueError):
            load_config(path)

    def test_bundled_config(self) -> None:
        """The sample config shipped with the project is valid."""
        path = Path(__file__).parent.parent.parent / "config" / "config.yaml"
        config = load_config(path)
        assert config.matching.time_quantum_s == pytest.approx(DEFAULT_TIME_QUANTUM_S)
