"""Tests for Config model validation, computed paths, and TOML loading."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from secret_item.config import Config

DATA_DIR = Path("/fake/data-dir")


class TestConfigPaths:
    """Computed path properties derive from data_dir."""

    def test_config_path(self) -> None:
        """Config file is data_dir / config.toml."""
        cfg = Config(data_dir=DATA_DIR)
        assert cfg.config_path == DATA_DIR / "config.toml"

    def test_log_path(self) -> None:
        """Log file is data_dir / secret-item.log."""
        cfg = Config(data_dir=DATA_DIR)
        assert cfg.log_path == DATA_DIR / "secret-item.log"


class TestConfigValidation:
    """Pydantic field constraints."""

    def test_defaults(self) -> None:
        """Default values for optional fields."""
        cfg = Config(data_dir=DATA_DIR)
        assert cfg.alias == "default"
        assert cfg.window_id == ""
        assert cfg.prompt_timeout == 0
        assert cfg.bus_address is None

    def test_prompt_timeout_below_minimum(self) -> None:
        """prompt_timeout < 0 is rejected."""
        with pytest.raises(ValidationError):
            Config(data_dir=DATA_DIR, prompt_timeout=-1)

    def test_empty_alias(self) -> None:
        """An empty alias is rejected."""
        with pytest.raises(ValidationError):
            Config(data_dir=DATA_DIR, alias="")

    def test_prompt_timeout_disabled(self) -> None:
        """Zero timeout means wait forever."""
        assert Config(data_dir=DATA_DIR).prompt_timeout_or_none is None

    def test_prompt_timeout_enabled(self) -> None:
        """Positive timeout is exposed in seconds."""
        assert Config(data_dir=DATA_DIR, prompt_timeout=30).prompt_timeout_or_none == 30.0

    def test_frozen(self) -> None:
        """Config is immutable."""
        cfg = Config(data_dir=DATA_DIR)
        with pytest.raises(ValidationError):
            cfg.alias = "other"  # type: ignore[misc]


class TestConfigBuild:
    """Config.build reads the optional TOML file."""

    def test_without_file(self, tmp_path: Path) -> None:
        """Defaults apply when config.toml is absent."""
        cfg = Config.build(tmp_path)
        assert cfg.data_dir == tmp_path
        assert cfg.alias == "default"

    def test_reads_toml(self, tmp_path: Path) -> None:
        """Known keys are read from config.toml."""
        (tmp_path / "config.toml").write_text(
            'alias = "login"\nwindow_id = "x11:0x1"\nprompt_timeout = 60\nbus_address = "unix:path=/tmp/bus"\n'
        )
        cfg = Config.build(tmp_path)
        assert cfg.alias == "login"
        assert cfg.window_id == "x11:0x1"
        assert cfg.prompt_timeout == 60
        assert cfg.bus_address == "unix:path=/tmp/bus"

    def test_ignores_wrong_types(self, tmp_path: Path) -> None:
        """Keys with unexpected types fall back to defaults."""
        (tmp_path / "config.toml").write_text('alias = 1\nprompt_timeout = "soon"\n')
        cfg = Config.build(tmp_path)
        assert cfg.alias == "default"
        assert cfg.prompt_timeout == 0
