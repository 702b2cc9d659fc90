"""Centralized application configuration."""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field

DEFAULT_DATA_DIR = Path.home() / ".local" / "secret-item"


class Config(BaseModel):
    """Application-wide configuration."""

    model_config = ConfigDict(frozen=True)

    data_dir: Path = Field(description="Base directory for all application data")
    alias: str = Field(default="default", min_length=1, description="Alias of the collection to store items in")
    window_id: str = Field(default="", description="Platform window handle passed to prompts")
    prompt_timeout: int = Field(default=0, ge=0, description="Seconds to wait for a prompt to complete (0 = wait forever)")
    bus_address: str | None = Field(default=None, description="Explicit D-Bus address (None = session bus)")

    @computed_field(description="Optional TOML configuration file")
    @property
    def config_path(self) -> Path:
        """Optional TOML configuration file."""
        return self.data_dir / "config.toml"

    @computed_field(description="Log file")
    @property
    def log_path(self) -> Path:
        """Log file."""
        return self.data_dir / "secret-item.log"

    @property
    def prompt_timeout_or_none(self) -> float | None:
        """Prompt timeout in seconds, or None when disabled."""
        return float(self.prompt_timeout) if self.prompt_timeout > 0 else None

    @staticmethod
    def build(data_dir: Path | None = None) -> Config:
        """Build a Config from defaults and optional config.toml."""
        resolved_dir = data_dir if data_dir is not None else DEFAULT_DATA_DIR
        config_path = resolved_dir / "config.toml"

        kwargs: dict[str, Any] = {"data_dir": resolved_dir}
        if config_path.is_file():
            with config_path.open("rb") as f:
                toml_data = tomllib.load(f)
            for key in ("alias", "window_id", "bus_address"):
                if isinstance(toml_data.get(key), str):
                    kwargs[key] = toml_data[key]
            if isinstance(toml_data.get("prompt_timeout"), int):
                kwargs["prompt_timeout"] = toml_data["prompt_timeout"]

        return Config(**kwargs)
