"""Configuration loading for refinement playback."""

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)


class PlaybackConfig(BaseModel):
    base_duration_ms: float = Field(default=600.0, gt=0)
    pause_ms: float = Field(default=1000.0, ge=0)  # dwell after each pass renders
    min_speed: float = Field(default=0.01, gt=0)
    default_speed: float = Field(default=1.0, gt=0)
    default_passes: int = Field(default=3, ge=1)


class Config(BaseModel):
    catalog_path: str | None = None
    default_problem: str = "code-review"
    playback: PlaybackConfig = Field(default_factory=PlaybackConfig)

    @property
    def resolved_catalog_path(self) -> Path | None:
        """Resolve catalog_path relative to project root."""
        if self.catalog_path is None:
            return None
        p = Path(self.catalog_path).expanduser()
        if p.is_absolute():
            return p
        return _project_root() / p


def _project_root() -> Path:
    """Return the refineplay project root directory."""
    return Path(__file__).parent.parent


def load_config(config_path: Path | None = None) -> Config:
    """Load config from YAML file.

    Falls back to defaults if the file is missing, unreadable, or invalid.
    """
    if config_path is None:
        config_path = _project_root() / "config.yaml"

    if config_path.exists():
        try:
            raw: Any = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
            return Config.model_validate(raw)
        except (OSError, UnicodeDecodeError, yaml.YAMLError, ValidationError) as e:
            logger.error("Ignoring config %s, using defaults: %s", config_path, e)

    return Config()
