"""Configuration management for posturemax.

Loads settings from a YAML configuration file with environment variable
overrides (``POSTUREMAX_`` prefix, ``__`` for nested sections). Supports
.env files.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config/posturemax.yaml")

DEFAULT_HOTKEYS: dict[str, str] = {
    "CommandOrControl+Shift+M": "toggle-monitoring",
    "CommandOrControl+Shift+P": "toggle-overlay",
    "CommandOrControl+Shift+T": "cycle-transparency",
    "CommandOrControl+Shift+C": "toggle-camera",
    "CommandOrControl+Shift+O": "center-overlay",
}


class SessionConfig(BaseModel):
    hide_grace_ms: int = Field(default=2000, gt=0, description="Overlay grace delay after stop")
    clock_interval: float = Field(default=1.0, gt=0, description="Presenter clock tick in seconds")


class ProducerConfig(BaseModel):
    min_interval: float = Field(default=3.0, gt=0)
    max_interval: float = Field(default=8.0, gt=0)
    good_probability: float = Field(default=0.7, ge=0.0, le=1.0)
    seed: int | None = Field(default=None)

    @model_validator(mode="after")
    def _check_interval_order(self) -> ProducerConfig:
        if self.min_interval > self.max_interval:
            raise ValueError("producer.min_interval must not exceed producer.max_interval")
        return self


class OverlayConfig(BaseModel):
    width: int = Field(default=800, gt=0)
    height: int = Field(default=80, gt=0)
    top_margin: int = Field(default=50, ge=0)
    transparent_opacity: float = Field(default=0.3, ge=0.0, le=1.0)
    visible_opacity: float = Field(default=1.0, ge=0.0, le=1.0)


class CameraConfig(BaseModel):
    enabled: bool = Field(default=True)
    device_index: int = Field(default=0, ge=0, description="OpenCV camera device index")
    width: int = Field(default=640, gt=0)
    height: int = Field(default=480, gt=0)
    frame_interval: float = Field(default=0.1, gt=0)


class DisplayConfig(BaseModel):
    work_area_width: int = Field(default=1920, gt=0)
    work_area_height: int = Field(default=1080, gt=0)


class EndpointConfig(BaseModel):
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=8765, ge=1, le=65535)
    timeout: float = Field(default=5.0, gt=0)

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.port}"


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO")
    format: str = Field(
        default="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    file: str | None = Field(default=None)


class Settings(BaseSettings):
    """Root configuration for posturemax.

    Loads from YAML file and supports environment variable overrides.
    Reads .env files automatically.
    """

    model_config = {
        "env_prefix": "POSTUREMAX_",
        "env_nested_delimiter": "__",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    session: SessionConfig = Field(default_factory=SessionConfig)
    producer: ProducerConfig = Field(default_factory=ProducerConfig)
    overlay: OverlayConfig = Field(default_factory=OverlayConfig)
    camera: CameraConfig = Field(default_factory=CameraConfig)
    display: DisplayConfig = Field(default_factory=DisplayConfig)
    hotkeys: dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_HOTKEYS))
    endpoint: EndpointConfig = Field(default_factory=EndpointConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def load_settings(config_path: Path | str | None = None) -> Settings:
    """Load settings from YAML + .env + environment variables.

    Priority: env vars > .env file > YAML file > defaults
    """
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH

    _load_dotenv()

    yaml_data = {}
    if path.exists():
        with open(path) as f:
            yaml_data = yaml.safe_load(f) or {}
        logger.info("Loaded configuration from %s", path)
    else:
        logger.warning("Config file %s not found, using defaults + env vars", path)

    _drop_env_overridden(yaml_data)

    return Settings(**yaml_data)


def _load_dotenv(env_path: Path = Path(".env")) -> None:
    """Copy .env entries into os.environ without replacing real variables."""
    if not env_path.exists():
        return
    with open(env_path) as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, _, value = line.partition("=")
            key = key.strip()
            if not os.environ.get(key):
                os.environ[key] = value.strip().strip("\"'")


def _drop_env_overridden(yaml_data: dict) -> None:
    """Remove YAML keys that an environment variable overrides.

    Init kwargs outrank the environment in pydantic-settings, so a YAML
    value would otherwise win over ``POSTUREMAX_*``.
    """
    prefix = "POSTUREMAX_"
    for key in os.environ:
        if not key.startswith(prefix):
            continue
        parts = key[len(prefix):].lower().split("__")
        section = yaml_data
        for part in parts[:-1]:
            section = section.get(part) if isinstance(section, dict) else None
            if section is None:
                break
        if isinstance(section, dict):
            section.pop(parts[-1], None)
