import logging
import os
import sys
from pathlib import Path
from typing import Any, Literal

import logfire
import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from viralgrowth.domain.upload.model.value import VideoFormat


# =============================================================================
# Scheduling Configuration
# =============================================================================


class SchedulerConfig(BaseModel):
    """Upload scheduler configuration (nested in Config, uses env_nested_delimiter).

    The scheduler period is expressed in countdown time-units; `tick_interval`
    is the wall-clock length of one unit, so a fire happens every
    `period * tick_interval` seconds.
    """

    period: int = Field(default=60, ge=1)  # Time-units between periodic fires
    tick_interval: float = Field(default=1.0, gt=0)  # Seconds per time-unit

    @property
    def period_seconds(self) -> float:
        return self.period * self.tick_interval


class PipelineConfig(BaseModel):
    """Pipeline run defaults (nested in Config, uses env_nested_delimiter)."""

    stage_delay: float = Field(default=2.0, ge=0)  # Seconds spent in each post-metadata stage
    niche: str = "AI Technology"
    tone: str = "energetic"
    format: VideoFormat = VideoFormat.SHORTS
    max_records: int | None = Field(default=None, ge=1)  # None = unbounded retention


class ChannelConfig(BaseModel):
    """Simulated channel connection configuration."""

    connect_latency: float = Field(default=1.5, ge=0)


class MetadataConfig(BaseModel):
    """Metadata provider configuration.

    `synthetic` works offline; `gemini` calls the Generative Language REST API
    and requires `api_key`.
    """

    provider: Literal["synthetic", "gemini"] = "synthetic"
    api_key: str = ""
    model: str = "gemini-2.0-flash"
    base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    timeout: float = Field(default=30.0, gt=0)
    latency: float = Field(default=1.0, ge=0)  # Simulated latency for the synthetic provider


class LoggingConfig(BaseModel):
    """Logging configuration (nested in Config, uses env_nested_delimiter)."""

    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"

    @property
    def file(self) -> str | None:
        """Get log file path from VG_LOG_FILE env var."""
        return os.environ.get("VG_LOG_FILE")


# =============================================================================
# Application Configuration
# =============================================================================


class YamlConfigSettingsSource(PydanticBaseSettingsSource):
    """Load settings from YAML file specified by VG_CONFIG_FILE env var."""

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Get the value for a field from the YAML config."""
        yaml_data = self._load_yaml_config()
        field_value = yaml_data.get(field_name)
        return field_value, field_name, False

    def __call__(self) -> dict[str, Any]:
        """Return all settings from YAML file."""
        return self._load_yaml_config()

    def _load_yaml_config(self) -> dict[str, Any]:
        """Load config from YAML file if specified."""
        config_file = os.environ.get("VG_CONFIG_FILE")
        if config_file:
            path = Path(config_file)
            if path.exists():
                return yaml.safe_load(path.read_text()) or {}
        return {}


class Config(BaseSettings):
    scheduler: SchedulerConfig = SchedulerConfig()
    pipeline: PipelineConfig = PipelineConfig()
    channel: ChannelConfig = ChannelConfig()
    metadata: MetadataConfig = MetadataConfig()
    logging: LoggingConfig = LoggingConfig()

    model_config = {
        "env_prefix": "VG_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_nested_delimiter": "__",  # Allows VG_SCHEDULER__PERIOD override
    }

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customize settings sources to include YAML config.

        Priority (highest to lowest):
        1. init_settings - values passed to Config()
        2. env_settings - environment variables
        3. dotenv_settings - .env file
        4. yaml_settings - VG_CONFIG_FILE yaml
        5. file_secret_settings - secrets from files
        """
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )


def configure_logging(config: LoggingConfig) -> None:
    """Configure Python logging based on config.

    Should be called early in application startup so every module logger
    picks up the handlers.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(config.level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    formatter = logging.Formatter(config.format, datefmt=config.date_format)

    if config.file:
        log_path = Path(config.file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
        file_handler.setLevel(config.level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)
    else:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(config.level)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    logging.debug("Logging configured: level=%s, file=%s", config.level, config.file)


def configure_observability() -> None:
    """Configure logfire spans; data is only shipped when LOGFIRE_TOKEN is set."""
    logfire.configure(send_to_logfire="if-token-present", console=False)
    logfire.instrument_httpx()
