from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from openchart.core.domain.config import ProcessingConfig


class SystemSettings(BaseSettings):
    """
    Engine-wide default settings.

    Environment variables (prefix ``OPENCHART_``) take precedence over values
    passed to the constructor, which is how YAML file values are supplied.
    """
    model_config = SettingsConfigDict(
        env_prefix="OPENCHART_",
        case_sensitive=False,
        extra="ignore",
    )

    # Processing defaults
    default_max_points: int = Field(default=1000, ge=1, description="Default point budget per series")
    default_gap_threshold_ms: int = Field(default=86_400_000, ge=0, description="Default gap threshold")
    default_interpolation_method: Literal["linear", "polynomial", "none"] = Field(default="none")

    # Logging
    log_level: str = Field(default="INFO", description="Root log level")
    log_format: str = Field(default="%(asctime)s %(levelname)s %(name)s: %(message)s")

    # Caller-owned cache
    cache_max_entries: int = Field(default=128, ge=1, description="Entries kept by the in-memory layout cache")

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        return env_settings, init_settings, dotenv_settings, file_secret_settings

    def processing_defaults(self) -> ProcessingConfig:
        """Build a ProcessingConfig seeded from these settings."""
        return ProcessingConfig(
            max_points=self.default_max_points,
            gap_threshold_ms=self.default_gap_threshold_ms,
            interpolation_method=self.default_interpolation_method,
        )
