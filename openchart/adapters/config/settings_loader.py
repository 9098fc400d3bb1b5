import logging
import os

import yaml

from openchart.core.domain.settings import SystemSettings

logger = logging.getLogger(__name__)


def load_settings(path: str | None = None) -> SystemSettings:
    """
    Load engine settings from a YAML file.
    Falls back to defaults if the file doesn't exist.

    Environment variables (``OPENCHART_*``) take precedence over file values.

    Args:
        path: Path to the YAML file. Defaults to OPENCHART_CONFIG_FILE env var or "openchart.yaml".
    """
    if path is None:
        path = os.getenv("OPENCHART_CONFIG_FILE", "openchart.yaml")

    config_data = {}

    if os.path.exists(path):
        try:
            with open(path, "r") as f:
                config_data = yaml.safe_load(f) or {}
        except Exception as e:
            raise RuntimeError(f"Failed to load configuration from {path}: {e}")
        if not isinstance(config_data, dict):
            raise RuntimeError(f"Configuration in {path} must be a mapping")
        logger.debug(f"Loaded settings file {path}")
    else:
        logger.debug(f"Settings file {path} not found, using defaults")

    return SystemSettings(**config_data)
