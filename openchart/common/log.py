"""
Logging setup for applications embedding the engine.

Library modules only create loggers; configuring handlers is left to the
application, which may call `configure_logging` once at startup.
"""

import logging

from openchart.core.domain.settings import SystemSettings


def configure_logging(settings: SystemSettings | None = None) -> None:
    settings = settings or SystemSettings()
    logging.basicConfig(level=settings.log_level.upper(), format=settings.log_format)
    logging.getLogger(__name__).debug(f"Logging configured at {settings.log_level}")
