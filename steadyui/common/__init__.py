"""
Shared configuration and logging utilities.

Example:
    from steadyui.common import ConfigLoader, init_logger

    init_logger()
    engine = ConfigLoader().get("browser.engine", "chromium")
"""

from .config_loader import ConfigLoader, ConfigurationError
from .log_config import get_logger, init_logger, reset_logger

__all__ = [
    "ConfigLoader",
    "ConfigurationError",
    "get_logger",
    "init_logger",
    "reset_logger",
]
