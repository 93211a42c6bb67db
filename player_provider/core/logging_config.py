"""
Logging configuration for the player data provider.

Provides structured logging with different levels for development, testing, and production.
Configures formatters, handlers, and loggers for the provider components.
"""

import logging
import logging.config
import os
import sys
from typing import Dict, Any


def get_log_level() -> str:
    """Get the log level from environment variables."""
    return os.getenv("LOG_LEVEL", "INFO").upper()


def get_logging_config() -> Dict[str, Any]:
    """
    Get the logging configuration dictionary.

    Returns a logging configuration that can be used with logging.config.dictConfig().
    Production output is JSON (python-json-logger); other environments get
    human-readable lines.
    """
    log_level = get_log_level()
    environment = os.getenv("ENVIRONMENT", "development").lower()

    if environment == "production":
        formatter_class = "pythonjsonlogger.json.JsonFormatter"
        formatter_format = "%(asctime)s %(name)s %(levelname)s %(message)s"
    else:
        # Human-readable formatting for development/testing
        formatter_class = "logging.Formatter"
        formatter_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "class": formatter_class,
                "format": formatter_format,
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "detailed": {
                "class": formatter_class,
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": log_level,
                "formatter": "default",
                "stream": sys.stdout,
            },
            "error_console": {
                "class": "logging.StreamHandler",
                "level": "ERROR",
                "formatter": "detailed",
                "stream": sys.stderr,
            },
        },
        "loggers": {
            "provider": {
                "level": log_level,
                "handlers": ["console", "error_console"],
                "propagate": False,
            },
            "provider.storage": {
                "level": log_level,
                "handlers": ["console", "error_console"],
                "propagate": False,
            },
            "provider.codec": {
                "level": log_level,
                "handlers": ["console", "error_console"],
                "propagate": False,
            },
        },
        "root": {
            "level": log_level,
            "handlers": ["console", "error_console"],
        },
    }

    return config


def setup_logging() -> None:
    """
    Configure logging for the host application.

    Call once at startup, before the provider is constructed. The provider
    itself never calls this; it only emits through get_logger().
    """
    config = get_logging_config()
    logging.config.dictConfig(config)

    logger = logging.getLogger("provider.logging")
    logger.info(
        "Logging configured",
        extra={
            "log_level": get_log_level(),
            "environment": os.getenv("ENVIRONMENT", "development"),
        },
    )


# Module -> logger name overrides, so the file store and codec can be tuned
# independently of the rest of the provider.
_COMPONENT_LOGGERS = {
    "file_store": "provider.storage",
    "record_codec": "provider.codec",
}


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for the given name.

    Args:
        name: The logger name, typically __name__ from the calling module

    Returns:
        A configured logger instance
    """
    # Ensure the logger name starts with 'provider.' for proper hierarchy
    if not name.startswith("provider."):
        if name.startswith("player_provider."):
            # Convert player_provider.services.file_store -> provider.storage
            parts = name.split(".")
            leaf = parts[-1]
            if leaf in _COMPONENT_LOGGERS:
                name = _COMPONENT_LOGGERS[leaf]
            elif len(parts) >= 2:
                name = f"provider.{parts[1]}"
            else:
                name = "provider"
        else:
            name = f"provider.{name}"

    return logging.getLogger(name)
