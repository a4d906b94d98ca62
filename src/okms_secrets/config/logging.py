"""
Centralized logging configuration.

Entry points call bootstrap_logging() once to configure logging from an INI
file using Python's native fileConfig format.
"""

import configparser
import logging
import logging.config
import os
import sys
from pathlib import Path
from typing import Optional

VALID_LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']

PACKAGED_LOGGING_CONFIG = Path(__file__).parent / 'logging.ini'

# Loggers whose level follows LOG_LEVEL even when logging.ini pins them
_LEVEL_FOLLOWING_LOGGERS = [
    'okms_secrets',
]


def _find_logging_config() -> Path:
    """
    Find the logging configuration file.

    Looks for logging.ini in the current working directory, then config/, then
    falls back to the file shipped with the package.
    """
    for candidate in (Path('logging.ini'), Path('config/logging.ini')):
        if candidate.exists():
            return candidate
    return PACKAGED_LOGGING_CONFIG


def _setup_environment_variables():
    """
    Set up environment variables for logging configuration.

    Sets LOG_LEVEL to INFO if not already set, ensuring the INI file has a valid value.
    """
    if 'LOG_LEVEL' not in os.environ:
        os.environ['LOG_LEVEL'] = 'INFO'

    log_level = os.environ['LOG_LEVEL'].strip().upper()
    if log_level not in VALID_LOG_LEVELS:
        print(f"Warning: Invalid LOG_LEVEL '{log_level}', using INFO", file=sys.stderr)
        os.environ['LOG_LEVEL'] = 'INFO'


def _basic_config():
    logging.basicConfig(
        level=logging.INFO,
        format='%(levelname)s: %(name)s: %(message)s',
        stream=sys.stderr
    )


def bootstrap_logging(name: Optional[str] = None, config_path: Optional[Path] = None) -> None:
    """
    Bootstrap logging configuration using Python's native INI format.

    Loads logging.ini with logging.config.fileConfig(), then applies the
    LOG_LEVEL environment variable to the root logger, its stream handlers
    and the package loggers.

    Args:
        name: Optional name for the logger that reports the configuration
        config_path: Explicit INI file; searched for when None
    """
    _setup_environment_variables()
    config_path = config_path or _find_logging_config()

    if not config_path.exists():
        print(f"Warning: Logging config {config_path} not found, using basic logging configuration",
              file=sys.stderr)
        _basic_config()
        return

    try:
        logging.config.fileConfig(
            str(config_path),
            defaults={'LOG_LEVEL': os.environ['LOG_LEVEL'].strip().upper()},
            disable_existing_loggers=False
        )
    except (OSError, KeyError, ValueError, RuntimeError, configparser.Error) as e:
        print(f"Warning: Failed to load logging config from {config_path}: {e}", file=sys.stderr)
        print("Using basic logging configuration", file=sys.stderr)
        _basic_config()
        return

    level = getattr(logging, os.environ['LOG_LEVEL'].strip().upper())
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in root_logger.handlers:
        if isinstance(handler, logging.StreamHandler):
            handler.setLevel(level)
    for logger_name in _LEVEL_FOLLOWING_LOGGERS:
        logging.getLogger(logger_name).setLevel(level)

    logging.getLogger(name).debug(f"Logging configured for {name or 'root logger'} from {config_path}")


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger with the specified name, ensuring logging is bootstrapped.

    Args:
        name: Name for the logger

    Returns:
        Configured logger instance
    """
    if not logging.getLogger().handlers:
        bootstrap_logging()
    return logging.getLogger(name)
