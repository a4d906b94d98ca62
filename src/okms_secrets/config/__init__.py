"""
Configuration for the okms-secrets package.

Store settings come from app.yaml plus environment overrides; logging is
configured from logging.ini.
"""

from .settings import StoreSettings, load_app_config, load_store_settings
from .logging import bootstrap_logging, get_logger

__all__ = [
    'StoreSettings',
    'load_app_config',
    'load_store_settings',
    'bootstrap_logging',
    'get_logger',
]
