"""
Store settings.

Reads the `secrets:` section of app.yaml and applies environment overrides so
the same app.yaml can point at different OKMS domains per environment.

Example app.yaml:

    secrets:
      provider: okms
      store:
        server: https://eu-west-rbx.okms.ovh.net
        okmsId: 5d1c2f4e-9a61-4a3f-8f3e-1f6a3c2b7d90
        casRequired: true
        auth:
          token:
            tokenSecretRef:
              name: okms-credentials
              key: token
"""
import os
import logging
import yaml
from pathlib import Path
from typing import Dict, Any, Optional, List

from pydantic import BaseModel, Field

from okms_secrets.exceptions import StoreValidationError

logger = logging.getLogger(__name__)

# Searched in order, relative to the working directory
APP_CONFIG_PATHS: List[Path] = [
    Path("config/app.yaml"),
    Path("app.yaml"),
    Path("../config/app.yaml"),  # For when running from subdirectories
]

# Environment variable -> store field, other spellings of that field
_STORE_ENV_OVERRIDES = {
    'OKMS_SERVER': ('server', ()),
    'OKMS_ID': ('okmsId', ('okms_id', 'okmsid')),
    'OKMS_CAS_REQUIRED': ('casRequired', ('cas_required',)),
    'OKMS_TIMEOUT': ('timeout', ()),
}

_TRUE_VALUES = ('true', '1', 'yes', 'on')
_FALSE_VALUES = ('false', '0', 'no', 'off', '')


class StoreSettings(BaseModel):
    """Selected provider and its raw store configuration."""

    provider: Optional[str] = None
    store: Dict[str, Any] = Field(default_factory=dict)


def load_app_config(config_paths: Optional[List[Path]] = None) -> Dict[str, Any]:
    """Load application configuration from app.yaml.

    Returns:
        The parsed configuration, or an empty dict when no app.yaml exists

    Raises:
        StoreValidationError: If app.yaml exists but cannot be parsed
    """
    for config_path in config_paths or APP_CONFIG_PATHS:
        if not config_path.exists():
            continue
        try:
            with open(config_path, 'r') as f:
                config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise StoreValidationError(f"Failed to parse {config_path}: {e}") from e
        if not isinstance(config, dict):
            raise StoreValidationError(f"{config_path} must contain a mapping at the top level")
        logger.debug(f"Loaded app configuration from: {config_path}")
        return config

    logger.debug("No app.yaml found, using default configuration")
    return {}


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise StoreValidationError(f"{name} must be a boolean, got '{value}'")


def _parse_float(name: str, value: str) -> float:
    try:
        return float(value)
    except ValueError as e:
        raise StoreValidationError(f"{name} must be a number of seconds, got '{value}'") from e


def load_store_settings(app_config: Optional[Dict[str, Any]] = None) -> StoreSettings:
    """Build store settings from app.yaml and the environment.

    Args:
        app_config: Already loaded app configuration; app.yaml is read when None

    Returns:
        StoreSettings with the provider name and the raw store mapping
    """
    if app_config is None:
        app_config = load_app_config()

    secrets_config = app_config.get('secrets') or {}
    if not isinstance(secrets_config, dict):
        raise StoreValidationError("app.yaml 'secrets' section must be a mapping")

    provider = secrets_config.get('provider')
    store = dict(secrets_config.get('store') or {})

    env_provider = os.environ.get('OKMS_PROVIDER')
    if env_provider:
        logger.debug(f"Provider overridden by OKMS_PROVIDER: {env_provider}")
        provider = env_provider

    for env_var, (field_name, aliases) in _STORE_ENV_OVERRIDES.items():
        value = os.environ.get(env_var)
        if value is None:
            continue
        if field_name == 'casRequired':
            store[field_name] = _parse_bool(env_var, value)
        elif field_name == 'timeout':
            store[field_name] = _parse_float(env_var, value)
        else:
            store[field_name] = value
        for alias in aliases:
            store.pop(alias, None)
        logger.debug(f"Store field '{field_name}' overridden by {env_var}")

    return StoreSettings(provider=provider, store=store)
