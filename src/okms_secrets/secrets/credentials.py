"""
Default credential resolution from environment variables.

Hosts that keep credentials elsewhere pass their own CredentialResolver to the
provider instead.
"""

import logging
import os

from okms_secrets.exceptions import StoreValidationError
from .models import SecretKeySelector

logger = logging.getLogger(__name__)


def selector_env_var(selector: SecretKeySelector) -> str:
    """Derive the environment variable holding a credential.

    Converts name 'okms-token' and key 'token' to 'OKMS_TOKEN_TOKEN'.
    """
    name = f"{selector.name}_{selector.key}"
    return name.replace('-', '_').replace('.', '_').upper()


def env_credential_resolver(selector: SecretKeySelector) -> str:
    """Resolve a credential selector from the environment.

    Raises:
        StoreValidationError: If the variable is unset or empty
    """
    env_var = selector_env_var(selector)
    value = os.environ.get(env_var)
    if not value:
        raise StoreValidationError(
            f"credential '{selector.name}/{selector.key}' is required but not set (environment variable: {env_var})"
        )
    logger.debug(f"Resolved credential '{selector.name}/{selector.key}' from {env_var}")
    return value
