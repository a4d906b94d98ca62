"""Provider registry and secrets client factory.

The hosting application builds a ProviderRegistry at startup, registers the
providers it wants (the built-in ones are listed in providers.yaml), and asks
the factory for a client configured from its store settings.
"""

import logging
import importlib
import yaml
from pathlib import Path
from typing import Optional, Dict, Any, List

from okms_secrets.config.settings import StoreSettings
from okms_secrets.exceptions import StoreValidationError
from .interface import CredentialResolver, SecretsClient, SecretsProvider

logger = logging.getLogger(__name__)

PROVIDERS_FILE = Path(__file__).parent / "providers.yaml"


class ProviderRegistry:
    """Named secrets providers available to a host application."""

    def __init__(self):
        self._providers: Dict[str, SecretsProvider] = {}

    def register(self, name: str, provider: SecretsProvider, replace: bool = False) -> None:
        """Register a provider under a name.

        Raises:
            ValueError: If the name is already taken and replace is False
        """
        if name in self._providers and not replace:
            raise ValueError(f"Secrets provider '{name}' is already registered")
        self._providers[name] = provider
        logger.debug(f"Registered secrets provider '{name}' ({type(provider).__name__})")

    def get(self, name: str) -> SecretsProvider:
        if name not in self._providers:
            raise StoreValidationError(
                f"Unknown secrets provider: {name}. Available: {self.names()}"
            )
        return self._providers[name]

    def names(self) -> List[str]:
        return sorted(self._providers)

    def __contains__(self, name: str) -> bool:
        return name in self._providers


def _load_providers_config(providers_file: Optional[Path] = None) -> Dict[str, Any]:
    """Load providers configuration from providers.yaml."""
    providers_file = providers_file or PROVIDERS_FILE
    try:
        with open(providers_file, 'r') as f:
            config = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.error(f"Failed to load providers config from {providers_file}: {e}")
        raise RuntimeError(f"Could not load providers configuration: {e}") from e
    logger.debug(f"Loaded providers config from {providers_file}")
    return config


def default_provider_name() -> str:
    """Return the provider used when the settings do not name one."""
    return _load_providers_config().get('default_provider', 'okms')


def _create_provider_instance(name: str, class_path: str) -> SecretsProvider:
    """Create a provider instance from its class path using dynamic import."""
    # "module.path.ClassName" -> module.path + ClassName
    module_path, class_name = class_path.rsplit('.', 1)
    try:
        module = importlib.import_module(module_path)
        provider_class = getattr(module, class_name)
    except (ImportError, AttributeError) as e:
        logger.error(f"Failed to load {name} provider from {class_path}: {e}")
        raise RuntimeError(f"Could not load {name} secrets provider: {e}") from e
    return provider_class()


def register_builtin_providers(registry: ProviderRegistry,
                               providers_file: Optional[Path] = None) -> ProviderRegistry:
    """Register every provider listed in providers.yaml.

    Args:
        registry: Registry to populate
        providers_file: Alternative providers file, mostly for tests

    Returns:
        The same registry, for chaining
    """
    providers = _load_providers_config(providers_file).get('providers', {})
    for name, provider_config in providers.items():
        registry.register(name, _create_provider_instance(name, provider_config['class']))
    return registry


def create_secrets_client(registry: ProviderRegistry, settings: StoreSettings,
                          credential_resolver: Optional[CredentialResolver] = None) -> SecretsClient:
    """Create a secrets client for the configured store.

    Args:
        registry: Registry holding the provider named by the settings
        settings: Provider name and raw store configuration
        credential_resolver: Overrides the provider's credential resolver

    Returns:
        A client ready to use; callers close it when done

    Raises:
        StoreValidationError: If the provider is unknown or the store is invalid
    """
    provider_name = settings.provider or default_provider_name()
    provider = registry.get(provider_name)
    logger.debug(f"Creating secrets client with provider: {provider_name}")
    return provider.new_client(settings.store, credential_resolver=credential_resolver)
