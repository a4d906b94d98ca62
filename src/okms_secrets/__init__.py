"""
OKMS secrets connector.

Reads, discovers and pushes secrets in an OKMS secret manager. Host
applications build a ProviderRegistry at startup:

    from okms_secrets.secrets import ProviderRegistry, register_builtin_providers, create_secrets_client
    from okms_secrets.config import load_store_settings

    registry = register_builtin_providers(ProviderRegistry())
    client = create_secrets_client(registry, load_store_settings())
"""

__version__ = '0.1.0'
