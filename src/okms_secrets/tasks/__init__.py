"""
okms-secrets task collection.

Tasks are grouped by submodule; secrets operations live under the
'secrets' namespace (okms-secrets secrets.get, secrets.push, ...).
"""

from invoke import Collection

from . import secrets

namespace = Collection()

# Add secrets as a nested namespace
secrets_collection = Collection.from_module(secrets)
namespace.add_collection(secrets_collection, name='secrets')
