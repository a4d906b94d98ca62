"""Secrets tasks.

Simple task definitions that build a client from app.yaml, run one operation
and print the result as JSON. Connector errors are reported with their
built-in guidance."""

import sys
import json
from invoke import task

from okms_secrets.exceptions import OkmsSecretsException
from okms_secrets.secrets.models import ErrorInfo, OperationMeta, OperationResponse


def _create_client():
    """Build a secrets client from the current app.yaml and environment."""
    from okms_secrets.config.settings import load_store_settings
    from okms_secrets.secrets.factory import (
        ProviderRegistry, create_secrets_client, register_builtin_providers
    )

    registry = register_builtin_providers(ProviderRegistry())
    return create_secrets_client(registry, load_store_settings())


def _decode(data: bytes) -> str:
    return data.decode('utf-8', errors='replace')


def _print_response(response: OperationResponse):
    print(response.model_dump_json(indent=2, exclude_none=True))


def _run(operation: str, key, action):
    """Run `action(client)` and print its result, exiting 1 on failure."""
    client = None
    try:
        client = _create_client()
        data = action(client)
    except OkmsSecretsException as e:
        provider = client.provider_type if client is not None else None
        _print_response(OperationResponse(
            meta=OperationMeta(
                success=False,
                provider=provider,
                operation=operation,
                error=ErrorInfo(code=type(e).__name__, message=str(e)),
            ),
            key=key,
        ))
        print(e.guidance, file=sys.stderr)
        sys.exit(1)
    finally:
        if client is not None:
            client.close()

    _print_response(OperationResponse(
        meta=OperationMeta(success=True, provider=client.provider_type, operation=operation),
        key=key,
        data=data,
    ))


@task(help={
    'remote_key': 'Path of the secret in the secret manager',
    'property': 'Property path inside the secret (dots, escapes, array indexes)',
    'version': 'Version to read (defaults to the current version)',
})
def get(ctx, remote_key, property='', version=''):
    """
    Get a secret, or one of its properties.

    Examples:
        okms-secrets secrets.get app/db
        okms-secrets secrets.get app/db --property=credentials.password --version=3
    """
    ref = {'key': remote_key, 'property': property, 'version': version}
    _run('get', remote_key, lambda client: _decode(client.get_secret(ref)))


@task(help={
    'remote_key': 'Path of the secret in the secret manager',
    'property': 'Property path of a JSON object inside the secret',
    'version': 'Version to read (defaults to the current version)',
})
def get_map(ctx, remote_key, property='', version=''):
    """
    Get a secret, or one of its object properties, as key/value pairs.

    Examples:
        okms-secrets secrets.get-map app/db
    """
    ref = {'key': remote_key, 'property': property, 'version': version}
    _run('get-map', remote_key, lambda client: {
        key: _decode(value) for key, value in client.get_secret_map(ref).items()
    })


@task(help={
    'path': 'Path prefix to search under (defaults to the whole store)',
    'regexp': 'Only return secrets whose path matches this regular expression',
})
def find(ctx, path=None, regexp=None):
    """
    Find every secret under a path, optionally filtered by a regexp.

    Examples:
        okms-secrets secrets.find --path=app/
        okms-secrets secrets.find --path=app --regexp='db$'
    """
    find_ref = {'path': path}
    if regexp is not None:
        find_ref['name'] = {'regexp': regexp}
    _run('find', path, lambda client: {
        key: _decode(value) for key, value in client.get_all_secrets(find_ref).items()
    })


@task(help={
    'remote_key': 'Path of the secret in the secret manager',
})
def exists(ctx, remote_key):
    """
    Tell whether a secret exists, without reading its value.

    Examples:
        okms-secrets secrets.exists app/db
    """
    _run('exists', remote_key, lambda client: client.secret_exists(remote_key))


def _parse_values(values, data):
    """Build the local secret from repeated key=value pairs and/or a JSON object."""
    secret = {}
    if data:
        try:
            parsed = json.loads(data)
        except ValueError as e:
            print(f"❌ --data is not valid JSON: {e}", file=sys.stderr)
            sys.exit(1)
        if not isinstance(parsed, dict):
            print("❌ --data must be a JSON object", file=sys.stderr)
            sys.exit(1)
        for key, value in parsed.items():
            secret[key] = value if isinstance(value, str) else json.dumps(value)
    for pair in values or []:
        if '=' not in pair:
            print(f"❌ --value must look like key=value, got '{pair}'", file=sys.stderr)
            sys.exit(1)
        key, value = pair.split('=', 1)
        secret[key] = value
    return {key: value.encode('utf-8') for key, value in secret.items()}


@task(
    iterable=['value'],
    help={
        'remote_key': 'Path of the secret in the secret manager',
        'value': 'Local key=value pair to push (repeatable)',
        'data': 'Local key/value pairs as a JSON object',
        'secret_key': 'Push only this local key',
        'property': 'Nest the pushed value under this top-level property',
    }
)
def push(ctx, remote_key, value=None, data=None, secret_key='', property=''):
    """
    Push local key/value pairs into the secret manager.

    Nothing is written when the remote secret already holds the same data.

    Examples:
        okms-secrets secrets.push app/db --value user=admin --value password=s3cr3t
        okms-secrets secrets.push app/db --data '{"port": 5432}' --property=config
    """
    secret = _parse_values(value, data)
    descriptor = {'remote_key': remote_key, 'secret_key': secret_key, 'property': property}
    _run('push', remote_key, lambda client: client.push_secret(secret, descriptor))


@task(help={
    'remote_key': 'Path of the secret to delete',
    'yes': 'Skip confirmation prompt',
})
def delete(ctx, remote_key, yes=False):
    """
    Delete a secret.

    Examples:
        okms-secrets secrets.delete app/db
        okms-secrets secrets.delete app/db --yes
    """
    # Interactive confirmation unless --yes
    if not yes:
        response = input(f"Delete secret '{remote_key}'? Type 'yes' to confirm: ")
        if response.lower() != 'yes':
            print("❌ Operation cancelled")
            sys.exit(1)

    _run('delete', remote_key, lambda client: client.delete_secret(remote_key))


@task
def validate(ctx):
    """
    Check that the configured secret store is reachable with its credentials.

    Examples:
        okms-secrets secrets.validate
    """
    _run('validate', None, lambda client: client.validate().value)
