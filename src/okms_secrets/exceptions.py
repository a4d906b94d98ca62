"""
Exception classes for the OKMS secrets connector, with built-in guidance.

NoSecretError is a control-flow signal ("the path holds no secret") and is
caught by the reader, the fetcher and the push reconciler. Everything else is
returned to the caller unchanged.
"""
from typing import List, Optional


class OkmsSecretsException(Exception):
    """Base exception for all connector errors."""
    def __init__(self, message: str, secret_name: str = None):
        super().__init__(message)
        self.secret_name = secret_name
        self.guidance = self._generate_guidance()

    def _generate_guidance(self):
        """Override in subclasses to provide specific guidance."""
        return f"""
❌ Secrets error: {self}
💡 Check the secret reference and the store configuration and try again
"""


class NoSecretError(OkmsSecretsException):
    """Raised when the target path holds no secret."""
    def __init__(self, message: str = "Secret does not exist", secret_name: str = None):
        super().__init__(message, secret_name=secret_name)

    def _generate_guidance(self):
        name = self.secret_name or '<remote-key>'
        return f"""
❌ Secret '{name}' does not exist in the secret manager
💡 Check the remote key, or list what is available: okms-secrets secrets.find --path=<prefix>
"""


class SecretValidationError(OkmsSecretsException):
    """Raised when a caller-supplied reference or payload is malformed.

    Always raised before any call to the remote store.
    """

    def _generate_guidance(self):
        return f"""
❌ Invalid request: {self}
💡 Fix the reference (key, property, version, regexp) or the pushed secret and try again
"""


class StoreValidationError(SecretValidationError):
    """Raised when the store configuration cannot be used to build a client."""

    def _generate_guidance(self):
        return f"""
❌ Invalid secret store configuration: {self}
💡 The 'secrets.store' section of app.yaml needs a server, an okms_id and exactly one
   authentication method:
     auth:
       token:
         tokenSecretRef: {{name: ..., key: ...}}
   or
     auth:
       mtls:
         certSecretRef: {{name: ..., key: ...}}
         keySecretRef: {{name: ..., key: ...}}
"""


class PropertyNotFoundError(OkmsSecretsException):
    """Raised when a property is absent from an otherwise valid secret value."""
    def __init__(self, property_name: str, secret_name: str = None):
        self.property_name = property_name
        super().__init__(f'secret property "{property_name}" not found', secret_name=secret_name)

    def _generate_guidance(self):
        name = self.secret_name or '<remote-key>'
        return f"""
❌ Property '{self.property_name}' not found in secret '{name}'
💡 Read the whole secret without a property to see which fields it holds:
   okms-secrets secrets.get {name}
"""


class RemoteStoreError(OkmsSecretsException):
    """Raised for transport, authorization and server-side failures.

    Never retried by this package.
    """
    def __init__(self, message: str, status_code: Optional[int] = None,
                 error_code: Optional[int] = None, request_id: Optional[str] = None,
                 errors: Optional[List[str]] = None, secret_name: str = None):
        self.status_code = status_code
        self.error_code = error_code
        self.request_id = request_id
        self.errors = errors or []
        super().__init__(message, secret_name=secret_name)

    def _generate_guidance(self):
        return f"""
❌ The secret manager rejected the request: {self}
💡 Check connectivity and credentials: okms-secrets secrets.validate
"""


class AggregateEmptyResultError(OkmsSecretsException):
    """Raised when a read-all operation produced no usable secret."""


class NoSecretsFoundError(AggregateEmptyResultError):
    """Raised when enumeration finds no secret under the requested path."""
    def __init__(self, message: str = "no secrets found in the secret manager", secret_name: str = None):
        super().__init__(message, secret_name=secret_name)

    def _generate_guidance(self):
        return f"""
❌ {self}
💡 Nothing is stored under the requested path; check the prefix (it must not start with '/')
"""


class NoSecretsMatchedError(AggregateEmptyResultError):
    """Raised when no enumerated secret survived regexp filtering and fetching."""
    def __init__(self, message: str = "no secrets matched the regexp", secret_name: str = None):
        super().__init__(message, secret_name=secret_name)

    def _generate_guidance(self):
        return f"""
❌ {self}
💡 Secrets exist under the path but none matched; loosen the regexp or drop it
"""
