"""Pydantic models for the OKMS secrets connector.

Defines request descriptors (remote references, find and push descriptors),
the store configuration with its authentication union, and response models
with meta/data separation for the task layer.
"""

from enum import Enum
from typing import Annotated, Any, Dict, Literal, Optional, Union
from uuid import UUID

from pydantic import (
    AliasChoices, BaseModel, ConfigDict, Field, ValidationError, model_validator
)


# Request Models
class MetadataPolicy(str, Enum):
    """How secret metadata should be handled on read."""
    NONE = "None"
    FETCH = "Fetch"


class RemoteReference(BaseModel):
    """Reference to one secret, optionally narrowed to a property or pinned to a version."""
    model_config = ConfigDict(populate_by_name=True)

    key: str = ""
    property: str = ""
    version: str = ""
    metadata_policy: MetadataPolicy = Field(
        default=MetadataPolicy.NONE,
        validation_alias=AliasChoices("metadata_policy", "metadataPolicy")
    )


class FindName(BaseModel):
    """Name filter of a find request."""
    regexp: str


class FindReference(BaseModel):
    """Request to read every secret under a path, optionally filtered by name."""
    path: Optional[str] = None
    name: Optional[FindName] = None


class PushDescriptor(BaseModel):
    """Mapping rule from local key/value pairs to the shape of the remote value."""
    model_config = ConfigDict(populate_by_name=True)

    remote_key: str = Field(default="", validation_alias=AliasChoices("remote_key", "remoteKey"))
    secret_key: str = Field(default="", validation_alias=AliasChoices("secret_key", "secretKey"))
    property: str = ""


# Store Configuration Models
class SecretKeySelector(BaseModel):
    """Reference to one key of a credential secret held by the host."""
    name: str
    key: str
    namespace: Optional[str] = None


class TokenAuth(BaseModel):
    """Bearer token authentication."""
    model_config = ConfigDict(populate_by_name=True)

    method: Literal["token"] = "token"
    token_secret_ref: Optional[SecretKeySelector] = Field(
        default=None,
        validation_alias=AliasChoices("token_secret_ref", "tokenSecretRef")
    )


class MtlsAuth(BaseModel):
    """Mutual TLS authentication with a client certificate and key."""
    model_config = ConfigDict(populate_by_name=True)

    method: Literal["mtls"] = "mtls"
    cert_secret_ref: Optional[SecretKeySelector] = Field(
        default=None,
        validation_alias=AliasChoices("cert_secret_ref", "certSecretRef")
    )
    key_secret_ref: Optional[SecretKeySelector] = Field(
        default=None,
        validation_alias=AliasChoices("key_secret_ref", "keySecretRef")
    )

    @model_validator(mode="after")
    def _require_certificate_and_key(self) -> 'MtlsAuth':
        if self.cert_secret_ref is None or self.key_secret_ref is None:
            raise ValueError("missing tls certificate or key")
        return self


StoreAuth = Annotated[Union[TokenAuth, MtlsAuth], Field(discriminator="method")]


def _normalize_auth(auth: Any) -> Any:
    """Turn the `{token: {...}}` / `{mtls: {...}}` form into a tagged variant.

    Exactly one method must be present.
    """
    if isinstance(auth, (TokenAuth, MtlsAuth)):
        return auth
    if not auth:
        raise ValueError("missing authentication method")
    if not isinstance(auth, dict):
        raise ValueError(f"invalid authentication method: {auth!r}")
    if "method" in auth:
        return auth

    token = auth.get("token")
    mtls = auth.get("mtls")
    if token is None and mtls is None:
        raise ValueError("missing authentication method")
    if token is not None and mtls is not None:
        raise ValueError("only one authentication method allowed (mtls | token)")
    if token is not None:
        return {"method": "token", **token}
    return {"method": "mtls", **mtls}


class OkmsStoreConfig(BaseModel):
    """Connection settings of one OKMS secret store."""
    model_config = ConfigDict(populate_by_name=True)

    server: str
    okms_id: UUID = Field(validation_alias=AliasChoices("okms_id", "okmsid", "okmsId"))
    cas_required: bool = Field(default=False, validation_alias=AliasChoices("cas_required", "casRequired"))
    timeout: float = 30.0
    auth: StoreAuth

    @model_validator(mode="before")
    @classmethod
    def _normalize(cls, data: Any) -> Any:
        if isinstance(data, dict):
            data = dict(data)
            data["auth"] = _normalize_auth(data.get("auth"))
            if data.get("cas_required", data.get("casRequired")) is None:
                data.pop("cas_required", None)
                data.pop("casRequired", None)
        return data


def describe_validation_error(error: ValidationError) -> str:
    """Render a pydantic ValidationError as a short one-line message."""
    parts = []
    for item in error.errors():
        message = item.get("msg", "")
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        location = ".".join(str(p) for p in item.get("loc", ()))
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts)


# Provider Models
class ValidationResult(str, Enum):
    """Outcome of a store reachability check."""
    READY = "Ready"


class StoreCapabilities(str, Enum):
    """What a provider can do with its store."""
    READ_WRITE = "ReadWrite"


# Response Meta Models
class ErrorInfo(BaseModel):
    """Error information in responses."""
    code: str
    message: str


class OperationMeta(BaseModel):
    """Meta information for all task responses."""
    success: bool
    provider: Optional[str] = None
    operation: Optional[str] = None  # e.g., "get", "find", "push", "delete", "validate"
    error: Optional[ErrorInfo] = None


class OperationResponse(BaseModel):
    """Response printed by the secrets tasks."""
    meta: OperationMeta
    key: Optional[str] = None
    data: Optional[Union[str, bool, Dict[str, str]]] = None
