"""
OKMS v2 REST client using the requests library.

Talks to the secret manager of an OVHcloud KMS (OKMS) domain. The only
protocol detail callers see is the metadata listing, which returns the next
path segment of each entry with a trailing '/' for namespaces.
"""
import logging
import os
import shutil
import tempfile
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests

from okms_secrets.exceptions import NoSecretError, RemoteStoreError
from .base_client import OkmsClient
from .response import SecretRecord

logger = logging.getLogger(__name__)

# OKMS error code for "secret does not exist"
NOT_FOUND_ERROR_CODE = 17125377

DEFAULT_TIMEOUT = 30.0


class OkmsRestClient(OkmsClient):
    """OKMS secret manager client over HTTPS.

    One instance serves one OKMS domain. The session is configured once with
    either a bearer token or a client certificate and reused for every call.
    """

    def __init__(self, server: str, okms_id: str, timeout: float = DEFAULT_TIMEOUT,
                 session: Optional[requests.Session] = None):
        """Initialize with the OKMS endpoint and domain id.

        Args:
            server: Base URL of the OKMS endpoint (e.g., https://eu-west-rbx.okms.ovh.net)
            okms_id: OKMS domain identifier
            timeout: Per-request timeout in seconds
            session: Optional pre-configured requests session
        """
        self.server = server.rstrip('/')
        self.okms_id = str(okms_id)
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers['Content-Type'] = 'application/json'
        self._cert_dir: Optional[str] = None

    def use_token(self, token: str) -> None:
        """Authenticate every request with a bearer token."""
        self.session.headers['Authorization'] = f'Bearer {token}'

    def use_client_certificate(self, cert_pem: str, key_pem: str) -> None:
        """Authenticate with mutual TLS.

        requests only accepts certificate files, so the PEM material is written
        to a private directory that cleanup() removes.
        """
        self._cert_dir = tempfile.mkdtemp(prefix='okms-mtls-')
        cert_file = os.path.join(self._cert_dir, 'client.crt')
        key_file = os.path.join(self._cert_dir, 'client.key')
        for file_path, content in ((cert_file, cert_pem), (key_file, key_pem)):
            fd = os.open(file_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
            with os.fdopen(fd, 'w') as f:
                f.write(content)
        self.session.cert = (cert_file, key_file)

    def cleanup(self) -> None:
        """Close the session and drop any certificate material written to disk."""
        self.session.close()
        if self._cert_dir is not None:
            shutil.rmtree(self._cert_dir, ignore_errors=True)
            self._cert_dir = None

    def _url(self, endpoint: str, path: str = '') -> str:
        url = f"{self.server}/api/{self.okms_id}/v2/{endpoint}"
        if path:
            url = f"{url}/{quote(path, safe='/')}"
        return url

    def _request(self, method: str, url: str, params: Optional[Dict[str, Any]] = None,
                 json: Optional[Dict[str, Any]] = None, secret_name: str = None) -> Any:
        """Send one request and decode the JSON body.

        Raises:
            NoSecretError: If OKMS reports the secret does not exist
            RemoteStoreError: For any other failure
        """
        try:
            response = self.session.request(method, url, params=params, json=json, timeout=self.timeout)
        except requests.RequestException as e:
            raise RemoteStoreError(f"{method} {url} failed: {e}", secret_name=secret_name) from e

        if response.status_code >= 400:
            raise self._handle_error(response, secret_name)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise RemoteStoreError(
                f"invalid JSON in okms response to {method} {url}: {e}",
                status_code=response.status_code,
                secret_name=secret_name
            ) from e

    def _handle_error(self, response: requests.Response, secret_name: str = None) -> Exception:
        """Translate an OKMS error response into an exception."""
        try:
            body = response.json()
        except ValueError:
            body = None

        if not isinstance(body, dict) or 'error_code' not in body:
            return RemoteStoreError(
                f"failed to parse okms error: HTTP {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
                secret_name=secret_name
            )

        error_code = body.get('error_code')
        if error_code == NOT_FOUND_ERROR_CODE:
            return NoSecretError(secret_name=secret_name)

        error_id = body.get('error_id', '')
        request_id = body.get('request_id', '')
        errors = body.get('errors') or []
        message = f'ID="{error_id}", Request-ID:"{request_id}", Code={error_code}'
        if errors:
            message = f"{message}, Errors={'; '.join(str(e) for e in errors)}"
        return RemoteStoreError(
            message,
            status_code=response.status_code,
            error_code=error_code,
            request_id=request_id,
            errors=[str(e) for e in errors],
            secret_name=secret_name
        )

    def read(self, path: str, version: Optional[int] = None, include_value: bool = True) -> SecretRecord:
        params = {'includeData': 'true' if include_value else 'false'}
        if version is not None:
            params['version'] = version

        logger.debug(f"Reading secret '{path}' (version: {version if version is not None else 'latest'})")
        body = self._request('GET', self._url('secret', path), params=params, secret_name=path)
        if body is None:
            raise NoSecretError(secret_name=path)

        metadata = body.get('metadata') or {}
        version_block = body.get('version') or {}
        return SecretRecord(
            path=body.get('path') or path,
            value=version_block.get('data') if include_value else None,
            current_version=metadata.get('current_version'),
            cas_required=metadata.get('cas_required'),
            metadata=metadata
        )

    def list(self, root: str) -> Optional[List[str]]:
        logger.debug(f"Listing secret metadata under '{root}'")
        body = self._request('GET', self._url('metadata', root), params={'list': 'true'}, secret_name=root)
        if body is None:
            return None
        data = body.get('data') or {}
        return data.get('keys')

    def create(self, path: str, value: Dict[str, Any]) -> None:
        logger.debug(f"Creating secret '{path}'")
        self._request(
            'POST', self._url('secret'),
            json={'path': path, 'version': {'data': value}},
            secret_name=path
        )

    def update(self, path: str, value: Dict[str, Any], expected_version: Optional[int] = None) -> None:
        params = {'cas': expected_version} if expected_version is not None else None
        logger.debug(f"Updating secret '{path}' (cas: {expected_version})")
        self._request(
            'PUT', self._url('secret', path),
            params=params,
            json={'version': {'data': value}},
            secret_name=path
        )

    def delete(self, path: str) -> None:
        logger.debug(f"Deleting secret '{path}'")
        self._request('DELETE', self._url('secret', path), secret_name=path)

    def probe_connectivity(self) -> None:
        self._request('GET', self._url('secret'), params={'pageSize': 1})
