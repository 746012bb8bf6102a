"""Vault secret source.

This module provides the VaultSource class, a thin wrapper around
``hvac.Client`` exposing the two calls the reconciler needs (list and
read) plus the authentication strategies used to obtain a token.
"""

from collections.abc import Generator
from contextlib import contextmanager
from typing import Any, Protocol

import hvac
import requests
from hvac import exceptions as hvac_exceptions
from icecream import ic

from vault_k8s_sync import console
from vault_k8s_sync.exceptions import (
    AuthFailure,
    ConfigError,
    SourceDenied,
    SourceNotFound,
    SourceUnavailable,
)
from vault_k8s_sync.models import SyncConfig


class AuthStrategy(Protocol):
    """Something that can log an hvac client in."""

    def login(self, client: hvac.Client) -> None: ...


class TokenAuth:
    """Authenticate with a pre-issued Vault token."""

    def __init__(self, token: str) -> None:
        self.token = token

    def login(self, client: hvac.Client) -> None:
        client.token = self.token
        if not client.is_authenticated():
            raise AuthFailure("Vault token is invalid or expired")

    def __repr__(self) -> str:
        return "TokenAuth(token=***)"


class AppRoleAuth:
    """Exchange an AppRole role id and secret id for a client token.

    Attributes:
        role_id: The AppRole role identifier.
        secret_id: The AppRole secret identifier.
        mount_point: Path the AppRole auth method is mounted at.

    """

    def __init__(self, role_id: str, secret_id: str, mount_point: str = "approle") -> None:
        self.role_id = role_id
        self.secret_id = secret_id
        self.mount_point = mount_point

    def login(self, client: hvac.Client) -> None:
        """Log in through AppRole and set the returned token on the client.

        Raises:
            AuthFailure: If Vault rejects the credentials or returns no token.

        """
        try:
            response = client.auth.approle.login(
                role_id=self.role_id,
                secret_id=self.secret_id,
                mount_point=self.mount_point,
            )
        except (hvac_exceptions.InvalidRequest, hvac_exceptions.Forbidden, hvac_exceptions.Unauthorized) as e:
            raise AuthFailure(f"AppRole login rejected: {e}") from e

        auth = response.get("auth") if isinstance(response, dict) else None
        if not auth or not auth.get("client_token"):
            raise AuthFailure("no auth info returned")

        client.token = auth["client_token"]

    def __repr__(self) -> str:
        return f"AppRoleAuth(role_id={self.role_id!r}, mount_point={self.mount_point!r})"


def resolve_auth(config: SyncConfig) -> AuthStrategy:
    """Pick the authentication strategy for a run.

    An AppRole role id / secret id pair takes precedence over a token.

    Raises:
        ConfigError: If neither credential set is complete.

    """
    if config.role_id and config.secret_id:
        return AppRoleAuth(config.role_id, config.secret_id, mount_point=config.approle_mount)
    if config.role_id or config.secret_id:
        raise ConfigError("AppRole auth needs both a role id and a secret id")
    if config.token:
        return TokenAuth(config.token)
    raise ConfigError("No Vault credentials: set VAULT_ROLE_ID and VAULT_SECRET_ID, or VAULT_TOKEN")


@contextmanager
def _translate_errors(operation: str, path: str) -> Generator[None, None, None]:
    """Map hvac and transport errors to the sync error taxonomy."""
    try:
        yield
    except hvac_exceptions.InvalidPath as e:
        raise SourceNotFound(f"Vault {operation} {path}: not found") from e
    except (hvac_exceptions.Forbidden, hvac_exceptions.Unauthorized) as e:
        raise SourceDenied(f"Vault {operation} {path}: permission denied") from e
    except hvac_exceptions.VaultError as e:
        raise SourceUnavailable(f"Vault {operation} {path} failed: {e}") from e
    except requests.exceptions.RequestException as e:
        raise SourceUnavailable(f"Vault {operation} {path} failed: {e}") from e


class VaultSource:
    """Read-only access to secrets under a Vault path.

    Attributes:
        client: The underlying hvac client.

    """

    def __init__(self, client: hvac.Client) -> None:
        self.client = client

    @classmethod
    def connect(cls, config: SyncConfig, auth: AuthStrategy | None = None) -> "VaultSource":
        """Create a client for ``config.vault_addr`` and log it in.

        Args:
            config: The run configuration.
            auth: Authentication strategy; resolved from config when omitted.

        Returns:
            An authenticated VaultSource.

        Raises:
            ConfigError: If no usable credentials are configured.
            AuthFailure: If login fails.
            SourceUnavailable: If Vault cannot be reached.

        """
        auth = auth or resolve_auth(config)
        ic(config.vault_addr, auth)

        console.action(f"Creating vault client for {console.highlight(config.vault_addr)}")
        source = cls(hvac.Client(url=config.vault_addr, verify=config.verify_tls))
        source.authenticate(auth)
        return source

    def authenticate(self, auth: AuthStrategy) -> None:
        """Log the client in with the given strategy."""
        try:
            with console.spinner(f"Authenticating with {type(auth).__name__}..."):
                auth.login(self.client)
        except requests.exceptions.RequestException as e:
            raise SourceUnavailable(f"Vault login failed: {e}") from e
        except hvac_exceptions.VaultError as e:
            raise AuthFailure(f"Vault login failed: {e}") from e
        console.success("Vault authentication succeeded")

    def list(self, path: str) -> dict[str, Any]:
        """List secret names at ``path``.

        Returns:
            The ``data`` block of the LIST response, holding a ``keys`` field.

        Raises:
            SourceNotFound: If nothing exists under the path.
            SourceUnavailable: If Vault cannot be reached.
            SourceDenied: If the token may not list the path.

        """
        ic(path)
        with _translate_errors("list", path):
            response = self.client.list(path)
        if not response or not isinstance(response.get("data"), dict):
            raise SourceNotFound(f"Vault list {path}: not found")
        return response["data"]

    def read(self, path: str) -> dict[str, Any]:
        """Read the secret at ``path``.

        Returns:
            The ``data`` block of the response. For KV v2 mounts the payload
            sits one level deeper, under another ``data`` key.

        Raises:
            SourceNotFound: If the secret does not exist.
            SourceUnavailable: If Vault cannot be reached.
            SourceDenied: If the token may not read the path.

        """
        ic(path)
        with _translate_errors("read", path):
            response = self.client.read(path)
        if not response or not isinstance(response.get("data"), dict):
            raise SourceNotFound(f"Vault read {path}: not found")
        return response["data"]

    def __repr__(self) -> str:
        return f"VaultSource(url={self.client.url!r})"
