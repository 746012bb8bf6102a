"""Custom exceptions for vault-k8s-sync.

This module defines the exception hierarchy used throughout the application.
Every fatal condition of a sync run is raised as a subclass of SyncError so
the CLI can report it and exit with a non-zero status.
"""

from vault_k8s_sync.models import LookupKind


class SyncError(Exception):
    """Base exception for all vault-k8s-sync errors.

    All custom exceptions in this package inherit from this class,
    allowing callers to catch every sync failure with a single
    except clause if desired.
    """

    pass


class ConfigError(SyncError):
    """Raised when the run configuration is invalid or incomplete.

    This can occur when:
    - Neither a token nor an AppRole role/secret id pair is provided
    - The KV engine version is not 1 or 2
    """

    pass


class AuthFailure(SyncError):
    """Raised when Vault login does not yield usable credentials.

    This can occur when:
    - The AppRole login response carries no auth block
    - The token is expired, revoked or unknown
    """

    pass


class SourceError(SyncError):
    """Base class for failures while listing or reading from Vault."""

    pass


class SourceUnavailable(SourceError):
    """Raised when Vault cannot be reached or answers with a server error."""

    pass


class SourceDenied(SourceError):
    """Raised when the authenticated client may not list or read a path."""

    pass


class SourceNotFound(SourceError):
    """Raised when a listed path or a secret does not exist in Vault.

    Also raised when a read succeeds but carries no usable payload,
    e.g. a KV v2 secret whose latest version was deleted.
    """

    pass


class StoreError(SyncError):
    """Raised when the Kubernetes API rejects or fails a Secret operation.

    Attributes:
        kind: Classification of the failure, when one is known.

    """

    def __init__(self, message: str, *, kind: LookupKind | None = None) -> None:
        super().__init__(message)
        self.kind = kind


class StoreLookupError(StoreError):
    """Raised when probing for an existing Secret fails.

    The ``kind`` attribute is always set; the upsert decision dispatches
    on it to choose between create and update.
    """

    def __init__(self, message: str, *, kind: LookupKind) -> None:
        super().__init__(message, kind=kind)


class ClusterConnectionError(StoreError):
    """Raised when connection to the Kubernetes cluster cannot be set up.

    This can occur when:
    - The kubeconfig is invalid or missing
    - The in-cluster service account environment is absent
    """

    pass
