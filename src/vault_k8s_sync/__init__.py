"""vault-k8s-sync: mirror Vault KV secrets into Kubernetes Secrets.

This package lists the secrets under a Vault KV path (v1 or v2), reads
each one and creates or replaces an Opaque Secret of the same name in a
Kubernetes namespace.

Example usage:
    from vault_k8s_sync import KubernetesStore, Reconciler, VaultSource
    from vault_k8s_sync.models import KVMode

    source = VaultSource.connect(config)
    store = KubernetesStore.connect(local=True)
    report = Reconciler(
        source, store, base_path="secret/app", mode=KVMode.KV_V2, namespace="apps"
    ).run()
"""

__version__ = "0.1.0"

from vault_k8s_sync.cli import cli
from vault_k8s_sync.cluster import DryRunStore, KubernetesStore
from vault_k8s_sync.exceptions import (
    AuthFailure,
    ClusterConnectionError,
    ConfigError,
    SourceDenied,
    SourceError,
    SourceNotFound,
    SourceUnavailable,
    StoreError,
    StoreLookupError,
    SyncError,
)
from vault_k8s_sync.reconcile import Reconciler
from vault_k8s_sync.vault import AppRoleAuth, TokenAuth, VaultSource

__all__ = [
    # Version
    "__version__",
    # Main CLI
    "cli",
    # Classes
    "AppRoleAuth",
    "DryRunStore",
    "KubernetesStore",
    "Reconciler",
    "TokenAuth",
    "VaultSource",
    # Exceptions
    "SyncError",
    "ConfigError",
    "AuthFailure",
    "SourceError",
    "SourceDenied",
    "SourceNotFound",
    "SourceUnavailable",
    "StoreError",
    "StoreLookupError",
    "ClusterConnectionError",
]
