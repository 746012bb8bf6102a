"""Data models for vault-k8s-sync.

This module provides the type-safe data structures shared by the Vault
source, the Kubernetes store and the reconciler.
"""

from dataclasses import dataclass, field
from enum import Enum, IntEnum

OPAQUE_SECRET_TYPE = "Opaque"


class KVMode(IntEnum):
    """Vault KV secrets engine version.

    Fixed for a whole run. Inherits from int so it can be built straight
    from the ``VAULT_KV_VERSION`` setting.
    """

    KV_V1 = 1
    KV_V2 = 2


class LookupKind(str, Enum):
    """Why a Secret lookup in the target namespace failed."""

    NOT_FOUND = "not-found"
    TRANSIENT = "transient"
    DENIED = "denied"


class ErrorPolicy(str, Enum):
    """How the reconciler reacts to a per-secret failure."""

    ABORT_ON_FIRST_ERROR = "abort-on-first-error"
    CONTINUE_AND_REPORT = "continue-and-report"


class UpsertAction(str, Enum):
    """Mutating call issued for a Secret."""

    CREATED = "created"
    UPDATED = "updated"


@dataclass(frozen=True, slots=True)
class CredentialObject:
    """An opaque Kubernetes Secret ready to be written.

    Attributes:
        name: The Secret name, identical to the Vault secret name.
        data: Field name to raw byte value.
        type: Kubernetes Secret type, always Opaque.

    """

    name: str
    data: dict[str, bytes]
    type: str = OPAQUE_SECRET_TYPE


@dataclass(frozen=True, slots=True)
class SecretOutcome:
    """Result of syncing a single secret name."""

    name: str
    action: UpsertAction | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(slots=True)
class SyncReport:
    """Summary of a reconciliation run.

    Attributes:
        listed: Number of entries returned by the Vault listing.
        skipped: Listing entries ignored, either because they are not scalar
            names or because they repeat an earlier name.
        outcomes: Per-name results in processing order.

    """

    listed: int = 0
    skipped: int = 0
    outcomes: list[SecretOutcome] = field(default_factory=list)

    def _count(self, action: UpsertAction) -> int:
        return sum(1 for outcome in self.outcomes if outcome.action is action)

    @property
    def created(self) -> int:
        return self._count(UpsertAction.CREATED)

    @property
    def updated(self) -> int:
        return self._count(UpsertAction.UPDATED)

    @property
    def failed(self) -> list[SecretOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.ok]

    @property
    def succeeded(self) -> bool:
        return not self.failed


@dataclass(frozen=True, slots=True)
class SyncConfig:
    """Settings for one sync invocation, assembled by the CLI.

    Attributes:
        vault_addr: Vault server URL.
        secret_path: Base path under which the secrets live.
        namespace: Target Kubernetes namespace.
        kv_mode: KV engine version of the mount behind secret_path.
        role_id: AppRole role id.
        secret_id: AppRole secret id.
        token: Vault token, used when no AppRole pair is set.
        approle_mount: Mount point of the AppRole auth method.
        verify_tls: Whether to verify the Vault TLS certificate.
        local: Use a kubeconfig instead of the in-cluster service account.
        kubeconfig: Optional kubeconfig path (local mode only).
        context: Optional kube context name (local mode only).
        policy: Reaction to per-secret failures.
        dry_run: Render manifests instead of writing to the cluster.

    """

    vault_addr: str
    secret_path: str
    namespace: str
    kv_mode: KVMode = KVMode.KV_V2
    role_id: str | None = None
    secret_id: str | None = None
    token: str | None = None
    approle_mount: str = "approle"
    verify_tls: bool = True
    local: bool = False
    kubeconfig: str | None = None
    context: str | None = None
    policy: ErrorPolicy = ErrorPolicy.ABORT_ON_FIRST_ERROR
    dry_run: bool = False
