"""Vault to Kubernetes reconciliation.

This module holds the sync pipeline: list secret names under a Vault path,
read each one, turn its payload into an opaque Secret and create or
replace that Secret in the target namespace.

Path shapes per KV engine version, for a base path ``secret/app`` and a
secret ``db``:

    KV v1: list ``secret/app/``, read ``secret/app/db``
    KV v2: list ``secret/app/metadata/``, read ``secret/app/data/db``
"""

import json
import math
from collections.abc import Mapping
from typing import Any, Protocol

from icecream import ic

from vault_k8s_sync import console
from vault_k8s_sync.exceptions import SourceNotFound, StoreLookupError, SyncError
from vault_k8s_sync.models import (
    CredentialObject,
    ErrorPolicy,
    KVMode,
    LookupKind,
    SecretOutcome,
    SyncReport,
    UpsertAction,
)

# Above this magnitude integral floats keep exponent notation.
_FLOAT_EXPONENT_THRESHOLD = 1e21


class SecretSource(Protocol):
    def list(self, path: str) -> dict[str, Any]: ...

    def read(self, path: str) -> dict[str, Any]: ...


class CredentialStore(Protocol):
    def get(self, namespace: str, name: str) -> CredentialObject: ...

    def create(self, namespace: str, obj: CredentialObject) -> None: ...

    def update(self, namespace: str, obj: CredentialObject) -> None: ...


def list_path(base_path: str, mode: KVMode) -> str:
    """Return the Vault path to LIST for secret names."""
    base = base_path.rstrip("/")
    if mode is KVMode.KV_V2:
        return f"{base}/metadata/"
    return f"{base}/"


def read_path(base_path: str, mode: KVMode, name: str) -> str:
    """Return the Vault path to read the secret ``name`` from."""
    base = base_path.rstrip("/")
    if mode is KVMode.KV_V2:
        return f"{base}/data/{name}"
    return f"{base}/{name}"


def scalar_to_bytes(value: Any) -> bytes:
    """Convert a Vault field value to the bytes stored in the Secret.

    Total over JSON values:

    - bytes pass through, strings are UTF-8 encoded
    - booleans become ``true`` / ``false``
    - integers use their decimal form
    - integral floats below 1e21 drop the fractional part (``30.0`` -> ``30``),
      other floats use the shortest repr (``1.5``, ``1e+21``)
    - None becomes empty bytes
    - mappings and sequences are encoded as compact JSON

    Args:
        value: A value from a decoded Vault payload.

    Returns:
        The byte representation written into the Secret.

    """
    if isinstance(value, bytes):
        return value
    if isinstance(value, str):
        return value.encode("utf-8")
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return b"true" if value else b"false"
    if isinstance(value, int):
        return str(value).encode("ascii")
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer() and abs(value) < _FLOAT_EXPONENT_THRESHOLD:
            return str(int(value)).encode("ascii")
        return repr(value).encode("ascii")
    if value is None:
        return b""
    return json.dumps(value, separators=(",", ":"), sort_keys=True, default=str).encode("utf-8")


def extract_payload(response: Mapping[str, Any], mode: KVMode, path: str = "") -> Mapping[str, Any]:
    """Pull the field mapping out of a read response.

    Args:
        response: The ``data`` block returned by the source read.
        mode: KV engine version; KV v2 nests the fields under ``data``.
        path: The read path, used in the error message.

    Raises:
        SourceNotFound: If the response holds no field mapping, e.g. a
            KV v2 secret whose current version is deleted.

    """
    payload = response.get("data") if mode is KVMode.KV_V2 else response
    if not isinstance(payload, Mapping):
        raise SourceNotFound(f"Vault read {path}: secret has no readable data")
    return payload


def build_credential(name: str, payload: Mapping[str, Any]) -> CredentialObject:
    """Build the opaque Secret for ``name``; keys are kept verbatim."""
    return CredentialObject(
        name=name,
        data={str(key): scalar_to_bytes(value) for key, value in payload.items()},
    )


def secret_names(listing: Mapping[str, Any]) -> tuple[list[str], int]:
    """Extract secret names from a LIST response.

    Scalar entries (str, int, float, bool) are turned into strings; any
    other entry is skipped. Duplicates after the first are skipped too.

    Returns:
        The names in listing order and the number of skipped entries.

    """
    keys = listing.get("keys")
    if not isinstance(keys, list):
        console.warning("Vault listing has no keys sequence, nothing to sync")
        return [], 0

    names: list[str] = []
    seen: set[str] = set()
    skipped = 0
    for entry in keys:
        if isinstance(entry, bool):
            name = "true" if entry else "false"
        elif isinstance(entry, (str, int, float)):
            name = entry if isinstance(entry, str) else str(entry)
        else:
            console.warning(f"Skipping malformed listing entry of type {type(entry).__name__}")
            skipped += 1
            continue
        if name in seen:
            console.warning(f"Skipping duplicate listing entry {console.highlight(name)}")
            skipped += 1
            continue
        seen.add(name)
        names.append(name)
    return names, skipped


def upsert(store: CredentialStore, namespace: str, obj: CredentialObject) -> UpsertAction:
    """Create ``obj`` if absent, otherwise replace it.

    The existence probe is a single ``get``. Only a NOT_FOUND lookup leads to
    a create; a lookup that fails for any other reason is routed to update,
    which surfaces the real problem if the Secret does not exist.

    Raises:
        StoreError: If the create or update is rejected.

    """
    try:
        store.get(namespace, obj.name)
    except StoreLookupError as e:
        if e.kind is LookupKind.NOT_FOUND:
            console.step(f"Secret {console.highlight(obj.name)} doesn't exist, creating")
            store.create(namespace, obj)
            return UpsertAction.CREATED
        console.warning(f"Lookup of {console.highlight(obj.name)} failed ({e.kind.value}), trying update: {e}")

    console.step(f"Secret {console.highlight(obj.name)} exists, updating")
    store.update(namespace, obj)
    return UpsertAction.UPDATED


class _AbortOnFirstError:
    def record(self, report: SyncReport, name: str, error: SyncError) -> None:
        raise error


class _ContinueAndReport:
    def record(self, report: SyncReport, name: str, error: SyncError) -> None:
        console.error(f"Secret {console.highlight(name)} failed: {error}")
        report.outcomes.append(SecretOutcome(name=name, error=str(error)))


_POLICIES = {
    ErrorPolicy.ABORT_ON_FIRST_ERROR: _AbortOnFirstError,
    ErrorPolicy.CONTINUE_AND_REPORT: _ContinueAndReport,
}


class Reconciler:
    """Mirror every secret under a Vault path into a Kubernetes namespace.

    Runs strictly sequentially: each name is read and upserted before the
    next one is touched. No state is kept between runs.

    Attributes:
        source: Authenticated Vault source.
        store: Kubernetes Secret store.
        base_path: Vault path the secrets live under.
        mode: KV engine version of that path.
        namespace: Target namespace.
        policy: Reaction to a per-secret failure.

    """

    def __init__(
        self,
        source: SecretSource,
        store: CredentialStore,
        *,
        base_path: str,
        mode: KVMode,
        namespace: str,
        policy: ErrorPolicy = ErrorPolicy.ABORT_ON_FIRST_ERROR,
    ) -> None:
        self.source = source
        self.store = store
        self.base_path = base_path
        self.mode = KVMode(mode)
        self.namespace = namespace
        self.policy = ErrorPolicy(policy)

    def run(self) -> SyncReport:
        """Sync all secrets once.

        A failing list is always fatal. With ABORT_ON_FIRST_ERROR the first
        read or write error is raised and later names are not processed;
        Secrets written before the failure stay in place.

        Returns:
            The run report.

        Raises:
            SyncError: On a listing failure, or on any per-secret failure
                under ABORT_ON_FIRST_ERROR.

        """
        errors = _POLICIES[self.policy]()
        report = SyncReport()

        path = list_path(self.base_path, self.mode)
        console.action(f"Listing secrets under {console.highlight(path)}")
        listing = self.source.list(path)
        ic(listing)

        names, report.skipped = secret_names(listing)
        keys = listing.get("keys")
        report.listed = len(keys) if isinstance(keys, list) else 0

        console.action(
            f"Syncing {console.highlight(str(len(names)))} secret(s) into namespace "
            f"{console.highlight(self.namespace)}"
        )
        for name in names:
            try:
                action = self.sync_one(name)
            except SyncError as e:
                errors.record(report, name, e)
                continue
            report.outcomes.append(SecretOutcome(name=name, action=action))

        return report

    def sync_one(self, name: str) -> UpsertAction:
        """Read, transform and upsert a single secret."""
        console.action(f"Processing secret {console.highlight(name)}")
        path = read_path(self.base_path, self.mode, name)
        response = self.source.read(path)
        obj = build_credential(name, extract_payload(response, self.mode, path))
        ic(obj.name, sorted(obj.data))
        return upsert(self.store, self.namespace, obj)

    def __repr__(self) -> str:
        return (
            f"Reconciler(base_path={self.base_path!r}, mode={self.mode.name}, "
            f"namespace={self.namespace!r}, policy={self.policy.value})"
        )
