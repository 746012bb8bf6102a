"""Shared test fixtures for vault-k8s-sync tests."""

from typing import Any
from unittest.mock import MagicMock, patch

import pytest

from vault_k8s_sync.exceptions import StoreLookupError
from vault_k8s_sync.models import CredentialObject, LookupKind


class FakeSource:
    """In-memory Vault source recording every call."""

    def __init__(
        self,
        listing: dict[str, Any],
        responses: dict[str, dict[str, Any]],
        failures: dict[str, Exception] | None = None,
    ) -> None:
        self.listing = listing
        self.responses = responses
        self.failures = failures or {}
        self.calls: list[tuple[str, str]] = []

    @property
    def reads(self) -> list[str]:
        return [path for op, path in self.calls if op == "read"]

    def list(self, path: str) -> dict[str, Any]:
        self.calls.append(("list", path))
        if path in self.failures:
            raise self.failures[path]
        return self.listing

    def read(self, path: str) -> dict[str, Any]:
        self.calls.append(("read", path))
        if path in self.failures:
            raise self.failures[path]
        return self.responses[path]


class FakeStore:
    """In-memory Secret store keyed by (namespace, name)."""

    def __init__(self, lookup_kinds: dict[str, LookupKind] | None = None) -> None:
        self.objects: dict[tuple[str, str], CredentialObject] = {}
        self.lookup_kinds = lookup_kinds or {}
        self.write_errors: dict[str, Exception] = {}
        self.calls: list[tuple[str, str]] = []

    def get(self, namespace: str, name: str) -> CredentialObject:
        self.calls.append(("get", name))
        if name in self.lookup_kinds:
            raise StoreLookupError(f"lookup of {name} failed", kind=self.lookup_kinds[name])
        if (namespace, name) not in self.objects:
            raise StoreLookupError(f"secrets {name!r} not found", kind=LookupKind.NOT_FOUND)
        return self.objects[(namespace, name)]

    def create(self, namespace: str, obj: CredentialObject) -> None:
        self.calls.append(("create", obj.name))
        if obj.name in self.write_errors:
            raise self.write_errors[obj.name]
        self.objects[(namespace, obj.name)] = obj

    def update(self, namespace: str, obj: CredentialObject) -> None:
        self.calls.append(("update", obj.name))
        if obj.name in self.write_errors:
            raise self.write_errors[obj.name]
        self.objects[(namespace, obj.name)] = obj

    def count(self, op: str) -> int:
        return sum(1 for call, _ in self.calls if call == op)


@pytest.fixture
def kv2_source():
    """KV v2 source with three secrets under secret/app."""
    return FakeSource(
        listing={"keys": ["db", "api", "cache"]},
        responses={
            "secret/app/data/db": {"data": {"user": "alice", "ttl": 30}, "metadata": {"version": 3}},
            "secret/app/data/api": {"data": {"token": "s3cr3t"}, "metadata": {"version": 1}},
            "secret/app/data/cache": {"data": {"enabled": True, "ratio": 0.5}, "metadata": {"version": 2}},
        },
    )


@pytest.fixture
def kv1_source():
    """KV v1 source with two secrets under kv/team."""
    return FakeSource(
        listing={"keys": ["db", "smtp"]},
        responses={
            "kv/team/db": {"user": "bob", "port": 5432},
            "kv/team/smtp": {"host": "mail.example.com"},
        },
    )


@pytest.fixture
def store():
    """Empty in-memory Secret store."""
    return FakeStore()


@pytest.fixture
def mock_hvac_client():
    """Mock hvac.Client as constructed by VaultSource.connect."""
    with patch("vault_k8s_sync.vault.hvac.Client") as mock:
        client = MagicMock()
        client.url = "https://vault.example.com"
        client.is_authenticated.return_value = True
        client.auth.approle.login.return_value = {"auth": {"client_token": "hvs.issued"}}
        mock.return_value = client
        yield client


@pytest.fixture
def mock_kube_contexts():
    """Mock kubernetes config contexts."""
    with patch("kubernetes.config.list_kube_config_contexts") as mock:
        mock.return_value = ([{"name": "test-context"}, {"name": "prod"}], {"name": "test-context"})
        yield mock


@pytest.fixture
def mock_kube_config():
    """Mock kubernetes kubeconfig loading."""
    with patch("kubernetes.config.load_kube_config") as mock:
        yield mock


@pytest.fixture
def mock_incluster_config():
    """Mock kubernetes in-cluster config loading."""
    with patch("kubernetes.config.load_incluster_config") as mock:
        yield mock


@pytest.fixture
def mock_core_v1_api():
    """Mock CoreV1Api for Secret operations."""
    with patch("kubernetes.client.CoreV1Api") as mock:
        api_instance = MagicMock()
        mock.return_value = api_instance
        yield api_instance


@pytest.fixture
def make_source():
    """Factory for FakeSource instances."""
    return FakeSource


@pytest.fixture
def make_store():
    """Factory for FakeStore instances."""
    return FakeStore
