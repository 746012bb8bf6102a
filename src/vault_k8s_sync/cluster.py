"""Kubernetes Secret store.

This module provides the KubernetesStore class, which connects to a
cluster (in-cluster service account or a local kubeconfig) and exposes
get/create/update for Secrets in a namespace, and DryRunStore, which
renders the same writes as YAML instead.
"""

import base64

import click
import questionary
from icecream import ic
from kubernetes import client, config
from kubernetes.client.exceptions import ApiException
from kubernetes.config.config_exception import ConfigException
from urllib3.exceptions import HTTPError, MaxRetryError

from vault_k8s_sync import console
from vault_k8s_sync.exceptions import ClusterConnectionError, StoreError, StoreLookupError
from vault_k8s_sync.manifests import render_yaml, to_v1_secret
from vault_k8s_sync.models import OPAQUE_SECRET_TYPE, CredentialObject, LookupKind
from vault_k8s_sync.styles import POINTER, PROMPT_STYLE, QMARK


def classify_status(status: int | None) -> LookupKind:
    """Map an HTTP status from the Kubernetes API to a lookup kind."""
    if status == 404:
        return LookupKind.NOT_FOUND
    if status in (401, 403):
        return LookupKind.DENIED
    return LookupKind.TRANSIENT


def _transport_reason(e: HTTPError) -> object:
    """Return the underlying cause of a urllib3 transport error."""
    if isinstance(e, MaxRetryError):
        return e.reason
    return e


def _from_v1_secret(secret: client.V1Secret) -> CredentialObject:
    data = {key: base64.b64decode(value) for key, value in (secret.data or {}).items()}
    return CredentialObject(
        name=secret.metadata.name,
        data=data,
        type=secret.type or OPAQUE_SECRET_TYPE,
    )


class KubernetesStore:
    """Secrets in a Kubernetes cluster, addressed by namespace and name.

    Attributes:
        api: CoreV1Api client bound to the selected cluster.
        context: The kube context in use, or None for in-cluster config.

    """

    def __init__(self, api: client.CoreV1Api, context: str | None = None) -> None:
        self.api = api
        self.context = context

    @classmethod
    def connect(
        cls,
        *,
        local: bool,
        kubeconfig: str | None = None,
        context: str | None = None,
        select_context: bool = False,
    ) -> "KubernetesStore":
        """Load cluster credentials and build a store.

        Args:
            local: Use a kubeconfig file instead of the in-cluster service account.
            kubeconfig: Path to the kubeconfig; the default location when None.
            context: Context to use; the current context when None.
            select_context: Prompt for the context. Only honored in local mode.

        Raises:
            ClusterConnectionError: If the configuration cannot be loaded.

        """
        console.action("Creating k8s client")
        if not local:
            try:
                config.load_incluster_config()
            except ConfigException as e:
                raise ClusterConnectionError(f"In-cluster configuration unavailable: {e}") from e
            console.step("Using in-cluster service account")
            return cls(client.CoreV1Api())

        context = cls._set_context(kubeconfig=kubeconfig, context=context, select_context=select_context)
        try:
            config.load_kube_config(config_file=kubeconfig, context=context)
        except ConfigException as e:
            raise ClusterConnectionError(f"Invalid or missing kubeconfig: {e}") from e
        return cls(client.CoreV1Api(), context=context)

    @staticmethod
    def _set_context(*, kubeconfig: str | None, context: str | None, select_context: bool) -> str:
        """Resolve the kube context to use in local mode.

        Returns:
            The explicit, selected or current context name.

        Raises:
            ClusterConnectionError: If kubeconfig is invalid or missing.
            click.Abort: If user cancels context selection.

        """
        try:
            contexts, current_context = config.list_kube_config_contexts(config_file=kubeconfig)
        except ConfigException as e:
            raise ClusterConnectionError(f"Invalid or missing kubeconfig: {e}") from e

        if context is None and select_context:
            context = questionary.select(
                "Select context to sync into",
                choices=[ctx["name"] for ctx in contexts],
                style=PROMPT_STYLE,
                pointer=POINTER,
                qmark=QMARK,
            ).ask()
            if context is None:
                console.warning("Context selection cancelled.")
                raise click.Abort()
        elif context is None:
            if not current_context:
                raise ClusterConnectionError("kubeconfig has no current context")
            context = str(current_context["name"])

        console.step(f"Working with {console.highlight(context)} cluster")
        return context

    def get(self, namespace: str, name: str) -> CredentialObject:
        """Fetch an existing Secret.

        Raises:
            StoreLookupError: If the Secret cannot be fetched; ``kind`` tells
                absence (NOT_FOUND) apart from other failures.

        """
        try:
            secret = self.api.read_namespaced_secret(name=name, namespace=namespace)
        except ApiException as e:
            kind = classify_status(e.status)
            ic(e.status, kind)
            raise StoreLookupError(f"Secret {namespace}/{name}: {e.status} {e.reason}", kind=kind) from e
        except HTTPError as e:
            raise StoreLookupError(
                f"Secret {namespace}/{name}: cluster unreachable: {_transport_reason(e)}", kind=LookupKind.TRANSIENT
            ) from e
        return _from_v1_secret(secret)

    def create(self, namespace: str, obj: CredentialObject) -> None:
        """Create a new Secret.

        Raises:
            StoreError: If the API rejects the Secret or cannot be reached.

        """
        try:
            self.api.create_namespaced_secret(namespace=namespace, body=to_v1_secret(obj, namespace))
        except ApiException as e:
            raise StoreError(
                f"Failed to create secret {namespace}/{obj.name}: {e.status} {e.reason}",
                kind=classify_status(e.status),
            ) from e
        except HTTPError as e:
            raise StoreError(
                f"Failed to create secret {namespace}/{obj.name}: cluster unreachable: {_transport_reason(e)}",
                kind=LookupKind.TRANSIENT,
            ) from e

    def update(self, namespace: str, obj: CredentialObject) -> None:
        """Replace an existing Secret with ``obj``.

        Raises:
            StoreError: If the API rejects the Secret or cannot be reached.

        """
        try:
            self.api.replace_namespaced_secret(name=obj.name, namespace=namespace, body=to_v1_secret(obj, namespace))
        except ApiException as e:
            raise StoreError(
                f"Failed to update secret {namespace}/{obj.name}: {e.status} {e.reason}",
                kind=classify_status(e.status),
            ) from e
        except HTTPError as e:
            raise StoreError(
                f"Failed to update secret {namespace}/{obj.name}: cluster unreachable: {_transport_reason(e)}",
                kind=LookupKind.TRANSIENT,
            ) from e

    def __repr__(self) -> str:
        return f"KubernetesStore(context={self.context!r})"


class DryRunStore:
    """Store that prints Secret manifests instead of writing them.

    Every lookup reports NOT_FOUND, so each secret is rendered once as a
    create. Rendered objects are kept in ``written`` in write order.
    """

    def __init__(self) -> None:
        self.written: list[CredentialObject] = []

    def get(self, namespace: str, name: str) -> CredentialObject:
        raise StoreLookupError(f"Secret {namespace}/{name}: dry run", kind=LookupKind.NOT_FOUND)

    def create(self, namespace: str, obj: CredentialObject) -> None:
        self.written.append(obj)
        console.document(render_yaml(obj, namespace))

    def update(self, namespace: str, obj: CredentialObject) -> None:
        self.create(namespace, obj)

    def __repr__(self) -> str:
        return f"DryRunStore(written={len(self.written)})"

