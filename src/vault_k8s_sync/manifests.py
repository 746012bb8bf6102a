"""Kubernetes Secret manifest rendering.

The Kubernetes API expects Secret ``data`` values base64 encoded. The
helpers here are the only place where raw bytes are encoded for the wire.
"""

import base64
from typing import Any

import yaml
from kubernetes import client

from vault_k8s_sync.models import CredentialObject


def encode_data(data: dict[str, bytes]) -> dict[str, str]:
    """Base64 encode every value of a Secret data mapping."""
    return {key: base64.b64encode(value).decode("ascii") for key, value in data.items()}


def to_v1_secret(obj: CredentialObject, namespace: str) -> client.V1Secret:
    """Build the API body for creating or replacing a Secret.

    Args:
        obj: The credential object to write.
        namespace: Target namespace.

    Returns:
        A V1Secret with base64 encoded data.

    """
    return client.V1Secret(
        api_version="v1",
        kind="Secret",
        metadata=client.V1ObjectMeta(name=obj.name, namespace=namespace),
        data=encode_data(obj.data),
        type=obj.type,
    )


def to_manifest(obj: CredentialObject, namespace: str) -> dict[str, Any]:
    """Return the Secret as a plain manifest dictionary."""
    return {
        "apiVersion": "v1",
        "kind": "Secret",
        "metadata": {"name": obj.name, "namespace": namespace},
        "type": obj.type,
        "data": encode_data(obj.data),
    }


def render_yaml(obj: CredentialObject, namespace: str) -> str:
    """Render the Secret as a single YAML document, ``---`` separated."""
    return "---\n" + yaml.safe_dump(to_manifest(obj, namespace), sort_keys=False)
