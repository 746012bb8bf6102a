#!/usr/bin/env python
"""Command-line interface for vault-k8s-sync.

This module provides the main CLI entry point. Every option can also be
set through the environment variable listed in its help text, which is
how the tool is normally configured when it runs as a Kubernetes Job.
"""

import sys

import click
from icecream import ic

from vault_k8s_sync import __version__, console
from vault_k8s_sync.cluster import DryRunStore, KubernetesStore
from vault_k8s_sync.exceptions import ConfigError, SyncError
from vault_k8s_sync.models import ErrorPolicy, KVMode, SyncConfig, SyncReport
from vault_k8s_sync.reconcile import Reconciler
from vault_k8s_sync.vault import VaultSource


def sync(config: SyncConfig, *, select_context: bool = False) -> SyncReport:
    """Run one Vault to Kubernetes sync.

    Args:
        config: The run configuration.
        select_context: Prompt for the kube context (local mode only).

    Returns:
        The reconciliation report.

    Raises:
        SyncError: On any fatal failure.

    """
    source = VaultSource.connect(config)

    if config.dry_run:
        console.info("Dry run: rendering manifests, nothing is written to the cluster")
        store = DryRunStore()
    else:
        store = KubernetesStore.connect(
            local=config.local,
            kubeconfig=config.kubeconfig,
            context=config.context,
            select_context=select_context,
        )

    reconciler = Reconciler(
        source,
        store,
        base_path=config.secret_path,
        mode=config.kv_mode,
        namespace=config.namespace,
        policy=config.policy,
    )
    ic(reconciler)
    return reconciler.run()


def print_summary(config: SyncConfig, report: SyncReport) -> None:
    """Print the end-of-run summary panel."""
    items = {
        "Source": f"{config.vault_addr} {config.secret_path} (KV v{config.kv_mode.value})",
        "Namespace": config.namespace,
        "Listed": str(report.listed),
        "Created": str(report.created),
        "Updated": str(report.updated),
        "Skipped": str(report.skipped),
    }
    if report.failed:
        items["Failed"] = ", ".join(outcome.name for outcome in report.failed)

    console.newline()
    title = "Sync finished with errors" if report.failed else "Create/update k8s secrets done"
    console.summary_panel(title, items, failed=bool(report.failed))


@click.command(help="Mirror secrets from a Vault KV path into Kubernetes Secrets")
@click.option("--version", "-v", required=False, is_flag=True, help="print version")
@click.option("--debug", required=False, is_flag=True, help="print debug information")
@click.option("--vault-addr", envvar="VAULT_ADDR", help="Vault server URL [env: VAULT_ADDR]")
@click.option("--secret-path", envvar="VAULT_SECRET_PATH", help="base path of the secrets [env: VAULT_SECRET_PATH]")
@click.option(
    "--namespace",
    "-n",
    envvar="K8S_NAMESPACE",
    default="default",
    show_default=True,
    help="target namespace [env: K8S_NAMESPACE]",
)
@click.option(
    "--kv-version",
    envvar="VAULT_KV_VERSION",
    type=click.Choice(["1", "2"]),
    default="2",
    show_default=True,
    help="KV secrets engine version [env: VAULT_KV_VERSION]",
)
@click.option("--role-id", envvar="VAULT_ROLE_ID", help="AppRole role id [env: VAULT_ROLE_ID]")
@click.option("--secret-id", envvar="VAULT_SECRET_ID", help="AppRole secret id [env: VAULT_SECRET_ID]")
@click.option("--token", envvar="VAULT_TOKEN", help="Vault token, used without AppRole [env: VAULT_TOKEN]")
@click.option(
    "--approle-mount",
    envvar="VAULT_APPROLE_MOUNT",
    default="approle",
    show_default=True,
    help="AppRole auth mount point [env: VAULT_APPROLE_MOUNT]",
)
@click.option("--skip-verify", envvar="VAULT_SKIP_VERIFY", is_flag=True, help="skip Vault TLS verification")
@click.option("--local", envvar="LOCAL", is_flag=True, help="use kubeconfig instead of in-cluster config [env: LOCAL]")
@click.option("--kubeconfig", envvar="KUBECONFIG", help="kubeconfig path for --local [env: KUBECONFIG]")
@click.option("--context", required=False, help="kube context for --local")
@click.option("--select", required=False, is_flag=True, default=False, help="prompt for context select")
@click.option("--continue-on-error", is_flag=True, help="sync remaining secrets after a failure")
@click.option("--dry-run", is_flag=True, help="print Secret manifests instead of applying them")
def cli(
    version: bool,
    debug: bool,
    vault_addr: str | None,
    secret_path: str | None,
    namespace: str,
    kv_version: str,
    role_id: str | None,
    secret_id: str | None,
    token: str | None,
    approle_mount: str,
    skip_verify: bool,
    local: bool,
    kubeconfig: str | None,
    context: str | None,
    select: bool,
    continue_on_error: bool,
    dry_run: bool,
) -> None:
    """Process CLI arguments and run the sync.

    Exits with status 1 when the sync fails or any secret could not be
    synced, and with status 2 on configuration errors.
    """
    if not debug:
        ic.disable()

    if version:
        click.echo(__version__)
        return

    if not vault_addr:
        raise click.UsageError("Missing Vault address: pass --vault-addr or set VAULT_ADDR")
    if not secret_path:
        raise click.UsageError("Missing secret path: pass --secret-path or set VAULT_SECRET_PATH")

    config = SyncConfig(
        vault_addr=vault_addr,
        secret_path=secret_path,
        namespace=namespace,
        kv_mode=KVMode(int(kv_version)),
        role_id=role_id,
        secret_id=secret_id,
        token=token,
        approle_mount=approle_mount,
        verify_tls=not skip_verify,
        local=local,
        kubeconfig=kubeconfig,
        context=context,
        policy=ErrorPolicy.CONTINUE_AND_REPORT if continue_on_error else ErrorPolicy.ABORT_ON_FIRST_ERROR,
        dry_run=dry_run,
    )
    ic(config.vault_addr, config.secret_path, config.namespace, config.kv_mode, config.policy)

    try:
        report = sync(config, select_context=select)
    except ConfigError as e:
        raise click.UsageError(str(e)) from None
    except SyncError as e:
        console.error(f"Sync failed: {e}")
        sys.exit(1)

    print_summary(config, report)
    if not report.succeeded:
        sys.exit(1)


if __name__ == "__main__":
    cli()
