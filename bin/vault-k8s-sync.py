#!/usr/bin/env python
"""Run vault-k8s-sync from a source checkout without installing it."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from vault_k8s_sync.cli import cli  # noqa: E402

if __name__ == "__main__":
    cli()
