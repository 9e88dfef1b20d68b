#!/usr/bin/env python3
"""Runnable demo: create a replicated volume pair, then tear it down.

Prerequisites:
    az ad sp create-for-rbac --sdk-auth > azureauth.json
    export AZURE_AUTH_LOCATION=$PWD/azureauth.json
    uv run python examples/crr_demo.py
"""

from __future__ import annotations

import sys
from pathlib import Path

from rich.console import Console

from anf_replication.config.credentials import build_credential, load_auth_info
from anf_replication.config.loader import load_topology_config
from anf_replication.observability.logging import configure_logging
from anf_replication.provisioning.azure import AzureNetAppFilesClient
from anf_replication.runner import run_replication

console = Console()

TOPOLOGY = Path(__file__).with_name("topology.yaml")


def main() -> None:
    configure_logging()

    # 1. Topology from defaults + the example overrides
    config = load_topology_config(TOPOLOGY)
    console.print(
        "[bold]Topology loaded[/bold]",
        f"{config.primary.location} -> {config.secondary.location}",
    )

    # 2. Service principal
    auth = load_auth_info()
    client = AzureNetAppFilesClient.from_credential(
        build_credential(auth), auth.subscription_id
    )

    # 3. Provision, wait for replication, then clean up
    result = run_replication(config, client, auth.subscription_id, cleanup=True)
    for side in result.context.sides():
        console.print(f"[cyan]{side.label} volume:[/cyan] {side.volume_id or '-'}")

    if not result.ok:
        console.print("[red]Demo failed:[/red]", result.error)
        sys.exit(result.exit_code)
    console.print("[green]Replication verified and resources removed[/green]")


if __name__ == "__main__":
    main()
