"""Typer CLI for the ANF cross-region replication provisioner."""

from __future__ import annotations

import structlog
import typer
from rich.console import Console
from rich.table import Table

from anf_replication.config.credentials import (
    AUTH_LOCATION_ENV,
    build_credential,
    load_auth_info,
)
from anf_replication.config.loader import load_topology_config
from anf_replication.config.models import TopologyConfig
from anf_replication.observability.logging import configure_logging
from anf_replication.runner import run_replication

logger = structlog.get_logger()
console = Console()
app = typer.Typer(name="anf-crr", help="Azure NetApp Files cross-region replication")


def _load(config_path: str | None) -> TopologyConfig:
    try:
        return load_topology_config(config_path)
    except FileNotFoundError as exc:
        console.print(f"[red]Config file not found: {config_path}[/red]")
        raise typer.Exit(1) from exc
    except ValueError as exc:
        console.print(f"[red]Validation error:[/red] {exc}")
        raise typer.Exit(1) from exc


def _topology_table(config: TopologyConfig) -> Table:
    table = Table(title="Replication Topology")
    table.add_column("Field", style="cyan")
    table.add_column("Primary")
    table.add_column("Secondary")
    for name in (
        "location",
        "resource_group",
        "vnet_name",
        "subnet_name",
        "account_name",
        "pool_name",
        "volume_name",
        "service_level",
    ):
        table.add_row(
            name,
            str(getattr(config.primary, name)),
            str(getattr(config.secondary, name)),
        )
    return table


@app.command()
def validate(
    config_path: str | None = typer.Option(
        None, "--config", "-c", help="Topology YAML (defaults are used when omitted)"
    ),
) -> None:
    """Validate a topology configuration file."""
    config = _load(config_path)
    console.print("[green]Valid[/green]")
    console.print(_topology_table(config))
    console.print(f"  replication schedule: {config.replication.schedule}")
    console.print(
        f"  polling: {config.polling.retries} x {config.polling.interval_seconds}s"
    )
    console.print(f"  cleanup: {config.cleanup}")


@app.command()
def run(
    config_path: str | None = typer.Option(
        None, "--config", "-c", help="Topology YAML (defaults are used when omitted)"
    ),
    auth_file: str | None = typer.Option(
        None,
        "--auth-file",
        envvar=AUTH_LOCATION_ENV,
        help="Service principal auth JSON (az ad sp create-for-rbac --sdk-auth)",
    ),
    cleanup: bool | None = typer.Option(
        None,
        "--cleanup/--no-cleanup",
        help="Tear everything down after a successful run (default: config cleanup)",
    ),
    json_logs: bool = typer.Option(False, "--json-logs", help="Emit JSON log lines"),
) -> None:
    """Create primary and secondary resources and enable replication."""
    configure_logging(json_logs=json_logs)
    console.print(
        "[bold]Azure NetApp Files CRR sample[/bold]: enables cross-region "
        "replication on an NFSv3 volume."
    )
    config = _load(config_path)

    try:
        auth = load_auth_info(auth_file)
    except (ValueError, FileNotFoundError) as exc:
        console.print(f"[red]Could not read auth file:[/red] {exc}")
        raise typer.Exit(1) from exc

    from anf_replication.provisioning.azure import AzureNetAppFilesClient

    logger.info(
        "cli.run_started",
        subscription_id=auth.subscription_id,
        primary=config.primary.location,
        secondary=config.secondary.location,
    )

    client = AzureNetAppFilesClient.from_credential(
        build_credential(auth), auth.subscription_id
    )
    result = run_replication(config, client, auth.subscription_id, cleanup=cleanup)

    for side in result.context.sides():
        console.print(f"[cyan]{side.label}[/cyan]")
        console.print(f"  account: {side.account_id or '-'}")
        console.print(f"  pool:    {side.pool_id or '-'}")
        console.print(f"  volume:  {side.volume_id or '-'}")

    if result.error is not None:
        console.print(f"[red]Failed:[/red] {result.error}")
        if not result.cleaned_up:
            console.print(
                "[yellow]Resources left in place; clean them up manually.[/yellow]"
            )
    elif result.cleaned_up:
        console.print("[green]Cleanup completed![/green]")
    else:
        console.print("[green]Cross-region replication is enabled[/green]")
    raise typer.Exit(result.exit_code)
