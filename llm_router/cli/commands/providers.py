"""Provider health and statistics commands for the llmr CLI."""

import asyncio
import sys

import httpx
import typer
from rich.console import Console
from rich.table import Table

from llm_router.core.config import ConfigError
from llm_router.core.exceptions import ConfigurationError
from llm_router.core.factory import create_manager
from llm_router.core.provider_manager import ProviderManager


def build_manager(console: Console) -> ProviderManager:
    from llm_router.core.config import get_config

    try:
        return create_manager(get_config().llm_config(), health_check=False)
    except (ConfigError, ConfigurationError) as e:
        console.print(f"[red]❌ {e}[/red]")
        sys.exit(1)


def health() -> None:
    """Probe every enabled provider."""
    console = Console()
    manager = build_manager(console)

    console.print("[bold cyan]Checking provider health[/bold cyan]")
    statuses = asyncio.run(manager.check_all_providers())

    table = Table(title="Provider Health")
    table.add_column("Provider", style="cyan")
    table.add_column("Status")
    table.add_column("Latency", justify="right")
    table.add_column("Error", style="red")
    for status in statuses:
        table.add_row(
            status.provider,
            "[green]healthy[/green]" if status.healthy else "[red]unhealthy[/red]",
            f"{status.response_time_ms:.0f}ms",
            status.error or "",
        )
    console.print(table)

    if not all(status.healthy for status in statuses):
        sys.exit(1)


def stats(
    url: str = typer.Option(None, "--url", help="Server base URL (default: http://localhost:PORT)"),
) -> None:
    """Show usage statistics of a running server."""
    console = Console()
    if url is None:
        from llm_router.core.config import get_config

        url = f"http://localhost:{get_config().port}"

    try:
        response = httpx.get(f"{url.rstrip('/')}/api/ai/monitoring", params={"type": "stats"})
        response.raise_for_status()
    except httpx.HTTPError as e:
        console.print(f"[red]❌ Could not fetch statistics from {url}: {e}[/red]")
        sys.exit(1)

    table = Table(title="Provider Statistics")
    table.add_column("Provider", style="cyan")
    table.add_column("Requests", justify="right")
    table.add_column("Success", justify="right", style="green")
    table.add_column("Failed", justify="right", style="red")
    table.add_column("Avg latency", justify="right")
    table.add_column("Cost (¢)", justify="right")
    table.add_column("Last used")
    for record in response.json():
        table.add_row(
            record["provider"],
            str(record["total_requests"]),
            str(record["successful_requests"]),
            str(record["failed_requests"]),
            f"{record['average_response_time_ms']:.0f}ms",
            f"{record['total_cost_cents']:.4f}",
            record["last_used"] or "never",
        )
    console.print(table)
