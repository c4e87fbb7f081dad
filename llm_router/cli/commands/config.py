"""Configuration commands for the llmr CLI."""

import sys

import typer
from rich.console import Console
from rich.table import Table

from llm_router.core.config import ConfigError, ConfigSchema, get_config, validate_all
from llm_router.core.exceptions import ConfigurationError

app = typer.Typer(help="Configuration management")


@app.command()
def show() -> None:
    """Show the current configuration with secrets masked."""
    console = Console()

    try:
        config = get_config()
    except ConfigError as e:
        console.print(f"[red]❌ {e}[/red]")
        sys.exit(1)

    table = Table(title="LLM Router Configuration")
    table.add_column("Variable", style="cyan")
    table.add_column("Value", style="green")
    for name, value in config.display_values().items():
        table.add_row(name, value)
    console.print(table)

    loader = config.provider_loader()
    try:
        llm_config = config.llm_config(loader)
    except ConfigurationError as e:
        console.print(f"[red]❌ {e}[/red]")
        sys.exit(1)

    providers = Table(title="Providers")
    providers.add_column("Provider", style="cyan")
    providers.add_column("Status")
    providers.add_column("Details", style="dim")
    for result in loader.get_load_results():
        if result.status == "enabled":
            status = "[green]enabled[/green]"
        else:
            status = "[yellow]disabled[/yellow]"
        details = result.message or ""
        if result.api_key_hash:
            details = f"key sha256:{result.api_key_hash} {result.base_url or ''}".strip()
        providers.add_row(result.name, status, details)
    console.print(providers)
    console.print(
        f"Default: [bold]{llm_config.default_provider}[/bold]  "
        f"Fallback: [bold]{llm_config.fallback_provider or 'none'}[/bold]"
    )


@app.command()
def validate() -> None:
    """Validate every configuration variable and report all problems."""
    console = Console()
    errors = validate_all()
    if errors:
        for error in errors:
            console.print(f"[red]❌ {error}[/red]")
        sys.exit(1)
    console.print("[green]✅ Configuration is valid[/green]")


@app.command()
def docs() -> None:
    """Print Markdown documentation for all environment variables."""
    typer.echo(ConfigSchema.generate_markdown_docs())
