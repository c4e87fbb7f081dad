"""Main CLI entry point for llm-router."""

import logging

import typer
from rich.console import Console

from llm_router.cli.commands import config, prompt, providers
from llm_router.core.logging import configure_root_logging

app = typer.Typer(
    name="llmr",
    help="LLM Router CLI - route prompts across LLM providers",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.add_typer(config.app, name="config", help="Configuration management")
app.command("health")(providers.health)
app.command("stats")(providers.stats)
app.command("improve")(prompt.improve)
app.command("generate")(prompt.generate)


@app.command()
def version() -> None:
    """Show version information."""
    from llm_router import __version__

    console = Console()
    console.print(f"[bold cyan]llmr[/bold cyan] version [green]{__version__}[/green]")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
) -> None:
    """LLM Router CLI."""
    configure_root_logging("DEBUG" if verbose else "WARNING")
    if verbose:
        logging.getLogger("llm_router").debug("Verbose logging enabled")


@app.command()
def start(
    host: str = typer.Option(None, "--host", help="Override host"),
    port: int = typer.Option(None, "--port", help="Override port"),
    reload: bool = typer.Option(False, "--reload", help="Enable auto-reload for development"),
) -> None:
    """Start the HTTP server."""
    import uvicorn

    from llm_router.core.config import get_config

    config = get_config()
    console = Console()

    server_host = host or config.host
    server_port = port or config.port
    log_level = configure_root_logging(config.log_level)

    console.print("[bold green]Starting LLM Router server...[/bold green]")
    console.print(f"Host: {server_host}")
    console.print(f"Port: {server_port}")

    uvicorn.run(
        "llm_router.main:app",
        host=server_host,
        port=server_port,
        reload=reload,
        log_level=log_level.lower(),
    )


if __name__ == "__main__":
    app()
