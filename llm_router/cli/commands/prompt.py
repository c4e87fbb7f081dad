"""Prompt commands for the llmr CLI."""

import asyncio
import sys

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from llm_router.cli.commands.providers import build_manager
from llm_router.core import factory
from llm_router.core.config import ConfigError
from llm_router.core.exceptions import LLMRouterError
from llm_router.core.types import GenerationResponse


def _show(console: Console, title: str, response: GenerationResponse) -> None:
    if not response.success:
        console.print(f"[red]❌ {response.provider} failed: {response.error}[/red]")
        sys.exit(1)
    console.print(Panel(escape(response.text), title=title, expand=False))
    usage = response.usage
    console.print(
        f"[dim]{response.provider}/{response.model} | "
        f"{usage.input_tokens} in, {usage.output_tokens} out | "
        f"{usage.cost_cents:.4f}¢ | {response.response_time_ms:.0f}ms[/dim]"
    )
    if response.warning:
        console.print(f"[yellow]⚠ {response.warning}[/yellow]")


def improve(
    prompt: str = typer.Argument(..., help="Prompt to improve"),
    mode: str = typer.Option("tighten", "--mode", "-m", help="tighten or expand"),
    fallback: bool = typer.Option(False, "--fallback", help="Retry once on the fallback provider"),
) -> None:
    """Tighten or expand a prompt."""
    console = Console()
    try:
        manager = build_manager(console)
        response = asyncio.run(
            factory.improve_prompt(prompt, mode, use_fallback=fallback, manager=manager)
        )
    except (ConfigError, LLMRouterError) as e:
        console.print(f"[red]❌ {e}[/red]")
        sys.exit(1)
    _show(console, f"Improved prompt ({mode})", response)


def generate(
    description: str = typer.Argument(..., help="What the prompt should do"),
    fallback: bool = typer.Option(False, "--fallback", help="Retry once on the fallback provider"),
) -> None:
    """Generate a prompt from a description."""
    console = Console()
    try:
        manager = build_manager(console)
        response = asyncio.run(
            factory.generate_prompt(description, use_fallback=fallback, manager=manager)
        )
    except (ConfigError, LLMRouterError) as e:
        console.print(f"[red]❌ {e}[/red]")
        sys.exit(1)
    _show(console, "Generated prompt", response)
