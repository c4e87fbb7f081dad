"""Declarative schema for environment variable configuration.

This module provides a single source of truth for all environment variables,
including automatic type coercion, validation, and documentation generation.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
_STRATEGIES = ("cheapest", "fastest", "priority", "round-robin", "least-used")


@dataclass(frozen=True)
class EnvVarSpec:
    """Specification for a single environment variable.

    Attributes:
        name: Environment variable name (e.g., "PORT", "LOG_LEVEL")
        default: Default value if env var not set
        type_hint: Type for validation (int, str, float, bool)
        description: Human-readable description for docs
        validator: Optional custom validation function
        coerce: Optional function to convert string to target type
        secret: Whether the value must be masked when displayed
    """

    name: str
    default: Any
    type_hint: type
    description: str
    validator: Callable[[Any], bool] | None = None
    coerce: Callable[[str], Any] | None = None
    secret: bool = False


class ConfigSchema:
    """Registry of all configuration environment variables."""

    # === Server Settings ===

    HOST = EnvVarSpec(
        name="HOST",
        default="0.0.0.0",
        type_hint=str,
        description="Server host address to bind to",
    )

    PORT = EnvVarSpec(
        name="PORT",
        default=8082,
        type_hint=int,
        description="Server port number",
        validator=lambda x: 1 <= x <= 65535,
    )

    LOG_LEVEL = EnvVarSpec(
        name="LOG_LEVEL",
        default="INFO",
        type_hint=str,
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
        # Tolerate trailing comments such as "INFO  # verbose in dev"
        validator=lambda x: x.split()[0].upper() in _LOG_LEVELS,
    )

    # === Provider Credentials ===

    SKIP_AI_REQUEST = EnvVarSpec(
        name="SKIP_AI_REQUEST",
        default=False,
        type_hint=bool,
        description="Serve every request from the offline mock provider",
    )

    OPENAI_API_KEY = EnvVarSpec(
        name="OPENAI_API_KEY",
        default=None,
        type_hint=str,
        description="OpenAI API key; the openai provider is enabled when set",
        secret=True,
    )

    OPENAI_BASE_URL = EnvVarSpec(
        name="OPENAI_BASE_URL",
        default="https://api.openai.com/v1",
        type_hint=str,
        description="Base URL of the OpenAI-compatible API",
    )

    ANTHROPIC_API_KEY = EnvVarSpec(
        name="ANTHROPIC_API_KEY",
        default=None,
        type_hint=str,
        description="Anthropic API key; the anthropic provider is enabled when set",
        secret=True,
    )

    ANTHROPIC_BASE_URL = EnvVarSpec(
        name="ANTHROPIC_BASE_URL",
        default="https://api.anthropic.com",
        type_hint=str,
        description="Base URL of the Anthropic API",
    )

    # === Routing Settings ===

    LLM_DEFAULT_PROVIDER = EnvVarSpec(
        name="LLM_DEFAULT_PROVIDER",
        default="openai",
        type_hint=str,
        description="Default provider name",
    )

    LLM_FALLBACK_PROVIDER = EnvVarSpec(
        name="LLM_FALLBACK_PROVIDER",
        default="anthropic",
        type_hint=str,
        description="Provider tried once when the primary attempt fails",
    )

    LLM_STRATEGY = EnvVarSpec(
        name="LLM_STRATEGY",
        default="cheapest",
        type_hint=str,
        description="Load-balancing strategy: " + ", ".join(_STRATEGIES),
        validator=lambda x: x in _STRATEGIES,
    )

    LLM_COST_OPTIMIZATION = EnvVarSpec(
        name="LLM_COST_OPTIMIZATION",
        default=True,
        type_hint=bool,
        description="Use estimated cost as a secondary ranking key and enforce the cost cap",
    )

    LLM_MAX_COST_PER_REQUEST_CENTS = EnvVarSpec(
        name="LLM_MAX_COST_PER_REQUEST_CENTS",
        default=50.0,
        type_hint=float,
        description="Estimated cost cap per request in cents (cost optimization only)",
        validator=lambda x: x > 0,
    )

    LLM_HEALTH_CHECK_ON_START = EnvVarSpec(
        name="LLM_HEALTH_CHECK_ON_START",
        default=True,
        type_hint=bool,
        description="Run a background health sweep right after the manager is built",
    )

    # === Timeout Settings ===

    REQUEST_TIMEOUT = EnvVarSpec(
        name="REQUEST_TIMEOUT",
        default=30.0,
        type_hint=float,
        description="Per-attempt provider timeout in seconds",
        validator=lambda x: x > 0,
    )

    MAX_RETRIES = EnvVarSpec(
        name="MAX_RETRIES",
        default=3,
        type_hint=int,
        description="Maximum retry attempts for retryable provider failures",
        validator=lambda x: x >= 0,
    )

    @classmethod
    def all_specs(cls) -> dict[str, EnvVarSpec]:
        """Get all environment variable specifications.

        Returns:
            Dictionary mapping spec names to EnvVarSpec objects
        """
        return {
            name: getattr(cls, name)
            for name in dir(cls)
            if isinstance(getattr(cls, name), EnvVarSpec)
        }

    @classmethod
    def get_spec(cls, name: str) -> EnvVarSpec | None:
        """Get specification for a specific env var by name."""
        for spec in cls.all_specs().values():
            if spec.name == name:
                return spec
        return None

    @classmethod
    def generate_markdown_docs(cls) -> str:
        """Generate Markdown documentation for all environment variables."""
        lines = ["# Configuration Options\n\n"]
        lines.extend(
            [
                "This document is auto-generated from `ConfigSchema`.\n\n",
                "## Environment Variables\n\n",
            ]
        )

        specs = cls.all_specs()
        for _name, spec in sorted(specs.items()):
            default_repr = f"`{spec.default}`" if spec.default is not None else "None"
            lines.extend(
                [
                    f"### `{spec.name}`\n\n",
                    f"- **Type**: `{spec.type_hint.__name__}`\n",
                    f"- **Default**: {default_repr}\n",
                    f"- **Description**: {spec.description}\n\n",
                ]
            )

        return "\n".join(lines)
