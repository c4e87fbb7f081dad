"""Type coercion and validation utilities for configuration loading.

Errors are raised with clear messages to help users fix configuration issues.
"""

import os
from typing import Any

from llm_router.core.config.schema import ConfigSchema, EnvVarSpec


class ConfigError(Exception):
    """Configuration validation error.

    Attributes:
        env_var: The environment variable name
        value: The raw value that failed validation
        message: Human-readable error message
    """

    def __init__(self, env_var: str, value: str, message: str) -> None:
        self.env_var = env_var
        self.value = value
        self.message = message
        super().__init__(f"{env_var}={value}: {message}")


def _parse_bool(value: str) -> bool:
    """True for "true", "1", "yes" or "on" (case-insensitive)."""
    return value.strip().lower() in ("true", "1", "yes", "on")


def load_env_var(spec: EnvVarSpec) -> Any:
    """Load and validate a single environment variable.

    Empty values count as unset.

    Raises:
        ConfigError: If validation fails or type conversion is impossible
    """
    raw_value = os.environ.get(spec.name)

    if raw_value is None or raw_value.strip() == "":
        return spec.default

    try:
        if spec.coerce is not None:
            value = spec.coerce(raw_value)
        elif spec.type_hint is bool:
            value = _parse_bool(raw_value)
        elif spec.type_hint is int:
            value = int(raw_value)
        elif spec.type_hint is float:
            value = float(raw_value)
        else:
            value = raw_value.strip()
    except (ValueError, TypeError) as e:
        raise ConfigError(
            spec.name,
            raw_value,
            f"Cannot convert to {spec.type_hint.__name__}: {e}",
        ) from e

    if spec.validator is not None:
        try:
            valid = spec.validator(value)
        except (TypeError, AttributeError, IndexError) as e:
            raise ConfigError(spec.name, raw_value, f"Validation error: {e}") from e
        if not valid:
            raise ConfigError(
                spec.name,
                raw_value,
                f"Validation failed for type {spec.type_hint.__name__}",
            )

    return value


def load_all_specs() -> dict[str, Any]:
    """Load all environment variables according to schema.

    Values that failed validation are returned as ConfigError instances so
    every problem can be reported at once.
    """
    result: dict[str, Any] = {}
    for name, spec in ConfigSchema.all_specs().items():
        try:
            result[name] = load_env_var(spec)
        except ConfigError as e:
            result[name] = e
    return result


def validate_all() -> list[ConfigError]:
    """Validate all environment variables and return any errors.

    Example:
        errors = validate_all()
        if errors:
            for error in errors:
                print(f"Configuration error: {error}")
            sys.exit(1)
    """
    return [value for value in load_all_specs().values() if isinstance(value, ConfigError)]
