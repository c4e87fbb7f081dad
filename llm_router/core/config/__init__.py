"""Environment-driven configuration for LLM Router."""

from llm_router.core.config.config import Config, get_config, reset_config
from llm_router.core.config.schema import ConfigSchema, EnvVarSpec
from llm_router.core.config.validation import ConfigError, validate_all

__all__ = [
    "Config",
    "ConfigError",
    "ConfigSchema",
    "EnvVarSpec",
    "get_config",
    "reset_config",
    "validate_all",
]
