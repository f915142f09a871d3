"""
DocExport - Configuration Management

This module provides configuration management including:
- YAML configuration loading and validation
- Environment variable substitution and DOCEXPORT_* overrides
- Configuration defaults
"""

from docexport.config.environment import (
    ensure_dotenv_loaded,
    load_environment,
    reset_environment,
)
from docexport.config.loader import (
    CONFIG_ENV_VAR,
    DEFAULT_CONFIG_PATHS,
    ENV_VAR_OVERRIDES,
    ConfigLoader,
    ConfigurationError,
    create_default_config,
    get_config,
    load_config,
    reset_config,
)
from docexport.config.models import (
    DEFAULT_DEPRECATION_FUNCTIONS,
    DocExportConfig,
    ExportConfig,
    HashNotationConfig,
    LoggingConfig,
    LogLevel,
)

__all__ = [
    # Config models
    "DocExportConfig",
    "HashNotationConfig",
    "ExportConfig",
    "LoggingConfig",
    "LogLevel",
    "DEFAULT_DEPRECATION_FUNCTIONS",
    # Loader
    "ConfigLoader",
    "ConfigurationError",
    "load_config",
    "get_config",
    "reset_config",
    "create_default_config",
    "CONFIG_ENV_VAR",
    "DEFAULT_CONFIG_PATHS",
    "ENV_VAR_OVERRIDES",
    # Environment
    "ensure_dotenv_loaded",
    "load_environment",
    "reset_environment",
]
