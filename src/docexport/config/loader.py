"""
Configuration Loader.

Loads and validates configuration from YAML files with environment
variable substitution.
"""

import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from docexport.config.environment import load_environment
from docexport.config.models import DocExportConfig

# Default configuration file locations
DEFAULT_CONFIG_PATHS = [
    "docexport.yaml",
    "docexport.yml",
    ".docexport.yaml",
    ".docexport.yml",
]

# Environment variable for config path
CONFIG_ENV_VAR = "DOCEXPORT_CONFIG"

# Environment variable overrides for configuration settings
# Maps env var name to config path (dot-separated)
ENV_VAR_OVERRIDES = {
    "DOCEXPORT_MAX_DEPTH": "hash_notation.max_depth",
    "DOCEXPORT_SHARED_INDEX": "hash_notation.shared_index",
    "DOCEXPORT_FALLBACK_TO_RAW": "hash_notation.fallback_to_raw",
    "DOCEXPORT_PARALLEL_FILES": "export.parallel_files",
    "DOCEXPORT_CONTINUE_ON_ERROR": "export.continue_on_error",
    "DOCEXPORT_LOG_LEVEL": "logging.level",
    "DOCEXPORT_LOG_FILE": "logging.file",
    "DOCEXPORT_DEBUG": "debug",
}


class ConfigurationError(Exception):
    """Raised when configuration is invalid."""

    def __init__(
        self,
        message: str,
        errors: list[dict] | None = None,
        path: Path | None = None,
    ) -> None:
        """Initialize configuration error.

        Args:
            message: Error message
            errors: List of validation errors (from Pydantic)
            path: Path to the config file that caused the error
        """
        super().__init__(message)
        self.errors = errors or []
        self.path = path

    def __str__(self) -> str:
        """Format error message with details."""
        msg = super().__str__()
        if self.path:
            msg = f"{msg} (file: {self.path})"
        if self.errors:
            details = []
            for err in self.errors[:5]:
                loc = ".".join(str(x) for x in err.get("loc", []))
                details.append(f"  - {loc}: {err.get('msg', 'Unknown error')}")
            if len(self.errors) > 5:
                details.append(f"  ... and {len(self.errors) - 5} more errors")
            msg = f"{msg}\n" + "\n".join(details)
        return msg


class ConfigLoader:
    """Loads configuration from YAML files.

    Supports:
    - YAML configuration files
    - Environment variable substitution (${VAR} and ${VAR:-default} syntax)
    - DOCEXPORT_* environment overrides
    - Validation via Pydantic

    Usage:
        # Load from specific file
        config = ConfigLoader("docexport.yaml").load()

        # Load from DOCEXPORT_CONFIG or default locations
        config = ConfigLoader().load_from_env()
    """

    # Matches ${VAR_NAME}, ${VAR_NAME:-default} and ${VAR_NAME:default}
    ENV_PATTERN = re.compile(r"\$\{(\w+)(?::-?([^}]*))?\}")

    def __init__(
        self,
        config_path: str | Path | None = None,
        env_file: str = ".env",
    ) -> None:
        """Initialize the config loader.

        Args:
            config_path: Path to YAML config file (optional)
            env_file: Path to .env file for environment loading
        """
        self._config_path = Path(config_path) if config_path else None
        self._env_file = env_file
        self._config: DocExportConfig | None = None

    @property
    def config_path(self) -> Path | None:
        """Get config file path."""
        return self._config_path

    @property
    def config(self) -> DocExportConfig | None:
        """Get loaded configuration, or None if not loaded yet."""
        return self._config

    def load(self, path: str | Path | None = None) -> DocExportConfig:
        """Load and validate configuration.

        Without a path, an empty document is validated so every setting
        takes its default (plus any environment overrides).

        Args:
            path: Optional path overriding the one given at construction

        Returns:
            Validated DocExportConfig

        Raises:
            ConfigurationError: If config is invalid
            FileNotFoundError: If config file not found
        """
        if path is not None:
            self._config_path = Path(path)

        load_environment(self._env_file)

        raw = self._load_yaml() if self._config_path else {}
        processed = self._substitute_env_vars(raw)
        processed = self._apply_env_overrides(processed)
        processed = self._clean_none_values(processed)

        try:
            self._config = DocExportConfig(**processed)
        except ValidationError as e:
            raise ConfigurationError(
                f"Configuration validation failed: {e.error_count()} errors",
                errors=e.errors(),
                path=self._config_path,
            ) from e

        return self._config

    def load_from_env(self) -> DocExportConfig:
        """Load configuration from DOCEXPORT_CONFIG or default locations.

        Falls back to defaults when no file is found.

        Returns:
            Validated DocExportConfig

        Raises:
            ConfigurationError: If config is invalid
            FileNotFoundError: If DOCEXPORT_CONFIG names a missing file
        """
        load_environment(self._env_file)

        env_config_path = os.environ.get(CONFIG_ENV_VAR)
        if env_config_path:
            config_path = Path(env_config_path)
            if not config_path.exists():
                raise FileNotFoundError(
                    f"Config file specified by {CONFIG_ENV_VAR} not found: {env_config_path}"
                )
            return self.load(config_path)

        for default_path in DEFAULT_CONFIG_PATHS:
            path = Path(default_path)
            if path.exists():
                return self.load(path)

        return self.load()

    def _load_yaml(self) -> dict[str, Any]:
        """Load YAML configuration file.

        Raises:
            FileNotFoundError: If file doesn't exist
            ConfigurationError: If YAML is invalid or not a mapping
        """
        if not self._config_path.exists():
            raise FileNotFoundError(f"Config file not found: {self._config_path}")

        try:
            with open(self._config_path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML: {e}", path=self._config_path) from e

        if not isinstance(data, dict):
            raise ConfigurationError("Configuration root must be a mapping", path=self._config_path)
        return data

    def _substitute_env_vars(self, data: Any) -> Any:
        """Recursively substitute ${VAR} references in config values."""
        if isinstance(data, dict):
            return {k: self._substitute_env_vars(v) for k, v in data.items()}
        elif isinstance(data, list):
            return [self._substitute_env_vars(item) for item in data]
        elif isinstance(data, str):
            return self._substitute_string(data)
        return data

    def _clean_none_values(self, data: Any) -> Any:
        """Drop None values so Pydantic applies defaults.

        YAML parses empty sections as None.
        """
        if isinstance(data, dict):
            return {k: self._clean_none_values(v) for k, v in data.items() if v is not None}
        elif isinstance(data, list):
            return [self._clean_none_values(item) for item in data]
        return data

    def _substitute_string(self, value: str) -> Any:
        """Substitute environment variables in a string.

        A string that is exactly one ``${VAR}`` reference is coerced to
        bool/int/float where possible.
        """
        full_match = self.ENV_PATTERN.fullmatch(value)
        if full_match:
            env_value = os.environ.get(full_match.group(1))
            resolved = env_value if env_value is not None else full_match.group(2)
            if resolved is not None:
                return self._coerce_type(resolved)
            # Left as-is; fails validation if the field needs another type
            return value

        def replace(match: re.Match[str]) -> str:
            env_value = os.environ.get(match.group(1))
            if env_value is not None:
                return env_value
            if match.group(2) is not None:
                return match.group(2)
            return match.group(0)

        return self.ENV_PATTERN.sub(replace, value)

    def _coerce_type(self, value: str) -> Any:
        """Coerce string value to bool, int, float, None or str."""
        if value == "":
            return None

        lower_value = value.lower()
        if lower_value in ("true", "yes", "on"):
            return True
        if lower_value in ("false", "no", "off"):
            return False

        try:
            if "." not in value and "e" not in lower_value:
                return int(value)
            return float(value)
        except ValueError:
            return value

    def _apply_env_overrides(self, config_dict: dict[str, Any]) -> dict[str, Any]:
        """Apply DOCEXPORT_* environment overrides (they win over the file)."""
        for env_var, config_path in ENV_VAR_OVERRIDES.items():
            env_value = os.environ.get(env_var)
            if env_value is not None:
                self._set_nested_value(config_dict, config_path, self._coerce_type(env_value))
        return config_dict

    def _set_nested_value(self, config_dict: dict[str, Any], path: str, value: Any) -> None:
        """Set a nested value using dot notation, creating sections as needed."""
        parts = path.split(".")
        current = config_dict
        for part in parts[:-1]:
            if not isinstance(current.get(part), dict):
                current[part] = {}
            current = current[part]
        current[parts[-1]] = value

    def save(self, path: str | Path | None = None) -> None:
        """Save current configuration to a YAML file.

        Raises:
            ValueError: If no config loaded or no path specified
        """
        if self._config is None:
            raise ValueError("No configuration loaded")

        save_path = Path(path) if path else self._config_path
        if save_path is None:
            raise ValueError("No path specified for saving")

        with open(save_path, "w", encoding="utf-8") as f:
            yaml.safe_dump(self._config.to_yaml_dict(), f, default_flow_style=False, sort_keys=False)


# Global loader state for caching
_global_config: DocExportConfig | None = None


def load_config(
    config_path: str | Path | None = None,
    env_file: str = ".env",
) -> DocExportConfig:
    """Load configuration and cache it globally.

    Args:
        config_path: Path to YAML config file; None searches
            DOCEXPORT_CONFIG and the default locations
        env_file: Path to .env file

    Returns:
        Validated DocExportConfig
    """
    global _global_config

    loader = ConfigLoader(config_path, env_file)
    _global_config = loader.load() if config_path else loader.load_from_env()
    return _global_config


def get_config() -> DocExportConfig:
    """Get the global configuration, loading defaults on first use."""
    global _global_config

    if _global_config is None:
        _global_config = ConfigLoader().load_from_env()
    return _global_config


def reset_config() -> None:
    """Reset global configuration (mainly for testing)."""
    global _global_config
    _global_config = None


def create_default_config(**overrides: Any) -> DocExportConfig:
    """Create a configuration with defaults, without reading files.

    Args:
        **overrides: Top-level sections or flags to override

    Returns:
        DocExportConfig with defaults
    """
    return DocExportConfig(**overrides)
