"""
Configuration Data Models.

Defines all configuration schemas using Pydantic for validation
and type safety.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from docexport.models.base import TagKind

# Functions whose second argument is the version an element was deprecated in
DEFAULT_DEPRECATION_FUNCTIONS = [
    "_deprecated_file",
    "_deprecated_function",
    "_deprecated_argument",
]


class LogLevel(str, Enum):
    """Logging verbosity."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


class HashNotationConfig(BaseModel):
    """Configuration for the hash-notation parser.

    Attributes:
        max_depth: Maximum nested blocks below the root
        shared_index: Share one positional counter across the whole tree
        fallback_to_raw: Emit raw text for a tag whose hash notation fails
    """

    max_depth: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Maximum nesting depth",
    )
    shared_index: bool = Field(
        default=True,
        description="Share positional index across branches",
    )
    fallback_to_raw: bool = Field(
        default=True,
        description="Fall back to raw text on parse errors",
    )


class ExportConfig(BaseModel):
    """Configuration for the export run.

    Attributes:
        parallel_files: Files exported concurrently by the async path
        continue_on_error: Record a failure and keep going (False = fail fast)
        deprecation_functions: Calls whose second argument is a version
    """

    parallel_files: int = Field(
        default=1,
        ge=1,
        le=64,
        description="Concurrent file exports",
    )
    continue_on_error: bool = Field(
        default=True,
        description="Continue if a file fails",
    )
    deprecation_functions: list[str] = Field(
        default_factory=lambda: list(DEFAULT_DEPRECATION_FUNCTIONS),
        description="Deprecation marker function names",
    )

    @field_validator("deprecation_functions")
    @classmethod
    def strip_names(cls, v: list[str]) -> list[str]:
        """Drop blank names and duplicates."""
        return list(dict.fromkeys(name.strip() for name in v if name.strip()))


class LoggingConfig(BaseModel):
    """Logging configuration.

    Attributes:
        level: Log level
        file: Optional log file path
        format: Log record format for the file handler
    """

    level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Log level",
    )
    file: Optional[str] = Field(
        default=None,
        description="Log file path",
    )
    format: str = Field(
        default="%(asctime)s %(levelname)s %(name)s: %(message)s",
        description="File log format",
    )

    @field_validator("level", mode="before")
    @classmethod
    def upper_level(cls, v: Any) -> Any:
        """Accept lower-case level names."""
        return v.upper() if isinstance(v, str) else v


class DocExportConfig(BaseModel):
    """Root configuration for the export engine.

    Attributes:
        hash_notation: Hash-notation parser settings
        export: Export run settings
        logging: Logging settings
        extra_tags: Additional annotation name -> tag kind bindings
        debug: Enable debug mode
    """

    hash_notation: HashNotationConfig = Field(
        default_factory=HashNotationConfig,
        description="Hash-notation parser",
    )
    export: ExportConfig = Field(
        default_factory=ExportConfig,
        description="Export run",
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Logging",
    )
    extra_tags: dict[str, str] = Field(
        default_factory=dict,
        description="Annotation name -> tag kind",
        examples=[{"option": "variable", "filter": "reference"}],
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )

    @field_validator("extra_tags")
    @classmethod
    def valid_tag_kinds(cls, v: dict[str, str]) -> dict[str, str]:
        """Ensure every binding names a known tag kind."""
        allowed = {kind.value for kind in TagKind}
        for name, kind in v.items():
            if kind not in allowed:
                raise ValueError(
                    f"Unknown tag kind '{kind}' for '@{name}', expected one of {sorted(allowed)}"
                )
        return v

    def to_yaml_dict(self) -> dict[str, Any]:
        """Convert to YAML-friendly dictionary.

        Returns:
            Dict suitable for YAML serialization
        """
        return self.model_dump(mode="json", exclude_none=True)
