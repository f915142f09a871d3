"""Tests for configuration models."""

import pytest
from pydantic import ValidationError

from docexport.config.models import (
    DEFAULT_DEPRECATION_FUNCTIONS,
    DocExportConfig,
    ExportConfig,
    HashNotationConfig,
    LoggingConfig,
    LogLevel,
)


class TestHashNotationConfig:
    """Tests for HashNotationConfig model."""

    def test_defaults(self):
        """Test the default parser settings."""
        config = HashNotationConfig()

        assert config.max_depth == 3
        assert config.shared_index is True
        assert config.fallback_to_raw is True

    def test_max_depth_bounds(self):
        """Test depth must stay within 1..10."""
        with pytest.raises(ValidationError):
            HashNotationConfig(max_depth=0)
        with pytest.raises(ValidationError):
            HashNotationConfig(max_depth=11)


class TestExportConfig:
    """Tests for ExportConfig model."""

    def test_defaults(self):
        """Test the default run settings."""
        config = ExportConfig()

        assert config.parallel_files == 1
        assert config.continue_on_error is True
        assert config.deprecation_functions == DEFAULT_DEPRECATION_FUNCTIONS

    def test_default_list_not_shared(self):
        """Test each config gets its own marker list."""
        config = ExportConfig()
        config.deprecation_functions.append("x")

        assert "x" not in DEFAULT_DEPRECATION_FUNCTIONS

    def test_deprecation_functions_cleaned(self):
        """Test blank and duplicate names are dropped."""
        config = ExportConfig(deprecation_functions=[" _deprecated_file ", "", "_deprecated_file"])

        assert config.deprecation_functions == ["_deprecated_file"]

    def test_parallel_files_positive(self):
        """Test at least one file at a time."""
        with pytest.raises(ValidationError):
            ExportConfig(parallel_files=0)


class TestLoggingConfig:
    """Tests for LoggingConfig model."""

    def test_defaults(self):
        """Test the default logging settings."""
        config = LoggingConfig()

        assert config.level == LogLevel.INFO
        assert config.file is None

    def test_lowercase_level(self):
        """Test level names are case-insensitive."""
        assert LoggingConfig(level="debug").level == LogLevel.DEBUG

    def test_invalid_level(self):
        """Test unknown levels are rejected."""
        with pytest.raises(ValidationError):
            LoggingConfig(level="LOUD")


class TestDocExportConfig:
    """Tests for DocExportConfig model."""

    def test_defaults(self):
        """Test every section has defaults."""
        config = DocExportConfig()

        assert config.hash_notation.max_depth == 3
        assert config.export.continue_on_error is True
        assert config.extra_tags == {}
        assert config.debug is False

    def test_extra_tags_valid(self):
        """Test known tag kinds are accepted."""
        config = DocExportConfig(extra_tags={"option": "variable", "filter": "reference"})

        assert config.extra_tags["filter"] == "reference"

    def test_extra_tags_unknown_kind(self):
        """Test unknown tag kinds are rejected."""
        with pytest.raises(ValidationError, match="Unknown tag kind 'weird'"):
            DocExportConfig(extra_tags={"option": "weird"})

    def test_to_yaml_dict(self):
        """Test the YAML form uses plain values and drops nulls."""
        data = DocExportConfig(logging=LoggingConfig(level=LogLevel.DEBUG)).to_yaml_dict()

        assert data["logging"]["level"] == "DEBUG"
        assert "file" not in data["logging"]
        assert data["hash_notation"] == {
            "max_depth": 3,
            "shared_index": True,
            "fallback_to_raw": True,
        }
