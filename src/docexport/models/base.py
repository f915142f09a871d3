"""
Base enumerations used throughout the data models.

These enums provide type-safe values for categorical fields of the
reflected input and of the export results.
"""

from enum import Enum


class TagKind(str, Enum):
    """Kind of doc-comment annotation.

    Each kind carries exactly the fields it supports, so the
    normalizer can match on kind instead of probing for accessors.
    """

    PLAIN = "plain"  # name + content only
    TYPED = "typed"  # @return, @throws
    VARIABLE = "variable"  # @param, @type, @var
    REFERENCE = "reference"  # @see, @uses
    VERSION = "version"  # @since, @deprecated


class Visibility(str, Enum):
    """Member visibility of a property or method."""

    PUBLIC = "public"
    PROTECTED = "protected"
    PRIVATE = "private"


class HookType(str, Enum):
    """Kind of hook call site reported by the reflector."""

    ACTION = "action"
    FILTER = "filter"
    ACTION_REFERENCE = "action_reference"
    FILTER_REFERENCE = "filter_reference"
    ACTION_DEPRECATED = "action_deprecated"
    FILTER_DEPRECATED = "filter_deprecated"


class IncludeType(str, Enum):
    """Kind of include statement."""

    REQUIRE = "require"
    REQUIRE_ONCE = "require_once"
    INCLUDE = "include"
    INCLUDE_ONCE = "include_once"


class ExportStatus(str, Enum):
    """Outcome of exporting a single file."""

    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"  # Not started because the run was cancelled
