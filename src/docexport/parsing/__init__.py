"""
DocExport - Annotation Parsing

Tag registry, annotation text parsing and the hash-notation parser for
nested parameter shapes.

Usage:
    from docexport.parsing import HashNotationParser, TagRegistry

    registry = TagRegistry.default()
    parser = HashNotationParser(registry)
    tree = parser.parse("{ @type string $name Display name. }")
"""

from docexport.parsing.hash_notation import (
    DEFAULT_MAX_DEPTH,
    HashNotationError,
    HashNotationParser,
    Token,
    TokenType,
    parse_hash_notation,
    tokenize,
)
from docexport.parsing.registry import (
    DEFAULT_HASH_MARKERS,
    DEFAULT_TAG_KINDS,
    TagRegistry,
    default_registry,
)
from docexport.parsing.tag_parser import (
    ParameterSpec,
    TagSyntaxError,
    build_tag,
    collapse_newlines,
    is_variable,
    parse_parameter,
)

__all__ = [
    # Registry
    "TagRegistry",
    "default_registry",
    "DEFAULT_TAG_KINDS",
    "DEFAULT_HASH_MARKERS",
    # Annotation text
    "ParameterSpec",
    "TagSyntaxError",
    "build_tag",
    "collapse_newlines",
    "is_variable",
    "parse_parameter",
    # Hash notation
    "HashNotationParser",
    "HashNotationError",
    "Token",
    "TokenType",
    "tokenize",
    "parse_hash_notation",
    "DEFAULT_MAX_DEPTH",
]
