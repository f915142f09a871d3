"""
DocExport Test Configuration and Fixtures

This module provides pytest fixtures shared across the test suite.

Fixture Categories:
- Paths: project root, fixtures directory, sample reflection dump
- Parsing: tag registry, hash-notation parser, docblock normalizer
- Reflected Elements: docblocks, functions, classes and files built from
  the models the reflector hands over
"""

import logging
from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest

from docexport.export.docblock import DocBlockNormalizer
from docexport.models import (
    Argument,
    ClassElement,
    Function,
    Hook,
    HookType,
    Method,
    Property,
    RawDocBlock,
    ReflectedFile,
    UseReference,
    Visibility,
)
from docexport.parsing import HashNotationParser, TagRegistry
from fixtures.builders import HASH_PARAM_TEXT, make_docblock

# =============================================================================
# Logging Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def restore_docexport_logger() -> Generator[None, None, None]:
    """Undo handlers and levels installed by configure_logging() in a test."""
    logger = logging.getLogger("docexport")
    handlers = list(logger.handlers)
    level = logger.level
    propagate = logger.propagate
    yield
    for handler in list(logger.handlers):
        if handler not in handlers:
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(level)
    logger.propagate = propagate


# =============================================================================
# Path Fixtures
# =============================================================================


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the fixtures directory path."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def sample_dump_path(fixtures_dir: Path) -> Path:
    """Return the sample reflection dump."""
    return fixtures_dir / "reflection" / "sample_file.json"


# =============================================================================
# Parsing Fixtures
# =============================================================================


@pytest.fixture
def registry() -> TagRegistry:
    """Default tag registry."""
    return TagRegistry.default()


@pytest.fixture
def hash_parser(registry: TagRegistry) -> HashNotationParser:
    """Hash-notation parser with default limits."""
    return HashNotationParser(registry)


@pytest.fixture
def normalizer(registry: TagRegistry, hash_parser: HashNotationParser) -> DocBlockNormalizer:
    """Docblock normalizer with raw-text fallback."""
    return DocBlockNormalizer(registry, hash_parser)


# =============================================================================
# Reflected Element Fixtures
# =============================================================================


@pytest.fixture
def function_docblock() -> RawDocBlock:
    """Docblock of a documented function with hash notation."""
    return make_docblock(
        short="Retrieve posts.",
        long="Long description\nspanning two lines.",
        tags=[
            ("since", "1.2.0"),
            ("param", HASH_PARAM_TEXT),
            ("return", "array List of posts."),
        ],
    )


@pytest.fixture
def simple_function() -> Function:
    """Documented function without arguments or hooks."""
    return Function(
        name="get_the_title",
        line=10,
        end_line=14,
        docblock=make_docblock(short="Retrieve post title."),
    )


@pytest.fixture
def documented_function(function_docblock: RawDocBlock) -> Function:
    """Function with arguments, use-references and a hook."""
    return Function(
        name="get_posts",
        line=20,
        end_line=60,
        arguments=[Argument(name="$args", default="null", type="array")],
        docblock=function_docblock,
        uses={
            "functions": [
                UseReference(name="wp_parse_args", line=22, end_line=22),
                UseReference(
                    name="_deprecated_argument",
                    line=25,
                    end_line=25,
                    arguments=["get_posts", "5.3.0", None],
                ),
            ],
        },
        hooks=[
            Hook(
                name="pre_get_posts",
                line=30,
                end_line=30,
                type=HookType.ACTION,
                arguments=["$query"],
                docblock=make_docblock(short="Fires before posts are retrieved."),
            )
        ],
    )


@pytest.fixture
def sample_class() -> ClassElement:
    """Class with one documented and one undocumented property."""
    return ClassElement(
        name="WP_Query",
        line=70,
        end_line=200,
        parent="WP_Base",
        interfaces=["Countable", "IteratorAggregate", "Countable"],
        docblock=make_docblock(short="Query class."),
        properties=[
            Property(
                name="$posts",
                line=75,
                default="array()",
                visibility=Visibility.PUBLIC,
                docblock=make_docblock(short="List of posts."),
            ),
            Property(name="$cache", line=80, visibility=Visibility.PRIVATE, static=True),
        ],
        methods=[
            Method(
                name="get",
                line=90,
                end_line=95,
                visibility=Visibility.PUBLIC,
                arguments=[Argument(name="$key")],
                docblock=make_docblock(short="Get a query variable."),
            ),
        ],
    )


@pytest.fixture
def reflected_file(
    simple_function: Function,
    documented_function: Function,
    sample_class: ClassElement,
) -> ReflectedFile:
    """Reflected file with functions, a class and a file docblock."""
    return ReflectedFile(
        path="/srv/wp/wp-includes/post.php",
        docblock=make_docblock(short="Post functions."),
        functions=[simple_function, documented_function],
        classes=[sample_class],
    )


@pytest.fixture
def raw_file_dict() -> dict[str, Any]:
    """Reflected file as a raw mapping with untyped annotations."""
    return {
        "path": "/srv/wp/wp-includes/formatting.php",
        "docblock": {
            "short_description": "Formatting functions.",
            "tags": [{"name": "package", "text": "WordPress"}],
        },
        "functions": [
            {
                "name": "wpautop",
                "line": 5,
                "end_line": 9,
                "docblock": {
                    "short_description": "Replaces double line breaks.",
                    "tags": [
                        {"name": "since", "text": "0.71"},
                        {"name": "param", "text": "string $text The text to format."},
                    ],
                },
            }
        ],
    }
