"""
DocBlock Normalizer.

Converts a raw docblock into the exported ``{description,
long_description, tags}`` mapping. Each tag kind contributes exactly the
fields it carries; ``@param`` content written in hash notation is
replaced by the parsed tree.
"""

import logging
from typing import Any, Optional

from docexport.models.tags import (
    AnyTag,
    RawDocBlock,
    ReferenceTag,
    TypedTag,
    VariableTag,
    VersionTag,
)
from docexport.parsing.hash_notation import HashNotationError, HashNotationParser
from docexport.parsing.registry import TagRegistry, default_registry
from docexport.parsing.tag_parser import collapse_newlines

logger = logging.getLogger(__name__)

# Annotation whose content may be written in hash notation
HASH_TAG_NAME = "param"

# Annotation whose structured version replaces its content
SINCE_TAG_NAME = "since"


def empty_docblock() -> dict[str, Any]:
    """Export shape of an element without a docblock."""
    return {
        "description": "",
        "long_description": "",
        "tags": [],
    }


class DocBlockNormalizer:
    """Normalizes raw docblocks into export mappings.

    Hash-notation failures are scoped to the tag being parsed. With
    ``fallback_to_raw`` the collapsed raw text is emitted instead and a
    warning is logged; otherwise the ``HashNotationError`` propagates.

    Usage:
        normalizer = DocBlockNormalizer()
        doc = normalizer.normalize(function.docblock)
        doc["tags"][0]["content"]
    """

    def __init__(
        self,
        registry: Optional[TagRegistry] = None,
        hash_parser: Optional[HashNotationParser] = None,
        fallback_to_raw: bool = True,
    ) -> None:
        """Initialize the normalizer.

        Args:
            registry: Tag registry (default registry if omitted)
            hash_parser: Hash-notation parser (built from registry if omitted)
            fallback_to_raw: Emit raw text for tags whose hash notation fails
        """
        self._registry = registry or default_registry()
        self._hash_parser = hash_parser or HashNotationParser(self._registry)
        self._fallback_to_raw = fallback_to_raw

    @property
    def registry(self) -> TagRegistry:
        """Get the tag registry."""
        return self._registry

    @property
    def hash_parser(self) -> HashNotationParser:
        """Get the hash-notation parser."""
        return self._hash_parser

    def normalize(self, docblock: Optional[RawDocBlock]) -> dict[str, Any]:
        """Normalize a docblock.

        Args:
            docblock: Raw docblock, or None when the element has none

        Returns:
            Mapping with ``description``, ``long_description`` and ``tags``;
            never None

        Raises:
            HashNotationError: If hash notation is malformed and
                ``fallback_to_raw`` is disabled
        """
        if docblock is None:
            return empty_docblock()

        return {
            "description": collapse_newlines(docblock.short_description),
            "long_description": collapse_newlines(docblock.long_description),
            "tags": [self.normalize_tag(tag) for tag in docblock.tags],
        }

    def normalize_tag(self, tag: AnyTag) -> dict[str, Any]:
        """Normalize one annotation."""
        content: Any = collapse_newlines(tag.content)
        if tag.name == HASH_TAG_NAME and HashNotationParser.looks_like_hash(content):
            content = self._parse_hash(tag, content)

        out: dict[str, Any] = {
            "name": tag.name,
            "content": content,
        }

        if isinstance(tag, TypedTag):
            out["types"] = list(tag.types)
        if isinstance(tag, VariableTag):
            out["variable"] = tag.variable
        if isinstance(tag, ReferenceTag):
            out["refers"] = tag.reference
        if isinstance(tag, VersionTag) and tag.name == SINCE_TAG_NAME and tag.version:
            out["content"] = tag.version

        return out

    def _parse_hash(self, tag: AnyTag, content: str) -> Any:
        try:
            return self._hash_parser.parse(content).to_export()
        except HashNotationError as e:
            if not self._fallback_to_raw:
                raise
            variable = tag.variable if isinstance(tag, VariableTag) else ""
            logger.warning(f"Keeping raw text for @{tag.name} {variable}: {e}")
            return content
