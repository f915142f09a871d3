"""
Annotation Text Parser.

Turns the raw text following an ``@name`` annotation into a typed tag.
The parameter-declaration grammar ``<types> [$variable] <description>``
is shared with the hash-notation parser, which treats any declaration it
cannot read as a hard error.
"""

import re
from dataclasses import dataclass, field
from typing import Optional

from docexport.models.base import TagKind
from docexport.models.tags import (
    AnyTag,
    PlainTag,
    ReferenceTag,
    TypedTag,
    VariableTag,
    VersionTag,
)
from docexport.parsing.registry import TagRegistry, default_registry

# $name, &$name (by reference) or ...$name (variadic)
_VARIABLE_PATTERN = re.compile(r"^(?:&|\.\.\.)?\$\w+$")
_VERSION_PATTERN = re.compile(r"^\d+(?:\.\d+)*(?:[-+][\w.]+)?$")
_NEWLINES = re.compile(r"[\r\n]+")


class TagSyntaxError(ValueError):
    """Raised when annotation text cannot be parsed."""

    def __init__(self, message: str, text: Optional[str] = None) -> None:
        """Initialize tag syntax error.

        Args:
            message: Error message
            text: Offending annotation text
        """
        super().__init__(message)
        self.text = text


@dataclass(frozen=True)
class ParameterSpec:
    """Parsed parameter declaration.

    Attributes:
        types: Declared types in order
        variable: Variable name, empty when not declared
        description: Remaining description text
    """

    types: list[str] = field(default_factory=list)
    variable: str = ""
    description: str = ""


def collapse_newlines(text: str) -> str:
    """Replace each run of CR/LF characters with a single space."""
    return _NEWLINES.sub(" ", text)


def is_variable(token: str) -> bool:
    """Check if a token is a variable name such as ``$args``."""
    return bool(_VARIABLE_PATTERN.match(token))


def _split_head(text: str) -> tuple[str, str]:
    head, _, rest = text.strip().partition(" ")
    return head, rest.strip()


def parse_parameter(text: str) -> ParameterSpec:
    """Parse a ``<types> [$variable] <description>`` declaration.

    Args:
        text: Declaration text without the leading annotation name

    Returns:
        Parsed declaration

    Raises:
        TagSyntaxError: If the text is empty or has no type before the variable
    """
    normalized = " ".join(text.split())
    if not normalized:
        raise TagSyntaxError("Empty parameter declaration", text)

    head, rest = _split_head(normalized)
    if is_variable(head):
        raise TagSyntaxError(f"Missing type before variable {head}", text)

    types = [t for t in head.split("|") if t]
    if not types:
        raise TagSyntaxError(f"Invalid type specification '{head}'", text)

    variable = ""
    candidate, remainder = _split_head(rest)
    if candidate.endswith("{") and is_variable(candidate[:-1]):
        # $bar{ opens a block right after the name
        variable = candidate[:-1]
        rest = f"{{ {remainder}".strip()
    elif candidate and is_variable(candidate):
        variable = candidate
        rest = remainder

    return ParameterSpec(types=types, variable=variable, description=rest)


def build_tag(
    name: str,
    text: str = "",
    registry: Optional[TagRegistry] = None,
) -> AnyTag:
    """Build a typed tag from raw annotation text.

    The registry decides the tag kind. Variable tags whose text does not
    parse are kept as variable tags with the raw text as content so a
    reflector dump never fails on a sloppy ``@param``.

    Args:
        name: Annotation name, with or without ``@``
        text: Raw text following the annotation name
        registry: Tag registry (default registry if omitted)

    Returns:
        Tag of the registered kind
    """
    registry = registry or default_registry()
    name = name.lstrip("@")
    text = text.strip()
    kind = registry.kind_for(name)

    if kind == TagKind.VARIABLE:
        try:
            spec = parse_parameter(text)
        except TagSyntaxError:
            return VariableTag(name=name, content=text)
        return VariableTag(
            name=name,
            content=spec.description,
            types=spec.types,
            variable=spec.variable,
        )

    if kind == TagKind.TYPED:
        head, rest = _split_head(text)
        types = [t for t in head.split("|") if t]
        return TypedTag(name=name, content=rest, types=types)

    if kind == TagKind.REFERENCE:
        head, rest = _split_head(text)
        return ReferenceTag(name=name, content=rest, reference=head)

    if kind == TagKind.VERSION:
        head, rest = _split_head(text)
        if head and _VERSION_PATTERN.match(head):
            return VersionTag(name=name, content=rest, version=head)
        return VersionTag(name=name, content=text)

    return PlainTag(name=name, content=text)
