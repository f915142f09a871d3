"""
Annotation and hash-notation data models.

A docblock annotation is one of five kinds, each carrying only the
fields it supports. ``HashNode`` is the recursive tree produced by the
hash-notation parser for nested ``@param array $args { ... }`` shapes.
"""

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PlainTag(BaseModel):
    """Annotation with a name and free-text content only.

    Attributes:
        name: Annotation name without the leading ``@``
        content: Free-text description
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["plain"] = "plain"
    name: str = Field(..., min_length=1, description="Annotation name", examples=["todo"])
    content: str = Field(default="", description="Free-text description")


class TypedTag(PlainTag):
    """Annotation carrying a type list (``@return``, ``@throws``).

    Attributes:
        types: Ordered, de-duplicated type names
    """

    kind: Literal["typed"] = "typed"  # type: ignore[assignment]
    types: list[str] = Field(default_factory=list, description="Declared types")

    @field_validator("types")
    @classmethod
    def unique_types(cls, v: list[str]) -> list[str]:
        """Keep the first occurrence of each type name."""
        return list(dict.fromkeys(v))


class VariableTag(TypedTag):
    """Annotation naming a variable (``@param``, ``@type``, ``@var``).

    Attributes:
        variable: Variable name including its ``$`` sigil, or empty
    """

    kind: Literal["variable"] = "variable"  # type: ignore[assignment]
    variable: str = Field(default="", description="Variable name", examples=["$args"])


class ReferenceTag(PlainTag):
    """Annotation pointing at another element (``@see``, ``@uses``).

    Attributes:
        reference: Cross-reference target
    """

    kind: Literal["reference"] = "reference"  # type: ignore[assignment]
    reference: str = Field(default="", description="Cross-reference target")


class VersionTag(PlainTag):
    """Annotation carrying a version (``@since``, ``@deprecated``).

    Attributes:
        version: Structured version string, may be empty
    """

    kind: Literal["version"] = "version"  # type: ignore[assignment]
    version: str = Field(default="", description="Version string", examples=["5.3.0"])


AnyTag = Annotated[
    Union[PlainTag, TypedTag, VariableTag, ReferenceTag, VersionTag],
    Field(discriminator="kind"),
]


class RawDocBlock(BaseModel):
    """Docblock as handed over by the reflector.

    Attributes:
        short_description: Summary line(s)
        long_description: Formatted long description
        tags: Annotations in source order
    """

    model_config = ConfigDict(frozen=True)

    short_description: str = Field(default="", description="Short description")
    long_description: str = Field(default="", description="Long description")
    tags: list[AnyTag] = Field(default_factory=list, description="Annotations in source order")


class HashNode(BaseModel):
    """One node of a parsed hash-notation tree.

    Children are keyed by variable name (``$foo``) or, when the block
    has no variable, by an integer positional index.

    Attributes:
        content: Description of this node
        types: Declared types, ``["array"]`` when unspecified
        children: Nested nodes in insertion order
    """

    content: str = Field(default="", description="Node description")
    types: list[str] = Field(default_factory=lambda: ["array"], description="Declared types")
    children: dict[Union[int, str], "HashNode"] = Field(
        default_factory=dict,
        description="Child key -> node",
    )

    @field_validator("types")
    @classmethod
    def types_not_empty(cls, v: list[str]) -> list[str]:
        """Fall back to ``["array"]`` when no type is given."""
        return v or ["array"]

    def depth(self) -> int:
        """Nesting depth below this node (a leaf has depth 0)."""
        if not self.children:
            return 0
        return 1 + max(child.depth() for child in self.children.values())

    def to_export(self) -> dict[Any, Any]:
        """Flatten into the output mapping ``{content, types, <key>: {...}}``.

        The root node built by the parser always exports
        ``types: ["array"]``, whatever type the enclosing ``@param``
        declares. Child keys keep their insertion order.
        """
        out: dict[Any, Any] = {
            "content": self.content,
            "types": list(self.types),
        }
        for key, child in self.children.items():
            out[key] = child.to_export()
        return out


HashNode.model_rebuild()
