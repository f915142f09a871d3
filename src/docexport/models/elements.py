"""
Reflected element models.

These models describe the already-reflected source tree handed over by
the external reflector: one ``ReflectedFile`` per source file with its
includes, constants, use-references, hooks, functions and classes. They
are immutable; exporters only read them.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from docexport.models.base import HookType, IncludeType, Visibility
from docexport.models.tags import RawDocBlock


class ReflectedElement(BaseModel):
    """Attributes shared by every reflected element.

    Attributes:
        name: Short name of the element
        line: First line (1-indexed)
        end_line: Last line (1-indexed), if known
        docblock: Raw docblock, if the element has one
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Short name")
    line: int = Field(..., ge=1, description="First line number (1-indexed)")
    end_line: Optional[int] = Field(default=None, ge=1, description="Last line number")
    docblock: Optional[RawDocBlock] = Field(default=None, description="Raw docblock")

    @model_validator(mode="after")
    def end_line_after_line(self) -> "ReflectedElement":
        """Ensure end_line is >= line when present."""
        if self.end_line is not None and self.end_line < self.line:
            raise ValueError("end_line must be >= line")
        return self

    @property
    def kind(self) -> str:
        """Element kind used in error messages."""
        return type(self).__name__.lower()


class Argument(BaseModel):
    """A declared function or method argument.

    Attributes:
        name: Argument name including its sigil
        default: Default value as source literal, if any
        type: Declared type, if any
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Argument name", examples=["$args"])
    default: Optional[str] = Field(default=None, description="Default literal", examples=["null"])
    type: Optional[str] = Field(default=None, description="Declared type", examples=["array"])


class UseReference(ReflectedElement):
    """One usage of another named element, e.g. a function call.

    Attributes:
        arguments: Literal values of the call's positional arguments,
            ``None`` where an argument is not a literal
    """

    arguments: list[Any] = Field(default_factory=list, description="Call argument literals")


class Hook(ReflectedElement):
    """A hook call site.

    Attributes:
        type: Hook kind tag
        arguments: Raw argument source strings, unparsed
    """

    type: HookType = Field(..., description="Hook kind")
    arguments: list[str] = Field(default_factory=list, description="Raw call arguments")


class Include(BaseModel):
    """An include/require statement.

    Attributes:
        name: Included path expression
        line: Line of the statement
        type: Include flavor
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Included path expression")
    line: int = Field(..., ge=1, description="Line number")
    type: IncludeType = Field(default=IncludeType.REQUIRE, description="Include flavor")


class Constant(BaseModel):
    """A file-level constant definition.

    Attributes:
        name: Constant name
        line: Line of the definition
        value: Value as source literal
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Constant name")
    line: int = Field(..., ge=1, description="Line number")
    value: Optional[str] = Field(default=None, description="Value literal")


class CallableElement(ReflectedElement):
    """Shared shape of functions and methods.

    Attributes:
        arguments: Declared arguments in order
        uses: Referenced elements grouped by reference kind
        hooks: Hook call sites inside the body
    """

    arguments: list[Argument] = Field(default_factory=list, description="Declared arguments")
    uses: dict[str, list[UseReference]] = Field(
        default_factory=dict,
        description="Reference kind -> usages",
        examples=[{"functions": [], "methods": []}],
    )
    hooks: list[Hook] = Field(default_factory=list, description="Hook call sites")

    @property
    def references_elements(self) -> bool:
        """True when the body references other elements or fires hooks."""
        return bool(self.uses) or bool(self.hooks)


class Function(CallableElement):
    """A free function."""


class Method(CallableElement):
    """A class method.

    Attributes:
        visibility: Member visibility
        static: Declared static
        final: Declared final
        abstract: Declared abstract
    """

    visibility: Visibility = Field(default=Visibility.PUBLIC, description="Visibility")
    static: bool = Field(default=False, description="Declared static")
    final: bool = Field(default=False, description="Declared final")
    abstract: bool = Field(default=False, description="Declared abstract")


class Property(ReflectedElement):
    """A class property.

    Attributes:
        default: Default value as source literal, if any
        visibility: Member visibility
        static: Declared static
    """

    default: Optional[str] = Field(default=None, description="Default literal")
    visibility: Visibility = Field(default=Visibility.PUBLIC, description="Visibility")
    static: bool = Field(default=False, description="Declared static")


class ClassElement(ReflectedElement):
    """A class declaration.

    Attributes:
        final: Declared final
        abstract: Declared abstract
        parent: Parent class name, if any
        interfaces: Implemented interface names
        properties: Properties in source order
        methods: Methods in source order
    """

    final: bool = Field(default=False, description="Declared final")
    abstract: bool = Field(default=False, description="Declared abstract")
    parent: Optional[str] = Field(default=None, description="Parent class name")
    interfaces: list[str] = Field(default_factory=list, description="Implemented interfaces")
    properties: list[Property] = Field(default_factory=list, description="Properties")
    methods: list[Method] = Field(default_factory=list, description="Methods")

    @field_validator("interfaces")
    @classmethod
    def unique_interfaces(cls, v: list[str]) -> list[str]:
        """Interfaces form a set; keep first occurrence order."""
        return list(dict.fromkeys(v))

    @property
    def kind(self) -> str:
        return "class"


class ReflectedFile(BaseModel):
    """One reflected source file.

    Attributes:
        path: File path as discovered (absolute or root-prefixed)
        docblock: File-level docblock, if any
        includes: Include statements in source order
        constants: Constants in source order
        uses: File-scope references grouped by kind
        hooks: File-scope hook call sites
        functions: Functions in source order
        classes: Classes in source order
    """

    model_config = ConfigDict(frozen=True)

    path: str = Field(..., min_length=1, description="File path", examples=["/src/wp-includes/post.php"])
    docblock: Optional[RawDocBlock] = Field(default=None, description="File docblock")
    includes: list[Include] = Field(default_factory=list, description="Include statements")
    constants: list[Constant] = Field(default_factory=list, description="Constants")
    uses: dict[str, list[UseReference]] = Field(
        default_factory=dict, description="Reference kind -> usages"
    )
    hooks: list[Hook] = Field(default_factory=list, description="Hook call sites")
    functions: list[Function] = Field(default_factory=list, description="Functions")
    classes: list[ClassElement] = Field(default_factory=list, description="Classes")
