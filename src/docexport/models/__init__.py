"""
DocExport - Core Data Models

Pydantic models for the reflected input tree, the annotation kinds,
hash-notation nodes and the export results.
"""

from docexport.models.base import (
    ExportStatus,
    HookType,
    IncludeType,
    TagKind,
    Visibility,
)
from docexport.models.elements import (
    Argument,
    CallableElement,
    ClassElement,
    Constant,
    Function,
    Hook,
    Include,
    Method,
    Property,
    ReflectedElement,
    ReflectedFile,
    UseReference,
)
from docexport.models.output import ExportRunResult, FileExportResult
from docexport.models.tags import (
    AnyTag,
    HashNode,
    PlainTag,
    RawDocBlock,
    ReferenceTag,
    TypedTag,
    VariableTag,
    VersionTag,
)

__all__ = [
    # Base enums
    "TagKind",
    "Visibility",
    "HookType",
    "IncludeType",
    "ExportStatus",
    # Annotation models
    "AnyTag",
    "PlainTag",
    "TypedTag",
    "VariableTag",
    "ReferenceTag",
    "VersionTag",
    "RawDocBlock",
    "HashNode",
    # Reflected elements
    "ReflectedElement",
    "ReflectedFile",
    "Argument",
    "UseReference",
    "Hook",
    "Include",
    "Constant",
    "CallableElement",
    "Function",
    "Method",
    "Property",
    "ClassElement",
    # Results
    "FileExportResult",
    "ExportRunResult",
]
