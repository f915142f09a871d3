"""
DocExport - Reflection Input

Reads reflector dumps (JSON or YAML) into the reflected element models.
"""

from docexport.reflection.loader import (
    ReflectionLoadError,
    classify_tags,
    load_reflection,
    read_reflection_dump,
)

__all__ = [
    "ReflectionLoadError",
    "classify_tags",
    "load_reflection",
    "read_reflection_dump",
]
