"""
Reflector Dump Loader.

An external reflector writes the reflected source tree as JSON or YAML,
either ``{"files": [...]}`` or a bare list of files. Annotations in a
dump may already be typed (they carry a ``kind``) or raw
``{"name": ..., "text": ...}`` pairs, which are classified here with the
tag registry.
"""

import json
import logging
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import ValidationError

from docexport.models.elements import ReflectedFile
from docexport.parsing.registry import TagRegistry, default_registry
from docexport.parsing.tag_parser import build_tag

logger = logging.getLogger(__name__)

JSON_SUFFIXES = {".json"}
YAML_SUFFIXES = {".yaml", ".yml"}


class ReflectionLoadError(Exception):
    """Raised when a reflector dump cannot be read or validated."""

    def __init__(
        self,
        message: str,
        errors: Optional[list[dict]] = None,
        path: Optional[Path] = None,
    ) -> None:
        """Initialize reflection load error.

        Args:
            message: Error message
            errors: Validation errors (from Pydantic)
            path: Path of the dump
        """
        super().__init__(message)
        self.errors = errors or []
        self.path = path

    def __str__(self) -> str:
        msg = super().__str__()
        if self.path:
            msg = f"{msg} (file: {self.path})"
        for err in self.errors[:5]:
            loc = ".".join(str(x) for x in err.get("loc", []))
            msg = f"{msg}\n  - {loc}: {err.get('msg', 'Unknown error')}"
        if len(self.errors) > 5:
            msg = f"{msg}\n  ... and {len(self.errors) - 5} more errors"
        return msg


def _classify_docblock(docblock: dict[str, Any], registry: TagRegistry) -> dict[str, Any]:
    tags = []
    for tag in docblock.get("tags") or []:
        if isinstance(tag, dict) and "kind" not in tag and "name" in tag:
            text = tag.get("text", tag.get("content", ""))
            tag = build_tag(str(tag["name"]), str(text or ""), registry).model_dump()
        tags.append(tag)
    return {**docblock, "tags": tags}


def classify_tags(data: Any, registry: Optional[TagRegistry] = None) -> Any:
    """Turn raw annotations anywhere in a dump into typed tag mappings.

    Args:
        data: Parsed dump data (mappings and lists)
        registry: Tag registry deciding the tag kinds

    Returns:
        A copy of data with every ``docblock.tags`` entry typed
    """
    registry = registry or default_registry()
    if isinstance(data, list):
        return [classify_tags(item, registry) for item in data]
    if not isinstance(data, dict):
        return data

    out = {}
    for key, value in data.items():
        if key == "docblock" and isinstance(value, dict):
            out[key] = _classify_docblock(value, registry)
        else:
            out[key] = classify_tags(value, registry)
    return out


def _parse_document(path: Path) -> Any:
    suffix = path.suffix.lower()
    try:
        with open(path, encoding="utf-8") as f:
            if suffix in JSON_SUFFIXES:
                return json.load(f)
            if suffix in YAML_SUFFIXES:
                return yaml.safe_load(f)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ReflectionLoadError(f"Invalid {suffix[1:].upper()} document: {e}", path=path) from e

    raise ReflectionLoadError(
        f"Unsupported dump format '{suffix}', expected one of "
        f"{sorted(JSON_SUFFIXES | YAML_SUFFIXES)}",
        path=path,
    )


def read_reflection_dump(
    path: str | Path,
    registry: Optional[TagRegistry] = None,
) -> list[dict[str, Any]]:
    """Read a dump into per-file mappings without validating them.

    The orchestrator validates each mapping on its own, so one malformed
    file does not prevent the others from being exported.

    Args:
        path: Path of a ``.json``, ``.yaml`` or ``.yml`` dump
        registry: Tag registry for raw annotations

    Returns:
        One mapping per reflected file, tags typed

    Raises:
        FileNotFoundError: If the dump does not exist
        ReflectionLoadError: If the document is malformed
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Reflection dump not found: {path}")

    data = _parse_document(path)
    if isinstance(data, dict):
        data = data.get("files")
    if not isinstance(data, list):
        raise ReflectionLoadError("Dump must be a list of files or contain a 'files' list", path=path)

    for index, item in enumerate(data):
        if not isinstance(item, dict):
            raise ReflectionLoadError(f"File entry #{index} is not a mapping", path=path)

    files = classify_tags(data, registry)
    logger.debug(f"Read {len(files)} reflected files from {path}")
    return files


def load_reflection(
    path: str | Path,
    registry: Optional[TagRegistry] = None,
) -> list[ReflectedFile]:
    """Load and validate a reflector dump.

    Args:
        path: Path of a ``.json``, ``.yaml`` or ``.yml`` dump
        registry: Tag registry for raw annotations

    Returns:
        Validated reflected files in dump order

    Raises:
        FileNotFoundError: If the dump does not exist
        ReflectionLoadError: If the document is malformed or a file fails
            validation
    """
    path = Path(path)
    files = []
    errors: list[dict] = []
    for index, item in enumerate(read_reflection_dump(path, registry)):
        try:
            files.append(ReflectedFile.model_validate(item))
        except ValidationError as e:
            errors.extend({**err, "loc": ("files", index, *err["loc"])} for err in e.errors())

    if errors:
        raise ReflectionLoadError(
            f"Reflection dump validation failed: {len(errors)} errors",
            errors=errors,
            path=path,
        )
    return files
