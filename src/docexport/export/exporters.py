"""
Element Exporters.

One exporter per reflected element kind. Each builds the plain,
JSON-serializable record for its element and recurses into child
exporters; none mutates its input. ``ElementExporter`` bundles the
docblock normalizer and the deprecation-marker names so callers do not
have to pass them to every function.
"""

import logging
from collections.abc import Iterable, Iterator, Mapping
from contextlib import contextmanager
from typing import Any, Optional

from docexport.config.models import DEFAULT_DEPRECATION_FUNCTIONS
from docexport.export.docblock import DocBlockNormalizer
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

logger = logging.getLogger(__name__)

# Use group exported separately by export_hooks
HOOKS_GROUP = "hooks"


class ExportError(Exception):
    """Base exception for export failures."""

    @property
    def location(self) -> Optional[str]:
        """Offending element, if known."""
        return None


class ElementExportError(ExportError):
    """Raised when a single element cannot be exported."""

    def __init__(
        self,
        message: str,
        kind: str,
        name: str,
        line: Optional[int] = None,
    ) -> None:
        """Initialize element export error.

        Args:
            message: Error message
            kind: Element kind (function, class, method, ...)
            name: Element name
            line: Element line number
        """
        super().__init__(message)
        self.kind = kind
        self.name = name
        self.line = line

    @property
    def location(self) -> str:
        """Human-readable element location."""
        if self.line is None:
            return f"{self.kind} {self.name}"
        return f"{self.kind} {self.name} (line {self.line})"

    def __str__(self) -> str:
        return f"{super().__str__()} in {self.location}"


class FileExportError(ExportError):
    """Raised when a file cannot be exported."""

    def __init__(
        self,
        message: str,
        path: str,
        element_location: Optional[str] = None,
    ) -> None:
        """Initialize file export error.

        Args:
            message: Error message
            path: Path of the failing file
            element_location: Offending element inside the file, if known
        """
        super().__init__(message)
        self.path = path
        self.element_location = element_location

    @property
    def location(self) -> Optional[str]:
        return self.element_location

    def __str__(self) -> str:
        return f"{super().__str__()} (file: {self.path})"


@contextmanager
def _element_context(element: ReflectedElement) -> Iterator[None]:
    """Wrap unexpected failures in an ElementExportError naming the element."""
    try:
        yield
    except ExportError:
        raise
    except Exception as e:
        raise ElementExportError(
            f"{type(e).__name__}: {e}",
            kind=element.kind,
            name=element.name,
            line=element.line,
        ) from e


@contextmanager
def _file_context(file: ReflectedFile, section: str) -> Iterator[None]:
    """Wrap unexpected failures in file-scope data in a FileExportError."""
    try:
        yield
    except ExportError:
        raise
    except Exception as e:
        raise FileExportError(
            f"{type(e).__name__}: {e}",
            path=file.path,
            element_location=f"file {section}",
        ) from e


def _default_normalizer(normalizer: Optional[DocBlockNormalizer]) -> DocBlockNormalizer:
    return normalizer or DocBlockNormalizer()


def relative_path(path: str, root: str) -> str:
    """Make a file path relative to root with forward slashes.

    Args:
        path: File path as discovered
        root: Root directory the export is relative to

    Returns:
        Root-relative path; the path unchanged (slashes normalized) when
        it does not lie under root
    """
    path = path.replace("\\", "/")
    root = root.replace("\\", "/").rstrip("/")

    if not root:
        return path.lstrip("/")
    if path == root or path.startswith(f"{root}/"):
        return path[len(root) :].lstrip("/")

    logger.debug(f"Path {path} is not under root {root}, keeping it as is")
    return path


def export_arguments(arguments: Iterable[Argument]) -> list[dict[str, Any]]:
    """Export declared arguments in order."""
    return [
        {
            "name": argument.name,
            "default": argument.default,
            "type": argument.type,
        }
        for argument in arguments
    ]


def export_uses(
    uses: Mapping[str, Iterable[UseReference]],
    deprecation_functions: Iterable[str] = DEFAULT_DEPRECATION_FUNCTIONS,
) -> dict[str, list[dict[str, Any]]]:
    """Export use-references grouped by reference kind.

    The ``hooks`` group is never exported here. A call to a deprecation
    marker with a literal second argument attaches ``deprecation_version``
    to the first usage of that marker within its group.

    Args:
        uses: Reference kind -> usages
        deprecation_functions: Names of deprecation-marker functions

    Returns:
        Reference kind -> list of ``{name, line, end_line}``
    """
    markers = frozenset(deprecation_functions)
    out: dict[str, list[dict[str, Any]]] = {}

    for group, references in uses.items():
        if group == HOOKS_GROUP:
            logger.debug("Dropping 'hooks' use group, hooks are exported separately")
            continue

        entries: list[dict[str, Any]] = []
        first_by_name: dict[str, dict[str, Any]] = {}
        for reference in references:
            entry = {
                "name": reference.name,
                "line": reference.line,
                "end_line": reference.end_line,
            }
            entries.append(entry)
            first = first_by_name.setdefault(reference.name, entry)
            if reference.name in markers:
                version = reference.arguments[1] if len(reference.arguments) > 1 else None
                if version is None:
                    logger.debug(
                        f"{reference.name} call on line {reference.line} has no literal version"
                    )
                else:
                    first["deprecation_version"] = version
        if entries:
            out[group] = entries

    return out


def export_hooks(
    hooks: Iterable[Hook],
    normalizer: Optional[DocBlockNormalizer] = None,
) -> list[dict[str, Any]]:
    """Export hook call sites in order."""
    normalizer = _default_normalizer(normalizer)
    out = []
    for hook in hooks:
        with _element_context(hook):
            out.append(
                {
                    "name": hook.name,
                    "line": hook.line,
                    "end_line": hook.end_line,
                    "type": hook.type.value,
                    "arguments": list(hook.arguments),
                    "doc": normalizer.normalize(hook.docblock),
                }
            )
    return out


def export_properties(
    properties: Iterable[Property],
    normalizer: Optional[DocBlockNormalizer] = None,
) -> list[dict[str, Any]]:
    """Export class properties in order.

    Unlike every other element, a property without a docblock has no
    ``doc`` key at all.
    """
    normalizer = _default_normalizer(normalizer)
    out = []
    for prop in properties:
        with _element_context(prop):
            record: dict[str, Any] = {
                "name": prop.name,
                "line": prop.line,
                "end_line": prop.end_line,
                "default": prop.default,
                "static": prop.static,
                "visibility": prop.visibility.value,
            }
            if prop.docblock is not None:
                record["doc"] = normalizer.normalize(prop.docblock)
            out.append(record)
    return out


def _attach_references(
    record: dict[str, Any],
    element: CallableElement,
    normalizer: DocBlockNormalizer,
    deprecation_functions: Iterable[str],
) -> dict[str, Any]:
    if element.references_elements:
        record["uses"] = export_uses(element.uses, deprecation_functions)
        if element.hooks:
            record["hooks"] = export_hooks(element.hooks, normalizer)
    return record


def export_function(
    function: Function,
    normalizer: Optional[DocBlockNormalizer] = None,
    deprecation_functions: Iterable[str] = DEFAULT_DEPRECATION_FUNCTIONS,
) -> dict[str, Any]:
    """Export a free function.

    ``hooks`` is always present (empty when the body fires none); ``uses``
    only when the body references other elements.
    """
    normalizer = _default_normalizer(normalizer)
    with _element_context(function):
        record: dict[str, Any] = {
            "name": function.name,
            "line": function.line,
            "end_line": function.end_line,
            "arguments": export_arguments(function.arguments),
            "doc": normalizer.normalize(function.docblock),
            "hooks": [],
        }
        return _attach_references(record, function, normalizer, deprecation_functions)


def export_methods(
    methods: Iterable[Method],
    normalizer: Optional[DocBlockNormalizer] = None,
    deprecation_functions: Iterable[str] = DEFAULT_DEPRECATION_FUNCTIONS,
) -> list[dict[str, Any]]:
    """Export class methods in order."""
    normalizer = _default_normalizer(normalizer)
    out = []
    for method in methods:
        with _element_context(method):
            record: dict[str, Any] = {
                "name": method.name,
                "line": method.line,
                "end_line": method.end_line,
                "final": method.final,
                "abstract": method.abstract,
                "static": method.static,
                "visibility": method.visibility.value,
                "arguments": export_arguments(method.arguments),
                "doc": normalizer.normalize(method.docblock),
                "hooks": [],
            }
            out.append(_attach_references(record, method, normalizer, deprecation_functions))
    return out


def export_class(
    cls: ClassElement,
    normalizer: Optional[DocBlockNormalizer] = None,
    deprecation_functions: Iterable[str] = DEFAULT_DEPRECATION_FUNCTIONS,
) -> dict[str, Any]:
    """Export a class with its properties and methods."""
    normalizer = _default_normalizer(normalizer)
    with _element_context(cls):
        return {
            "name": cls.name,
            "line": cls.line,
            "end_line": cls.end_line,
            "final": cls.final,
            "abstract": cls.abstract,
            "extends": cls.parent,
            "implements": list(cls.interfaces),
            "properties": export_properties(cls.properties, normalizer),
            "methods": export_methods(cls.methods, normalizer, deprecation_functions),
            "doc": normalizer.normalize(cls.docblock),
        }


def export_includes(includes: Iterable[Include]) -> list[dict[str, Any]]:
    """Export include statements in order."""
    return [
        {
            "name": include.name,
            "line": include.line,
            "type": include.type.value,
        }
        for include in includes
    ]


def export_constants(constants: Iterable[Constant]) -> list[dict[str, Any]]:
    """Export constants in order."""
    return [
        {
            "name": constant.name,
            "line": constant.line,
            "value": constant.value,
        }
        for constant in constants
    ]


def export_file(
    file: ReflectedFile,
    root: str,
    normalizer: Optional[DocBlockNormalizer] = None,
    deprecation_functions: Iterable[str] = DEFAULT_DEPRECATION_FUNCTIONS,
) -> dict[str, Any]:
    """Export one reflected file.

    Keys appear in the order ``file, path, root, uses, includes,
    constants, hooks, functions, classes``; collections with nothing to
    report are left out.

    Args:
        file: Reflected file
        root: Root path, passed through verbatim and stripped from the path
        normalizer: Docblock normalizer
        deprecation_functions: Names of deprecation-marker functions

    Returns:
        Export record for the file

    Raises:
        ElementExportError: If an element inside the file cannot be exported
        FileExportError: If the file docblock or a file-scope collection
            cannot be exported
    """
    normalizer = _default_normalizer(normalizer)
    with _file_context(file, "docblock"):
        doc = normalizer.normalize(file.docblock)
    record: dict[str, Any] = {
        "file": doc,
        "path": relative_path(file.path, root),
        "root": root,
    }

    if file.uses:
        with _file_context(file, "uses"):
            record["uses"] = export_uses(file.uses, deprecation_functions)
    if file.includes:
        with _file_context(file, "includes"):
            record["includes"] = export_includes(file.includes)
    if file.constants:
        with _file_context(file, "constants"):
            record["constants"] = export_constants(file.constants)
    if file.hooks:
        record["hooks"] = export_hooks(file.hooks, normalizer)
    for function in file.functions:
        record.setdefault("functions", []).append(
            export_function(function, normalizer, deprecation_functions)
        )
    for cls in file.classes:
        record.setdefault("classes", []).append(
            export_class(cls, normalizer, deprecation_functions)
        )

    return record


class ElementExporter:
    """Exports reflected elements with a shared normalizer.

    Usage:
        exporter = ElementExporter(DocBlockNormalizer(registry))
        record = exporter.export_file(reflected_file, root="/srv/wordpress")
    """

    def __init__(
        self,
        normalizer: Optional[DocBlockNormalizer] = None,
        deprecation_functions: Optional[Iterable[str]] = None,
    ) -> None:
        """Initialize the exporter.

        Args:
            normalizer: Docblock normalizer (default registry if omitted)
            deprecation_functions: Deprecation-marker function names
        """
        self._normalizer = normalizer or DocBlockNormalizer()
        self._deprecation_functions = frozenset(
            DEFAULT_DEPRECATION_FUNCTIONS if deprecation_functions is None else deprecation_functions
        )

    @property
    def normalizer(self) -> DocBlockNormalizer:
        """Get the docblock normalizer."""
        return self._normalizer

    @property
    def deprecation_functions(self) -> frozenset[str]:
        """Get the deprecation-marker function names."""
        return self._deprecation_functions

    def export_docblock(self, element: ReflectedElement | ReflectedFile) -> dict[str, Any]:
        """Normalize the docblock of an element or file."""
        return self._normalizer.normalize(element.docblock)

    def export_uses(self, uses: Mapping[str, Iterable[UseReference]]) -> dict[str, Any]:
        """Export reference groups, marking deprecation calls (see ``export_uses``)."""
        return export_uses(uses, self._deprecation_functions)

    def export_hooks(self, hooks: Iterable[Hook]) -> list[dict[str, Any]]:
        """Export hook invocations with their normalized docs."""
        return export_hooks(hooks, self._normalizer)

    def export_function(self, function: Function) -> dict[str, Any]:
        """Export one function (see ``export_function``)."""
        return export_function(function, self._normalizer, self._deprecation_functions)

    def export_class(self, cls: ClassElement) -> dict[str, Any]:
        """Export one class with its properties and methods (see ``export_class``)."""
        return export_class(cls, self._normalizer, self._deprecation_functions)

    def export_file(self, file: ReflectedFile, root: str) -> dict[str, Any]:
        """Export one reflected file (see ``export_file``)."""
        return export_file(file, root, self._normalizer, self._deprecation_functions)
