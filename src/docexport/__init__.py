"""
DocExport: Documentation Tree Export for Reflected Source Elements.

Walks already-reflected source elements (files, functions, classes,
methods, properties, constants, includes and hook call sites) and
normalizes their doc comments into an ordered, serializable tree that
downstream renderers consume by field name.

Key Features:
- Typed annotation model with an explicit tag registry
- Hash-notation parser for nested ``@param array $args { ... }`` shapes
- Per-file export isolation with cooperative cancellation

Example:
    from docexport import ExportOrchestrator

    orchestrator = ExportOrchestrator(root="/path/to/source")
    result = orchestrator.export(reflected_files)
    records = result.records()
"""

from docexport.export.orchestrator import ExportOrchestrator, export_files
from docexport.version import __version__

__all__ = [
    "__version__",
    "ExportOrchestrator",
    "export_files",
]
