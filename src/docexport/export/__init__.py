"""
DocExport - Export Engine

Docblock normalization, per-element exporters and the batch orchestrator
that turns reflected files into documentation records.
"""

from docexport.export.cancellation import CancellationToken
from docexport.export.docblock import DocBlockNormalizer, empty_docblock
from docexport.export.exporters import (
    ElementExporter,
    ElementExportError,
    ExportError,
    FileExportError,
    export_arguments,
    export_class,
    export_constants,
    export_file,
    export_function,
    export_hooks,
    export_includes,
    export_methods,
    export_properties,
    export_uses,
    relative_path,
)
from docexport.export.orchestrator import (
    ExportOrchestrator,
    export_files,
    registry_from_config,
)

__all__ = [
    # Orchestration
    "ExportOrchestrator",
    "export_files",
    "registry_from_config",
    "CancellationToken",
    # Normalizer
    "DocBlockNormalizer",
    "empty_docblock",
    # Exporters
    "ElementExporter",
    "export_arguments",
    "export_uses",
    "export_hooks",
    "export_properties",
    "export_methods",
    "export_function",
    "export_class",
    "export_includes",
    "export_constants",
    "export_file",
    "relative_path",
    # Errors
    "ExportError",
    "ElementExportError",
    "FileExportError",
]
