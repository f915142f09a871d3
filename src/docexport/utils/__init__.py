"""
DocExport - Utilities

Logging setup shared by the library and the CLI.
"""

from docexport.utils.logging import configure_logging, get_logger

__all__ = [
    "configure_logging",
    "get_logger",
]
