"""
Export Orchestrator.

Drives the export of a batch of reflected files. Every file is exported
independently: a failure is recorded against that file only, and the
remaining files are still exported unless fail-fast mode is configured.
Results always come back in input order, also from the concurrent path.
"""

import asyncio
import logging
from collections.abc import Iterable, Mapping, Sequence
from datetime import datetime
from typing import Any, Optional, Union

from pydantic import ValidationError

from docexport.config.models import DocExportConfig
from docexport.export.cancellation import CancellationToken
from docexport.export.docblock import DocBlockNormalizer
from docexport.export.exporters import ElementExporter, ExportError, FileExportError
from docexport.models.base import ExportStatus, TagKind
from docexport.models.elements import ReflectedFile
from docexport.models.output import ExportRunResult, FileExportResult
from docexport.parsing.hash_notation import HashNotationParser
from docexport.parsing.registry import TagRegistry, default_registry
from docexport.reflection.loader import classify_tags

logger = logging.getLogger(__name__)

FileInput = Union[ReflectedFile, Mapping[str, Any]]


def registry_from_config(
    config: DocExportConfig,
    base: Optional[TagRegistry] = None,
) -> TagRegistry:
    """Build the tag registry for a configuration.

    Args:
        config: Configuration whose ``extra_tags`` extend the registry
        base: Registry to extend (default registry if omitted)

    Returns:
        ``base`` itself when there is nothing to add, otherwise a new registry
    """
    base = base or default_registry()
    if not config.extra_tags:
        return base
    return base.with_overrides(
        kinds={name: TagKind(kind) for name, kind in config.extra_tags.items()}
    )


def _input_path(file: FileInput, index: int) -> str:
    if isinstance(file, ReflectedFile):
        return file.path
    path = file.get("path") if isinstance(file, Mapping) else None
    return str(path) if path else f"<file #{index}>"


def _validation_location(error: ValidationError) -> Optional[str]:
    errors = error.errors()
    if not errors:
        return None
    return ".".join(str(part) for part in errors[0].get("loc", ()))


class ExportOrchestrator:
    """Exports batches of reflected files.

    The orchestrator owns one ``ElementExporter`` built from the
    configuration; it holds no per-run state, so one instance can run
    several batches.

    Usage:
        orchestrator = ExportOrchestrator(root="/srv/wordpress")
        result = orchestrator.export(files)
        records = result.records()

        # Concurrently, bounded by export.parallel_files
        result = await orchestrator.export_async(files)
    """

    def __init__(
        self,
        root: str,
        config: Optional[DocExportConfig] = None,
        registry: Optional[TagRegistry] = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            root: Root path stripped from file paths, passed through verbatim
            config: Configuration (defaults if omitted)
            registry: Base tag registry, extended by ``config.extra_tags``
        """
        self._root = root
        self._config = config or DocExportConfig()
        self._registry = registry_from_config(self._config, registry)

        hash_config = self._config.hash_notation
        parser = HashNotationParser(
            self._registry,
            max_depth=hash_config.max_depth,
            shared_index=hash_config.shared_index,
        )
        normalizer = DocBlockNormalizer(
            self._registry,
            parser,
            fallback_to_raw=hash_config.fallback_to_raw,
        )
        self._exporter = ElementExporter(
            normalizer,
            deprecation_functions=self._config.export.deprecation_functions,
        )

    @property
    def root(self) -> str:
        """Get the root path."""
        return self._root

    @property
    def config(self) -> DocExportConfig:
        """Get the configuration."""
        return self._config

    @property
    def registry(self) -> TagRegistry:
        """Get the effective tag registry."""
        return self._registry

    @property
    def exporter(self) -> ElementExporter:
        """Get the element exporter."""
        return self._exporter

    def export(
        self,
        files: Iterable[FileInput],
        cancel_token: Optional[CancellationToken] = None,
    ) -> ExportRunResult:
        """Export files one after another in input order.

        Args:
            files: Reflected files or raw mappings to validate
            cancel_token: Token checked before each file is started

        Returns:
            Run result with one entry per input file

        Raises:
            FileExportError: On the first failure when
                ``export.continue_on_error`` is disabled
        """
        files = list(files)
        run = ExportRunResult(root=self._root)
        logger.info(f"Exporting {len(files)} files relative to {self._root}")

        for index, file in enumerate(files):
            if cancel_token is not None and cancel_token.is_cancelled():
                run.cancelled = True
                run.results.append(self._skipped(file, index))
                continue
            run.results.append(self._export_one(file, index))

        return self._finish(run)

    async def export_async(
        self,
        files: Iterable[FileInput],
        cancel_token: Optional[CancellationToken] = None,
    ) -> ExportRunResult:
        """Export files concurrently.

        At most ``export.parallel_files`` files are exported at once, each
        in a worker thread. Results are returned in input order.

        Args:
            files: Reflected files or raw mappings to validate
            cancel_token: Token checked before each file is started

        Returns:
            Run result with one entry per input file

        Raises:
            FileExportError: On a failure when ``export.continue_on_error``
                is disabled
        """
        files = list(files)
        run = ExportRunResult(root=self._root)
        semaphore = asyncio.Semaphore(self._config.export.parallel_files)
        logger.info(
            f"Exporting {len(files)} files relative to {self._root} "
            f"({self._config.export.parallel_files} at a time)"
        )

        async def export_bounded(index: int, file: FileInput) -> FileExportResult:
            async with semaphore:
                if cancel_token is not None and cancel_token.is_cancelled():
                    return self._skipped(file, index)
                return await asyncio.to_thread(self._export_one, file, index)

        results = await asyncio.gather(
            *(export_bounded(index, file) for index, file in enumerate(files))
        )

        run.results = list(results)
        run.cancelled = any(r.status == ExportStatus.SKIPPED for r in results)
        return self._finish(run)

    def _export_one(self, file: FileInput, index: int) -> FileExportResult:
        """Export a single file, isolating its failure."""
        path = _input_path(file, index)
        try:
            if isinstance(file, ReflectedFile):
                reflected = file
            else:
                reflected = ReflectedFile.model_validate(classify_tags(file, self._registry))
            record = self._exporter.export_file(reflected, self._root)
        except ValidationError as e:
            failure = FileExportError(
                f"Invalid reflected file: {e.error_count()} errors",
                path,
                _validation_location(e),
            )
            return self._failed(path, failure, e)
        except FileExportError as e:
            return self._failed(path, e, e)
        except ExportError as e:
            failure = FileExportError(str(e), path, e.location)
            return self._failed(path, failure, e)

        logger.debug(f"Exported {path}")
        return FileExportResult(path=path, status=ExportStatus.COMPLETED, record=record)

    def _failed(self, path: str, failure: FileExportError, cause: Exception) -> FileExportResult:
        if not self._config.export.continue_on_error:
            raise failure from cause
        logger.warning(f"Failed to export {path}: {cause}")
        return FileExportResult(
            path=path,
            status=ExportStatus.FAILED,
            error=str(cause),
            error_location=failure.element_location,
        )

    def _skipped(self, file: FileInput, index: int) -> FileExportResult:
        return FileExportResult(path=_input_path(file, index), status=ExportStatus.SKIPPED)

    def _finish(self, run: ExportRunResult) -> ExportRunResult:
        run.completed_at = datetime.now()
        if run.cancelled:
            logger.info(f"Export cancelled: {run.skipped_count} files not started")
        logger.info(
            f"Export finished: {run.completed_count} completed, "
            f"{run.failed_count} failed, {run.skipped_count} skipped"
        )
        return run


def export_files(
    files: Sequence[FileInput],
    root: str,
    config: Optional[DocExportConfig] = None,
    registry: Optional[TagRegistry] = None,
    cancel_token: Optional[CancellationToken] = None,
) -> list[dict[str, Any]]:
    """Export files and return the records of the completed ones.

    Convenience wrapper around ``ExportOrchestrator.export`` for callers
    that only need the export trees.

    Args:
        files: Reflected files or raw mappings
        root: Root path for relative path computation
        config: Configuration (defaults if omitted)
        registry: Base tag registry
        cancel_token: Token checked before each file is started

    Returns:
        Export records in input order
    """
    orchestrator = ExportOrchestrator(root, config=config, registry=registry)
    return orchestrator.export(files, cancel_token=cancel_token).records()
