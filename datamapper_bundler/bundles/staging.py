"""Staging of module sources and collection of bundle output.

This module handles:
- Copying a module's source files into the shared staging directory
- Copying the produced bundle back into the module's own directory

Copies are best-effort: a failing file is logged and reported, the
remaining files are still processed.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from datamapper_bundler.bundles.workspace import SOURCE_EXTENSION
from datamapper_bundler.types import DataMapperModule, OperationResult

logger = logging.getLogger(__name__)


class StagingError(Exception):
    """Raised when a single file cannot be staged."""

    def __init__(self, message: str, code: str = "stage_error") -> None:
        super().__init__(message)
        self.code = code


def stage_file(source: Path, dest: Path) -> None:
    """Copy a single file, replacing any existing destination.

    Args:
        source: Path to source file.
        dest: Destination path.

    Raises:
        StagingError: If the copy fails.
    """
    try:
        dest.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(source, dest)
    except OSError as e:
        raise StagingError(
            f"Failed to copy {source} -> {dest}: {e}",
            code="file_copy_error",
        ) from e


def stage_module(
    module: DataMapperModule,
    staging_dir: Path,
    extension: str = SOURCE_EXTENSION,
) -> OperationResult:
    """Copy a module's source files into the staging directory.

    Only files with the source extension are copied. Each file keeps its
    path relative to the module directory.

    Args:
        module: Module to stage.
        staging_dir: Shared staging directory.
        extension: Source file extension to select.

    Returns:
        OperationResult with the staged and failed files in ``details``.
    """
    staged: list[str] = []
    failed: list[str] = []

    try:
        sources = module.source_files(extension)
    except OSError as e:
        logger.error("Failed to list source files of %s: %s", module.name, e)
        return OperationResult(
            success=False,
            message=f"Failed to list source files of {module.name}: {e}",
            code="source_walk_error",
        )

    for source in sources:
        rel_path = source.relative_to(module.source_dir)
        try:
            stage_file(source, staging_dir / rel_path)
        except StagingError as e:
            logger.error("Failed to copy data mapper file %s: %s", source, e)
            failed.append(rel_path.as_posix())
            continue
        staged.append(rel_path.as_posix())

    logger.debug("Staged %d file(s) for %s", len(staged), module.name)
    message = f"Staged {len(staged)} file(s) for {module.name}"
    if failed:
        message += f"; failed to copy: {', '.join(failed)}"
    return OperationResult(
        success=not failed,
        message=message,
        code="partial_stage" if failed else None,
        details={"staged": staged, "failed": failed},
    )


def collect_bundle(bundle_path: Path, module: DataMapperModule) -> OperationResult:
    """Copy the produced bundle into the module's directory.

    Args:
        bundle_path: Fixed bundler output file.
        module: Module the bundle belongs to.

    Returns:
        OperationResult with the destination path in ``details``.
    """
    logger.info("Copying bundled js file: %s", bundle_path)
    dest = module.source_dir / bundle_path.name

    if not bundle_path.is_file():
        logger.error("Bundled js file not found: %s", bundle_path)
        return OperationResult(
            success=False,
            message=f"Bundle not found: {bundle_path}",
            code="bundle_not_found",
        )

    try:
        stage_file(bundle_path, dest)
    except StagingError as e:
        logger.error("Failed to copy bundled js file %s: %s", bundle_path, e)
        return OperationResult(success=False, message=str(e), code=e.code)

    return OperationResult(
        success=True,
        message=f"Collected {dest}",
        details={"path": str(dest)},
    )


__all__ = ["StagingError", "collect_bundle", "stage_file", "stage_module"]
