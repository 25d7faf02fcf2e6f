"""Removal of transient bundling files.

Two granularities:
- Per-module cleanup clears the staging directory between modules
- Final cleanup removes every generated file, cache and output directory

Both are best-effort: failures are logged and reported, never raised.
"""

from __future__ import annotations

import logging
from pathlib import Path

from datamapper_bundler.bundles.workspace import SOURCE_EXTENSION, WorkspaceLayout
from datamapper_bundler.types import OperationResult

logger = logging.getLogger(__name__)


def delete_recursively(path: Path, failures: list[str] | None = None) -> list[str]:
    """Delete a file or directory tree, children before parents.

    A failing entry is logged and recorded; the sweep carries on with its
    siblings.

    Args:
        path: File or directory to delete.
        failures: Optional list that collects failed paths.

    Returns:
        List of paths that could not be deleted.
    """
    if failures is None:
        failures = []

    if path.is_dir() and not path.is_symlink():
        try:
            children = list(path.iterdir())
        except OSError as e:
            logger.error("Failed to list %s: %s", path, e)
            children = []
        for child in children:
            delete_recursively(child, failures)
        try:
            path.rmdir()
        except OSError as e:
            logger.error("Failed to delete %s: %s", path, e)
            failures.append(str(path))
    else:
        try:
            path.unlink()
        except OSError as e:
            logger.error("Failed to delete %s: %s", path, e)
            failures.append(str(path))

    return failures


def _prune_empty_dirs(root: Path) -> None:
    subdirs = [p for p in root.rglob("*") if p.is_dir()]
    for directory in sorted(subdirs, key=lambda p: len(p.parts), reverse=True):
        try:
            directory.rmdir()
        except OSError:
            # not empty
            continue


def clean_module(
    layout: WorkspaceLayout,
    extension: str = SOURCE_EXTENSION,
) -> OperationResult:
    """Clear one module's files out of the staging directory.

    Removes staged source files, the previous bundle and the per-module
    bundler config so the next module starts from an empty staging area.

    Args:
        layout: Workspace layout.
        extension: Source file extension to remove.

    Returns:
        OperationResult with failed paths in ``details``.
    """
    failures: list[str] = []
    staging_dir = layout.staging_dir

    if staging_dir.is_dir():
        for path in sorted(staging_dir.rglob(f"*{extension}")):
            if path.is_file():
                delete_recursively(path, failures)
        _prune_empty_dirs(staging_dir)

    for path in (layout.bundle_path, layout.webpack_config):
        if path.exists():
            delete_recursively(path, failures)
        else:
            logger.debug("Nothing to delete at %s", path)

    if failures:
        logger.error("Error while removing data-mapper source files")
    return OperationResult(
        success=not failures,
        message="Staging directory cleared"
        if not failures
        else f"{len(failures)} path(s) could not be removed",
        code="cleanup_error" if failures else None,
        details={"failed": failures},
    )


def clean_all(layout: WorkspaceLayout) -> OperationResult:
    """Remove every transient file and directory of a run.

    Safe to call repeatedly: paths that are already gone are skipped.

    Args:
        layout: Workspace layout.

    Returns:
        OperationResult with removed and failed paths in ``details``.
    """
    logger.info("Cleaning up data mapper bundling artifacts")
    failures: list[str] = []
    removed: list[str] = []

    for path in layout.transient_paths():
        if not path.exists() and not path.is_symlink():
            logger.debug("Nothing to delete at %s", path)
            continue
        before = len(failures)
        delete_recursively(path, failures)
        if len(failures) == before:
            removed.append(str(path))

    return OperationResult(
        success=not failures,
        message=f"Removed {len(removed)} path(s)",
        code="cleanup_error" if failures else None,
        details={"removed": removed, "failed": failures},
    )


__all__ = ["clean_all", "clean_module", "delete_recursively"]
