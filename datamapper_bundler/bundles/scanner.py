"""Data mapper module discovery.

Each immediate subdirectory of the module root is one buildable module.
Nested directories are part of their parent module and are not scanned.
"""

from __future__ import annotations

import logging
from pathlib import Path

from datamapper_bundler.types import DataMapperModule

logger = logging.getLogger(__name__)


def list_modules(module_root: Path) -> list[DataMapperModule]:
    """Discover data mapper modules under a root directory.

    Scan failures are not fatal: the error is logged and an empty list is
    returned, so the run completes with nothing bundled.

    Args:
        module_root: Directory whose subdirectories are modules.

    Returns:
        Modules sorted by directory name.
    """
    try:
        entries = sorted(module_root.iterdir())
    except OSError as e:
        logger.error("Failed to find data mapper directories in %s: %s", module_root, e)
        return []

    modules = [
        DataMapperModule(name=path.name, source_dir=path)
        for path in entries
        if path.is_dir() and path != module_root
    ]
    logger.debug("Found %d data mapper(s) in %s", len(modules), module_root)
    return modules


__all__ = ["list_modules"]
