"""Shared type definitions for datamapper_bundler.

This module contains dataclasses and enums shared across subpackages
to avoid circular imports.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any


class BundleStatus(str, Enum):
    """Status of a single module's bundle cycle."""

    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class DataMapperModule:
    """A buildable data mapper: one subdirectory under the module root."""

    name: str
    source_dir: Path

    def source_files(self, extension: str = ".ts") -> list[Path]:
        """List source files below the module directory, sorted."""
        return sorted(
            path
            for path in self.source_dir.rglob(f"*{extension}")
            if path.is_file()
        )


@dataclass
class OperationResult:
    """Result of an operation (stage, collect, cleanup, etc.)."""

    success: bool
    message: str
    code: str | None = None
    details: dict[str, object] = field(default_factory=dict)


@dataclass
class ModuleOutcome:
    """Outcome of bundling one module."""

    name: str
    status: BundleStatus = BundleStatus.PENDING
    bundle_path: Path | None = None
    message: str | None = None
    warnings: list[str] = field(default_factory=list)


@dataclass
class BundleReport:
    """Result of a full bundling run.

    Attributes:
        success: Whether every attempted module was bundled.
        code: Error code when the run failed.
        message: Human readable summary.
        maven_home: Toolchain root used for the run, if found.
        modules: Per-module outcomes in scan order.
        warnings: Non-fatal workspace problems met during the run.
    """

    success: bool = False
    code: str | None = None
    message: str = ""
    maven_home: Path | None = None
    modules: list[ModuleOutcome] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def succeeded(self) -> list[str]:
        return [m.name for m in self.modules if m.status == BundleStatus.SUCCEEDED]

    @property
    def failed(self) -> list[str]:
        return [m.name for m in self.modules if m.status == BundleStatus.FAILED]

    def to_dict(self) -> dict[str, Any]:
        """Render the report as a JSON-serializable dictionary."""
        return {
            "success": self.success,
            "code": self.code,
            "message": self.message,
            "maven_home": str(self.maven_home) if self.maven_home else None,
            "modules": [
                {
                    "name": m.name,
                    "status": m.status.value,
                    "bundle_path": str(m.bundle_path) if m.bundle_path else None,
                    "message": m.message,
                    "warnings": list(m.warnings),
                }
                for m in self.modules
            ],
            "warnings": list(self.warnings),
        }


__all__ = [
    "BundleReport",
    "BundleStatus",
    "DataMapperModule",
    "ModuleOutcome",
    "OperationResult",
]
