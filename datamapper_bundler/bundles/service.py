"""Bundling service module.

This module provides the high-level bundling API:
- bundle_data_mappers(): Main entry point - bundle every module of a project
- bundle_module(): One stage-in / build / collect / clear cycle
- bundling_workspace(): Scope that guarantees final cleanup

Modules are bundled strictly one after another because they share one
staging directory and one bundler output path.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from datamapper_bundler.bundles.cleanup import clean_all, clean_module
from datamapper_bundler.bundles.runner import (
    InvocationError,
    MavenInvoker,
    bootstrap_step,
    bundle_step,
    dependency_install_step,
    run_step,
)
from datamapper_bundler.bundles.scanner import list_modules
from datamapper_bundler.bundles.staging import collect_bundle, stage_module
from datamapper_bundler.bundles.toolchain import find_maven_home
from datamapper_bundler.bundles.workspace import (
    WorkspaceLayout,
    prepare_workspace,
    write_webpack_config,
)
from datamapper_bundler.config import Settings, get_settings
from datamapper_bundler.types import (
    BundleReport,
    BundleStatus,
    DataMapperModule,
    ModuleOutcome,
    OperationResult,
)

logger = logging.getLogger(__name__)

BANNER_RULE = "-" * 72


@contextmanager
def bundling_workspace(layout: WorkspaceLayout) -> Iterator[WorkspaceLayout]:
    """Scope a bundling run, removing all transient files on exit.

    Cleanup runs on normal exit, early return and propagated exceptions.

    Args:
        layout: Workspace layout of the run.

    Yields:
        The same layout.
    """
    try:
        yield layout
    finally:
        clean_all(layout)


def _record_warning(warnings: list[str], result: OperationResult) -> None:
    if not result.success:
        warnings.append(result.message)


def resolve_module_root(settings: Settings, working_dir: Path) -> Path:
    """Return the module root, anchoring relative paths at the working dir."""
    module_root = settings.module_root()
    if not module_root.is_absolute():
        module_root = working_dir / module_root
    return module_root


def bundle_module(
    invoker: MavenInvoker,
    layout: WorkspaceLayout,
    module: DataMapperModule,
    outcome: ModuleOutcome | None = None,
) -> ModuleOutcome:
    """Stage, build and collect one module, then clear the staging area.

    The staging area is cleared whether or not the build succeeded. Failed
    stage-in, config and cleanup steps do not stop the cycle; their messages
    are kept in ``outcome.warnings``.

    Args:
        invoker: Invoker bound to the run's toolchain.
        layout: Workspace layout.
        module: Module to bundle.
        outcome: Outcome record to update; created if not given.

    Returns:
        The updated ModuleOutcome.

    Raises:
        InvocationError: If the build goal cannot be executed.
    """
    if outcome is None:
        outcome = ModuleOutcome(name=module.name)
    outcome.status = BundleStatus.RUNNING

    try:
        _record_warning(outcome.warnings, stage_module(module, layout.staging_dir))
        _record_warning(outcome.warnings, write_webpack_config(layout, module.name))

        result = run_step(invoker, bundle_step(module.name))
        if not result.success:
            logger.error("Failed to bundle data mapper: %s", module.name)
            outcome.status = BundleStatus.FAILED
            outcome.message = result.error_message
            return outcome

        logger.info("Bundle completed for data mapper: %s", module.name)
        collected = collect_bundle(layout.bundle_path, module)
        if not collected.success:
            outcome.status = BundleStatus.FAILED
            outcome.message = collected.message
            return outcome

        outcome.status = BundleStatus.SUCCEEDED
        outcome.bundle_path = Path(str(collected.details["path"]))
        return outcome
    finally:
        _record_warning(outcome.warnings, clean_module(layout))


def _fail(report: BundleReport, code: str, message: str) -> BundleReport:
    report.success = False
    report.code = code
    report.message = message
    return report


def _skip_remaining(report: BundleReport, modules: list[DataMapperModule]) -> None:
    seen = {outcome.name for outcome in report.modules}
    for outcome in report.modules:
        if outcome.status == BundleStatus.RUNNING:
            outcome.status = BundleStatus.FAILED
    for module in modules:
        if module.name not in seen:
            report.modules.append(
                ModuleOutcome(name=module.name, status=BundleStatus.SKIPPED)
            )


def bundle_data_mappers(
    settings: Settings | None = None,
    invoker: MavenInvoker | None = None,
    maven_home: Path | None = None,
) -> BundleReport:
    """Bundle every data mapper module of a project.

    This is the main entry point. It:
    1. Locates the Maven home (aborts without touching the disk if absent)
    2. Creates the staging directory and run-wide config files
    3. Installs Node/npm, then the npm dependencies
    4. Bundles each discovered module in scan order
    5. Removes every transient file, whatever happened before

    A failing bootstrap or dependency install aborts before any module is
    attempted. A failing module aborts the run unless ``fail_fast`` is off.
    Bundles already collected for earlier modules stay in place.

    Args:
        settings: Application settings.
        invoker: Invoker to use instead of one built from the Maven home.
        maven_home: Known Maven home; skips the probe when given.

    Returns:
        BundleReport describing the run.
    """
    if settings is None:
        settings = get_settings()

    logger.info(BANNER_RULE)
    logger.info("Bundling Data Mapper")
    logger.info(BANNER_RULE)

    report = BundleReport()
    working_dir = settings.resolve_working_dir()

    if maven_home is None:
        maven_home = find_maven_home(settings.maven_command)
    if maven_home is None:
        logger.error("Could not determine Maven home.")
        return _fail(report, "toolchain_not_found", "Could not determine Maven home")
    report.maven_home = maven_home

    layout = WorkspaceLayout(working_dir, settings.staging_dir_name)
    if invoker is None:
        invoker = MavenInvoker(maven_home, working_dir, settings.pom_file)

    modules: list[DataMapperModule] = []
    with bundling_workspace(layout):
        for prepared in prepare_workspace(layout):
            _record_warning(report.warnings, prepared)

        try:
            result = run_step(invoker, bootstrap_step())
            if not result.success:
                logger.error("Node and NPM installation failed.")
                if result.error_message:
                    logger.error(result.error_message)
                return _fail(
                    report, "bootstrap_failed", "Node and NPM installation failed"
                )

            result = run_step(invoker, dependency_install_step())
            if not result.success:
                logger.error("npm install failed.")
                if result.error_message:
                    logger.error(result.error_message)
                return _fail(report, "dependency_install_failed", "npm install failed")

            logger.info("Start bundling data mappers")
            modules = list_modules(resolve_module_root(settings, working_dir))

            for module in modules:
                outcome = ModuleOutcome(name=module.name)
                report.modules.append(outcome)
                bundle_module(invoker, layout, module, outcome)

                if outcome.status == BundleStatus.FAILED and settings.fail_fast:
                    _skip_remaining(report, modules)
                    return _fail(
                        report,
                        "module_build_failed",
                        f"Failed to bundle data mapper: {module.name}",
                    )

        except InvocationError as e:
            logger.error("Failed to bundle data mapper.")
            logger.error(str(e))
            _skip_remaining(report, modules)
            return _fail(report, "invocation_error", str(e))

    if report.failed:
        return _fail(
            report,
            "module_build_failed",
            f"Failed to bundle data mapper(s): {', '.join(report.failed)}",
        )

    report.success = True
    report.message = f"Bundled {len(report.succeeded)} data mapper(s)"
    logger.info("Data mapper bundling completed successfully.")
    return report


__all__ = [
    "bundle_data_mappers",
    "bundle_module",
    "bundling_workspace",
    "resolve_module_root",
]
