"""Workspace preparation for data mapper bundling.

This module handles:
- Laying out the generated files, caches and staging directory
- Creating the shared staging directory
- Generating package.json, tsconfig.json and webpack.config.js

All generated files are owned by a bundling run: they are written before
the first build step and removed by the cleanup module afterwards.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from datamapper_bundler.types import OperationResult

logger = logging.getLogger(__name__)

SOURCE_EXTENSION = ".ts"
BUNDLE_FILE_NAME = "bundle.js"

PACKAGE_JSON_FILE_NAME = "package.json"
PACKAGE_LOCK_FILE_NAME = "package-lock.json"
TS_CONFIG_FILE_NAME = "tsconfig.json"
WEBPACK_CONFIG_FILE_NAME = "webpack.config.js"

# Directories created by the toolchain itself
NODE_INSTALL_DIR_NAME = "node"
NODE_MODULES_DIR_NAME = "node_modules"
COMPILER_OUTPUT_DIR_NAME = "target"

DEFAULT_STAGING_DIR_NAME = "data-mapper-artifacts"

PACKAGE_JSON: dict[str, Any] = {
    "name": "data-mapper-bundler",
    "version": "1.0.0",
    "scripts": {"build": "tsc && webpack"},
    "devDependencies": {
        "typescript": "^4.4.2",
        "webpack": "^5.52.0",
        "webpack-cli": "^4.8.0",
        "ts-loader": "^9.2.3",
    },
}

WEBPACK_CONFIG_TEMPLATE = """\
const path = require("path");
module.exports = {{
    entry: {entry},
    module: {{
        rules: [
            {{
                test: /\\.tsx?$/,
                use: "ts-loader",
                exclude: /node_modules/,
            }}
        ],
    }},
    resolve: {{
        extensions: [".ts", ".js"],
    }},
    output: {{
        filename: {bundle},
        path: path.resolve(__dirname, {staging}),
    }},
}};
"""


@dataclass(frozen=True)
class WorkspaceLayout:
    """Paths used by a bundling run, relative to a working directory."""

    working_dir: Path
    staging_dir_name: str = DEFAULT_STAGING_DIR_NAME

    @property
    def staging_dir(self) -> Path:
        return self.working_dir / self.staging_dir_name

    @property
    def bundle_path(self) -> Path:
        """Fixed location where the bundler writes its output."""
        return self.staging_dir / BUNDLE_FILE_NAME

    @property
    def package_json(self) -> Path:
        return self.working_dir / PACKAGE_JSON_FILE_NAME

    @property
    def package_lock(self) -> Path:
        return self.working_dir / PACKAGE_LOCK_FILE_NAME

    @property
    def tsconfig(self) -> Path:
        return self.working_dir / TS_CONFIG_FILE_NAME

    @property
    def webpack_config(self) -> Path:
        return self.working_dir / WEBPACK_CONFIG_FILE_NAME

    def transient_paths(self) -> list[Path]:
        """Every path a run may leave behind, in deletion order."""
        return [
            self.package_json,
            self.tsconfig,
            self.webpack_config,
            self.package_lock,
            self.staging_dir,
            self.working_dir / NODE_INSTALL_DIR_NAME,
            self.working_dir / NODE_MODULES_DIR_NAME,
            self.working_dir / COMPILER_OUTPUT_DIR_NAME,
        ]


def render_tsconfig(staging_dir_name: str) -> dict[str, Any]:
    """Build compiler options scoped to the staging directory."""
    return {
        "compilerOptions": {
            "outDir": f"./{COMPILER_OUTPUT_DIR_NAME}",
            "module": "commonjs",
            "target": "es5",
            "sourceMap": True,
        },
        "include": [f"./{staging_dir_name}/**/*"],
    }


def render_webpack_config(module_name: str, staging_dir_name: str) -> str:
    """Build bundler options with the entry point pinned to one module.

    Values are emitted as JSON string literals, which are valid JavaScript
    whatever characters the module name contains.
    """
    return WEBPACK_CONFIG_TEMPLATE.format(
        entry=json.dumps(f"./{staging_dir_name}/{module_name}{SOURCE_EXTENSION}"),
        staging=json.dumps(staging_dir_name),
        bundle=json.dumps(BUNDLE_FILE_NAME),
    )


def _write_text(path: Path, content: str) -> OperationResult:
    try:
        path.write_text(content, encoding="utf-8")
    except OSError as e:
        logger.error("Failed to create %s file: %s", path.name, e)
        return OperationResult(
            success=False,
            message=f"Failed to create {path.name}: {e}",
            code="config_write_error",
        )
    logger.debug("Wrote %s", path)
    return OperationResult(success=True, message=f"Created {path.name}")


def ensure_staging_dir(layout: WorkspaceLayout) -> OperationResult:
    """Create the staging directory if it does not exist yet."""
    try:
        layout.staging_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.error(
            "Failed to create data-mapper artifacts directory %s: %s",
            layout.staging_dir,
            e,
        )
        return OperationResult(
            success=False,
            message=f"Failed to create {layout.staging_dir}: {e}",
            code="staging_dir_error",
        )
    return OperationResult(success=True, message=f"Staging at {layout.staging_dir}")


def write_package_json(layout: WorkspaceLayout) -> OperationResult:
    return _write_text(layout.package_json, json.dumps(PACKAGE_JSON, indent=4))


def write_tsconfig(layout: WorkspaceLayout) -> OperationResult:
    content = json.dumps(render_tsconfig(layout.staging_dir_name), indent=4)
    return _write_text(layout.tsconfig, content)


def write_webpack_config(layout: WorkspaceLayout, module_name: str) -> OperationResult:
    """Write the per-module bundler options.

    Args:
        layout: Workspace layout.
        module_name: Module whose entry file is bundled.

    Returns:
        OperationResult describing the write.
    """
    content = render_webpack_config(module_name, layout.staging_dir_name)
    return _write_text(layout.webpack_config, content)


def prepare_workspace(layout: WorkspaceLayout) -> list[OperationResult]:
    """Create the staging directory and the run-wide config files.

    Failures are logged and reported but do not stop the remaining steps;
    a missing file surfaces later as a build failure.

    Args:
        layout: Workspace layout.

    Returns:
        One OperationResult per preparation step.
    """
    logger.info("Creating data mapper artifacts")
    return [
        ensure_staging_dir(layout),
        write_package_json(layout),
        write_tsconfig(layout),
    ]


__all__ = [
    "BUNDLE_FILE_NAME",
    "DEFAULT_STAGING_DIR_NAME",
    "PACKAGE_JSON",
    "SOURCE_EXTENSION",
    "WorkspaceLayout",
    "ensure_staging_dir",
    "prepare_workspace",
    "render_tsconfig",
    "render_webpack_config",
    "write_package_json",
    "write_tsconfig",
    "write_webpack_config",
]
