"""Build runner for executing toolchain goals through Maven.

This module handles:
- Describing toolchain invocations as BuildSteps
- Composing Maven command lines from a step
- Executing steps with all process output discarded

Steps run synchronously and without timeout; only the exit status and
process start errors are reported back.
"""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

FRONTEND_PLUGIN = "com.github.eirslett:frontend-maven-plugin:1.12.1"
EXEC_PLUGIN = "org.codehaus.mojo:exec-maven-plugin:3.1.0"

INSTALL_NODE_AND_NPM_GOAL = f"{FRONTEND_PLUGIN}:install-node-and-npm"
NPM_GOAL = f"{FRONTEND_PLUGIN}:npm"
EXEC_GOAL = f"{EXEC_PLUGIN}:exec"

NODE_VERSION = "v14.17.3"
NPM_VERSION = "6.14.13"
NPM_COMMAND = "npm"
NPM_INSTALL_ARGS = "install"
NPM_RUN_BUILD_ARGS = "run build"


class InvocationError(Exception):
    """Raised when a toolchain goal cannot be executed at all."""

    def __init__(self, message: str, code: str = "invocation_error") -> None:
        super().__init__(message)
        self.code = code


@dataclass(frozen=True)
class BuildStep:
    """One toolchain invocation: a goal plus its properties."""

    goal: str
    properties: Mapping[str, str] = field(default_factory=dict)
    description: str = ""


@dataclass
class InvocationResult:
    """Result of executing a BuildStep.

    Attributes:
        exit_code: Process exit code.
        command: The command that was executed.
        error_message: Diagnostic message if the step failed.
    """

    exit_code: int
    command: str = ""
    error_message: str | None = None

    @property
    def success(self) -> bool:
        return self.exit_code == 0


def bootstrap_step() -> BuildStep:
    """Install the pinned Node and npm versions."""
    return BuildStep(
        goal=INSTALL_NODE_AND_NPM_GOAL,
        properties={"nodeVersion": NODE_VERSION, "npmVersion": NPM_VERSION},
        description="Installing Node and NPM",
    )


def dependency_install_step() -> BuildStep:
    """Install the dev dependencies declared in package.json."""
    return BuildStep(
        goal=NPM_GOAL,
        properties={"arguments": NPM_INSTALL_ARGS},
        description="Running npm install",
    )


def bundle_step(module_name: str) -> BuildStep:
    """Compile and bundle the currently staged module."""
    return BuildStep(
        goal=EXEC_GOAL,
        properties={"exec.executable": NPM_COMMAND, "exec.args": NPM_RUN_BUILD_ARGS},
        description=f"Bundling data mapper: {module_name}",
    )


def maven_executable(maven_home: Path) -> Path:
    """Return the Maven launcher inside a Maven home."""
    name = "mvn.cmd" if os.name == "nt" else "mvn"
    return maven_home / "bin" / name


def compose_maven_command(
    maven_home: Path,
    pom_path: Path,
    step: BuildStep,
) -> list[str]:
    """Compose the Maven command line for a step.

    Args:
        maven_home: Toolchain root.
        pom_path: Build descriptor file.
        step: Step to execute.

    Returns:
        Command as list of strings suitable for subprocess.
    """
    cmd = [str(maven_executable(maven_home)), "-B", "-f", str(pom_path), step.goal]
    cmd.extend(f"-D{key}={value}" for key, value in step.properties.items())
    return cmd


class MavenInvoker:
    """Execute BuildSteps against a fixed Maven home and build descriptor."""

    def __init__(
        self, maven_home: Path, working_dir: Path, pom_file: str = "pom.xml"
    ) -> None:
        self.maven_home = maven_home
        # the child runs with cwd=working_dir, so the pom path must not be relative
        self.working_dir = working_dir.resolve()
        self.pom_path = self.working_dir / pom_file

    def execute(self, step: BuildStep) -> InvocationResult:
        """Run a step to completion, discarding its output.

        Args:
            step: Step to execute.

        Returns:
            InvocationResult carrying the exit code.

        Raises:
            InvocationError: If the process cannot be started.
        """
        cmd = compose_maven_command(self.maven_home, self.pom_path, step)
        cmd_str = shlex.join(cmd)
        logger.debug("Executing: %s", cmd_str)

        try:
            result = subprocess.run(
                cmd,
                cwd=self.working_dir,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                check=False,
            )
        except OSError as e:
            raise InvocationError(
                f"Failed to execute {step.goal}: {e}",
                code="execution_error",
            ) from e

        error_message = None
        if result.returncode != 0:
            error_message = f"{step.goal} exited with code {result.returncode}"
        return InvocationResult(
            exit_code=result.returncode,
            command=cmd_str,
            error_message=error_message,
        )


def run_step(invoker: MavenInvoker, step: BuildStep) -> InvocationResult:
    """Execute a step and log its outcome.

    Args:
        invoker: Invoker bound to the run's toolchain.
        step: Step to execute.

    Returns:
        InvocationResult from the invoker.

    Raises:
        InvocationError: Propagated from the invoker.
    """
    if step.description:
        logger.info(step.description)
    result = invoker.execute(step)
    if not result.success:
        logger.error(
            "Step failed: %s", result.error_message or f"exit code {result.exit_code}"
        )
    return result


__all__ = [
    "EXEC_GOAL",
    "INSTALL_NODE_AND_NPM_GOAL",
    "NODE_VERSION",
    "NPM_GOAL",
    "NPM_VERSION",
    "BuildStep",
    "InvocationError",
    "InvocationResult",
    "MavenInvoker",
    "bootstrap_step",
    "bundle_step",
    "compose_maven_command",
    "dependency_install_step",
    "maven_executable",
    "run_step",
]
