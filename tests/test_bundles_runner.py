"""Tests for bundles/runner.py module.

Tests step construction, command composition and execution.
Uses mocked subprocess for execution tests.
"""

import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from datamapper_bundler.bundles.runner import (
    EXEC_GOAL,
    INSTALL_NODE_AND_NPM_GOAL,
    NODE_VERSION,
    NPM_GOAL,
    NPM_VERSION,
    BuildStep,
    InvocationError,
    InvocationResult,
    MavenInvoker,
    bootstrap_step,
    bundle_step,
    compose_maven_command,
    dependency_install_step,
    maven_executable,
    run_step,
)


class TestSteps:
    """Tests for step constructors."""

    def test_bootstrap_step(self):
        """Bootstrap should pin Node and npm versions."""
        step = bootstrap_step()
        assert step.goal == INSTALL_NODE_AND_NPM_GOAL
        assert step.properties == {"nodeVersion": NODE_VERSION, "npmVersion": NPM_VERSION}

    def test_dependency_install_step(self):
        """Dependency install should run npm install."""
        step = dependency_install_step()
        assert step.goal == NPM_GOAL
        assert step.properties == {"arguments": "install"}

    def test_bundle_step(self):
        """Bundle step should run the npm build script."""
        step = bundle_step("orders")
        assert step.goal == EXEC_GOAL
        assert step.properties["exec.executable"] == "npm"
        assert step.properties["exec.args"] == "run build"
        assert "orders" in step.description


class TestInvocationResult:
    """Tests for InvocationResult."""

    def test_success_on_zero(self):
        """Exit code zero is success."""
        assert InvocationResult(exit_code=0).success

    def test_failure_on_non_zero(self):
        """Non-zero exit code is failure."""
        assert not InvocationResult(exit_code=1).success


class TestComposeMavenCommand:
    """Tests for compose_maven_command function."""

    def test_command_layout(self, tmp_path):
        """Should call mvn from the home with pom, goal and properties."""
        home = tmp_path / "maven"
        pom = tmp_path / "pom.xml"
        step = BuildStep(goal="g:a:1:goal", properties={"k": "v", "x.y": "a b"})

        cmd = compose_maven_command(home, pom, step)

        assert cmd[0] == str(maven_executable(home))
        assert cmd[1:5] == ["-B", "-f", str(pom), "g:a:1:goal"]
        assert cmd[5:] == ["-Dk=v", "-Dx.y=a b"]

    def test_no_properties(self, tmp_path):
        """A step without properties ends with the goal."""
        cmd = compose_maven_command(tmp_path, tmp_path / "pom.xml", BuildStep("g"))
        assert cmd[-1] == "g"

    def test_maven_executable_in_bin(self, tmp_path):
        """The launcher should live in the home's bin directory."""
        assert maven_executable(tmp_path).parent == tmp_path / "bin"


class TestMavenInvoker:
    """Tests for MavenInvoker.execute."""

    def test_success(self, tmp_path):
        """Exit code zero should produce a successful result."""
        invoker = MavenInvoker(Path("/opt/maven"), tmp_path)

        with patch("datamapper_bundler.bundles.runner.subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(returncode=0)
            result = invoker.execute(bootstrap_step())

        assert result.success
        assert result.error_message is None
        kwargs = mock_run.call_args.kwargs
        assert kwargs["cwd"] == tmp_path
        assert kwargs["stdout"] == subprocess.DEVNULL
        assert kwargs["stderr"] == subprocess.DEVNULL
        assert "timeout" not in kwargs

    def test_uses_pom_in_working_dir(self, tmp_path):
        """The build descriptor should be resolved in the working dir."""
        invoker = MavenInvoker(Path("/opt/maven"), tmp_path, pom_file="build.xml")

        with patch("datamapper_bundler.bundles.runner.subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(returncode=0)
            invoker.execute(bootstrap_step())

        cmd = mock_run.call_args.args[0]
        assert str(tmp_path / "build.xml") in cmd

    def test_relative_working_dir_is_resolved(self, tmp_path, monkeypatch):
        """A relative working dir should give an absolute pom path and cwd."""
        (tmp_path / "proj").mkdir()
        monkeypatch.chdir(tmp_path)
        invoker = MavenInvoker(Path("/opt/maven"), Path("proj"))

        with patch("datamapper_bundler.bundles.runner.subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(returncode=0)
            invoker.execute(bootstrap_step())

        cmd = mock_run.call_args.args[0]
        pom_arg = cmd[cmd.index("-f") + 1]
        assert Path(pom_arg).is_absolute()
        assert pom_arg == str(tmp_path / "proj" / "pom.xml")
        assert mock_run.call_args.kwargs["cwd"] == tmp_path / "proj"

    def test_failure_exit_code(self, tmp_path):
        """Non-zero exit should produce a failed result with a message."""
        invoker = MavenInvoker(Path("/opt/maven"), tmp_path)

        with patch("datamapper_bundler.bundles.runner.subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(returncode=1)
            result = invoker.execute(dependency_install_step())

        assert not result.success
        assert result.exit_code == 1
        assert "exited with code 1" in result.error_message

    def test_oserror_raises(self, tmp_path):
        """A process that cannot start should raise InvocationError."""
        invoker = MavenInvoker(Path("/opt/maven"), tmp_path)

        with patch(
            "datamapper_bundler.bundles.runner.subprocess.run",
            side_effect=FileNotFoundError("mvn not found"),
        ):
            with pytest.raises(InvocationError) as exc_info:
                invoker.execute(bootstrap_step())

        assert exc_info.value.code == "execution_error"
        assert "mvn not found" in str(exc_info.value)
        assert not hasattr(exc_info.value, "exit_code")


class TestRunStep:
    """Tests for run_step function."""

    def test_delegates_to_invoker(self):
        """run_step should return the invoker's result."""
        invoker = MagicMock()
        invoker.execute.return_value = InvocationResult(exit_code=0)
        step = bootstrap_step()

        result = run_step(invoker, step)

        assert result.success
        invoker.execute.assert_called_once_with(step)

    def test_logs_failure(self, caplog):
        """A failed step should be logged at error level."""
        invoker = MagicMock()
        invoker.execute.return_value = InvocationResult(
            exit_code=2, error_message="boom"
        )

        with caplog.at_level("ERROR"):
            result = run_step(invoker, bundle_step("orders"))

        assert not result.success
        assert "boom" in caplog.text
