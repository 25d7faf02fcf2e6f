"""Tests for bundles/cleanup.py module."""

from pathlib import Path
from unittest.mock import patch

import pytest

from datamapper_bundler.bundles.cleanup import (
    clean_all,
    clean_module,
    delete_recursively,
)
from datamapper_bundler.bundles.workspace import WorkspaceLayout, prepare_workspace


@pytest.fixture
def layout(tmp_path: Path) -> WorkspaceLayout:
    """Create a layout with every transient path populated."""
    layout = WorkspaceLayout(tmp_path)
    prepare_workspace(layout)
    layout.webpack_config.write_text("module.exports = {};")
    layout.package_lock.write_text("{}")
    (layout.staging_dir / "orders.ts").write_text("a")
    (tmp_path / "node" / "bin").mkdir(parents=True)
    (tmp_path / "node" / "bin" / "node").write_text("bin")
    (tmp_path / "node_modules" / "webpack").mkdir(parents=True)
    (tmp_path / "node_modules" / "webpack" / "index.js").write_text("js")
    (tmp_path / "target").mkdir()
    (tmp_path / "target" / "orders.js").write_text("js")
    return layout


class TestDeleteRecursively:
    """Tests for delete_recursively function."""

    def test_deletes_tree(self, tmp_path: Path) -> None:
        """Should remove nested files and directories."""
        root = tmp_path / "tree"
        (root / "a" / "b").mkdir(parents=True)
        (root / "a" / "b" / "f.txt").write_text("x")
        (root / "g.txt").write_text("y")

        assert delete_recursively(root) == []
        assert not root.exists()

    def test_deletes_file(self, tmp_path: Path) -> None:
        """Should remove a single file."""
        f = tmp_path / "f.txt"
        f.write_text("x")
        assert delete_recursively(f) == []
        assert not f.exists()

    def test_missing_path_is_reported(self, tmp_path: Path) -> None:
        """A missing path should be recorded as a failure, not raised."""
        failures = delete_recursively(tmp_path / "missing")
        assert failures == [str(tmp_path / "missing")]

    def test_failure_does_not_stop_siblings(self, tmp_path: Path) -> None:
        """A failing child should not stop deletion of its siblings."""
        root = tmp_path / "tree"
        root.mkdir()
        (root / "keep.txt").write_text("x")
        (root / "gone.txt").write_text("y")
        real_unlink = Path.unlink

        def flaky_unlink(self, *args, **kwargs):
            if self.name == "keep.txt":
                raise PermissionError("locked")
            return real_unlink(self, *args, **kwargs)

        with patch.object(Path, "unlink", flaky_unlink):
            failures = delete_recursively(root)

        assert str(root / "keep.txt") in failures
        assert str(root) in failures
        assert not (root / "gone.txt").exists()
        assert (root / "keep.txt").exists()


class TestCleanModule:
    """Tests for clean_module function."""

    def test_clears_sources_bundle_and_webpack(self, layout: WorkspaceLayout) -> None:
        """Staged sources, bundle and bundler config should be removed."""
        (layout.staging_dir / "lib").mkdir()
        (layout.staging_dir / "lib" / "helpers.ts").write_text("b")
        layout.bundle_path.write_text("bundle")

        result = clean_module(layout)

        assert result.success
        assert list(layout.staging_dir.iterdir()) == []
        assert layout.staging_dir.is_dir()
        assert not layout.webpack_config.exists()
        assert layout.package_json.exists()
        assert layout.tsconfig.exists()

    def test_keeps_non_source_files(self, layout: WorkspaceLayout) -> None:
        """Only source files are cleared from staging."""
        (layout.staging_dir / "keep.json").write_text("{}")

        clean_module(layout)

        assert (layout.staging_dir / "keep.json").exists()
        assert not (layout.staging_dir / "orders.ts").exists()

    def test_nothing_to_clean(self, tmp_path: Path) -> None:
        """An empty workspace should clean without failures."""
        result = clean_module(WorkspaceLayout(tmp_path))
        assert result.success


class TestCleanAll:
    """Tests for clean_all function."""

    def test_removes_every_transient_path(self, layout: WorkspaceLayout) -> None:
        """All generated files, caches and staging should be gone."""
        result = clean_all(layout)

        assert result.success
        for path in layout.transient_paths():
            assert not path.exists(), path
        assert len(result.details["removed"]) == len(layout.transient_paths())

    def test_leaves_project_files(self, layout: WorkspaceLayout) -> None:
        """Files not owned by the run should survive."""
        pom = layout.working_dir / "pom.xml"
        pom.write_text("<project/>")
        (layout.working_dir / "src").mkdir()

        clean_all(layout)

        assert pom.exists()
        assert (layout.working_dir / "src").is_dir()

    def test_idempotent(self, layout: WorkspaceLayout) -> None:
        """Running twice should not raise and should report no failures."""
        clean_all(layout)
        result = clean_all(layout)

        assert result.success
        assert result.details["removed"] == []

    def test_failure_continues_sweep(self, layout: WorkspaceLayout) -> None:
        """A failing path should not stop the remaining deletions."""
        real_unlink = Path.unlink

        def flaky_unlink(self, *args, **kwargs):
            if self.name == "package.json":
                raise PermissionError("locked")
            return real_unlink(self, *args, **kwargs)

        with patch.object(Path, "unlink", flaky_unlink):
            result = clean_all(layout)

        assert not result.success
        assert result.code == "cleanup_error"
        assert result.details["failed"] == [str(layout.package_json)]
        assert not layout.staging_dir.exists()
        assert not (layout.working_dir / "node_modules").exists()
