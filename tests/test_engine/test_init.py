"""Tests for project initialization."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from skillgraft.init import init_project
from skillgraft.state import read_state

from .conftest import git, init_git_repo, write_file, write_package_json

if TYPE_CHECKING:
    from pathlib import Path


class TestInitProject:
    @pytest.fixture(autouse=True)
    def _setup(self, project_tmp: Path) -> None:
        self.root = project_tmp
        self.base = project_tmp / ".skillgraft" / "base"
        write_file(project_tmp / "src" / "index.ts", "main\n")
        write_file(project_tmp / "src" / "node_modules" / "dep.js", "vendored\n")
        write_file(project_tmp / "docs" / "readme.md", "not tracked\n")
        write_file(project_tmp / ".env.example", "A=1\n")

    def test_snapshots_baseline_with_excludes(self) -> None:
        init_project()

        assert (self.base / "src" / "index.ts").read_text() == "main\n"
        assert (self.base / ".env.example").read_text() == "A=1\n"
        assert not (self.base / "src" / "node_modules").exists()
        assert not (self.base / "docs").exists()

    def test_core_version_from_package_json(self) -> None:
        pkg = write_package_json(self.root)
        pkg.write_text(pkg.read_text().replace('"1.0.0"', '"2.3.4"'))

        state = init_project()

        assert state.core_version == "2.3.4"
        assert read_state().core_version == "2.3.4"
        assert read_state().applied_skills == []
        assert (self.base / "package.json").exists()

    def test_core_version_defaults(self) -> None:
        assert init_project().core_version == "0.0.0"
        assert init_project(core_version="5.0.0").core_version == "5.0.0"

    def test_reinit_replaces_baseline(self) -> None:
        init_project()
        write_file(self.base / "stale.txt", "old\n")

        init_project()

        assert not (self.base / "stale.txt").exists()
        assert (self.base / "src" / "index.ts").exists()

    def test_enables_resolution_cache_in_git_repo(self) -> None:
        init_git_repo(self.root)
        git(self.root, "config", "--unset", "rerere.enabled")

        init_project()

        assert git(self.root, "config", "--local", "rerere.enabled").strip() == "true"
