"""Shared fixtures for skills engine tests."""

from __future__ import annotations

import json
import subprocess
from typing import TYPE_CHECKING, Any

import pytest
import yaml

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture(autouse=True)
def _no_dependency_install(monkeypatch: pytest.MonkeyPatch) -> None:
    """Never shell out to a package manager from tests."""
    monkeypatch.setattr("skillgraft.structured.INSTALL_COMMAND", [])


@pytest.fixture()
def project_tmp(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Create a temp project directory and chdir into it."""
    project = tmp_path / "project"
    project.mkdir()
    monkeypatch.chdir(project)
    return project


@pytest.fixture()
def engine_dir(project_tmp: Path) -> Path:
    """Set up .skillgraft/base and a minimal state. Returns the project root."""
    (project_tmp / ".skillgraft" / "base").mkdir(parents=True, exist_ok=True)
    create_minimal_state(project_tmp)
    return project_tmp


def write_state(project: Path, state: dict[str, Any]) -> None:
    state_path = project / ".skillgraft" / "state.yaml"
    state_path.parent.mkdir(parents=True, exist_ok=True)
    state_path.write_text(yaml.safe_dump(state), encoding="utf-8")


def create_minimal_state(project: Path, core_version: str = "1.0.0") -> None:
    write_state(
        project,
        {
            "skills_system_version": "0.1.0",
            "core_version": core_version,
            "applied_skills": [],
        },
    )


def write_file(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def write_package_json(project: Path, dependencies: dict[str, str] | None = None) -> Path:
    pkg = {"name": "demo", "version": "1.0.0", "dependencies": dependencies or {}}
    return write_file(project / "package.json", json.dumps(pkg, indent=2) + "\n")


def create_skill_package(
    parent: Path,
    *,
    skill: str = "test-skill",
    version: str = "1.0.0",
    core_version: str = "1.0.0",
    adds: list[str] | None = None,
    modifies: list[str] | None = None,
    add_files: dict[str, str] | None = None,
    modify_files: dict[str, str] | None = None,
    conflicts: list[str] | None = None,
    depends: list[str] | None = None,
    test: str | None = None,
    structured: dict[str, Any] | None = None,
    dir_name: str | None = None,
) -> Path:
    """Create a skill package directory with manifest, add/ and modify/ files."""
    skill_dir = parent / (dir_name or f"{skill}-pkg")
    skill_dir.mkdir(parents=True, exist_ok=True)

    manifest: dict[str, Any] = {
        "skill": skill,
        "version": version,
        "description": "Test skill",
        "core_version": core_version,
        "adds": adds or [],
        "modifies": modifies or [],
        "conflicts": conflicts or [],
        "depends": depends or [],
    }
    if test is not None:
        manifest["test"] = test
    if structured is not None:
        manifest["structured"] = structured

    (skill_dir / "manifest.yaml").write_text(yaml.safe_dump(manifest), encoding="utf-8")

    for rel_path, content in (add_files or {}).items():
        write_file(skill_dir / "add" / rel_path, content)
    for rel_path, content in (modify_files or {}).items():
        write_file(skill_dir / "modify" / rel_path, content)

    return skill_dir


def git(directory: Path, *args: str) -> str:
    result = subprocess.run(["git", *args], cwd=str(directory), capture_output=True, text=True, check=True)
    return result.stdout


def init_git_repo(directory: Path) -> None:
    """Initialize a git repo with rerere enabled and an initial commit."""
    git(directory, "init")
    git(directory, "config", "user.email", "test@test.com")
    git(directory, "config", "user.name", "Test")
    git(directory, "config", "rerere.enabled", "true")
    (directory / ".gitignore").write_text(".skillgraft/\n__pycache__\n", encoding="utf-8")
    git(directory, "add", "-A")
    git(directory, "commit", "-m", "init")
