"""Tests for manifest reading, validation, and pre-flight checks."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
import yaml

from skillgraft.errors import ManifestError
from skillgraft.manifest import check_conflicts, check_core_version, check_dependencies, read_manifest

from .conftest import create_skill_package

if TYPE_CHECKING:
    from pathlib import Path

VALID = {
    "skill": "telegram",
    "version": "2.0.0",
    "core_version": "1.0.0",
    "adds": ["src/telegram.ts"],
    "modifies": ["src/config.ts"],
}


def _write_manifest(directory: Path, data: dict) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    (directory / "manifest.yaml").write_text(yaml.safe_dump(data), encoding="utf-8")
    return directory


class TestReadManifest:
    def test_parses_valid_manifest(self, tmp_path: Path) -> None:
        skill_dir = create_skill_package(
            tmp_path,
            skill="telegram",
            version="2.0.0",
            adds=["src/telegram.ts"],
            modifies=["src/config.ts"],
            structured={"npm_dependencies": {"grammy": "^1.0.0"}, "env_additions": ["TELEGRAM_TOKEN"]},
        )
        manifest = read_manifest(skill_dir)
        assert manifest.skill == "telegram"
        assert manifest.version == "2.0.0"
        assert manifest.adds == ["src/telegram.ts"]
        assert manifest.modifies == ["src/config.ts"]
        assert manifest.structured is not None
        assert manifest.structured.npm_dependencies == {"grammy": "^1.0.0"}
        assert manifest.structured.env_additions == ["TELEGRAM_TOKEN"]

    @pytest.mark.parametrize("field", ["skill", "version", "core_version", "adds", "modifies"])
    def test_missing_required_field_is_an_error(self, tmp_path: Path, field: str) -> None:
        data = {k: v for k, v in VALID.items() if k != field}
        skill_dir = _write_manifest(tmp_path / "pkg", data)
        with pytest.raises(ManifestError, match=field):
            read_manifest(skill_dir)

    def test_missing_manifest_file(self, tmp_path: Path) -> None:
        with pytest.raises(ManifestError, match="Manifest not found"):
            read_manifest(tmp_path)

    def test_manifest_error_is_a_value_error(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError):
            read_manifest(tmp_path)

    def test_conflicts_and_depends_default_to_empty(self, tmp_path: Path) -> None:
        skill_dir = _write_manifest(tmp_path / "pkg", {**VALID, "depends": None})
        manifest = read_manifest(skill_dir)
        assert manifest.conflicts == []
        assert manifest.depends == []
        assert manifest.structured is None

    def test_empty_adds_and_modifies_are_allowed(self, tmp_path: Path) -> None:
        skill_dir = _write_manifest(tmp_path / "pkg", {**VALID, "adds": [], "modifies": []})
        manifest = read_manifest(skill_dir)
        assert manifest.adds == []
        assert manifest.modifies == []

    @pytest.mark.parametrize("bad_path", ["../outside.txt", "/etc/passwd", "src/../../x.ts"])
    def test_rejects_paths_escaping_project(self, tmp_path: Path, bad_path: str) -> None:
        skill_dir = _write_manifest(tmp_path / "pkg", {**VALID, "adds": [bad_path]})
        with pytest.raises(ManifestError, match="Invalid path"):
            read_manifest(skill_dir)

    def test_rejects_non_mapping_manifest(self, tmp_path: Path) -> None:
        (tmp_path / "manifest.yaml").write_text("- just\n- a list\n", encoding="utf-8")
        with pytest.raises(ManifestError):
            read_manifest(tmp_path)


class TestChecks:
    def _manifest(self, tmp_path: Path, **kwargs):
        return read_manifest(create_skill_package(tmp_path, **kwargs))

    def test_dependencies_satisfied(self, tmp_path: Path) -> None:
        manifest = self._manifest(tmp_path, depends=["core-a"])
        result = check_dependencies(manifest, {"core-a", "other"})
        assert result.ok is True
        assert result.names == []

    def test_dependencies_report_missing_subset(self, tmp_path: Path) -> None:
        manifest = self._manifest(tmp_path, depends=["core-a", "core-b", "core-c"])
        result = check_dependencies(manifest, {"core-b"})
        assert result.ok is False
        assert result.names == ["core-a", "core-c"]

    def test_no_conflicts_when_none_applied(self, tmp_path: Path) -> None:
        manifest = self._manifest(tmp_path, conflicts=["whatsapp"])
        assert check_conflicts(manifest, set()).ok is True

    def test_conflicts_report_offending_subset(self, tmp_path: Path) -> None:
        manifest = self._manifest(tmp_path, conflicts=["whatsapp", "signal"])
        result = check_conflicts(manifest, ["signal", "telegram"])
        assert result.ok is False
        assert result.names == ["signal"]

    def test_core_version_newer_than_project_warns(self, tmp_path: Path) -> None:
        manifest = self._manifest(tmp_path, core_version="2.1.0")
        result = check_core_version(manifest, "2.0.0")
        assert result.ok is True
        assert "2.1.0" in result.warning

    def test_core_version_same_or_older_is_silent(self, tmp_path: Path) -> None:
        manifest = self._manifest(tmp_path, core_version="1.0.0")
        assert check_core_version(manifest, "1.10.0").warning is None
