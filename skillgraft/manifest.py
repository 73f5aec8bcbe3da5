"""Skill manifest reading, validation, and pre-flight checks."""

from __future__ import annotations

from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING

import yaml
from pydantic import ValidationError

from .config import MANIFEST_FILE
from .errors import ManifestError
from .state import compare_semver
from .types import CheckResult, SkillManifest

if TYPE_CHECKING:
    from collections.abc import Collection

REQUIRED_FIELDS = ("skill", "version", "core_version", "adds", "modifies")


def read_manifest(skill_dir: Path | str) -> SkillManifest:
    """Read and validate the manifest of a skill package."""
    manifest_path = Path(skill_dir) / MANIFEST_FILE
    if not manifest_path.exists():
        raise ManifestError(f"Manifest not found: {manifest_path}")

    try:
        raw = yaml.safe_load(manifest_path.read_text(encoding="utf-8"))
    except yaml.YAMLError as err:
        raise ManifestError(f"Manifest is not valid YAML: {manifest_path}: {err}") from err

    if not isinstance(raw, dict):
        raise ManifestError(f"Manifest must be a mapping: {manifest_path}")

    for field in REQUIRED_FIELDS:
        if raw.get(field) is None:
            raise ManifestError(f"Manifest missing required field: {field}")

    for rel_path in [*raw["adds"], *raw["modifies"]]:
        posix = PurePosixPath(str(rel_path))
        if posix.is_absolute() or ".." in posix.parts:
            raise ManifestError(f'Invalid path in manifest: {rel_path} (must be relative without "..")')

    # Explicit nulls count as absent
    for field in ("conflicts", "depends"):
        if raw.get(field) is None:
            raw[field] = []

    try:
        return SkillManifest.model_validate(raw)
    except ValidationError as err:
        raise ManifestError(f"Invalid manifest {manifest_path}: {err}") from err


def check_dependencies(manifest: SkillManifest, applied: Collection[str]) -> CheckResult:
    """Every name in `depends` must already be applied."""
    missing = [dep for dep in manifest.depends if dep not in applied]
    return CheckResult(ok=not missing, names=missing)


def check_conflicts(manifest: SkillManifest, applied: Collection[str]) -> CheckResult:
    """No name in `conflicts` may already be applied."""
    conflicting = [name for name in manifest.conflicts if name in applied]
    return CheckResult(ok=not conflicting, names=conflicting)


def check_core_version(manifest: SkillManifest, core_version: str) -> CheckResult:
    """Warn when the skill targets a newer core than the project runs. Never blocks."""
    if compare_semver(manifest.core_version, core_version) > 0:
        return CheckResult(
            ok=True,
            warning=(
                f"Skill targets core {manifest.core_version} but current core is "
                f"{core_version}. The merge might still work but there's a compatibility risk."
            ),
        )
    return CheckResult(ok=True)
