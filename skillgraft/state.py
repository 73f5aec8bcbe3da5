"""Engine state persistence and file hashing."""

from __future__ import annotations

import hashlib
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import yaml

from .config import SCHEMA_VERSION
from .errors import StateNotInitialized, StateVersionMismatch
from .paths import ProjectPaths
from .types import AppliedSkill, EngineState

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path


def read_state(project_root: Path | None = None) -> EngineState:
    """Read and validate the engine state file."""
    state_path = ProjectPaths(project_root).state_file
    if not state_path.exists():
        raise StateNotInitialized(f"{state_path} not found. Run init_project() first.")

    raw = yaml.safe_load(state_path.read_text(encoding="utf-8")) or {}
    state = EngineState.model_validate(raw)

    if compare_semver(state.skills_system_version, SCHEMA_VERSION) > 0:
        raise StateVersionMismatch(
            f"state.yaml version {state.skills_system_version} is newer than "
            f"engine version {SCHEMA_VERSION}. Update skillgraft."
        )

    return state


def write_state(state: EngineState, project_root: Path | None = None) -> None:
    """Atomically write the engine state file with stable key ordering."""
    state_path = ProjectPaths(project_root).state_file
    state_path.parent.mkdir(parents=True, exist_ok=True)

    content = yaml.safe_dump(state.model_dump(exclude_none=True), sort_keys=True)

    tmp_path = state_path.with_suffix(".yaml.tmp")
    tmp_path.write_text(content, encoding="utf-8")
    tmp_path.replace(state_path)


def record_skill_application(
    skill_name: str,
    version: str,
    file_hashes: dict[str, str],
    structured_outcomes: dict[str, Any] | None = None,
    project_root: Path | None = None,
) -> AppliedSkill:
    """Record a skill application, replacing any earlier record with the same name."""
    state = read_state(project_root)

    record = AppliedSkill(
        name=skill_name,
        version=version,
        applied_at=datetime.now(UTC).isoformat(),
        file_hashes=file_hashes,
        structured_outcomes=structured_outcomes,
    )
    state.applied_skills = [s for s in state.applied_skills if s.name != skill_name]
    state.applied_skills.append(record)

    write_state(state, project_root)
    return record


def get_applied_skills(project_root: Path | None = None) -> list[AppliedSkill]:
    return read_state(project_root).applied_skills


def list_applied(project_root: Path | None = None) -> dict[str, str]:
    """Applied skill names mapped to their applied versions, in application order."""
    return {s.name: s.version for s in get_applied_skills(project_root)}


def compute_file_hash(file_path: Path) -> str:
    """SHA-256 of the raw file bytes, hex encoded."""
    return hashlib.sha256(file_path.read_bytes()).hexdigest()


def collect_file_hashes(rel_paths: Iterable[str], project_root: Path | None = None) -> dict[str, str]:
    """Hash every listed project file that exists. Missing files are left out."""
    paths = ProjectPaths(project_root)
    hashes: dict[str, str] = {}
    for rel_path in rel_paths:
        live = paths.live(rel_path)
        if live.is_file():
            hashes[rel_path] = compute_file_hash(live)
    return hashes


def compare_semver(a: str, b: str) -> int:
    """Compare two dotted numeric versions.

    Returns negative if a < b, 0 if equal, positive if a > b.
    Missing trailing parts count as zero.
    """
    parts_a = [int(x) for x in a.split(".")]
    parts_b = [int(x) for x in b.split(".")]

    for i in range(max(len(parts_a), len(parts_b))):
        val_a = parts_a[i] if i < len(parts_a) else 0
        val_b = parts_b[i] if i < len(parts_b) else 0
        if val_a != val_b:
            return val_a - val_b

    return 0
