"""Structured merges for the dependency manifest and the example env file."""

from __future__ import annotations

import json
import re
import subprocess
from pathlib import Path
from typing import TYPE_CHECKING, Any

from .config import INSTALL_COMMAND
from .errors import StructuredConflict
from .logger import logger
from .paths import ProjectPaths

if TYPE_CHECKING:
    from .types import SkillManifest

ENV_NAME_RE = re.compile(r"^\s*(?:export\s+)?([A-Za-z_][A-Za-z0-9_]*)\s*=")
ENV_BLOCK_HEADER = "# Added by skill"


def merge_npm_dependencies(package_json_path: Path, new_deps: dict[str, str]) -> dict[str, str]:
    """Insert new dependencies into package.json, sorted by name.

    A name already present (in dependencies or devDependencies) at a different
    version raises StructuredConflict before anything is written. Returns the
    entries that were actually added.
    """
    pkg: dict[str, Any] = json.loads(package_json_path.read_text(encoding="utf-8"))
    dependencies: dict[str, str] = dict(pkg.get("dependencies") or {})
    dev_dependencies: dict[str, str] = pkg.get("devDependencies") or {}

    added: dict[str, str] = {}
    for name, version in new_deps.items():
        existing = dependencies.get(name, dev_dependencies.get(name))
        if existing is None:
            added[name] = version
        elif existing != version:
            raise StructuredConflict(f"Dependency conflict: {name} is already at {existing}, skill wants {version}")

    if not added and "dependencies" in pkg:
        return added

    dependencies.update(added)
    pkg["dependencies"] = dict(sorted(dependencies.items()))
    package_json_path.write_text(json.dumps(pkg, indent=2) + "\n", encoding="utf-8")
    return added


def merge_env_additions(env_example_path: Path, additions: list[str]) -> list[str]:
    """Append `NAME=` lines for variables not yet declared. Existing lines are untouched."""
    content = env_example_path.read_text(encoding="utf-8") if env_example_path.exists() else ""

    existing_vars = {m.group(1) for m in map(ENV_NAME_RE.match, content.splitlines()) if m}
    new_vars = [v for v in dict.fromkeys(additions) if v not in existing_vars]
    if not new_vars:
        return []

    if content and not content.endswith("\n"):
        content += "\n"
    content += f"\n{ENV_BLOCK_HEADER}\n" + "".join(f"{v}=\n" for v in new_vars)

    env_example_path.write_text(content, encoding="utf-8")
    return new_vars


def run_dependency_install(project_root: Path | None = None) -> None:
    """Run the configured install command. Failures raise CalledProcessError."""
    if not INSTALL_COMMAND:
        logger.info("Dependency install disabled")
        return
    cwd = project_root or Path.cwd()
    logger.info("Installing dependencies", command=" ".join(INSTALL_COMMAND))
    subprocess.run(INSTALL_COMMAND, cwd=str(cwd), check=True)


def apply_structured_edits(manifest: SkillManifest, project_root: Path | None = None) -> dict[str, Any] | None:
    """Apply the manifest's declarative edits and return what was actually merged.

    Each declared edit maps to the entries it added, empty when all were
    already present. The install step only runs when a dependency was added.
    """
    paths = ProjectPaths(project_root)
    outcomes: dict[str, Any] = {}
    edits = manifest.structured

    if edits is not None and edits.npm_dependencies:
        added = merge_npm_dependencies(paths.dependency_manifest, edits.npm_dependencies)
        outcomes["npm_dependencies"] = added
        if added:
            run_dependency_install(paths.root)

    if edits is not None and edits.env_additions:
        outcomes["env_additions"] = merge_env_additions(paths.env_example, edits.env_additions)

    if manifest.test:
        outcomes["test"] = manifest.test

    return outcomes or None
