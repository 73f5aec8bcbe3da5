"""Engine configuration constants and environment overrides."""

from __future__ import annotations

import os
import shlex
from pathlib import Path

# Hidden directory holding state, baselines, backup and lock
ENGINE_DIR = Path(os.environ.get("SKILLGRAFT_DIR", ".skillgraft"))
STATE_FILE = "state.yaml"
PENDING_FILE = "pending.yaml"
LOCK_FILE = "lock"
BASE_DIR_NAME = "base"
BACKUP_DIR_NAME = "backup"

SCHEMA_VERSION = "0.1.0"

# Skill package layout
MANIFEST_FILE = "manifest.yaml"
ADD_DIR = "add"
MODIFY_DIR = "modify"

# Files touched by structured edits
DEPENDENCY_MANIFEST = "package.json"
ENV_EXAMPLE = ".env.example"

LOG_LEVEL: str = os.environ.get("SKILLGRAFT_LOG_LEVEL", "INFO").upper()

# Empty value disables the post-merge install step
INSTALL_COMMAND: list[str] = shlex.split(os.environ.get("SKILLGRAFT_INSTALL_COMMAND", "npm install"))

LOCK_STALE_AFTER_S = 5 * 60

# Baseline snapshot taken by init_project
BASELINE_INCLUDES = ["src/", DEPENDENCY_MANIFEST, ENV_EXAMPLE]
BASELINE_EXCLUDES = {
    ".git",
    str(ENGINE_DIR),
    "node_modules",
    "dist",
    "__pycache__",
    ".venv",
}
