"""Apply a skill package to the project in the current directory."""

from __future__ import annotations

import json
import sys

from skillgraft.apply import apply_skill
from skillgraft.errors import SkillEngineError


def main() -> None:
    if len(sys.argv) != 2:
        print("Usage: python scripts/apply_skill.py <skill-dir>", file=sys.stderr)
        sys.exit(1)

    try:
        result = apply_skill(sys.argv[1])
    except SkillEngineError as err:
        print(f"{type(err).__name__}: {err}", file=sys.stderr)
        sys.exit(1)

    print(json.dumps(result.model_dump(mode="json", exclude_none=True), indent=2))
    if result.merge_conflicts:
        print("Resolve the conflicts, then run: python scripts/resolve_skill.py commit", file=sys.stderr)
    if not result.success:
        sys.exit(1)


if __name__ == "__main__":
    main()
