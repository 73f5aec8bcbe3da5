"""Commit or abort a skill application that stopped on merge conflicts."""

from __future__ import annotations

import json
import sys

from skillgraft.errors import NoPendingApplication
from skillgraft.resolve import abort_application, commit_resolution


def main() -> None:
    if len(sys.argv) != 2 or sys.argv[1] not in ("commit", "abort"):
        print("Usage: python scripts/resolve_skill.py commit|abort", file=sys.stderr)
        sys.exit(1)

    try:
        if sys.argv[1] == "abort":
            pending = abort_application()
            print(f"Rolled back {pending.skill} {pending.version}.")
            return

        result = commit_resolution()
    except NoPendingApplication as err:
        print(str(err), file=sys.stderr)
        sys.exit(1)

    print(json.dumps(result.model_dump(mode="json", exclude_none=True), indent=2))
    if not result.success:
        sys.exit(1)


if __name__ == "__main__":
    main()
