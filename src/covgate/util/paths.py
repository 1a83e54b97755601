from __future__ import annotations

"""Path utilities.

CONTRACT
- Inputs: strings (paths as given on the command line or in the gate file)
- Outputs:
  - canonicalize() returns a normalized path string
  - coverage_index_path() returns the canonical coverage index location
  - ensure_dir() creates directory tree
- Invariants:
  - canonicalize is purely lexical (never touches the filesystem)
  - backslashes become "/", "." segments vanish, ".." segments collapse
  - leading ".." of relative paths are preserved
  - a Windows drive ("C:") is kept as part of the root
- Failure:
  - None
"""

import re
from pathlib import Path

# Owned by the coverage XML reader: PHPUnit writes its index below this name.
COVERAGE_INDEX_FILE_NAME = "coverage-xml/index.xml"

_DRIVE_ROOT_RE = re.compile(r"^[A-Za-z]:(/|$)")


def ensure_dir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def canonicalize(path: str) -> str:
    if path == "":
        return ""

    path = path.replace("\\", "/")
    root = ""
    if _DRIVE_ROOT_RE.match(path):
        root = path[:2] + "/"
        path = path[2:].lstrip("/")
    elif path.startswith("/"):
        root = "/"
        path = path.lstrip("/")

    parts: list[str] = []
    for segment in path.split("/"):
        if segment in ("", "."):
            continue
        if segment == "..":
            if parts and parts[-1] != "..":
                parts.pop()
                continue
            if root:
                # Cannot climb above the filesystem root.
                continue
        parts.append(segment)

    return root + "/".join(parts)


def coverage_index_path(coverage_path: str) -> str:
    return canonicalize(coverage_path + "/" + COVERAGE_INDEX_FILE_NAME)


if __name__ == "__main__":
    import argparse
    import sys

    parser = argparse.ArgumentParser(description="Path utilities")
    parser.add_argument("--canonicalize", help="Canonicalize a path")
    parser.add_argument("--index-for", help="Print the coverage index path for a coverage dir")
    args = parser.parse_args()

    if args.canonicalize is not None:
        print(canonicalize(args.canonicalize))
    elif args.index_for is not None:
        print(coverage_index_path(args.index_for))
    else:
        parser.print_help()
        sys.exit(1)
