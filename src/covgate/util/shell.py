from __future__ import annotations

"""Shell command execution.

CONTRACT
- Inputs: argv list, optional cwd, timeout
- Outputs (required):
  - CmdResult(cmd, returncode, stdout, stderr, elapsed_s)
- Invariants:
  - Never uses a shell (argv is passed as-is)
  - Respects timeout_s (returncode 124 if exceeded)
- Failure:
  - Returns CmdResult with exit code (does NOT raise on non-zero exit,
    missing binary or timeout)
"""

import os
import subprocess
import time
from dataclasses import dataclass
from pathlib import Path


def which(cmd: str) -> str | None:
    if os.sep in cmd:
        candidate = Path(cmd)
        if candidate.exists() and os.access(candidate, os.X_OK):
            return str(candidate)
        return None
    for p in os.environ.get("PATH", "").split(os.pathsep):
        candidate = Path(p) / cmd
        if candidate.exists() and os.access(candidate, os.X_OK):
            return str(candidate)
    return None


@dataclass(frozen=True)
class CmdResult:
    cmd: str
    returncode: int
    stdout: str
    stderr: str
    elapsed_s: float

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def run_cmd(
    cmd: list[str],
    cwd: Path | None = None,
    env: dict[str, str] | None = None,
    timeout_s: float | None = None,
) -> CmdResult:
    """Run a command and capture stdout/stderr.

    CONTRACT:
    - Never raises for non-zero exit; caller inspects return code.
    - A binary that cannot be started yields returncode 127.
    - Records duration.
    """
    start_t = time.time()
    stdout = ""
    stderr = ""
    try:
        p = subprocess.run(
            cmd,
            cwd=str(cwd) if cwd else None,
            env=(os.environ | env) if env else None,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            timeout=timeout_s,
            text=True,
            check=False,
        )
        rc = p.returncode
        stdout = p.stdout or ""
        stderr = p.stderr or ""
    except subprocess.TimeoutExpired as e:
        rc = 124  # Standard timeout exit code
        stdout = e.stdout if isinstance(e.stdout, str) else ""
        stderr = "\nTimeout expired.\n"
    except OSError as e:
        rc = 127
        stderr = f"\nException: {e}\n"

    return CmdResult(
        cmd=" ".join(cmd),  # simplified for logs
        returncode=rc,
        stdout=stdout,
        stderr=stderr,
        elapsed_s=time.time() - start_t,
    )


if __name__ == "__main__":
    import argparse
    import shlex
    import sys

    parser = argparse.ArgumentParser(description="Run a command and show its output")
    parser.add_argument("--cmd", required=True, help="Command to run")
    parser.add_argument("--timeout", type=float, default=10, help="Timeout in seconds")
    args = parser.parse_args()

    res = run_cmd(shlex.split(args.cmd), timeout_s=args.timeout)
    print(f"Exit code: {res.returncode}")
    print(f"Stdout: {res.stdout}")
    print(f"Stderr: {res.stderr}")
    sys.exit(res.returncode)
