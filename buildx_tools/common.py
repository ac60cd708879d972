"""
Script: buildx_tools/common.py
What: Shared helper functions used by all `buildx_tools` modules.
Doing: Wraps env reads, command execution, and warning output.
Why: Avoids duplicated helper code across the build commands.
Goal: Keep error and output behavior consistent across all helper modules.
"""

from __future__ import annotations

import os
import subprocess
import sys
from typing import Sequence


class BuildToolError(RuntimeError):
    """Raised when a build helper hits a known error condition."""


class BuildInterrupted(KeyboardInterrupt):
    """
    Raised when the process receives an interrupt or termination signal.

    Not a `BuildToolError`, so helpers that catch command failures (for
    example `cmd_succeeds`) let it through.
    """


TRUTHY_VALUES = {"1", "true", "yes", "on"}


def require_env(name: str) -> str:
    """Return a required environment variable or raise a clear error."""
    value = os.environ.get(name)
    if value is None or value == "":
        raise BuildToolError(f"Missing required environment variable: {name}")
    return value


def optional_env(name: str, default: str = "") -> str:
    """Return an environment variable with a fallback default."""
    value = os.environ.get(name)
    if value is None or value == "":
        return default
    return value


def env_flag(name: str) -> bool:
    """True when the variable is set to `true`, `1`, `yes` or `on` (any case)."""
    return optional_env(name).strip().lower() in TRUTHY_VALUES


def run_cmd(
    args: Sequence[str],
    *,
    capture_output: bool = True,
    cwd: str | None = None,
) -> str:
    """Run a command and return stdout, raising a readable error on failure."""
    try:
        result = subprocess.run(
            list(args),
            check=True,
            text=True,
            capture_output=capture_output,
            cwd=cwd,
        )
    except subprocess.CalledProcessError as exc:
        stderr = (exc.stderr or "").strip()
        stdout = (exc.stdout or "").strip()
        details = stderr or stdout or str(exc)
        raise BuildToolError(f"Command failed: {' '.join(args)}\n{details}") from exc
    except FileNotFoundError as exc:
        raise BuildToolError(f"Command not found: {args[0]}") from exc

    if not capture_output:
        return ""
    return result.stdout


def cmd_succeeds(args: Sequence[str], *, cwd: str | None = None) -> bool:
    """True when the command exits with status 0. Output is discarded."""
    try:
        run_cmd(args, cwd=cwd)
        return True
    except BuildToolError:
        return False


def warn(message: str) -> None:
    """Print a non-fatal warning to stderr."""
    print(f"Warning: {message}", file=sys.stderr)
