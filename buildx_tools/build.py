"""
Script: buildx_tools/build.py
What: Composes and runs the `docker buildx build --push` call.
Doing: Attaches every tag to one single-platform build and streams its output.
Why: All build commands share the same build call shape.
Goal: Build and push both tags in one step, or stop the run on failure.
"""

from __future__ import annotations

from typing import Sequence

from buildx_tools.common import run_cmd


DEFAULT_PLATFORM = "linux/amd64"
SEPARATOR = "━" * 40


def build_command(
    dockerfile: str,
    tags: Sequence[str],
    *,
    builder: str | None = None,
    platform: str = DEFAULT_PLATFORM,
    context: str = ".",
) -> list[str]:
    """Return the full `docker buildx build` argument list."""
    command = ["docker", "buildx", "build"]
    if builder:
        command.extend(["--builder", builder])
    command.extend(["--platform", platform, "-f", dockerfile])
    for tag in tags:
        command.extend(["-t", tag])
    command.extend(["--push", context])
    return command


def run_build(command: Sequence[str]) -> None:
    # Output goes straight to the terminal; a non-zero exit raises BuildToolError.
    run_cmd(command, capture_output=False)


def print_image_list(title: str, tags: Sequence[str]) -> None:
    print("")
    print(title)
    for tag in tags:
        print(f"  - {tag}")
