from __future__ import annotations

import argparse
import sys
from collections.abc import Callable, Mapping

from buildx_tools.common import BuildToolError

CommandFn = Callable[[list[str]], None]


def command_map() -> dict[str, CommandFn]:
    """
    Map CLI command names to Python entry functions.

    Each value is a `main(argv)` function from one build command module.
    """
    from buildx_tools.build_from_commit import main as build_from_commit
    from buildx_tools.build_from_commit_cloud import main as build_from_commit_cloud
    from buildx_tools.build_from_commit_nonroot import main as build_from_commit_nonroot

    return {
        "build-from-commit": build_from_commit,
        "build-from-commit-nonroot": build_from_commit_nonroot,
        "build-from-commit-cloud": build_from_commit_cloud,
    }


def build_parser(commands: Mapping[str, CommandFn]) -> argparse.ArgumentParser:
    """Build argument parser with one positional command choice."""
    parser = argparse.ArgumentParser(
        prog="buildx-tools",
        description="Build and push container images for a git commit.",
    )
    parser.add_argument("command", choices=sorted(commands.keys()))
    # Everything after the command belongs to the command itself.
    parser.add_argument("args", nargs=argparse.REMAINDER)
    return parser


def run_command(
    command: str,
    commands: Mapping[str, CommandFn],
    args: list[str] | None = None,
) -> None:
    """
    Run one registered command.

    `commands` is passed in to keep this function easy to test.
    """
    commands[command](list(args or []))


def main(argv: list[str] | None = None) -> None:
    # Build command registry once so parser and dispatcher use the same keys.
    commands = command_map()
    parser = build_parser(commands)
    args = parser.parse_args(argv)

    try:
        run_command(args.command, commands, args.args)
    except BuildToolError as exc:
        # Keep failures short and readable.
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc
    except KeyboardInterrupt as exc:
        # Covers BuildInterrupted (SIGINT/SIGTERM) as well as a plain Ctrl-C.
        print(f"Error: {exc or 'interrupted'}", file=sys.stderr)
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()
