"""
Script: buildx_tools/build_from_commit.py
What: Builds and pushes the default (root) image for the current commit.
Doing: Runs the shared daemon build flow with the repository `Dockerfile`.
Why: Gives each commit its own pushed image without a CI run.
Goal: Publish `<repo>:<branch>-<hash>` and `<repo>:<branch>-latest`.
"""

from __future__ import annotations

import argparse

from buildx_tools.local_build import run_local_build


DOCKERFILE = "Dockerfile"
DEFAULT_REPOSITORY = "alexsanderperf/litellm"


def main(argv: list[str] | None = None) -> None:
    # No options; parsing still rejects stray arguments and gives `--help`.
    argparse.ArgumentParser(
        prog="build-from-commit",
        description="Build & push the root image for HEAD (DOCKER_HOST selects a remote daemon).",
    ).parse_args(argv)

    run_local_build(
        dockerfile=DOCKERFILE,
        default_repository=DEFAULT_REPOSITORY,
        description="Docker image",
    )


if __name__ == "__main__":
    main()
