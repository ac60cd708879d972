"""
Script: buildx_tools/build_from_commit_nonroot.py
What: Builds and pushes the non-root image for the current commit.
Doing: Runs the shared daemon build flow with `docker/Dockerfile.nonroot`.
Why: Non-root images are published next to root ones and need distinct tags.
Goal: Publish `<repo>:<branch>-<hash>-nonroot` and `<repo>:<branch>-latest-nonroot`.
"""

from __future__ import annotations

import argparse

from buildx_tools.local_build import run_local_build


DOCKERFILE = "docker/Dockerfile.nonroot"
DEFAULT_REPOSITORY = "alexsanderperf/litellm"
TAG_SUFFIX = "-nonroot"


def main(argv: list[str] | None = None) -> None:
    argparse.ArgumentParser(
        prog="build-from-commit-nonroot",
        description="Build & push the non-root image for HEAD (DOCKER_HOST selects a remote daemon).",
    ).parse_args(argv)

    run_local_build(
        dockerfile=DOCKERFILE,
        default_repository=DEFAULT_REPOSITORY,
        tag_suffix=TAG_SUFFIX,
        description="non-root Docker image",
    )


if __name__ == "__main__":
    main()
