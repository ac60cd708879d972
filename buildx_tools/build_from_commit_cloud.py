"""
Script: buildx_tools/build_from_commit_cloud.py
What: Builds and pushes the dev image through Docker Build Cloud, optionally from another commit.
Doing: Stashes local changes, checks out the requested commit, builds with the cloud builder, restores, then optionally redeploys.
Why: Cloud builders avoid local daemon limits and let any past commit be rebuilt on demand.
Goal: Publish `<repo>:<type>-<branch>-<hash>` and `<repo>:<type>-latest`.
"""

from __future__ import annotations

import argparse

from buildx_tools.build import SEPARATOR, build_command, print_image_list, run_build
from buildx_tools.builders import (
    cloud_builder_name,
    ensure_cloud_builder,
    require_buildx,
    require_docker_cli,
)
from buildx_tools.common import optional_env
from buildx_tools.git_state import GitRepo, GitStateGuard
from buildx_tools.redeploy import redeploy_from_env
from buildx_tools.tags import build_type_tags


DOCKERFILE = "docker/Dockerfile.dev"
DEFAULT_REPOSITORY = "litellmperformancetesting/litellm"
DEFAULT_BUILD_TYPE = "default-build-type"
DEFAULT_CLOUD_PROJECT = "berriai/litellm-oom-builds"


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="build-from-commit-cloud",
        description="Build & push an image via Docker Build Cloud.",
        epilog=(
            "Environment: BUILD_TYPE, DOCKER_BUILD_CLOUD_PROJECT, IMAGE_REPOSITORY, "
            "REDEPLOY_ENABLED, REDEPLOY_HOOK_URL, REDEPLOY_TIMEOUT"
        ),
    )
    parser.add_argument(
        "commit",
        nargs="?",
        default=None,
        help="Commit to build (default: HEAD). Any ref git can resolve works.",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None, repo: GitRepo | None = None) -> None:
    args = parse_args(argv)

    # Configuration comes from environment variables, with fixed defaults.
    build_type = optional_env("BUILD_TYPE", DEFAULT_BUILD_TYPE)
    cloud_project = optional_env("DOCKER_BUILD_CLOUD_PROJECT", DEFAULT_CLOUD_PROJECT)
    repository = optional_env("IMAGE_REPOSITORY", DEFAULT_REPOSITORY)
    builder_name = cloud_builder_name(cloud_project)

    require_docker_cli()
    require_buildx()

    guard = GitStateGuard(
        repo or GitRepo(),
        target_commit=args.commit,
        stash_label="Docker Build Cloud build",
    )
    with guard:
        target = guard.target
        tags = build_type_tags(repository, build_type, target.branch, target.short_commit)

        print("Building & pushing Docker image via Docker Build Cloud:")
        print("  Image tags:")
        for tag in tags:
            print(f"    - {tag}")
        print(f"  Commit: {target.commit}")
        print(f"  Build type: {build_type}")
        print(f"  Cloud project: {cloud_project}")
        print(f"  Builder name: {builder_name}")
        print(SEPARATOR)

        ensure_cloud_builder(cloud_project, builder_name)
        run_build(build_command(DOCKERFILE, tags.as_list(), builder=builder_name))

        print(SEPARATOR)
        print("Docker Build Cloud build & push complete!")

    print_image_list("Images available at:", tags.as_list())

    # Runs after the working tree is restored; failures only warn.
    redeploy_from_env()


if __name__ == "__main__":
    main()
