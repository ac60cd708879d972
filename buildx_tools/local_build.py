"""
Script: buildx_tools/local_build.py
What: Shared flow for builds that run on a local or remote Docker daemon.
Doing: Checks the daemon, stashes local changes, tags from branch and commit, builds and pushes.
Why: The root and non-root commands only differ in Dockerfile, repository and tag suffix.
Goal: Keep both daemon-based commands on one code path.
"""

from __future__ import annotations

from buildx_tools.build import SEPARATOR, build_command, print_image_list, run_build
from buildx_tools.builders import check_docker_daemon, ensure_local_builder, require_docker_cli
from buildx_tools.common import optional_env
from buildx_tools.git_state import GitRepo, GitStateGuard
from buildx_tools.tags import branch_tags


def run_local_build(
    *,
    dockerfile: str,
    default_repository: str,
    tag_suffix: str = "",
    description: str = "Docker image",
    repo: GitRepo | None = None,
) -> list[str]:
    """
    Build and push one image through the daemon in `DOCKER_HOST` (or the local one).

    Returns the pushed tags.
    """
    docker_host = optional_env("DOCKER_HOST")
    repository = optional_env("IMAGE_REPOSITORY", default_repository)

    # Fail on missing tooling before the working tree is touched.
    require_docker_cli()
    check_docker_daemon(docker_host)

    with GitStateGuard(repo or GitRepo(), stash_label="Docker build") as guard:
        target = guard.target
        tags = branch_tags(repository, target.branch, target.short_commit, suffix=tag_suffix)

        print(f"Building & pushing {description} (buildx):")
        for tag in tags:
            print(f"  - {tag}")
        if docker_host:
            print(f"Using remote Docker host: {docker_host}")
        print(SEPARATOR)

        # None means no builder could be set up; buildx then picks its own.
        builder = ensure_local_builder()
        run_build(build_command(dockerfile, tags.as_list(), builder=builder))

        print(SEPARATOR)
        print("Build & push complete!")

    print_image_list("Images available at:", tags.as_list())
    return tags.as_list()
