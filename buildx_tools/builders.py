"""
Script: buildx_tools/builders.py
What: Checks docker tooling and picks the buildx builder for a build.
Doing: Verifies the docker CLI, buildx plugin and daemon, then inspects, creates or selects a builder.
Why: `docker buildx build` fails late and unclearly when the builder is missing.
Goal: Have a usable builder selected before the build starts.
"""

from __future__ import annotations

import os
import shutil

from buildx_tools.common import BuildToolError, cmd_succeeds, warn


DEFAULT_BUILDER = "default"


def require_docker_cli() -> None:
    if shutil.which("docker") is None:
        raise BuildToolError("docker CLI not found on PATH")


def require_buildx() -> None:
    if not cmd_succeeds(["docker", "buildx", "version"]):
        raise BuildToolError(
            "docker buildx is not available. "
            "Make sure Docker is up to date and buildx is enabled."
        )


def check_docker_daemon(docker_host: str = "") -> None:
    """
    Fail early when the daemon cannot be reached.

    `docker` reads `DOCKER_HOST` itself, so the same check covers local and
    remote daemons. The value is only used to pick the error message.
    """
    if cmd_succeeds(["docker", "info"]):
        return
    if docker_host:
        raise BuildToolError(f"Cannot connect to remote Docker daemon at {docker_host}")
    raise BuildToolError(
        "Cannot connect to Docker daemon\n"
        "Options:\n"
        "  1. Start the local Docker daemon (Docker Desktop)\n"
        "  2. Set DOCKER_HOST to use a remote Docker daemon:\n"
        "     export DOCKER_HOST=tcp://remote-host:2375"
    )


def ensure_local_builder(pid: int | None = None) -> str | None:
    """
    Select a builder for local or remote daemon builds.

    Order:
    1. the `default` builder, when it can be inspected
    2. a new `docker-container` builder named `remote-builder-<pid>`
    3. nothing (returns None) and let `docker buildx build` use whatever
       builder docker picks
    """
    if cmd_succeeds(["docker", "buildx", "inspect", DEFAULT_BUILDER]):
        print("Using existing default builder")
        # Selection failure is fine here; the build call reports real problems.
        cmd_succeeds(["docker", "buildx", "use", DEFAULT_BUILDER])
        return DEFAULT_BUILDER

    builder_name = f"remote-builder-{pid if pid is not None else os.getpid()}"
    print("Creating container-based builder...")
    created = cmd_succeeds(
        [
            "docker",
            "buildx",
            "create",
            "--name",
            builder_name,
            "--driver",
            "docker-container",
            "--use",
        ]
    )
    if created:
        print(f"Created container-based builder: {builder_name}")
        return builder_name

    warn("Could not create builder, attempting to use default...")
    return None


def cloud_builder_name(project: str) -> str:
    """`org/project` becomes `cloud-org-project`."""
    return "cloud-" + project.replace("/", "-")


def ensure_cloud_builder(project: str, builder_name: str) -> str:
    """Use the named Docker Build Cloud builder, creating it when missing."""
    if cmd_succeeds(["docker", "buildx", "inspect", builder_name]):
        print(f"Using existing Docker Build Cloud builder: {builder_name}")
        cmd_succeeds(["docker", "buildx", "use", builder_name])
        return builder_name

    print("Creating Docker Build Cloud builder...")
    created = cmd_succeeds(
        [
            "docker",
            "buildx",
            "create",
            "--driver",
            "cloud",
            project,
            "--name",
            builder_name,
            "--use",
        ]
    )
    if not created:
        raise BuildToolError(
            f"Failed to create Docker Build Cloud builder for project '{project}'\n"
            "Make sure you are logged in and have access:\n"
            "  docker login\n"
            f"  docker buildx create --driver cloud {project} --use"
        )

    print(f"Created Docker Build Cloud builder: {builder_name}")
    return builder_name
