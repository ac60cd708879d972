"""
Script: buildx_tools/tags.py
What: Builds the image tags pushed by each build command.
Doing: Sanitizes the branch name and combines it with the short commit hash and optional build type.
Why: Every build command needs the same naming rules.
Goal: Give each build one versioned tag and one moving `latest` tag.
"""

from __future__ import annotations

from typing import NamedTuple


class ImageTagSet(NamedTuple):
    versioned: str
    latest: str

    def as_list(self) -> list[str]:
        return [self.versioned, self.latest]


def sanitize_branch_name(branch: str) -> str:
    """
    Make a branch name usable inside an image tag.

    Only `/` is replaced, so `feature/login` becomes `feature-login`.
    """
    return branch.replace("/", "-")


def branch_tags(
    repository: str,
    branch: str,
    short_commit: str,
    *,
    suffix: str = "",
) -> ImageTagSet:
    """
    Tags for the local/remote daemon builds.

    Example with suffix `-nonroot`:
    - `repo:main-abc1234-nonroot`
    - `repo:main-latest-nonroot`
    """
    safe_branch = sanitize_branch_name(branch)
    return ImageTagSet(
        versioned=f"{repository}:{safe_branch}-{short_commit}{suffix}",
        latest=f"{repository}:{safe_branch}-latest{suffix}",
    )


def build_type_tags(
    repository: str,
    build_type: str,
    branch: str,
    short_commit: str,
) -> ImageTagSet:
    """
    Tags for cloud builds, grouped by build type.

    The `latest` tag only carries the build type, so it moves with the most
    recent build of that type regardless of branch.
    """
    safe_branch = sanitize_branch_name(branch)
    return ImageTagSet(
        versioned=f"{repository}:{build_type}-{safe_branch}-{short_commit}",
        latest=f"{repository}:{build_type}-latest",
    )
