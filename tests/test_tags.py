from __future__ import annotations

import unittest

from buildx_tools.tags import branch_tags, build_type_tags, sanitize_branch_name


class SanitizeBranchNameTests(unittest.TestCase):
    def test_replaces_every_slash(self) -> None:
        self.assertEqual(sanitize_branch_name("feature/auth/login"), "feature-auth-login")

    def test_leaves_other_characters_alone(self) -> None:
        # Only `/` is rewritten; case and other characters stay as they are.
        self.assertEqual(sanitize_branch_name("Fix_Bug.2"), "Fix_Bug.2")


class BranchTagsTests(unittest.TestCase):
    def test_root_tags(self) -> None:
        tags = branch_tags("example/app", "feature/x", "abc1234")
        self.assertEqual(tags.versioned, "example/app:feature-x-abc1234")
        self.assertEqual(tags.latest, "example/app:feature-x-latest")

    def test_nonroot_suffix_goes_last(self) -> None:
        tags = branch_tags("example/app", "main", "abc1234", suffix="-nonroot")
        self.assertEqual(
            tags.as_list(),
            ["example/app:main-abc1234-nonroot", "example/app:main-latest-nonroot"],
        )


class BuildTypeTagsTests(unittest.TestCase):
    def test_latest_tag_only_carries_build_type(self) -> None:
        tags = build_type_tags("example/app", "perf", "release/1.2", "abc1234")
        self.assertEqual(tags.versioned, "example/app:perf-release-1.2-abc1234")
        self.assertEqual(tags.latest, "example/app:perf-latest")


if __name__ == "__main__":
    unittest.main()
