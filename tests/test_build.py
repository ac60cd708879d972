from __future__ import annotations

import unittest
from unittest import mock

from buildx_tools import build
from buildx_tools.common import BuildToolError


class BuildCommandTests(unittest.TestCase):
    def test_local_build_has_no_builder_flag(self) -> None:
        command = build.build_command(
            "docker/Dockerfile.nonroot",
            ["example/app:main-abc1234-nonroot", "example/app:main-latest-nonroot"],
        )
        self.assertEqual(
            command,
            [
                "docker",
                "buildx",
                "build",
                "--platform",
                "linux/amd64",
                "-f",
                "docker/Dockerfile.nonroot",
                "-t",
                "example/app:main-abc1234-nonroot",
                "-t",
                "example/app:main-latest-nonroot",
                "--push",
                ".",
            ],
        )

    def test_cloud_build_names_builder(self) -> None:
        command = build.build_command(
            "docker/Dockerfile.dev",
            ["example/app:perf-main-abc1234", "example/app:perf-latest"],
            builder="cloud-org-proj",
        )
        self.assertEqual(command[3:5], ["--builder", "cloud-org-proj"])
        self.assertEqual(command.count("--push"), 1)
        self.assertEqual(command.count("-t"), 2)


class RunBuildTests(unittest.TestCase):
    def test_streams_output(self) -> None:
        with mock.patch.object(build, "run_cmd", return_value="") as run_cmd:
            build.run_build(["docker", "buildx", "build", "."])
        run_cmd.assert_called_once_with(["docker", "buildx", "build", "."], capture_output=False)

    def test_failure_propagates(self) -> None:
        with mock.patch.object(build, "run_cmd", side_effect=BuildToolError("Command failed")):
            with self.assertRaises(BuildToolError):
                build.run_build(["docker", "buildx", "build", "."])


if __name__ == "__main__":
    unittest.main()
