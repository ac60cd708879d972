"""
Script: tests/test_redeploy.py
What: Tests the optional post-build redeploy hook.
Doing: Injects a fake `post` callable and toggles the redeploy environment variables.
Why: Redeploy must stay best-effort and opt-in.
Goal: Confirm status handling, id extraction, and skip rules.
"""

from __future__ import annotations

import contextlib
import io
import os
import unittest
from unittest import mock

import requests

from buildx_tools.redeploy import extract_deploy_id, redeploy_from_env, trigger_redeploy


class FakeResponse:
    def __init__(self, status_code: int, payload=None, bad_json: bool = False) -> None:
        self.status_code = status_code
        self._payload = payload
        self._bad_json = bad_json

    def json(self):
        if self._bad_json:
            raise ValueError("not json")
        return self._payload


class RecordingPost:
    def __init__(self, response=None, error: Exception | None = None) -> None:
        self.response = response
        self.error = error
        self.calls: list[tuple[str, dict]] = []

    def __call__(self, url, **kwargs):
        self.calls.append((url, kwargs))
        if self.error is not None:
            raise self.error
        return self.response


class ExtractDeployIdTests(unittest.TestCase):
    def test_nested_deploy_id(self) -> None:
        self.assertEqual(extract_deploy_id({"deploy": {"id": "dep-123"}}), "dep-123")

    def test_top_level_id(self) -> None:
        self.assertEqual(extract_deploy_id({"id": "dep-456"}), "dep-456")

    def test_unknown_shapes(self) -> None:
        self.assertEqual(extract_deploy_id([]), "")
        self.assertEqual(extract_deploy_id({"status": "ok"}), "")


class TriggerRedeployTests(unittest.TestCase):
    def test_created_is_success(self) -> None:
        post = RecordingPost(FakeResponse(201, {"deploy": {"id": "dep-123"}}))
        stdout = io.StringIO()
        with contextlib.redirect_stdout(stdout):
            self.assertTrue(trigger_redeploy("https://hooks.example/deploy", timeout=5, post=post))
        self.assertEqual(post.calls, [("https://hooks.example/deploy", {"timeout": 5})])
        self.assertIn("dep-123", stdout.getvalue())

    def test_unparseable_body_still_succeeds(self) -> None:
        post = RecordingPost(FakeResponse(200, bad_json=True))
        self.assertTrue(trigger_redeploy("https://hooks.example/deploy", post=post))

    def test_other_status_only_warns(self) -> None:
        post = RecordingPost(FakeResponse(500))
        stderr = io.StringIO()
        with contextlib.redirect_stderr(stderr):
            self.assertFalse(trigger_redeploy("https://hooks.example/deploy", post=post))
        self.assertIn("HTTP 500", stderr.getvalue())

    def test_transport_error_only_warns(self) -> None:
        post = RecordingPost(error=requests.ConnectionError("refused"))
        stderr = io.StringIO()
        with contextlib.redirect_stderr(stderr):
            self.assertFalse(trigger_redeploy("https://hooks.example/deploy", post=post))
        self.assertIn("Redeploy request failed", stderr.getvalue())


class RedeployFromEnvTests(unittest.TestCase):
    def test_disabled_by_default(self) -> None:
        post = RecordingPost(FakeResponse(200))
        env = {"REDEPLOY_ENABLED": "", "REDEPLOY_HOOK_URL": "https://hooks.example/deploy"}
        with mock.patch.dict(os.environ, env):
            self.assertFalse(redeploy_from_env(post=post))
        self.assertEqual(post.calls, [])

    def test_enabled_without_url_warns(self) -> None:
        post = RecordingPost(FakeResponse(200))
        stderr = io.StringIO()
        env = {"REDEPLOY_ENABLED": "true", "REDEPLOY_HOOK_URL": ""}
        with mock.patch.dict(os.environ, env), contextlib.redirect_stderr(stderr):
            self.assertFalse(redeploy_from_env(post=post))
        self.assertEqual(post.calls, [])
        self.assertIn("REDEPLOY_HOOK_URL is empty", stderr.getvalue())

    def test_enabled_with_url_posts_once(self) -> None:
        post = RecordingPost(FakeResponse(200, {"id": "dep-1"}))
        env = {
            "REDEPLOY_ENABLED": "YES",
            "REDEPLOY_HOOK_URL": "https://hooks.example/deploy",
            "REDEPLOY_TIMEOUT": "12",
        }
        with mock.patch.dict(os.environ, env):
            self.assertTrue(redeploy_from_env(post=post))
        self.assertEqual(post.calls, [("https://hooks.example/deploy", {"timeout": 12.0})])

    def test_invalid_timeout_uses_default(self) -> None:
        post = RecordingPost(FakeResponse(200))
        env = {
            "REDEPLOY_ENABLED": "1",
            "REDEPLOY_HOOK_URL": "https://hooks.example/deploy",
            "REDEPLOY_TIMEOUT": "soon",
        }
        with mock.patch.dict(os.environ, env), contextlib.redirect_stderr(io.StringIO()):
            self.assertTrue(redeploy_from_env(post=post))
        self.assertEqual(post.calls[0][1], {"timeout": 30.0})


if __name__ == "__main__":
    unittest.main()
