"""
Script: buildx_tools/redeploy.py
What: Optionally triggers a redeploy after an image was pushed.
Doing: Sends one POST to a deploy hook URL and reports the result.
Why: Lets a hosted service pick up the fresh `latest` image without a manual step.
Goal: Best-effort notification that never changes the build result.
"""

from __future__ import annotations

from typing import Any, Callable

import requests

from buildx_tools.common import env_flag, optional_env, warn


SUCCESS_STATUS_CODES = {200, 201}
DEFAULT_TIMEOUT_SECONDS = 30.0


def extract_deploy_id(payload: Any) -> str:
    """
    Read a deploy id from a hook response body.

    Accepts `{"id": ...}` and `{"deploy": {"id": ...}}`; anything else gives "".
    """
    if not isinstance(payload, dict):
        return ""
    deploy = payload.get("deploy")
    if isinstance(deploy, dict) and deploy.get("id"):
        return str(deploy["id"])
    if payload.get("id"):
        return str(payload["id"])
    return ""


def trigger_redeploy(
    url: str,
    *,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    post: Callable[..., requests.Response] = requests.post,
) -> bool:
    """
    POST to the deploy hook. Returns True on HTTP 200/201.

    `post` is passed in to keep this function easy to test.
    """
    print("Triggering redeploy...")
    try:
        response = post(url, timeout=timeout)
    except requests.RequestException as exc:
        warn(f"Redeploy request failed: {exc}")
        return False

    if response.status_code not in SUCCESS_STATUS_CODES:
        warn(f"Redeploy hook returned HTTP {response.status_code}")
        return False

    try:
        deploy_id = extract_deploy_id(response.json())
    except ValueError:
        deploy_id = ""

    if deploy_id:
        print(f"Redeploy triggered (deploy id: {deploy_id})")
    else:
        print("Redeploy triggered")
    return True


def redeploy_timeout() -> float:
    raw_value = optional_env("REDEPLOY_TIMEOUT", str(DEFAULT_TIMEOUT_SECONDS))
    try:
        return float(raw_value)
    except ValueError:
        warn(f"Ignoring invalid REDEPLOY_TIMEOUT={raw_value!r}")
        return DEFAULT_TIMEOUT_SECONDS


def redeploy_from_env(
    post: Callable[..., requests.Response] = requests.post,
) -> bool:
    """
    Run the redeploy step configured by environment variables.

    - `REDEPLOY_ENABLED`: must be truthy, otherwise the step is skipped
    - `REDEPLOY_HOOK_URL`: deploy hook to POST to
    - `REDEPLOY_TIMEOUT`: request timeout in seconds
    """
    if not env_flag("REDEPLOY_ENABLED"):
        return False

    url = optional_env("REDEPLOY_HOOK_URL").strip()
    if not url:
        warn("REDEPLOY_ENABLED is set but REDEPLOY_HOOK_URL is empty; skipping redeploy")
        return False

    return trigger_redeploy(url, timeout=redeploy_timeout(), post=post)
