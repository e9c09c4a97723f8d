"""Lifecycle hooks: shell commands run after committed tracker operations.

Configured via tracker/hooks.yaml, for example::

    on_practice:
      - notify-send "Practice logged"
    on_edit:
      - command: ./sync.sh
        timeout: 10

Hook points: on_practice, on_skip, on_advance, on_edit, on_reset.
Commands run in the workspace root with QITRACK_HOOK, QITRACK_DAY and
QITRACK_ENERGY set.
"""

from __future__ import annotations

import json
import logging
import os
import subprocess
from pathlib import Path
from typing import Any

from qitrack.fileio import read_yaml
from qitrack.workspace import hooks_config_path, workspace_root

logger = logging.getLogger(__name__)

VALID_HOOK_POINTS = {
    "on_practice",
    "on_skip",
    "on_advance",
    "on_edit",
    "on_reset",
}

DEFAULT_TIMEOUT = 30
OUTPUT_CAP = 4096


def load_hooks_config(root: Path | None = None) -> dict[str, Any]:
    if root is None:
        root = workspace_root()
    return read_yaml(hooks_config_path(root))


def hook_env(hook_point: str, context: dict[str, Any], root: Path) -> dict[str, str]:
    """Environment for a hook command: the caller's, plus the tracker position.

    Sets QITRACK_ROOT, QITRACK_HOOK, and QITRACK_DAY / QITRACK_ENERGY when the
    context carries ``currentDay`` / ``currentEnergy``.
    """
    env = dict(os.environ)
    env["QITRACK_ROOT"] = str(root)
    env["QITRACK_HOOK"] = hook_point
    if context.get("currentDay") is not None:
        env["QITRACK_DAY"] = str(context["currentDay"])
    if context.get("currentEnergy") is not None:
        env["QITRACK_ENERGY"] = f"{context['currentEnergy']:.2f}"
    return env


def run_hooks(
    hook_point: str,
    context: dict[str, Any],
    root: Path | None = None,
) -> list[dict[str, Any]]:
    """Run every command registered for *hook_point*.

    *context*, tagged with ``hookPoint``, is sent as JSON on stdin and
    summarised in the environment (see hook_env). Each result holds the command, its
    exit code and capped stdout/stderr; a timeout or launch failure gives
    exit_code -1 and an ``error`` message.
    """
    if hook_point not in VALID_HOOK_POINTS:
        return []

    if root is None:
        root = workspace_root()

    hooks = load_hooks_config(root).get(hook_point, [])
    if not hooks or not isinstance(hooks, list):
        return []

    results = []
    context_json = json.dumps({"hookPoint": hook_point, **context}, ensure_ascii=False)
    env = hook_env(hook_point, context, root)

    for hook in hooks:
        if isinstance(hook, str):
            command, timeout = hook, DEFAULT_TIMEOUT
        elif isinstance(hook, dict):
            command = hook.get("command", "")
            timeout = hook.get("timeout", DEFAULT_TIMEOUT)
        else:
            continue
        if not command:
            continue

        result: dict[str, Any] = {"command": command, "hook_point": hook_point}
        try:
            proc = subprocess.run(
                command,
                shell=True,
                input=context_json,
                capture_output=True,
                text=True,
                timeout=timeout,
                cwd=str(root),
                env=env,
            )
            result["exit_code"] = proc.returncode
            result["stdout"] = proc.stdout[:OUTPUT_CAP]
            result["stderr"] = proc.stderr[:OUTPUT_CAP]
            if proc.returncode != 0:
                logger.warning("Hook %r (%s) exited with %d", command, hook_point, proc.returncode)
        except subprocess.TimeoutExpired:
            result["exit_code"] = -1
            result["error"] = f"Hook timed out after {timeout}s"
            logger.warning("Hook %r (%s) timed out after %ss", command, hook_point, timeout)
        except OSError as e:
            result["exit_code"] = -1
            result["error"] = str(e)
            logger.warning("Hook %r (%s) failed to start: %s", command, hook_point, e)

        results.append(result)

    return results
