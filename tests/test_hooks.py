"""Tests for qitrack/hooks.py — hook system."""

import json

import yaml

from qitrack.hooks import hook_env, load_hooks_config, run_hooks


def _write_hooks(workspace, config):
    path = workspace / "tracker" / "hooks.yaml"
    path.write_text(yaml.dump(config), encoding="utf-8")


def test_run_hooks_no_config(workspace):
    """No hooks.yaml -> no hooks run."""
    assert load_hooks_config(workspace) == {}
    results = run_hooks("on_practice", {"currentDay": 1}, workspace)
    assert results == []


def test_run_hooks_with_echo(workspace):
    """Hook echoes the context it receives on stdin."""
    _write_hooks(workspace, {"on_practice": ["cat"]})

    results = run_hooks("on_practice", {"currentDay": 4, "currentEnergy": 1.08}, workspace)
    assert len(results) == 1
    assert results[0]["exit_code"] == 0
    assert results[0]["hook_point"] == "on_practice"
    output = json.loads(results[0]["stdout"])
    assert output["currentDay"] == 4


def test_run_hooks_invalid_hook_point(workspace):
    _write_hooks(workspace, {"post_finalize": ["cat"]})
    assert run_hooks("post_finalize", {}, workspace) == []


def test_run_hooks_skips_blank_entries(workspace):
    _write_hooks(workspace, {"on_skip": [{"timeout": 5}, 42, "true"]})
    results = run_hooks("on_skip", {}, workspace)
    assert [r["command"] for r in results] == ["true"]


def test_run_hooks_nonzero_exit(workspace):
    _write_hooks(workspace, {"on_reset": ["echo oops >&2; exit 2"]})
    results = run_hooks("on_reset", {}, workspace)
    assert results[0]["exit_code"] == 2
    assert "oops" in results[0]["stderr"]


def test_run_hooks_timeout(workspace):
    """Test hook timeout protection."""
    _write_hooks(workspace, {"on_advance": [{"command": "sleep 10", "timeout": 1}]})

    results = run_hooks("on_advance", {"currentDay": 2}, workspace)
    assert len(results) == 1
    assert results[0]["exit_code"] == -1
    assert "timed out" in results[0].get("error", "").lower()


def test_run_hooks_sets_tracker_environment(workspace):
    _write_hooks(workspace, {"on_practice": ['echo "$QITRACK_HOOK $QITRACK_DAY $QITRACK_ENERGY"']})

    results = run_hooks("on_practice", {"currentDay": 3, "currentEnergy": 1.1}, workspace)
    assert results[0]["stdout"].strip() == "on_practice 3 1.10"


def test_run_hooks_tags_context_with_hook_point(workspace):
    _write_hooks(workspace, {"on_edit": ["cat"]})
    results = run_hooks("on_edit", {"editedDay": 2}, workspace)
    output = json.loads(results[0]["stdout"])
    assert output == {"hookPoint": "on_edit", "editedDay": 2}


def test_hook_env_without_position(workspace):
    env = hook_env("on_reset", {}, workspace)
    assert env["QITRACK_HOOK"] == "on_reset"
    assert env["QITRACK_ROOT"] == str(workspace)
    assert "QITRACK_DAY" not in env
