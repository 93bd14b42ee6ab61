"""Tests for core.sandbox."""

import subprocess
import tempfile
from unittest.mock import patch, MagicMock

import pytest

from core.sandbox import run_in_sandbox


def test_disallowed_command():
    with tempfile.TemporaryDirectory() as tmpdir:
        with pytest.raises(ValueError, match="not in allowlist"):
            run_in_sandbox(["rm", "-rf", "/"], cwd=tmpdir)


def test_disallowed_bash():
    with tempfile.TemporaryDirectory() as tmpdir:
        with pytest.raises(ValueError, match="not in allowlist"):
            run_in_sandbox(["bash", "-c", "echo pwned"], cwd=tmpdir)


def test_invalid_cwd():
    with pytest.raises(ValueError, match="does not exist"):
        run_in_sandbox(["npx", "tsc"], cwd="/nonexistent/path")


def test_empty_command():
    with tempfile.TemporaryDirectory() as tmpdir:
        with pytest.raises(ValueError, match="non-empty list"):
            run_in_sandbox([], cwd=tmpdir)


@patch("core.sandbox.subprocess.run")
def test_returns_process_output(mock_run):
    mock_run.return_value = MagicMock(stdout="out", stderr="err", returncode=2)
    with tempfile.TemporaryDirectory() as tmpdir:
        assert run_in_sandbox(["npx", "tsc", "--noEmit"], cwd=tmpdir) == ("out", "err", 2)
    kwargs = mock_run.call_args.kwargs
    assert kwargs["env"]["CI"] == "1"
    assert kwargs["env"]["FORCE_COLOR"] == "0"


@patch("core.sandbox.subprocess.run")
def test_extra_env_overrides_defaults(mock_run):
    mock_run.return_value = MagicMock(stdout="", stderr="", returncode=0)
    with tempfile.TemporaryDirectory() as tmpdir:
        run_in_sandbox(["node", "-v"], cwd=tmpdir, env={"CI": "0"})
    assert mock_run.call_args.kwargs["env"]["CI"] == "0"


@patch("core.sandbox.subprocess.run", side_effect=subprocess.TimeoutExpired(cmd="npx", timeout=1))
def test_timeout(mock_run):
    with tempfile.TemporaryDirectory() as tmpdir:
        stdout, stderr, rc = run_in_sandbox(["npx", "tsc"], cwd=tmpdir, timeout=1)
    assert rc == -1
    assert "timed out" in stderr.lower()


@patch("core.sandbox.subprocess.run", side_effect=FileNotFoundError("npx"))
def test_command_not_found(mock_run):
    with tempfile.TemporaryDirectory() as tmpdir:
        stdout, stderr, rc = run_in_sandbox(["npx", "tsc"], cwd=tmpdir)
    assert rc == -1
    assert "not found" in stderr.lower()
