"""Allowlisted subprocess runner for toolchain commands (tsc, node)."""

import os
import subprocess

from config.defaults import DEFAULTS

# Keep npm/npx quiet and colourless so diagnostics parse cleanly
_QUIET_ENV = {
    "CI": "1",
    "FORCE_COLOR": "0",
    "NO_UPDATE_NOTIFIER": "1",
    "npm_config_update_notifier": "false",
    "npm_config_fund": "false",
    "npm_config_audit": "false",
}


def run_in_sandbox(command, cwd, timeout=None, env=None):
    """Run a toolchain command inside the project directory.

    Args:
        command: Argument list, e.g. ["npx", "tsc", "--noEmit"]
        cwd: Project directory (must exist)
        timeout: Seconds before the process is killed (default from config)
        env: Extra environment variables layered over the quiet defaults

    Returns:
        (stdout, stderr, returncode). returncode is -1 when the command timed
        out or could not be found.

    Raises:
        ValueError: If the executable is not allowlisted or cwd is invalid.
    """
    if timeout is None:
        timeout = DEFAULTS["sandbox_timeout"]

    if not command or not isinstance(command, list):
        raise ValueError("Command must be a non-empty list of strings")

    executable = command[0]
    allowed = DEFAULTS["allowed_commands"]
    if executable not in allowed:
        raise ValueError(f"Command '{executable}' not in allowlist: {allowed}")

    cwd = os.path.realpath(cwd)
    if not os.path.isdir(cwd):
        raise ValueError(f"Working directory does not exist: {cwd}")

    run_env = os.environ.copy()
    run_env.update(_QUIET_ENV)
    run_env.update(env or {})

    try:
        result = subprocess.run(
            command, cwd=cwd, env=run_env,
            capture_output=True, text=True, timeout=timeout,
        )
    except subprocess.TimeoutExpired:
        return "", f"Command timed out after {timeout}s", -1
    except FileNotFoundError:
        return "", f"Command not found: {executable}", -1
    return result.stdout, result.stderr, result.returncode
