"""Compiler oracle: runs the TypeScript checker over the project tree. Zero LLM calls."""

import logging
import os

from config.defaults import DEFAULTS
from core.sandbox import run_in_sandbox

logger = logging.getLogger(__name__)

TSC_COMMAND = ["npx", "tsc", "--noEmit", "--pretty", "false"]


class CompilerUnavailableError(Exception):
    """The checker could not be run at all (missing binary, timeout)."""


class TscCompiler:
    """Type-checks the project rooted at root and returns raw diagnostic text.

    Absolute paths under root are rewritten to project-relative ones so the
    diagnostic parser can match them against store paths.
    """

    name = "tsc"

    def __init__(self, root, command=None, timeout=None):
        self.root = os.path.realpath(root)
        self.command = command or TSC_COMMAND
        self.timeout = timeout or DEFAULTS["compile_timeout"]

    def check(self):
        stdout, stderr, rc = run_in_sandbox(self.command, cwd=self.root, timeout=self.timeout)
        if rc == -1:
            raise CompilerUnavailableError(stderr or "type checker failed to run")
        output = (stdout or "") + (stderr or "")
        output = output.replace(self.root + os.sep, "").replace(self.root + "/", "")
        if rc != 0:
            logger.debug("tsc exited %d:\n%s", rc, output[:1000])
        return output
