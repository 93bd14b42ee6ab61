"""Oracle-assisted repair: last resort after the deterministic fixers."""

import logging
import os

from agents.fixers import Fixer
from config.defaults import DEFAULTS
from core.diagnostics import summarize
from core.guards import normalize_path
from utils.llm import call_llm, parse_file_blocks, OracleError

logger = logging.getLogger(__name__)

_PROMPT_FILE = os.path.join(os.path.dirname(__file__), "prompts", "fixer.txt")


def _load_prompt():
    with open(_PROMPT_FILE) as f:
        return f.read()


class OracleFixer(Fixer):
    """Sends the file and its diagnostics to the oracle, asking for those errors only.

    The reply is accepted only when it is exactly one file block for the
    same path. Oracle failures leave the content unchanged.
    """

    name = "oracle"

    def __init__(self, llm=None, temperature=None):
        self.llm = llm or call_llm
        self.temperature = DEFAULTS["fix_temperature"] if temperature is None else temperature

    def build_message(self, path, content, diagnostics, ctx):
        parts = [
            f"FILE: {path}\n```tsx\n{content}\n```",
            f"--- ERRORS TO FIX ---\n{summarize(diagnostics)}",
        ]
        if ctx is not None and ctx.plan_context:
            parts.append(f"--- PROJECT PLAN ---\n{ctx.plan_context}")
        return "\n\n".join(parts)

    def apply(self, path, content, diagnostics, ctx):
        if not diagnostics:
            return content, False
        try:
            raw = self.llm(_load_prompt(), self.build_message(path, content, diagnostics, ctx),
                           temperature=self.temperature)
        except OracleError as e:
            logger.warning("Oracle fix for %s failed: %s", path, e)
            return content, False

        blocks = parse_file_blocks(raw)
        if len(blocks) != 1 or blocks[0][0] != normalize_path(path):
            logger.warning("Oracle fix for %s rejected: expected one block for that path, got %s",
                           path, [p or "(no path)" for p, _ in blocks])
            return content, False

        fixed = blocks[0][1]
        return fixed, fixed != content
