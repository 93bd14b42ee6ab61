"""Generator agent: asks the Generation Oracle for one task's file."""

import logging
import os

from config.defaults import DEFAULTS
from config.rules import MANIFEST_FILE
from core.guards import normalize_path, parse_manifest
from core.state import GeneratedFile
from utils.llm import call_llm, parse_file_blocks

logger = logging.getLogger(__name__)

_PROMPT_FILE = os.path.join(os.path.dirname(__file__), "prompts", "generator.txt")


class GenerationFormatError(Exception):
    """The oracle answered, but no file block could be parsed from it."""


def _load_prompt():
    with open(_PROMPT_FILE) as f:
        return f.read()


class GeneratorAgent:
    """Builds the generation prompt for a task and parses the single-file reply."""

    name = "generator"

    def __init__(self, llm=None, context_files=None):
        self.llm = llm or call_llm
        self.context_files = context_files or DEFAULTS["context_files"]

    def _context_files(self, task, ctx):
        """Accepted files shown to the oracle: dependencies first, then the most recent."""
        chosen = []
        for dep in task.dependencies:
            dep = normalize_path(dep)
            if dep in ctx.accepted and dep not in chosen:
                chosen.append(dep)
        for path in reversed(list(ctx.accepted)):
            if len(chosen) >= self.context_files:
                break
            if path not in chosen:
                chosen.append(path)
        return [ctx.accepted[p] for p in chosen]

    def build_message(self, task, ctx):
        parts = []
        if ctx.user_prompt:
            parts.append(f"Project request: {ctx.user_prompt}")
        if ctx.plan_context:
            parts.append(f"--- PROJECT PLAN ---\n{ctx.plan_context}")

        parts.append(
            f"--- TASK {task.step} ---\n"
            f"Task: {task.label}\n"
            f"File: {task.file}\n"
            f"Description: {task.description}"
        )
        if task.dependencies:
            parts.append("Depends on: " + ", ".join(task.dependencies))

        aliases = sorted(a for a in ctx.allowed_aliases if not a.endswith("/index"))
        parts.append("Available @/lib modules: " + (", ".join(aliases) if aliases else "(none)"))
        if ctx.declared_dependencies is not None:
            parts.append("Declared packages: " + ", ".join(sorted(ctx.declared_dependencies)))

        context = self._context_files(task, ctx)
        if context:
            parts.append("--- EXISTING FILES (read-only) ---")
            for f in context:
                parts.append(f"FILE: {f.path}\n```tsx\n{f.content}\n```")

        parts.append(f"Write the complete content of {task.file} now.")
        return "\n\n".join(parts)

    def generate(self, task, ctx):
        """Request the task's file.

        Returns (GeneratedFile, raw response text).

        Raises:
            GenerationFormatError: No file block in the response.
            OracleError / RetryableOracleError: From the LLM client.
        """
        raw = self.llm(_load_prompt(), self.build_message(task, ctx))
        blocks = parse_file_blocks(raw)
        if not blocks:
            raise GenerationFormatError(f"No file block in response for {task.file}")

        target = normalize_path(task.file)
        content = None
        for path, block in blocks:
            if path == MANIFEST_FILE:
                declared = parse_manifest(block)
                if declared is not None:
                    logger.info("Refreshing declared dependencies from generated %s", MANIFEST_FILE)
                    ctx.declared_dependencies = declared
            elif path == target and content is None:
                content = block

        if content is None:
            others = [(p, b) for p, b in blocks if p != MANIFEST_FILE]
            if not others:
                raise GenerationFormatError(f"Response for {task.file} only contained {MANIFEST_FILE}")
            path, content = others[0]
            logger.warning("Response named %s, using it for %s", path or "(no path)", target)

        return GeneratedFile(path=target, content=content), raw
