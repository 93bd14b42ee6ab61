"""Sequential workflow: generate -> guard -> compile -> repair, one task at a time."""

import logging
import os

from agents.fixers import default_fixers
from agents.generator import GeneratorAgent, GenerationFormatError
from agents.oracle_fixer import OracleFixer
from config.defaults import DEFAULTS
from config.rules import MANIFEST_FILE
from core.compiler import CompilerUnavailableError
from core.diagnostics import errors_for_file, summarize
from core.guards import (
    GuardedFileStore, ProtectedPathError, check_dependencies, is_protected,
    normalize_path, parse_manifest,
)
from core.imports import lib_aliases, seed_registry, validate
from core.repair import RepairPipeline
from core.retry import RetryPolicy
from core.state import (
    CompilationError, GeneratedFile, PipelineResult, RawResponse, RunContext, TaskResult,
)
from core.status import StatusTracker
from utils.llm import OracleError, RetryableOracleError

logger = logging.getLogger(__name__)


class CompileBudgetExhausted(Exception):
    """Every compiler call a task may spend, retries included, has been used."""

# Per-task progress is reported inside this band, as the planner owns 0-30
# and the build/persistence step owns 80-100.
PROGRESS_START = 30
PROGRESS_END = 80


def _clamp(value, default, ceiling):
    if value is None:
        value = default
    return max(0, min(value, ceiling))


class Orchestrator:
    """Runs every task to a terminal state before starting the next.

    A task is accepted once the compiler reports no errors for its file, or
    failed once both attempt budgets run out. A failed task never aborts the
    run. Every store mutation goes through the protected-path guard.
    """

    def __init__(self, store, compiler, generator=None, repair=None, retry=None,
                 max_task_attempts=None, max_fix_attempts=None, on_status=None):
        self.store = store
        self.compiler = compiler
        self.generator = generator or GeneratorAgent()
        self.repair = repair or RepairPipeline(default_fixers(), fallback=OracleFixer())
        self.max_task_attempts = max(1, _clamp(
            max_task_attempts, DEFAULTS["max_task_attempts"], DEFAULTS["hard_max_task_attempts"]))
        self.max_fix_attempts = _clamp(
            max_fix_attempts, DEFAULTS["max_fix_attempts"], DEFAULTS["hard_max_fix_attempts"])
        self.retry = retry or RetryPolicy(max_attempts=self.max_task_attempts)
        self.compile_budget = self.max_task_attempts * (1 + self.max_fix_attempts)
        self.on_status = on_status

    def create_context(self, plan_context="", user_prompt=""):
        """Fresh per-run scope: guarded store, seeded registry, declared packages."""
        ctx = RunContext(
            store=GuardedFileStore(self.store),
            plan_context=plan_context,
            user_prompt=user_prompt,
            status=StatusTracker(on_update=self.on_status),
        )
        seed_registry(ctx)
        ctx.declared_dependencies = self._read_manifest(ctx)
        return ctx

    def _read_manifest(self, ctx):
        if not ctx.store.exists(MANIFEST_FILE):
            logger.warning("No %s found; undeclared-dependency check disabled", MANIFEST_FILE)
            return None
        declared = parse_manifest(ctx.store.read(MANIFEST_FILE))
        if declared is None:
            logger.warning("Unreadable %s; undeclared-dependency check disabled", MANIFEST_FILE)
        return declared

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------

    def run(self, tasks, plan_context="", user_prompt=""):
        """Process tasks in ascending step order and return the PipelineResult."""
        ctx = self.create_context(plan_context, user_prompt)
        ordered = sorted(tasks, key=lambda t: t.step)
        total = len(ordered)
        result = PipelineResult()
        ctx.status.add("generating", f"Generating {total} file(s)", progress=PROGRESS_START)

        for index, task in enumerate(ordered):
            try:
                task_result = self.run_task(task, ctx, index=index, total=total)
            except Exception as e:
                # Containment: one broken task must not abort the rest of the run
                logger.exception("Task %s crashed", task.file)
                self._rollback(ctx, task.file)
                task_result = TaskResult(task=task, status="failed", errors=[f"Internal error: {e}"])
            result.task_results.append(task_result)
            ctx.registry_sizes.append(len(ctx.allowed_aliases))

        result.accepted = list(ctx.accepted.values())
        result.raw_responses = list(ctx.raw_responses)
        result.attempt_counts = dict(ctx.attempts)
        result.fix_attempt_counts = dict(ctx.fix_attempts)
        result.registry_sizes = list(ctx.registry_sizes)

        failed = len(result.failed)
        ctx.status.add(
            "generated",
            f"{len(result.accepted)} file(s) accepted, {failed} failed",
            progress=PROGRESS_END,
        )
        return result

    def run_task(self, task, ctx, index=0, total=1):
        """Drive one task through the generate/guard/compile/repair loop."""
        path = normalize_path(task.file)
        result = TaskResult(task=task)
        ctx.commit()
        ctx.attempts[path] = 0
        ctx.fix_attempts[path] = 0
        span = (PROGRESS_END - PROGRESS_START) / max(total, 1)
        start = int(PROGRESS_START + span * index)
        end = int(PROGRESS_START + span * (index + 1))
        ctx.status.add("task", f"[{index + 1}/{total}] {task.label}", progress=start)

        if is_protected(path):
            return self._give_up(result, ctx, path, end,
                                 f"{path} is a protected template file and cannot be generated")

        self._check_dependencies(task, ctx)

        for attempt in range(1, self.max_task_attempts + 1):
            ctx.attempts[path] = attempt
            result.attempts = attempt
            logger.info("%s: generation attempt %d/%d", path, attempt, self.max_task_attempts)

            # Requesting
            try:
                generated = self._request(task, ctx)
            except (OracleError, GenerationFormatError) as e:
                self._record(result, f"Attempt {attempt}: generation failed: {e}")
                continue

            # Guarding
            issues = self._guard(path, generated.content, ctx)
            if issues:
                for issue in issues:
                    logger.warning("%s: %s", path, issue)
                self._record(result, f"Attempt {attempt}: " + "; ".join(issues))
                continue

            try:
                content = self._compile_and_repair(path, generated.content, ctx, result, attempt)
            except CompileBudgetExhausted as e:
                self._record(result, f"Attempt {attempt}: {e}")
                break
            if content is not None:
                return self._accept(result, ctx, path, content, end)

        self._rollback(ctx, path)
        return self._give_up(result, ctx, path, end,
                             f"Giving up on {path} after {result.attempts} attempt(s)")

    # ------------------------------------------------------------------
    # States
    # ------------------------------------------------------------------

    def _request(self, task, ctx):
        def on_retry(n, error):
            ctx.status.add("retrying", f"Oracle busy, retrying {task.file} ({n})")

        generated, raw = self.retry.call(
            lambda: self.generator.generate(task, ctx),
            retry_on=(RetryableOracleError,),
            on_retry=on_retry,
        )
        ctx.raw_responses.append(RawResponse(task=task.label, file=generated.path, raw_response=raw))
        return generated

    def _guard(self, path, content, ctx):
        """Import-resolution and undeclared-dependency issues; empty when the draft may compile."""
        issues = validate(path, content, ctx)
        if ctx.declared_dependencies is not None:
            for package in check_dependencies(content, ctx.declared_dependencies):
                issues.append(
                    f"Package \"{package}\" imported in {path} is not declared in {MANIFEST_FILE}. "
                    "Use only declared packages."
                )
        return issues

    def _compile(self, path, result):
        def check():
            # Retried calls count too: the budget bounds real compiler invocations
            if result.compiler_calls >= self.compile_budget:
                raise CompileBudgetExhausted(
                    f"compiler budget of {self.compile_budget} call(s) exhausted for {path}")
            result.compiler_calls += 1
            return self.compiler.check()

        raw = self.retry.call(check, retry_on=(CompilerUnavailableError,))
        return errors_for_file(raw, path)

    def _compile_and_repair(self, path, content, ctx, result, attempt):
        """Compile the draft, repairing until clean. Returns the clean content or None."""
        ctx.write(path, content)
        fixes = 0
        pending = None
        while True:
            if pending is None:
                try:
                    errors = self._compile(path, result)
                except CompilerUnavailableError as e:
                    self._record(result, f"Attempt {attempt}: compiler unavailable: {e}")
                    return None
            else:
                errors, pending = pending, None

            if not errors:
                return content

            logger.info("%s: %d error(s)\n%s", path, len(errors), summarize(errors))
            if fixes >= self.max_fix_attempts:
                self._record(result, f"Attempt {attempt}: fix budget exhausted:\n{summarize(errors)}")
                return None

            # Repairing
            fixes += 1
            ctx.fix_attempts[path] += 1
            result.fix_attempts = ctx.fix_attempts[path]
            ctx.status.add("fixing", f"Fixing {path} (fix {fixes}/{self.max_fix_attempts})")
            try:
                content, changed, _ = self.repair.run(path, content, errors, ctx)
            except ProtectedPathError as e:
                self._record(result, f"Attempt {attempt}: {e}")
                return None
            if not changed:
                self._record(result, f"Attempt {attempt}: no repair for:\n{summarize(errors)}")
                return None
            ctx.write(path, content)

            issues = self._guard(path, content, ctx)
            if issues:
                pending = [CompilationError(file=path, message=i, category="import") for i in issues]

    def _accept(self, result, ctx, path, content, progress):
        ctx.commit()
        ctx.accepted.pop(path, None)
        ctx.accepted[path] = GeneratedFile(path=path, content=content)
        for alias in lib_aliases(path):
            ctx.register_alias(alias)
        result.status = "accepted"
        logger.info("%s accepted (attempt %d, %d fix(es))", path, result.attempts, result.fix_attempts)
        ctx.status.add("accepted", f"{path} compiled", progress=progress)
        return result

    def _give_up(self, result, ctx, path, progress, message):
        result.status = "failed"
        result.errors.append(message)
        logger.error(message)
        ctx.status.add("failed", message, progress=progress)
        return result

    def _rollback(self, ctx, path):
        """Undo every change the task made, so no later task sees a failed draft or its repairs."""
        try:
            undone = ctx.rollback()
        except Exception:
            logger.exception("Could not roll back changes made for %s", path)
            return
        if undone:
            logger.info("%s: rolled back %d change(s)", path, undone)

    def _record(self, result, message):
        logger.warning(message)
        result.errors.append(message)

    def _check_dependencies(self, task, ctx):
        missing = [d for d in task.dependencies
                   if normalize_path(d) not in ctx.accepted and not ctx.exists(normalize_path(d))]
        if missing:
            logger.warning("%s: dependencies not generated yet: %s", task.file, ", ".join(missing))

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def write_files(self, result, output_dir):
        """Write accepted files to output_dir. Returns the written paths."""
        os.makedirs(output_dir, exist_ok=True)
        root = os.path.realpath(output_dir)
        written = []
        for f in result.accepted:
            resolved = os.path.realpath(os.path.join(root, f.path))
            if not resolved.startswith(root + os.sep):
                raise ValueError(f"Path escapes output directory: {f.path}")
            os.makedirs(os.path.dirname(resolved), exist_ok=True)
            with open(resolved, "w") as fp:
                fp.write(f.content)
            written.append(f.path)
        return written
