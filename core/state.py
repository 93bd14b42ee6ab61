"""Pipeline state models shared across all stages."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone


@dataclass(frozen=True)
class Task:
    step: int
    file: str                       # target path e.g. "src/components/Header.tsx"
    description: str
    dependencies: tuple[str, ...] = ()
    title: str = ""                 # planner's short label, e.g. "Create Header component"

    @property
    def label(self):
        return self.title or self.file


@dataclass
class GeneratedFile:
    path: str
    content: str


@dataclass
class CompilationError:
    file: str
    message: str
    line: int | None = None
    column: int | None = None
    code: str = ""                  # "TS2305", empty for guard issues
    category: str = "other"         # see core.diagnostics.CATEGORIES

    @property
    def key(self):
        return (self.line, self.message)


@dataclass
class RawResponse:
    task: str
    file: str
    raw_response: str
    timestamp: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )


@dataclass
class TaskResult:
    task: Task
    status: str = "pending"         # pending|accepted|failed
    attempts: int = 0
    fix_attempts: int = 0
    compiler_calls: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def accepted(self):
        return self.status == "accepted"


@dataclass
class PipelineResult:
    accepted: list[GeneratedFile] = field(default_factory=list)
    raw_responses: list[RawResponse] = field(default_factory=list)
    attempt_counts: dict[str, int] = field(default_factory=dict)
    fix_attempt_counts: dict[str, int] = field(default_factory=dict)
    task_results: list[TaskResult] = field(default_factory=list)
    registry_sizes: list[int] = field(default_factory=list)   # allowed-alias count after each task

    @property
    def failed(self):
        return [r for r in self.task_results if r.status == "failed"]


@dataclass
class RunContext:
    """Everything scoped to one pipeline run.

    Created by the orchestrator at run start and dropped at run end. No
    component keeps module-level state between runs.

    Every mutation made through the context is journaled until the current
    task commits, so a task that gives up can put back each file it touched,
    including files changed by repairs to other modules.
    """

    store: object                   # GuardedFileStore
    plan_context: str = ""
    user_prompt: str = ""
    allowed_aliases: set[str] = field(default_factory=set)
    import_cache: dict[str, bool] = field(default_factory=dict)
    declared_dependencies: set[str] | None = None
    accepted: dict[str, GeneratedFile] = field(default_factory=dict)
    attempts: dict[str, int] = field(default_factory=dict)
    fix_attempts: dict[str, int] = field(default_factory=dict)
    raw_responses: list[RawResponse] = field(default_factory=list)
    registry_sizes: list[int] = field(default_factory=list)
    status: object = None           # StatusTracker
    journal: list[tuple] = field(default_factory=list)

    def register_alias(self, alias):
        # Add-only: later tasks rely on every alias seen so far staying valid
        self.allowed_aliases.add(alias)

    def _previous(self, path):
        return self.store.read(path) if self.store.exists(path) else None

    def write(self, path, content):
        """Write through the guarded store and keep the accepted copy in sync."""
        previous = self._previous(path)
        self.store.write(path, content)
        self.journal.append(("write", path, previous))
        self.import_cache.pop(path, None)
        if path in self.accepted:
            self.accepted[path].content = content

    def delete(self, path):
        previous = self._previous(path)
        self.store.delete(path)
        self.journal.append(("delete", path, previous))
        self.import_cache.pop(path, None)

    def rename(self, old_path, new_path):
        self.store.rename(old_path, new_path)
        self.journal.append(("rename", old_path, new_path))
        self.import_cache.pop(old_path, None)
        self.import_cache.pop(new_path, None)
        if old_path in self.accepted:
            entry = self.accepted.pop(old_path)
            entry.path = new_path
            self.accepted[new_path] = entry

    def commit(self):
        """Keep every mutation made so far; nothing before this point can be rolled back."""
        self.journal.clear()

    def rollback(self):
        """Undo journaled mutations, newest first. Returns the number undone."""
        entries, self.journal = self.journal, []
        for op, path, other in reversed(entries):
            if op == "rename":
                self.rename(other, path)
            elif other is None:
                if self.store.exists(path):
                    self.delete(path)
            else:
                self.write(path, other)
        self.journal = []
        return len(entries)

    def exists(self, path):
        if self.import_cache.get(path):
            return True
        found = self.store.exists(path)
        # Only positive results are cached: a missing file may be written by a later task
        if found:
            self.import_cache[path] = True
        return found
