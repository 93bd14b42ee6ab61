"""Import resolution validator: every local specifier must resolve in the file store."""

import logging
import posixpath
import re

from config.rules import (
    ALIAS_PREFIX, SOURCE_ROOT, LIB_DIR, LIB_ALIAS_PREFIX,
    FORBIDDEN_ALIAS_PREFIXES, CANDIDATE_EXTENSIONS, SOURCE_EXTENSIONS,
)
from core.guards import import_specifiers

logger = logging.getLogger(__name__)

_EXT_RE = re.compile(r"\.(tsx|ts|jsx|js|mjs|cjs)$", re.IGNORECASE)


def classify(specifier):
    """Return "alias", "relative" or "external"."""
    if specifier.startswith(ALIAS_PREFIX):
        return "alias"
    if specifier.startswith("./") or specifier.startswith("../"):
        return "relative"
    return "external"


def lib_aliases(path):
    """Aliases under which a shared-utility file can be imported.

    "src/lib/utils.ts" -> ["@/lib/utils"]
    "src/lib/theme/index.ts" -> ["@/lib/theme/index", "@/lib/theme"]
    Files outside src/lib/ have none.
    """
    if not path.startswith(LIB_DIR) or not path.endswith(SOURCE_EXTENSIONS):
        return []
    alias = ALIAS_PREFIX + _EXT_RE.sub("", path[len(SOURCE_ROOT):])
    aliases = [alias]
    if alias.endswith("/index"):
        aliases.append(alias[:-len("/index")])
    return aliases


def seed_registry(ctx):
    """Register an alias for every file already present under src/lib/."""
    for path in ctx.store.list_files(LIB_DIR):
        for alias in lib_aliases(path):
            ctx.register_alias(alias)
    logger.debug("Seeded %d shared-utility alias(es)", len(ctx.allowed_aliases))


def candidate_paths(base):
    base = base.rstrip("/")
    candidates = []
    for ext in CANDIDATE_EXTENSIONS:
        for path in (base + ext, base + "/index" + ext):
            if path not in candidates:
                candidates.append(path)
    return candidates


def resolve_base(specifier, source_file):
    """Store path a local specifier names before extensions are tried, or None."""
    kind = classify(specifier)
    if kind == "alias":
        return (SOURCE_ROOT + specifier[len(ALIAS_PREFIX):]).rstrip("/")
    if kind == "relative":
        base_dir = posixpath.dirname(source_file)
        resolved = posixpath.normpath(posixpath.join(base_dir, specifier))
        if resolved.startswith(".."):
            return None
        return resolved
    return None


def resolve_candidates(specifier, source_file):
    """Store paths that would satisfy specifier when imported from source_file."""
    base = resolve_base(specifier, source_file)
    return candidate_paths(base) if base else []


def resolve(specifier, source_file, ctx):
    """First existing store path for specifier, or None."""
    for candidate in resolve_candidates(specifier, source_file):
        if ctx.exists(candidate):
            return candidate
    return None


def _lib_alias_known(specifier, allowed):
    normalized = _EXT_RE.sub("", specifier)
    return (specifier in allowed
            or normalized in allowed
            or f"{normalized}/index" in allowed)


def validate(file_path, content, ctx):
    """Return human-readable issues for specifiers that cannot be resolved.

    An empty list means every aliased and relative import resolves. External
    packages are left to the dependency guard.
    """
    issues = []
    for specifier in import_specifiers(content):
        if any(specifier.startswith(p) for p in FORBIDDEN_ALIAS_PREFIXES):
            issues.append(
                f"Do not import from {specifier} in {file_path}. Template library "
                "components are reference-only; use \"@/components/...\" instead."
            )
            continue

        if specifier.startswith(LIB_ALIAS_PREFIX):
            if not _lib_alias_known(specifier, ctx.allowed_aliases):
                issues.append(
                    f"Module {specifier} imported in {file_path} does not exist in src/lib. "
                    "Only import utilities that already exist (e.g. \"@/lib/utils\")."
                )
            continue

        if classify(specifier) == "external":
            continue

        if resolve(specifier, file_path, ctx) is None:
            issues.append(
                f"Import \"{specifier}\" in {file_path} points to a file that does not "
                "exist yet. Generate that file or remove the import."
            )
    return issues
