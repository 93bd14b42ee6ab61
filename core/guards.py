"""Protected-path and dependency-declaration guards. Zero LLM calls."""

import json
import logging

from config.rules import (
    PROTECTED_FILES, IMPORT_FROM_RE, SIDE_EFFECT_IMPORT_RE, ALIAS_PREFIX,
)

logger = logging.getLogger(__name__)


class ProtectedPathError(Exception):
    """A write, delete or rename targeted a protected infrastructure file."""


def normalize_path(path):
    """Strip sandbox and relative prefixes so paths compare as project-relative."""
    path = path.replace("\\", "/")
    if path.startswith("/workspace/"):
        path = path[len("/workspace/"):]
    while path.startswith("./"):
        path = path[2:]
    return path.lstrip("/")


def is_protected(path):
    """True for the template files at the project root; nested namesakes are ordinary files."""
    return normalize_path(path) in PROTECTED_FILES


class GuardedFileStore:
    """Wraps a file store and refuses every mutation of a protected path.

    The check runs before the call is forwarded, so a blocked operation never
    reaches the underlying store.
    """

    def __init__(self, inner):
        self.inner = inner

    def _check(self, op, path):
        if is_protected(path):
            logger.error("Blocked %s of protected file %s", op, path)
            raise ProtectedPathError(
                f"Cannot {op} protected template file: {path}. "
                "This file is managed by the template and must not be changed."
            )

    def read(self, path):
        return self.inner.read(path)

    def exists(self, path):
        return self.inner.exists(path)

    def list_files(self, prefix=""):
        return self.inner.list_files(prefix)

    def write(self, path, content):
        self._check("write", path)
        self.inner.write(path, content)

    def delete(self, path):
        self._check("delete", path)
        self.inner.delete(path)

    def rename(self, old_path, new_path):
        self._check("rename", old_path)
        self._check("rename", new_path)
        self.inner.rename(old_path, new_path)


# ------------------------------------------------------------------
# Dependency declaration
# ------------------------------------------------------------------

def import_specifiers(content):
    """Every module specifier imported or re-exported by content, in order, unique."""
    found = []
    for m in IMPORT_FROM_RE.finditer(content):
        found.append((m.start(), m.group(2)))
    for m in SIDE_EFFECT_IMPORT_RE.finditer(content):
        found.append((m.start(), m.group(1)))
    found.sort()
    seen = []
    for _, spec in found:
        if spec not in seen:
            seen.append(spec)
    return seen


def is_external(specifier):
    return not (
        specifier.startswith(".")
        or specifier.startswith(ALIAS_PREFIX)
        or specifier.startswith("~")
        or specifier.startswith("node:")
        or specifier.startswith("/")
    )


def package_root(specifier):
    """'@scope/pkg/sub' -> '@scope/pkg', 'pkg/sub' -> 'pkg'."""
    parts = specifier.split("/")
    if specifier.startswith("@"):
        return "/".join(parts[:2])
    return parts[0]


def check_dependencies(content, declared):
    """Return root package names imported by content but absent from declared."""
    missing = []
    for spec in import_specifiers(content):
        if not is_external(spec):
            continue
        root = package_root(spec)
        if root not in declared and root not in missing:
            missing.append(root)
    return missing


def parse_manifest(text):
    """Declared package names from package.json text, or None if it is not valid JSON."""
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, TypeError) as e:
        logger.warning("Failed to parse package manifest: %s", e)
        return None
    if not isinstance(data, dict):
        return None
    declared = set()
    for section in ("dependencies", "devDependencies"):
        declared.update((data.get(section) or {}).keys())
    return declared
