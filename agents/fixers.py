"""Deterministic repair strategies. Zero LLM calls.

Each fixer takes (path, content, diagnostics, ctx) and returns
(content, changed). Fixers are idempotent: applying one twice gives the
same content as applying it once. They run in the order of default_fixers().
"""

import difflib
import logging
import posixpath
import re

from config.icons import ICON_CATALOG, ICON_MODULE, DEFAULT_ICON, fallback_icon
from config.rules import (
    NAMING_TYPOS, DISALLOWED_TAG_ATTRIBUTES, ATTRIBUTE_VALUE_RE,
    IMPORT_FROM_RE, SOURCE_ROOT, SOURCE_EXTENSIONS, ALIAS_PREFIX,
)
from core.diagnostics import missing_symbols, casing_pairs
from core.guards import is_protected, normalize_path, import_specifiers, is_external
from core.imports import resolve, resolve_base, resolve_candidates

logger = logging.getLogger(__name__)


class Fixer:
    """Base class for a single repair strategy."""

    name = "fixer"

    def apply(self, path, content, diagnostics, ctx):
        raise NotImplementedError


class NamingTypoFixer(Fixer):
    """Literal substitution of known attribute-name typos."""

    name = "naming_typo"

    def __init__(self, typos=None):
        self.typos = typos or NAMING_TYPOS

    def apply(self, path, content, diagnostics, ctx):
        fixed = content
        for wrong, right in self.typos:
            # Loop so "classNameNameName" collapses fully in one application
            while wrong in fixed:
                fixed = fixed.replace(wrong, right)
        return fixed, fixed != content


class TagAttributeFixer(Fixer):
    """Strips attributes the runtime rejects, e.g. <style jsx global>."""

    name = "tag_attribute"

    def __init__(self, rules=None):
        self.rules = rules or DISALLOWED_TAG_ATTRIBUTES
        self._patterns = []
        for tag, attrs in self.rules.items():
            tag_re = re.compile(rf"<{re.escape(tag)}\b[^>]*>")
            names = "|".join(re.escape(a) for a in attrs)
            attr_re = re.compile(rf"\s+(?:{names})\b{ATTRIBUTE_VALUE_RE}(?=[\s/>])")
            self._patterns.append((tag_re, attr_re))

    def apply(self, path, content, diagnostics, ctx):
        fixed = content
        for tag_re, attr_re in self._patterns:
            fixed = tag_re.sub(lambda m, r=attr_re: r.sub("", m.group(0)), fixed)
        return fixed, fixed != content


def _named_import_re(module):
    return re.compile(
        r"""(import\s+(?:type\s+)?(?:[\w$]+\s*,\s*)?\{)([^}]*)(\}\s*from\s*['"]"""
        + re.escape(module) + r"""['"])"""
    )


def _entry_name(entry):
    entry = entry.strip()
    if entry.startswith("type "):
        entry = entry[5:].strip()
    return entry.split(" as ")[0].strip()


class NearestSymbolFixer(Fixer):
    """Replaces symbols a catalog module does not export with the closest valid one.

    Only names reported by a missing-symbol diagnostic are touched. When no
    catalog name is close enough a keyword fallback (or the default symbol) is
    substituted so the file can still compile.
    """

    name = "nearest_symbol"

    def __init__(self, catalog=None, module=None, default=None, cutoff=0.6):
        self.catalog = frozenset(ICON_CATALOG if catalog is None else catalog)
        self.module = module or ICON_MODULE
        self.default = default or DEFAULT_ICON
        self.cutoff = cutoff
        self._import_re = _named_import_re(self.module)

    def imported_names(self, content):
        names = []
        for m in self._import_re.finditer(content):
            for entry in m.group(2).split(","):
                name = _entry_name(entry)
                if name and name not in names:
                    names.append(name)
        return names

    def replacement_for(self, name, suggestion=None):
        if suggestion and suggestion in self.catalog:
            return suggestion
        matches = difflib.get_close_matches(name, sorted(self.catalog), n=1, cutoff=self.cutoff)
        if matches:
            return matches[0]
        fallback = fallback_icon(name)
        if fallback == DEFAULT_ICON or fallback not in self.catalog:
            return self.default
        return fallback

    def _dedupe_imports(self, content):
        def repl(m):
            entries = [e.strip() for e in m.group(2).split(",") if e.strip()]
            unique = list(dict.fromkeys(entries))
            if unique == entries:
                return m.group(0)
            return f"{m.group(1)} {', '.join(unique)} {m.group(3)}"
        return self._import_re.sub(repl, content)

    def apply(self, path, content, diagnostics, ctx):
        imported = self.imported_names(content)
        if not imported:
            return content, False

        fixed = content
        for name, suggestion in missing_symbols(diagnostics, self.module):
            if name not in imported or name in self.catalog:
                continue
            replacement = self.replacement_for(name, suggestion)
            logger.info("%s: replacing %s symbol %s with %s", path, self.module, name, replacement)
            fixed = re.sub(rf"(?<![\w$]){re.escape(name)}(?![\w$])", replacement, fixed)

        fixed = self._dedupe_imports(fixed)
        return fixed, fixed != content


# ------------------------------------------------------------------
# Export shape
# ------------------------------------------------------------------

_HAS_DEFAULT_RE = re.compile(r"^\s*export\s+default\b|\bexport\s*\{[^}]*\bas\s+default\b", re.MULTILINE)
_VALUE_EXPORT_RE = re.compile(
    r"^\s*export\s+(?:declare\s+)?(?:async\s+)?(?:function\*?|const|let|var|class|abstract\s+class)\s+([\w$]+)",
    re.MULTILINE,
)
_EXPORT_LIST_RE = re.compile(r"^\s*export\s+(?:type\s+)?\{([^}]*)\}", re.MULTILINE)
_DEFAULT_DECL_RE = re.compile(
    r"^\s*export\s+default\s+(?:async\s+)?(?:function\*?\s+|class\s+)?([\w$]+)", re.MULTILINE,
)
_KEYWORDS = {"function", "class", "async", "new"}


def _parse_clause(clause):
    """(default_local_name_or_None, [named imports]) for an import clause."""
    default = None
    named = []
    brace = re.search(r"\{([^}]*)\}", clause)
    head = (clause[:brace.start()] if brace else clause).strip().rstrip(",").strip()
    if head and not head.startswith("*"):
        default = head
    if brace:
        for entry in brace.group(1).split(","):
            entry = entry.strip()
            if not entry:
                continue
            name = _entry_name(entry)
            if name == "default":
                default = entry.split(" as ")[-1].strip()
            else:
                named.append(name)
    return default, named


def _named_exports(content):
    names = set(_VALUE_EXPORT_RE.findall(content))
    for m in _EXPORT_LIST_RE.finditer(content):
        for entry in m.group(1).split(","):
            entry = entry.strip()
            if entry.startswith("type "):
                entry = entry[5:].strip()
            if entry:
                names.add(entry.split(" as ")[-1].strip())
    names.discard("default")
    return names


def _declares(content, name):
    return re.search(
        rf"^\s*(?:export\s+)?(?:async\s+)?(?:function\*?|const|let|var|class)\s+{re.escape(name)}\b",
        content, re.MULTILINE,
    ) is not None


class ExportShapeFixer(Fixer):
    """Rewrites an imported file's exports to match how the draft imports it.

    The importer is never changed: other accepted files may already import the
    target the same way. Exports are appended, so existing importers keep working.
    """

    name = "export_shape"

    def _fix_target(self, target_content, default_name, named):
        additions = []
        has_default = _HAS_DEFAULT_RE.search(target_content) is not None
        exports = _named_exports(target_content)

        if default_name and not has_default:
            candidate = None
            if default_name in exports or _declares(target_content, default_name):
                candidate = default_name
            elif len(exports) == 1:
                candidate = next(iter(exports))
            if candidate:
                additions.append(f"export default {candidate};")
                has_default = True

        decl = _DEFAULT_DECL_RE.search(target_content)
        default_decl = decl.group(1) if decl and decl.group(1) not in _KEYWORDS else None
        for name in named:
            if name in exports or not has_default:
                continue
            if name == default_decl:
                additions.append(f"export {{ {name} }};")

        if not additions:
            return target_content
        return target_content.rstrip("\n") + "\n\n" + "\n".join(additions) + "\n"

    def apply(self, path, content, diagnostics, ctx):
        if not any(d.category in ("missing_default", "missing_symbol") for d in diagnostics):
            return content, False

        changed = False
        for m in IMPORT_FROM_RE.finditer(content):
            if m.group(0).lstrip().startswith("export"):
                continue
            specifier = m.group(2)
            if is_external(specifier):
                continue
            target = resolve(specifier, path, ctx)
            if target is None or target == normalize_path(path) or is_protected(target):
                continue

            default_name, named = _parse_clause(m.group(1))
            target_content = ctx.store.read(target)
            fixed = self._fix_target(target_content, default_name, named)
            if fixed != target_content:
                logger.info("%s: aligning exports of %s with its import in %s", self.name, target, path)
                ctx.write(target, fixed)
                changed = True
        return content, changed


# ------------------------------------------------------------------
# Path casing
# ------------------------------------------------------------------

def _specifier_tail(specifier):
    tail = specifier
    if tail.startswith(ALIAS_PREFIX):
        return tail[len(ALIAS_PREFIX):]
    while tail.startswith("./") or tail.startswith("../"):
        tail = tail[tail.index("/") + 1:]
    return tail


def _recased_specifier(specifier, source_file, actual, imported):
    """specifier rewritten to point at imported, or None if it does not point at actual."""
    if actual not in resolve_candidates(specifier, source_file):
        return None
    base = resolve_base(specifier, source_file)
    tail = _specifier_tail(specifier).rstrip("/")
    if not base.endswith(tail):
        return None
    # actual and imported differ only in case, so base spans the same characters in both
    new_tail = imported[len(base) - len(tail):len(base)]
    head = specifier.rstrip("/")[:len(specifier.rstrip("/")) - len(tail)]
    return head + new_tail


def _rewrite_specifiers(content, source_file, actual, imported):
    fixed = content
    for specifier in import_specifiers(content):
        if is_external(specifier):
            continue
        new = _recased_specifier(specifier, source_file, actual, imported)
        if new and new != specifier:
            for quote in ("'", '"'):
                fixed = fixed.replace(f"{quote}{specifier}{quote}", f"{quote}{new}{quote}")
    return fixed


class PathCasingFixer(Fixer):
    """Canonicalizes a file name to the casing its import sites use.

    The on-disk file is renamed through the guarded store and every source
    file still importing the old casing is rewritten, including the draft.
    """

    name = "path_casing"

    def apply(self, path, content, diagnostics, ctx):
        draft_path = normalize_path(path)
        fixed = content
        changed = False
        for actual, imported in casing_pairs(diagnostics):
            if actual == draft_path or is_protected(actual) or is_protected(imported):
                logger.warning("%s: cannot rename %s -> %s", self.name, actual, imported)
                continue
            directory = posixpath.dirname(actual)
            if actual not in ctx.store.list_files(directory + "/" if directory else ""):
                continue

            logger.info("%s: renaming %s -> %s", self.name, actual, imported)
            ctx.rename(actual, imported)
            changed = True

            for source in ctx.store.list_files(SOURCE_ROOT):
                if source == draft_path or source == imported or not source.endswith(SOURCE_EXTENSIONS):
                    continue
                if is_protected(source):
                    continue
                original = ctx.store.read(source)
                rewritten = _rewrite_specifiers(original, source, actual, imported)
                if rewritten != original:
                    ctx.write(source, rewritten)

            fixed = _rewrite_specifiers(fixed, draft_path, actual, imported)
        return fixed, changed or fixed != content


def default_fixers(catalog=None):
    """The deterministic chain, in application order."""
    return [
        NamingTypoFixer(),
        TagAttributeFixer(),
        NearestSymbolFixer(catalog=catalog),
        ExportShapeFixer(),
        PathCasingFixer(),
    ]
