"""Diagnostic parser: raw tsc output -> structured CompilationError records."""

import re

from core.guards import normalize_path
from core.state import CompilationError

CATEGORIES = (
    "missing_symbol", "missing_default", "unresolved_module", "casing",
    "unknown_name", "syntax", "import", "other",
)

# src/components/Header.tsx(12,5): error TS2305: Module '"lucide-react"' has no exported member 'Aray'.
_LOCATED_RE = re.compile(
    r"^(?P<file>[^\s(][^(\n]*?)\((?P<line>\d+),(?P<col>\d+)\):\s*error\s+(?P<code>TS\d+):\s*(?P<msg>.+)$",
    re.MULTILINE,
)
# error TS1149: File name '...' differs from already included file name '...' only in casing.
_BARE_RE = re.compile(r"^\s*error\s+(?P<code>TS\d+):\s*(?P<msg>.+)$", re.MULTILINE)

_MISSING_MEMBER_RE = re.compile(
    r"""(?:Module )?['"]+(?P<module>[^'"]+)['"]+ has no exported member(?: named)? ['"](?P<name>[\w$]+)['"]"""
    r"""(?:\.\s*Did you mean ['"](?P<suggestion>[\w$]+)['"])?"""
)
_CASING_1261_RE = re.compile(
    r"""Already included file name ['"](?P<imported>[^'"]+)['"] differs from file name ['"](?P<actual>[^'"]+)['"] only in casing"""
)
_CASING_1149_RE = re.compile(
    r"""File name ['"](?P<actual>[^'"]+)['"] differs from already included file name ['"](?P<imported>[^'"]+)['"] only in casing"""
)
_QUOTED_PATH_RE = re.compile(r"""['"]([^'"]+\.[jt]sx?)['"]""")

_CODE_CATEGORIES = {
    "TS2305": "missing_symbol",
    "TS2724": "missing_symbol",
    "TS2614": "missing_symbol",
    "TS1192": "missing_default",
    "TS2613": "missing_default",
    "TS2307": "unresolved_module",
    "TS1149": "casing",
    "TS1261": "casing",
    "TS2304": "unknown_name",
}


def categorize(code, message):
    if code in _CODE_CATEGORIES:
        return _CODE_CATEGORIES[code]
    if "only in casing" in message:
        return "casing"
    if "has no exported member" in message:
        return "missing_symbol"
    if code.startswith("TS1") and len(code) == 6:
        return "syntax"
    return "other"


def parse_diagnostics(raw):
    """Every error in raw compiler output, in output order."""
    errors = []
    for m in _LOCATED_RE.finditer(raw or ""):
        code, msg = m.group("code"), m.group("msg").strip()
        errors.append(CompilationError(
            file=normalize_path(m.group("file").strip()),
            message=msg,
            line=int(m.group("line")),
            column=int(m.group("col")),
            code=code,
            category=categorize(code, msg),
        ))
    for m in _BARE_RE.finditer(raw or ""):
        code, msg = m.group("code"), m.group("msg").strip()
        paths = _QUOTED_PATH_RE.findall(msg)
        errors.append(CompilationError(
            file=normalize_path(paths[0]) if paths else "",
            message=msg,
            code=code,
            category=categorize(code, msg),
        ))
    return errors


def dedupe(errors):
    """Keep the first error for every (line, message) pair."""
    seen = set()
    unique = []
    for e in errors:
        if e.key in seen:
            continue
        seen.add(e.key)
        unique.append(e)
    return unique


def errors_for_file(raw, file_path):
    """Errors that belong to file_path; diagnostics for other files are dropped.

    Casing diagnostics are attributed to whichever file reported them, so they
    are also kept when the message mentions file_path.
    """
    target = normalize_path(file_path)
    scoped = []
    for e in parse_diagnostics(raw):
        if e.file == target:
            scoped.append(CompilationError(
                file=target, message=e.message, line=e.line, column=e.column,
                code=e.code, category=e.category,
            ))
        elif e.category == "casing" and _mentions(e.message, target):
            scoped.append(CompilationError(
                file=target, message=e.message, line=e.line, column=e.column,
                code=e.code, category=e.category,
            ))
    return dedupe(scoped)


def _mentions(message, path):
    stem = path.rsplit(".", 1)[0].lower()
    return any(normalize_path(p).rsplit(".", 1)[0].lower() == stem
               for p in _QUOTED_PATH_RE.findall(message))


# ------------------------------------------------------------------
# Category-specific extraction
# ------------------------------------------------------------------

def missing_symbols(errors, module):
    """[(name, tsc_suggestion_or_None)] for symbols module does not export."""
    found = []
    for e in errors:
        if e.category != "missing_symbol":
            continue
        m = _MISSING_MEMBER_RE.search(e.message)
        if m and m.group("module") == module:
            item = (m.group("name"), m.group("suggestion"))
            if item not in found:
                found.append(item)
    return found


def casing_pairs(errors):
    """[(actual_path, imported_path)] from casing diagnostics, project-relative."""
    pairs = []
    for e in errors:
        if e.category != "casing":
            continue
        m = _CASING_1261_RE.search(e.message) or _CASING_1149_RE.search(e.message)
        if not m:
            continue
        pair = (normalize_path(m.group("actual")), normalize_path(m.group("imported")))
        if pair[0] != pair[1] and pair[0].lower() == pair[1].lower() and pair not in pairs:
            pairs.append(pair)
    return pairs


def summarize(errors):
    """One line per error, for prompts and logs."""
    lines = []
    for e in errors:
        code = f"[{e.code}] " if e.code else ""
        lines.append(f"Line {e.line or '?'}: {code}{e.message}")
    return "\n".join(lines)
