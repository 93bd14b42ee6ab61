"""Tests for core.diagnostics: tsc output parsing and scoping."""

from core.diagnostics import (
    categorize, parse_diagnostics, dedupe, errors_for_file, missing_symbols,
    casing_pairs, summarize,
)
from core.state import CompilationError

RAW = """\
src/components/Badge.tsx(1,10): error TS2305: Module '"lucide-react"' has no exported member 'Aray'.
src/components/Badge.tsx(7,14): error TS2304: Cannot find name 'Aray'.
src/components/Badge.tsx(7,14): error TS2304: Cannot find name 'Aray'.
src/App.tsx(3,8): error TS1192: Module '"/app/src/components/Button"' has no default export.
src/App.tsx(12,1): error TS1005: ';' expected.
src/pages/Home.tsx(2,20): error TS2307: Cannot find module './Missing' or its corresponding type declarations.
"""


def test_parse_located_errors():
    errors = parse_diagnostics(RAW)
    assert len(errors) == 6
    first = errors[0]
    assert first.file == "src/components/Badge.tsx"
    assert (first.line, first.column) == (1, 10)
    assert first.code == "TS2305"
    assert first.category == "missing_symbol"


def test_categories():
    cats = [e.category for e in parse_diagnostics(RAW)]
    assert cats == [
        "missing_symbol", "unknown_name", "unknown_name", "missing_default",
        "syntax", "unresolved_module",
    ]


def test_categorize_fallbacks():
    assert categorize("TS2724", "x") == "missing_symbol"
    assert categorize("TS9999", "differs only in casing") == "casing"
    assert categorize("TS1128", "Declaration or statement expected.") == "syntax"
    assert categorize("TS2322", "Type 'string' is not assignable") == "other"


def test_empty_output():
    assert parse_diagnostics("") == []
    assert parse_diagnostics(None) == []
    assert errors_for_file("", "src/App.tsx") == []


def test_scoped_to_file_and_deduped():
    errors = errors_for_file(RAW, "src/components/Badge.tsx")
    assert [e.code for e in errors] == ["TS2305", "TS2304"]
    assert all(e.file == "src/components/Badge.tsx" for e in errors)


def test_other_files_ignored():
    errors = errors_for_file(RAW, "src/App.tsx")
    assert {e.code for e in errors} == {"TS1192", "TS1005"}
    assert errors_for_file(RAW, "src/components/Header.tsx") == []


def test_scoping_accepts_prefixed_paths():
    raw = "./src/App.tsx(1,1): error TS2304: Cannot find name 'x'.\n"
    assert len(errors_for_file(raw, "/workspace/src/App.tsx")) == 1


def test_dedupe_keeps_first():
    a = CompilationError(file="f", message="m", line=1, code="TS1")
    b = CompilationError(file="f", message="m", line=1, code="TS2")
    c = CompilationError(file="f", message="m", line=2)
    assert dedupe([a, b, c]) == [a, c]


def test_missing_symbols_filters_by_module():
    raw = ("src/A.tsx(1,10): error TS2724: '\"lucide-react\"' has no exported member named 'Githb'. "
           "Did you mean 'Github'?\n"
           "src/A.tsx(1,17): error TS2305: Module '\"lucide-react\"' has no exported member 'Aray'.\n"
           "src/A.tsx(2,10): error TS2305: Module '\"./Other\"' has no exported member 'Thing'.\n")
    errors = errors_for_file(raw, "src/A.tsx")
    assert missing_symbols(errors, "lucide-react") == [("Githb", "Github"), ("Aray", None)]


def test_missing_symbols_did_you_mean():
    raw = ("src/A.tsx(1,10): error TS2724: Module '\"lucide-react\"' has no exported member named "
           "'Githb'. Did you mean 'Github'?\n")
    errors = errors_for_file(raw, "src/A.tsx")
    assert missing_symbols(errors, "lucide-react") == [("Githb", "Github")]


class TestCasing:

    RAW_1149 = ("error TS1149: File name 'src/components/header.tsx' differs from already "
                "included file name 'src/components/Header.tsx' only in casing.\n")
    RAW_1261 = ("src/App.tsx(2,20): error TS1261: Already included file name "
                "'src/components/Header.tsx' differs from file name 'src/components/header.tsx' "
                "only in casing.\n")

    def test_bare_error_attributed_to_mentioned_path(self):
        errors = parse_diagnostics(self.RAW_1149)
        assert errors[0].file == "src/components/header.tsx"
        assert errors[0].category == "casing"
        assert errors[0].line is None

    def test_casing_pairs_1149(self):
        errors = parse_diagnostics(self.RAW_1149)
        assert casing_pairs(errors) == [("src/components/header.tsx", "src/components/Header.tsx")]

    def test_casing_pairs_1261(self):
        errors = parse_diagnostics(self.RAW_1261)
        assert casing_pairs(errors) == [("src/components/header.tsx", "src/components/Header.tsx")]

    def test_casing_error_kept_for_mentioned_file(self):
        errors = errors_for_file(self.RAW_1261, "src/components/Header.tsx")
        assert len(errors) == 1
        assert errors[0].category == "casing"


def test_summarize():
    errors = errors_for_file(RAW, "src/App.tsx")
    text = summarize(errors)
    assert "Line 3: [TS1192]" in text
    assert "Line 12: [TS1005] ';' expected." in text
    assert summarize([CompilationError(file="f", message="bad import", category="import")]) == \
        "Line ?: bad import"
