"""Tests for core.repair.RepairPipeline."""

from unittest.mock import MagicMock

from agents.fixers import Fixer, NamingTypoFixer
from core.repair import RepairPipeline
from core.state import CompilationError

DIAG = [CompilationError(file="src/A.tsx", message="boom", line=1)]


class Replace(Fixer):
    def __init__(self, name, old, new):
        self.name = name
        self.old = old
        self.new = new

    def apply(self, path, content, diagnostics, ctx):
        fixed = content.replace(self.old, self.new)
        return fixed, fixed != content


def _fallback(result):
    fb = MagicMock()
    fb.name = "oracle"
    fb.apply.return_value = result
    return fb


def test_chain_runs_in_order_to_fixpoint():
    # b->c only becomes possible after a->b ran, so a second pass is needed
    fixers = [Replace("second", "b", "c"), Replace("first", "a", "b")]
    content, changed, applied = RepairPipeline(fixers, max_passes=3).run("src/A.tsx", "a", DIAG, None)
    assert content == "c"
    assert changed
    assert applied == ["first", "second"]


def test_max_passes_bounds_work():
    calls = []

    class Always(Fixer):
        name = "always"

        def apply(self, path, content, diagnostics, ctx):
            calls.append(1)
            return content + "!", True

    RepairPipeline([Always()], max_passes=2).run("src/A.tsx", "x", DIAG, None)
    assert len(calls) == 2


def test_fallback_only_when_nothing_changed():
    fallback = _fallback(("fixed by oracle", True))
    pipeline = RepairPipeline([NamingTypoFixer()], fallback=fallback)

    content, changed, applied = pipeline.run("src/A.tsx", '<a classname="x" />', DIAG, None)
    assert content == '<a className="x" />'
    assert applied == ["naming_typo"]
    fallback.apply.assert_not_called()

    content, changed, applied = pipeline.run("src/A.tsx", "clean", DIAG, None)
    assert content == "fixed by oracle"
    assert changed
    assert applied == ["oracle"]
    fallback.apply.assert_called_once()


def test_no_progress():
    fallback = _fallback(("clean", False))
    content, changed, applied = RepairPipeline([NamingTypoFixer()], fallback=fallback).run(
        "src/A.tsx", "clean", DIAG, None)
    assert (content, changed, applied) == ("clean", False, [])


def test_default_chain_order():
    names = [f.name for f in RepairPipeline().fixers]
    assert names == ["naming_typo", "tag_attribute", "nearest_symbol", "export_shape", "path_casing"]
