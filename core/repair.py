"""Repair pipeline: deterministic fixers to a fixpoint, then the oracle fallback."""

import logging

from agents.fixers import default_fixers

logger = logging.getLogger(__name__)


class RepairPipeline:
    """Composes fixers in a fixed order.

    The deterministic chain is re-run while any fixer still changes the
    content, up to max_passes. The fallback (oracle) fixer runs only when no
    deterministic fixer changed anything.
    """

    def __init__(self, fixers=None, fallback=None, max_passes=3):
        self.fixers = list(default_fixers() if fixers is None else fixers)
        self.fallback = fallback
        self.max_passes = max_passes

    def run(self, path, content, diagnostics, ctx):
        """Returns (content, changed, names of fixers that made a change)."""
        applied = []
        for _ in range(self.max_passes):
            progressed = False
            for fixer in self.fixers:
                content, changed = fixer.apply(path, content, diagnostics, ctx)
                if changed:
                    progressed = True
                    if fixer.name not in applied:
                        applied.append(fixer.name)
            if not progressed:
                break

        if not applied and self.fallback is not None:
            content, changed = self.fallback.apply(path, content, diagnostics, ctx)
            if changed:
                applied.append(self.fallback.name)

        if applied:
            logger.info("%s: applied %s", path, ", ".join(applied))
        else:
            logger.info("%s: no repair strategy made progress", path)
        return content, bool(applied), applied
