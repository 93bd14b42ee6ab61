"""Shared fixtures: an in-memory project tree and a run context over it."""

import json

import pytest

from core.file_store import MemoryFileStore
from core.guards import GuardedFileStore, parse_manifest
from core.imports import seed_registry
from core.state import RunContext

PACKAGE_JSON = json.dumps({
    "name": "app",
    "dependencies": {"react": "^18.2.0", "react-dom": "^18.2.0", "lucide-react": "^0.300.0"},
    "devDependencies": {"typescript": "^5.2.0", "@types/react": "^18.2.0"},
})

TEMPLATE_FILES = {
    "package.json": PACKAGE_JSON,
    "index.html": "<div id=\"root\"></div>",
    "tsconfig.json": "{}",
    "vite.config.ts": "export default {}",
    "src/main.tsx": "import App from './App'\n",
    "src/lib/utils.ts": "export function cn(...c: string[]) { return c.join(' ') }\n",
    "src/components/lib/Internal.tsx": "export default function Internal() { return null }\n",
}


@pytest.fixture
def store():
    return MemoryFileStore(TEMPLATE_FILES)


@pytest.fixture
def make_ctx():
    def _make(inner):
        ctx = RunContext(store=GuardedFileStore(inner))
        seed_registry(ctx)
        if inner.exists("package.json"):
            ctx.declared_dependencies = parse_manifest(inner.read("package.json"))
        return ctx
    return _make


@pytest.fixture
def ctx(store, make_ctx):
    return make_ctx(store)
