"""Path conventions and repair pattern tables for generated TypeScript projects."""

import re

# Infrastructure files owned by the project template. Generated content may
# read them but never write, delete or rename them.
PROTECTED_FILES = [
    "src/main.tsx",
    "postcss.config.js",
    "vite.config.ts",
    "tsconfig.json",
    "tsconfig.app.json",
    "tsconfig.node.json",
    "package.json",
    "index.html",
]

MANIFEST_FILE = "package.json"

SOURCE_ROOT = "src/"
ALIAS_PREFIX = "@/"

# Shared utilities: files here become importable as "@/lib/<name>" once they exist
LIB_DIR = "src/lib/"
LIB_ALIAS_PREFIX = "@/lib/"

# Template reference components, never importable from generated code
FORBIDDEN_ALIAS_PREFIXES = ["@/components/lib"]

# Tried in order when resolving an aliased or relative specifier
CANDIDATE_EXTENSIONS = ["", ".tsx", ".ts", ".jsx", ".js"]

SOURCE_EXTENSIONS = (".tsx", ".ts", ".jsx", ".js", ".mjs", ".cjs")

# Literal attribute typos the generator is known to produce: (wrong, right)
NAMING_TYPOS = [
    ("classNameName", "className"),
    ("classname=", "className="),
    ("onclick=", "onClick="),
    ("onchange=", "onChange="),
    ("onsubmit=", "onSubmit="),
    ("htmlfor=", "htmlFor="),
    ("tabindex=", "tabIndex="),
]

# Attributes the generator emits on a tag that the runtime rejects
DISALLOWED_TAG_ATTRIBUTES = {
    "style": ["jsx", "global"],
}

# Matches one attribute (bare, ="..", ={..}) so it can be stripped from a tag
ATTRIBUTE_VALUE_RE = r"""(?:\s*=\s*(?:\{\s*(?:true|false)\s*\}|"[^"]*"|'[^']*'))?"""

IMPORT_FROM_RE = re.compile(
    r"""^\s*(?:import|export)\s+(?:type\s+)?([^'";]*?)\s*from\s*['"]([^'"\n]+)['"]""",
    re.MULTILINE,
)
SIDE_EFFECT_IMPORT_RE = re.compile(r"""^\s*import\s*['"]([^'"\n]+)['"]""", re.MULTILINE)
