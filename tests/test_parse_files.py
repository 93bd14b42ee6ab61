"""Tests for utils.llm.parse_file_blocks / parse_single_file."""

from utils.llm import parse_file_blocks, parse_single_file


# --- Primary format: FILE: line followed by a fenced block ---

def test_file_line_then_fence():
    response = "FILE: src/App.tsx\n```tsx\nexport default function App() {}\n```"
    assert parse_file_blocks(response) == [("src/App.tsx", "export default function App() {}")]


def test_file_line_without_language_tag():
    response = "FILE: src/lib/math.ts\n```\nexport const add = (a: number, b: number) => a + b\n```"
    assert parse_file_blocks(response) == [
        ("src/lib/math.ts", "export const add = (a: number, b: number) => a + b")
    ]


def test_file_line_bold_and_backticks():
    response = "**FILE: `./src/App.tsx`**\n\n```tsx\nconst a = 1\n```"
    assert parse_file_blocks(response) == [("src/App.tsx", "const a = 1")]


def test_multiple_blocks_in_order():
    response = (
        "Here you go.\n\n"
        "FILE: src/components/Header.tsx\n```tsx\nexport default function Header() {}\n```\n\n"
        "FILE: package.json\n```json\n{\"dependencies\": {}}\n```\n"
    )
    paths = [p for p, _ in parse_file_blocks(response)]
    assert paths == ["src/components/Header.tsx", "package.json"]


def test_multiline_content_preserved():
    body = "import React from 'react'\n\nexport default function A() {\n  return <div />\n}"
    response = f"FILE: src/A.tsx\n```tsx\n{body}\n```"
    assert parse_file_blocks(response) == [("src/A.tsx", body)]


# --- Fallbacks ---

def test_language_colon_path_fence():
    response = "```tsx:src/components/Footer.tsx\nexport default function Footer() {}\n```"
    assert parse_file_blocks(response) == [
        ("src/components/Footer.tsx", "export default function Footer() {}")
    ]


def test_language_space_path_fence():
    response = "```typescript src/lib/format.ts\nexport const f = 1\n```"
    assert parse_file_blocks(response) == [("src/lib/format.ts", "export const f = 1")]


def test_untagged_fence_has_empty_path():
    response = "```tsx\nexport default function Card() { return null }\n```"
    assert parse_file_blocks(response) == [("", "export default function Card() { return null }")]


def test_tiny_untagged_fence_ignored():
    assert parse_file_blocks("```\nok\n```") == []


def test_no_fence():
    assert parse_file_blocks("I cannot help with that.") == []
    assert parse_file_blocks("") == []
    assert parse_file_blocks(None) == []


# --- parse_single_file ---

def test_single_file_matching_path():
    response = "FILE: src/App.tsx\n```tsx\nconst x = 1\n```"
    assert parse_single_file(response, "src/App.tsx") == "const x = 1"
    assert parse_single_file(response, "./src/App.tsx") == "const x = 1"


def test_single_file_other_path():
    response = "FILE: src/Other.tsx\n```tsx\nconst x = 1\n```"
    assert parse_single_file(response, "src/App.tsx") is None


def test_single_file_untagged_block():
    response = "```tsx\nexport const value = 42\n```"
    assert parse_single_file(response, "src/App.tsx") == "export const value = 42"
