"""Claude API client (Generation Oracle) and response parsing."""

import logging
import os
import re

import anthropic

from config.defaults import DEFAULTS

logger = logging.getLogger(__name__)

MODEL = DEFAULTS["model"]
MAX_TOKENS = DEFAULTS["max_tokens"]

# Upstream statuses that mean "try again later": 429 rate limit, 5xx, 529 overloaded
_RETRYABLE_STATUS = {408, 409, 429, 500, 502, 503, 504, 529}
_RETRYABLE_MARKERS = ("overloaded", "rate limit", "unavailable", "503", "429")


class OracleError(Exception):
    """The generation oracle failed in a way that retrying will not fix."""


class RetryableOracleError(OracleError):
    """Transient upstream failure (rate limit, overload, connection drop)."""


def get_client():
    """Return an Anthropic client. Raises if no API key is set."""
    api_key = os.environ.get("ANTHROPIC_API_KEY")
    if not api_key:
        raise RuntimeError(
            "ANTHROPIC_API_KEY environment variable is not set. "
            "Get a key at https://console.anthropic.com/ and run:\n"
            "  export ANTHROPIC_API_KEY='your-key-here'"
        )
    return anthropic.Anthropic(api_key=api_key)


def _classify_error(error):
    """Map an SDK exception onto the oracle error taxonomy."""
    if isinstance(error, (anthropic.RateLimitError, anthropic.APIConnectionError)):
        return RetryableOracleError(str(error))
    if isinstance(error, anthropic.APIStatusError):
        if error.status_code in _RETRYABLE_STATUS or error.status_code >= 500:
            return RetryableOracleError(f"{error.status_code}: {error}")
        return OracleError(f"{error.status_code}: {error}")
    message = str(error)
    if any(marker in message.lower() for marker in _RETRYABLE_MARKERS):
        return RetryableOracleError(message)
    return OracleError(message)


def call_llm(system_prompt, user_message, temperature=None, client=None):
    """Stream one completion from Claude and return its text.

    Args:
        system_prompt: System prompt string.
        user_message: User message string.
        temperature: Sampling temperature (default from config).
        client: Optional pre-built client, mainly for tests.

    Raises:
        RetryableOracleError: Rate limit, overload, 5xx or connection failure.
        OracleError: Any other API failure.
    """
    client = client or get_client()
    if temperature is None:
        temperature = DEFAULTS["temperature"]

    try:
        # Use streaming to avoid SDK timeout for large max_tokens
        text = ""
        with client.messages.stream(
            model=MODEL,
            max_tokens=MAX_TOKENS,
            temperature=temperature,
            system=system_prompt,
            messages=[{"role": "user", "content": user_message}],
        ) as stream:
            for chunk in stream.text_stream:
                text += chunk
            stop_reason = stream.get_final_message().stop_reason
    except anthropic.APIError as e:
        raise _classify_error(e) from e

    if stop_reason == "max_tokens":
        logger.warning("Oracle response hit the token limit; the file may be truncated")
    return text


# ------------------------------------------------------------------
# Response parsing
# ------------------------------------------------------------------

# FILE: src/components/Header.tsx
# ```tsx
# ...
# ```
_FILE_BLOCK_RE = re.compile(
    r"^[ \t]*(?:\*\*)?FILE:[ \t]*`?(?P<path>[^\s`*]+)`?(?:\*\*)?[ \t]*\n+"
    r"```[\w+-]*[ \t]*\n(?P<content>.*?)\n?```",
    re.MULTILINE | re.DOTALL,
)
# ```tsx:src/components/Header.tsx  or  ```typescript src/App.tsx
_TAGGED_FENCE_RE = re.compile(
    r"```[\w+-]*[: \t][ \t]*(?P<path>[\w@./-]+\.\w+)[ \t]*\n(?P<content>.*?)\n?```",
    re.DOTALL,
)
_ANY_FENCE_RE = re.compile(r"```[\w+-]*[ \t]*\n(?P<content>.*?)\n?```", re.DOTALL)


def _clean_path(path):
    path = path.strip().strip("`'\"")
    while path.startswith("./"):
        path = path[2:]
    return path.lstrip("/")


def parse_file_blocks(raw):
    """Extract (path, content) pairs from an oracle response.

    The expected format is a ``FILE: <path>`` line followed by a fenced
    block. Fences that carry the path in their info string are accepted as
    a fallback, and a single untagged fence is returned with an empty path
    so the caller can re-target it.
    """
    raw = raw or ""
    files = [(_clean_path(m.group("path")), m.group("content"))
             for m in _FILE_BLOCK_RE.finditer(raw)]
    if files:
        return files

    files = [(_clean_path(m.group("path")), m.group("content"))
             for m in _TAGGED_FENCE_RE.finditer(raw)]
    if files:
        return files

    for m in _ANY_FENCE_RE.finditer(raw):
        content = m.group("content")
        if len(content.strip()) > 10:
            return [("", content)]
    return []


def parse_single_file(raw, expected_path):
    """Content of the block for expected_path, or None.

    A lone untagged block is taken as the expected file.
    """
    expected = _clean_path(expected_path)
    blocks = parse_file_blocks(raw)
    for path, content in blocks:
        if path == expected:
            return content
    if len(blocks) == 1 and blocks[0][0] == "":
        return blocks[0][1]
    return None
