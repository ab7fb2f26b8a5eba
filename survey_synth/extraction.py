"""Extract and repair JSON payloads from free-form model output.

Two phases: a brace-balanced extractor, then, only when the extracted block
fails a strict ``json.loads``, a fixed list of conservative text rewrites
applied in order before parsing again. Well-formed payloads never reach the
rewrites.
"""

import json
import logging
import re
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)

_CLOSERS = {"{": "}", "[": "]"}
_FENCE_JSON = re.compile(r"```json(.*?)```", re.IGNORECASE | re.DOTALL)
_FENCE_ANY = re.compile(r"```(.*?)```", re.DOTALL)
_FENCE_MARKERS = re.compile(r"```json|```", re.IGNORECASE)

_SMART_DOUBLE = re.compile("[\u201C\u201D\u201E\u201F\u2033\u2036]")
_SMART_SINGLE = re.compile("[\u2018\u2019\u2032\u2035]")
_SINGLE_QUOTED_KEY = re.compile(r"([{,]\s*)'([^'\n\r]+?)'\s*:")
_SINGLE_QUOTED_VALUE = re.compile(r":\s*'([^'\n\r]*?)'")
_BARE_KEY = re.compile(r"(\s*)([A-Za-z_][A-Za-z0-9_]*)\s*:")
_TRAILING_COMMA = re.compile(r",(\s*[}\]])")
_BACKTICK_STRING = re.compile(r"`([^`\n\r]*?)`")

PREVIEW_CHARS = 400


class MalformedOutputError(ValueError):
    """Raised when model output cannot be parsed even after repair."""


def _matching_close(text: str, start: int) -> int:
    """Index of the closer matching the opener at ``start``, or -1.

    Tracks double-quoted strings and backslash escapes so brackets inside
    string values are ignored.
    """
    opener = text[start]
    closer = _CLOSERS[opener]
    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if escaped:
            escaped = False
            continue
        if ch == "\\":
            escaped = True
            continue
        if ch == '"':
            in_string = not in_string
            continue
        if in_string:
            continue
        if ch == opener:
            depth += 1
        elif ch == closer:
            depth -= 1
            if depth == 0:
                return i
    return -1


def extract_json_block(text: str, opener: str = "{") -> str:
    """Pull the most plausible JSON payload out of raw model text.

    A fenced code block wins. Otherwise the first ``opener`` and its
    balanced closer are returned; an unbalanced tail is returned as-is for
    the repair pass to close. Text without any opener comes back trimmed.
    """
    if not text:
        return "{}" if opener == "{" else "[]"

    fence = _FENCE_JSON.search(text) or _FENCE_ANY.search(text)
    if fence:
        return fence.group(1).strip()

    start = text.find(opener)
    if start == -1:
        return text.strip()
    end = _matching_close(text, start)
    if end == -1:
        return text[start:].strip()
    return text[start:end + 1].strip()


def strip_noise(text: str) -> str:
    """Drop a leading BOM and any stray code-fence markers."""
    return _FENCE_MARKERS.sub("", text.lstrip("\ufeff")).strip()


def normalize_smart_quotes(text: str) -> str:
    return _SMART_SINGLE.sub("'", _SMART_DOUBLE.sub('"', text))


def quote_single_quoted_keys(text: str) -> str:
    return _SINGLE_QUOTED_KEY.sub(r'\1"\2":', text)


def quote_single_quoted_values(text: str) -> str:
    return _SINGLE_QUOTED_VALUE.sub(r': "\1"', text)


def quote_bare_keys(text: str) -> str:
    """Quote identifier keys such as ``{score: 75}``, skipping string contents."""
    out: list[str] = []
    in_string = False
    escaped = False
    i = 0
    while i < len(text):
        ch = text[i]
        out.append(ch)
        i += 1
        if escaped:
            escaped = False
            continue
        if ch == "\\":
            escaped = True
            continue
        if ch == '"':
            in_string = not in_string
            continue
        if in_string or ch not in "{,":
            continue
        match = _BARE_KEY.match(text, i)
        if match:
            out.append(f'{match.group(1)}"{match.group(2)}":')
            i = match.end()
    return "".join(out)


def strip_trailing_commas(text: str) -> str:
    return _TRAILING_COMMA.sub(r"\1", text)


def quote_backtick_strings(text: str) -> str:
    return _BACKTICK_STRING.sub(r'"\1"', text)


def truncate_trailing_garbage(text: str, opener: str = "{") -> str:
    """Cut anything before the first opener and after its matching closer."""
    start = text.find(opener)
    if start == -1:
        return text
    end = _matching_close(text, start)
    if end == -1:
        return text[start:]
    return text[start:end + 1]


def auto_balance(text: str) -> str:
    """Close a dangling string, then every unclosed bracket in LIFO order."""
    stack: list[str] = []
    in_string = False
    escaped = False
    for ch in text:
        if escaped:
            escaped = False
            continue
        if ch == "\\":
            escaped = True
            continue
        if ch == '"':
            in_string = not in_string
            continue
        if in_string:
            continue
        if ch in _CLOSERS:
            stack.append(ch)
        elif ch in ("}", "]") and stack and _CLOSERS[stack[-1]] == ch:
            stack.pop()

    if in_string:
        text += '"'
    while stack:
        text += _CLOSERS[stack.pop()]
    return text


REPAIR_RULES: list[Callable[[str], str]] = [
    strip_noise,
    normalize_smart_quotes,
    quote_single_quoted_keys,
    quote_single_quoted_values,
    quote_bare_keys,
    strip_trailing_commas,
    quote_backtick_strings,
]


def repair_json(raw: str, opener: str = "{") -> str:
    """Apply the repair rules in order, then truncate and auto-balance."""
    if not raw:
        return "{}" if opener == "{" else "[]"
    text = raw
    for rule in REPAIR_RULES:
        text = rule(text)
    text = truncate_trailing_garbage(text, opener)
    return auto_balance(text)


def preview(text: str | None, limit: int = PREVIEW_CHARS) -> str:
    """Single-line, truncated view of model output for log messages."""
    return re.sub(r"[\r\n\t]+", " ", (text or "")[:limit])


def parse_model_json(text: str, opener: str = "{") -> Any:
    """Extract and strictly parse a JSON payload, repairing it only if needed.

    A block that already parses is returned as-is, so the repair rules never
    touch string contents of well-formed output.

    Raises:
        MalformedOutputError: If the repaired text is still not valid JSON.
    """
    block = extract_json_block(text, opener)
    try:
        return json.loads(block)
    except json.JSONDecodeError:
        logger.debug("Extracted block is not strict JSON, applying repair rules")
    repaired = repair_json(block, opener)
    try:
        return json.loads(repaired)
    except json.JSONDecodeError as exc:
        raise MalformedOutputError(f"Unparseable model output: {exc}") from exc
