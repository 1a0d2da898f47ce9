"""
Core line transformation logic lives here.

Responsibilities:
- text detection + decoding
- rule table application, one line at a time
- tab expansion / unexpansion at a fixed tab width
- trailing whitespace and line terminator normalization
"""

from __future__ import annotations

import base64
import hashlib
import io
from typing import Any, Dict, Iterable, Iterator, Optional, Tuple

from charset_normalizer import from_bytes

from .models import DecodedSource, TransformOptions, TransformStats
from .rules import RULES


_TERMINATORS = ("\r\n", "\n", "\r")
_UTF8_BOM = b"\xef\xbb\xbf"


def _sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def _strip_terminator(line: str) -> str:
    for term in _TERMINATORS:
        if line.endswith(term):
            return line[: -len(term)]
    return line


def expand_tabs(line: str, tab_width: int) -> str:
    """Replace every tab with spaces up to the next multiple of ``tab_width``."""
    return line.expandtabs(tab_width)


def unexpand_tabs(line: str, tab_width: int) -> str:
    """
    Replace every run of blanks that ends on a tab stop with a tab.

    The line is expanded first and then cut into ``tab_width`` columns; a
    full column ending in spaces loses them to a single tab. The trailing
    partial column is kept as is, so the visual layout never changes.
    """
    expanded = line.expandtabs(tab_width)
    out = []

    for start in range(0, len(expanded), tab_width):
        column = expanded[start:start + tab_width]
        if len(column) == tab_width and column.endswith(" "):
            column = column.rstrip(" ") + "\t"
        out.append(column)

    return "".join(out)


def transform_line(line: str, options: TransformOptions) -> str:
    """
    Transform a single line.

    The result always ends with exactly one ``\\n`` and never carries
    trailing whitespace, so a whitespace-only line becomes ``"\\n"``.
    """
    text = _strip_terminator(line)

    for rule in RULES:
        text = rule.apply(text)

    mode = options.whitespace_mode
    if mode == "expand":
        text = expand_tabs(text, options.tab_width)
    elif mode == "unexpand":
        text = unexpand_tabs(text, options.tab_width)

    return text.rstrip() + "\n"


def transform_lines(lines: Iterable[str], options: TransformOptions) -> Iterator[str]:
    for line in lines:
        yield transform_line(line, options)


def iter_lines(text: str) -> Iterator[str]:
    # newline="" keeps \r\n and \r endings intact so they are counted as changes
    return iter(io.StringIO(text, newline=""))


def transform_text(text: str, options: TransformOptions) -> Tuple[str, TransformStats]:
    stats = TransformStats()
    out = io.StringIO(newline="")
    lines = list(iter_lines(text))

    for line, new_line in zip(lines, transform_lines(lines, options)):
        stats.lines += 1
        if new_line != line:
            stats.lines_changed += 1
        out.write(new_line)

    return out.getvalue(), stats


def decode_source(raw: bytes) -> Optional[DecodedSource]:
    """
    Decode raw file content, or return None when it looks binary.

    Rules:
    - Any NUL byte marks the content as binary.
    - Strict UTF-8 is tried first; a leading BOM selects utf-8-sig so it survives the rewrite.
    - Otherwise charset-normalizer picks the best guess; no guess means binary.
    """
    if b"\x00" in raw:
        return None

    try:
        if raw.startswith(_UTF8_BOM):
            return DecodedSource(text=raw.decode("utf-8-sig"), encoding="utf-8-sig")
        return DecodedSource(text=raw.decode("utf-8"), encoding="utf-8")
    except UnicodeDecodeError:
        pass

    match = from_bytes(raw).best()
    if match is None:
        return None

    try:
        return DecodedSource(text=raw.decode(match.encoding), encoding=match.encoding)
    except (UnicodeDecodeError, LookupError):
        return None


def encode_source(text: str, encoding: str) -> bytes:
    return text.encode(encoding)


def transform_source_bytes(raw: bytes, options: TransformOptions) -> Optional[Dict[str, Any]]:
    """
    Transform an uploaded source file.
    Returns a dict matching the API's response envelope, or None for binary content.
    """
    source = decode_source(raw)
    if source is None:
        return None

    text, stats = transform_text(source.text, options)
    transformed = encode_source(text, source.encoding)

    b64 = base64.b64encode(transformed).decode("ascii")
    return {
        "transformed_source": {
            "sha256": _sha256_hex(transformed),
            "encoding": source.encoding,
            "content_b64": b64,
        },
        "report": {
            "lines": stats.lines,
            "lines_changed": stats.lines_changed,
            "changed": transformed != raw,
            "mode": options.whitespace_mode,
            "tab_width": options.tab_width,
        },
    }
