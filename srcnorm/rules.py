"""
Deterministic source rewriting rules.

This file exists to make the rule table explicit and fixed: it is built once
at import time and is not user-configurable.
"""

from __future__ import annotations

import re
from typing import NamedTuple, Pattern, Tuple


class Rule(NamedTuple):
    pattern: Pattern[str]
    replacement: str

    def apply(self, line: str) -> str:
        return self.pattern.sub(self.replacement, line)


def _rule(pattern: str, replacement: str) -> Rule:
    return Rule(re.compile(pattern), replacement)


# Applied in order to a line with its terminator removed.
RULES: Tuple[Rule, ...] = (
    # stray carriage returns left by mixed line endings
    _rule(r"\r+$", ""),
    # keyword glued to its condition: if(x) -> if (x)
    _rule(r"\b(if|for|while|switch|catch)\(", r"\1 ("),
    # ){ -> ) {
    _rule(r"\)\{", ") {"),
    _rule(r"\}else\b", "} else"),
    _rule(r"\belse\{", "else {"),
    # trailing horizontal whitespace
    _rule(r"[ \t\f\v]+$", ""),
)

DEFAULT_TAB_WIDTH = 4

SOURCE_EXTENSIONS = frozenset({"h", "cpp", "c", "m", "mm"})

BACKUP_SUFFIX = ".bak"

BEGIN_MARKER = "==> begin {path} <=="
END_MARKER = "==> end {path} <=="
