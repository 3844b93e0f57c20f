"""Decorative symbol removal for prose and for code/diagram blocks.

The symbol set is a declarative table of :class:`SymbolRule` entries. Each
rule lists code point ranges and/or literal characters plus the action taken
on a match. Two compiled patterns are derived from it at import time, one per
:class:`SanitizeMode`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum


class SanitizeMode(str, Enum):
    STRICT = "strict"
    DIAGRAM_SAFE = "diagram_safe"


class SymbolAction(str, Enum):
    DELETE = "delete"
    # Delete in strict mode, turn into a plain arrow in diagram-safe mode.
    ARROW = "arrow"


@dataclass(frozen=True)
class SymbolRule:
    name: str
    ranges: tuple[tuple[int, int], ...] = ()
    literals: str = ""
    action: SymbolAction = SymbolAction.DELETE


DECORATIVE_RULES: tuple[SymbolRule, ...] = (
    SymbolRule(
        "named glyphs",
        literals=(
            "⚠✅❌⭐🎯📊📝📌🔄💡🚀🎓📂📄🔍💾🖥⚡🔧📈📉🌐💻🔒🔓"
            "🔴🟢🟡🔵⚪⚫🟤🟠🟣✓✗★☆●○◆◇▶◀▲▼△▽□■◻◼☑☐🔹🔸▪▫"
        ),
    ),
    SymbolRule("decorated arrows", literals="⬆⬇➡⬅↔↕", action=SymbolAction.ARROW),
    SymbolRule("variation selectors", ranges=((0xFE0E, 0xFE0F),)),
    SymbolRule("pictographs", ranges=((0x1F300, 0x1F9FF),)),
    SymbolRule("emoticons", ranges=((0x1F600, 0x1F64F),)),
    SymbolRule("transport symbols", ranges=((0x1F680, 0x1F6FF),)),
    SymbolRule("flags", ranges=((0x1F1E0, 0x1F1FF),)),
    SymbolRule("misc symbols", ranges=((0x2600, 0x26FF),)),
    SymbolRule("dingbats", ranges=((0x2700, 0x27BF),)),
)

ARROW_LOOKUP: dict[str, str] = {
    "⬆": "↑",
    "⬇": "↓",
    "➡": "→",
    "⬅": "←",
}

_WHITESPACE_RE = re.compile(r"\s+")


def _char_class(rules: tuple[SymbolRule, ...]) -> re.Pattern[str]:
    parts: list[str] = []
    for rule in rules:
        for lo, hi in rule.ranges:
            parts.append(f"{re.escape(chr(lo))}-{re.escape(chr(hi))}")
        parts.extend(re.escape(ch) for ch in rule.literals)
    return re.compile("[" + "".join(parts) + "]")


_STRICT_RE = _char_class(DECORATIVE_RULES)
_DIAGRAM_DELETE_RE = _char_class(
    tuple(rule for rule in DECORATIVE_RULES if rule.action is SymbolAction.DELETE)
)
_ARROW_RE = _char_class(
    tuple(rule for rule in DECORATIVE_RULES if rule.action is SymbolAction.ARROW)
)


def _plain_arrow(match: re.Match[str]) -> str:
    return ARROW_LOOKUP.get(match.group(0), "")


def remove_decorative(text: str, mode: SanitizeMode = SanitizeMode.STRICT) -> str:
    if not text:
        return ""
    if mode is SanitizeMode.DIAGRAM_SAFE:
        # Arrows first: ➡ sits inside the dingbats range.
        text = _ARROW_RE.sub(_plain_arrow, text)
        return _DIAGRAM_DELETE_RE.sub("", text)
    text = _STRICT_RE.sub("", text)
    return _WHITESPACE_RE.sub(" ", text).strip()


def strip_decorative(text: str) -> str:
    return remove_decorative(text, SanitizeMode.STRICT)


def strip_decorative_keep_diagram(text: str) -> str:
    return remove_decorative(text, SanitizeMode.DIAGRAM_SAFE)
