from __future__ import annotations

import re

from markdoc_ops.models import TextRun

INLINE_CODE_SHADING = "e8e8e8"
_SPAN_RE = re.compile(r"\*\*[^*]+\*\*|`[^`]+`")


def tokenize(line: str) -> list[TextRun]:
    """Split an already sanitized line into plain, bold and code runs.

    Spans need both markers on the same line; a lone ``**`` or backtick is
    kept as literal text. The result is never empty.
    """
    runs: list[TextRun] = []
    last = 0
    for match in _SPAN_RE.finditer(line):
        if match.start() > last:
            runs.append(TextRun(text=line[last : match.start()]))
        matched = match.group(0)
        if matched.startswith("**"):
            runs.append(TextRun(text=matched[2:-2], bold=True))
        else:
            runs.append(
                TextRun(text=matched[1:-1], monospace=True, shading=INLINE_CODE_SHADING)
            )
        last = match.end()

    if last < len(line):
        runs.append(TextRun(text=line[last:]))
    if not runs:
        runs.append(TextRun(text=line))
    return runs
