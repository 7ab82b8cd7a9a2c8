"""Split Markdown source into prose and fenced-code runs."""

from __future__ import annotations

import re
from collections.abc import Iterator

_OPEN_RE = re.compile(r"^(`{3,}|~{3,})")


def _closes(line: str, fence: str) -> bool:
    # Same character, at least as long, nothing after it.
    stripped = line.rstrip()
    return stripped.startswith(fence) and not stripped.lstrip(fence[0])


def split_fenced(text: str) -> Iterator[tuple[str, bool]]:
    """Yield (chunk, is_code) runs covering text exactly.

    Delimiter lines belong to the code run. An unclosed fence runs to the
    end of the text.
    """
    current: list[str] = []
    fence: str | None = None
    for line in text.splitlines(keepends=True):
        if fence is None:
            match = _OPEN_RE.match(line)
            if match:
                if current:
                    yield "".join(current), False
                current = [line]
                fence = match.group(1)
                continue
        elif _closes(line, fence):
            current.append(line)
            yield "".join(current), True
            current = []
            fence = None
            continue
        current.append(line)
    if current:
        yield "".join(current), fence is not None


def prose_lines(text: str) -> Iterator[str]:
    """Lines of text that sit outside fenced code blocks."""
    for chunk, is_code in split_fenced(text):
        if not is_code:
            yield from chunk.splitlines()
