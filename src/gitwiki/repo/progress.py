"""Parse `git clone --progress` output.

git writes progress to stderr and redraws the current line with ``\\r``, so
a chunk read from the pipe may hold several updates or half of one.
``ProgressParser.feed`` buffers the trailing partial segment until its
terminator arrives.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Literal

# (message, percent or None)
ProgressCallback = Callable[[str, "int | None"], None]

PHASE_LABELS = {
    "receiving": "Receiving objects",
    "resolving": "Resolving deltas",
}

_RECEIVING_RE = re.compile(r"Receiving objects:\s*(\d+)%")
_RESOLVING_RE = re.compile(r"Resolving deltas:\s*(\d+)%")
_SEGMENT_SPLIT_RE = re.compile(r"[\r\n]")


@dataclass(frozen=True)
class ProgressEvent:
    phase: Literal["receiving", "resolving"]
    percent: int

    @property
    def message(self) -> str:
        return PHASE_LABELS[self.phase]


def parse_progress(segment: str) -> ProgressEvent | None:
    """Parse one progress line, or None if it carries no percentage."""
    match = _RECEIVING_RE.search(segment)
    if match:
        return ProgressEvent("receiving", int(match.group(1)))
    match = _RESOLVING_RE.search(segment)
    if match:
        return ProgressEvent("resolving", int(match.group(1)))
    return None


class ProgressParser:
    """Incremental parser that only reports changed percentages."""

    def __init__(self) -> None:
        self._buffer = ""
        self._last: ProgressEvent | None = None

    def feed(self, chunk: str) -> Iterator[ProgressEvent]:
        self._buffer += chunk
        *segments, self._buffer = _SEGMENT_SPLIT_RE.split(self._buffer)
        yield from self._consume(segments)

    def close(self) -> Iterator[ProgressEvent]:
        segments, self._buffer = [self._buffer], ""
        yield from self._consume(segments)

    def _consume(self, segments: list[str]) -> Iterator[ProgressEvent]:
        for segment in segments:
            segment = segment.strip()
            if not segment:
                continue
            event = parse_progress(segment)
            if event is None or event == self._last:
                continue
            self._last = event
            yield event
