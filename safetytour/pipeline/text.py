from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .backend import DocumentBackend, FontState


_CHUNKS = re.compile(r"(\s+)")
_NEWLINES = re.compile(r"\r\n|\r|\n")


class TextMeasurer:
    def __init__(self, backend: DocumentBackend) -> None:
        self.backend = backend

    def width(self, text: str, font: Optional[FontState] = None) -> float:
        return self.backend.string_width(text, font)


@dataclass(frozen=True)
class WrappedText:
    lines: Tuple[str, ...]

    @property
    def line_count(self) -> int:
        return len(self.lines)


class LineWrapper:
    """
    Greedy wrapper shared by row sizing and drawing.

    Text is split into whitespace-delimited chunks (delimiters kept as their
    own chunks) and chunks are packed while the line stays within
    ``max_width``. A chunk wider than the whole line starts a fresh line and
    is broken character by character, so the count never grows as the width
    grows. Hard newlines start a new paragraph.
    """

    def __init__(self, measurer: TextMeasurer) -> None:
        self.measurer = measurer

    def line_count(self, text: str, max_width: float, font: Optional[FontState] = None) -> int:
        return self.wrap(text, max_width, font).line_count

    def wrap(self, text: str, max_width: float, font: Optional[FontState] = None) -> WrappedText:
        max_w = max(1.0, float(max_width))
        lines: List[str] = []
        for paragraph in _NEWLINES.split(text or ""):
            lines.extend(self._wrap_paragraph(paragraph, max_w, font))
        return WrappedText(tuple(line.strip() for line in lines))

    def _wrap_paragraph(self, text: str, max_w: float, font: Optional[FontState]) -> List[str]:
        lines: List[str] = [""]
        line_w = 0.0
        for chunk in _CHUNKS.split(text):
            if not chunk:
                continue
            cw = self.measurer.width(chunk, font)
            if line_w + cw <= max_w:
                lines[-1] += chunk
                line_w += cw
            elif cw <= max_w:
                lines.append(chunk)
                line_w = cw
            else:
                if lines[-1]:
                    lines.append("")
                    line_w = 0.0
                for ch in chunk:
                    ch_w = self.measurer.width(ch, font)
                    # a character always stays on an empty line, however wide
                    if line_w + ch_w <= max_w or not lines[-1]:
                        lines[-1] += ch
                        line_w += ch_w
                    else:
                        lines.append(ch)
                        line_w = ch_w
        return lines
