from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Union

from .backend import RGB, DocumentBackend, FontState
from .page import PageState
from .status import Priority, ResultStatus
from .text import LineWrapper, WrappedText


GREEN: RGB = (34, 197, 94)
RED: RGB = (239, 68, 68)
AMBER: RGB = (245, 158, 11)
GREY: RGB = (100, 116, 139)
WHITE: RGB = (255, 255, 255)

RESULT_COLOURS: Dict[ResultStatus, RGB] = {
    ResultStatus.PASS: GREEN,
    ResultStatus.FAIL: RED,
    ResultStatus.IMPROVEMENT: AMBER,
    ResultStatus.NA: GREY,
    ResultStatus.UNKNOWN: GREY,
}

PRIORITY_COLOURS: Dict[Priority, RGB] = {
    Priority.LOW: GREEN,
    Priority.MEDIUM: AMBER,
    Priority.HIGH: RED,
    Priority.UNKNOWN: GREY,
}

BadgeValue = Union[ResultStatus, Priority]


def badge_color(value: BadgeValue) -> RGB:
    if isinstance(value, ResultStatus):
        return RESULT_COLOURS[value]
    if isinstance(value, Priority):
        return PRIORITY_COLOURS[value]
    return GREY


@dataclass(frozen=True)
class Badge:
    label: str
    value: BadgeValue

    @property
    def color(self) -> RGB:
        return badge_color(self.value)


@dataclass(frozen=True)
class ColumnSpec:
    width: float
    text: str = ""
    align: str = "L"
    badge: Optional[Badge] = None
    fill: Optional[RGB] = None


class BadgeRenderer:
    def __init__(
        self,
        backend: DocumentBackend,
        state: PageState,
        font: FontState,
        text_color: RGB,
        label_color: RGB = WHITE,
    ) -> None:
        self.backend = backend
        self.state = state
        self.font = font
        self.text_color = text_color
        self.label_color = label_color

    def draw_badge(self, text: str, value: BadgeValue, width: float, height: float) -> None:
        """Filled pill at the cursor; the label is centred and never truncated."""
        x, y = self.state.x, self.state.y
        previous = self.backend.font
        self.backend.set_fill_color(badge_color(value))
        self.backend.rect(x, y, width, height, stroke=False, fill=True)
        self.backend.set_font(self.font.family, self.font.size, bold=self.font.bold)
        self.backend.set_text_color(self.label_color)
        self.backend.text_lines(x, y, width, [text], height, align="C", padding=0.0)
        self.backend.set_text_color(self.text_color)
        self.backend.set_font(previous.family, previous.size, bold=previous.bold)
        self.state.x = x + width


class RowComposer:
    """Draws one bordered row; its height follows the column needing the most lines."""

    def __init__(
        self,
        backend: DocumentBackend,
        state: PageState,
        wrapper: LineWrapper,
        badges: BadgeRenderer,
        cell_padding: float = 1.0,
        badge_height: float = 6.0,
    ) -> None:
        self.backend = backend
        self.state = state
        self.wrapper = wrapper
        self.badges = badges
        self.cell_padding = cell_padding
        self.badge_height = badge_height

    def wrap_columns(self, columns: Sequence[ColumnSpec]) -> List[Optional[WrappedText]]:
        return [
            None if col.badge else self.wrapper.wrap(col.text, col.width - 2 * self.cell_padding)
            for col in columns
        ]

    def row_height(self, columns: Sequence[ColumnSpec], line_height: float) -> float:
        return self._height(self.wrap_columns(columns), line_height)

    @staticmethod
    def _height(wrapped: Sequence[Optional[WrappedText]], line_height: float) -> float:
        counts = [w.line_count for w in wrapped if w is not None]
        return line_height * max([1] + counts)

    def draw_row(self, columns: Sequence[ColumnSpec], line_height: float = 6.0) -> float:
        wrapped = self.wrap_columns(columns)
        row_h = self._height(wrapped, line_height)
        x0, y0 = self.state.x, self.state.y
        x = x0
        for col, lines in zip(columns, wrapped):
            if col.fill is not None:
                self.backend.set_fill_color(col.fill)
            self.backend.rect(x, y0, col.width, row_h, stroke=True, fill=col.fill is not None)
            if col.badge is not None:
                self.state.x = x + self.cell_padding
                self.state.y = y0 + self.cell_padding
                self.badges.draw_badge(
                    col.badge.label,
                    col.badge.value,
                    col.width - 2 * self.cell_padding,
                    self.badge_height,
                )
            elif lines is not None:
                self.backend.text_lines(x, y0, col.width, lines.lines, line_height, col.align, self.cell_padding)
            x += col.width
        self.state.x = x0
        self.state.y = y0 + row_h
        return row_h
