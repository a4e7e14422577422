from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional
from zoneinfo import ZoneInfo

from .. import config
from ..config import BOTTOM_MARGIN, PAGE_MARGIN, REPORT_TITLE, load_style_preset
from .backend import RGB, DocumentBackend, FontState, ReportLabBackend
from .images import ImageGridPlacer
from .page import PageFlowController, PageState
from .records import ImageRef, QuestionRecord, TourRecord
from .rows import WHITE, Badge, BadgeRenderer, ColumnSpec, RowComposer
from .scoring import format_score
from .text import LineWrapper, TextMeasurer


logger = logging.getLogger(__name__)

QUESTION_HEADERS = ["Ref", "Question", "Result", "Priority", "Notes"]
QUESTION_WIDTHS = [18.0, 90.0, 24.0, 24.0, 34.0]
TABLE_WIDTH = sum(QUESTION_WIDTHS)
DETAIL_LABEL_WIDTH = 45.0

LINE_HEIGHT = 6.0
HEADER_LINE_HEIGHT = 7.0
SECTION_LINE_HEIGHT = 8.0

THUMB_W, THUMB_H, THUMB_GAP = 32.0, 24.0, 3.0
PHOTO_W, PHOTO_H, PHOTO_GAP, PHOTO_COLUMNS = 40.0, 30.0, 4.0, 4
SIGNATURE_W, SIGNATURE_ADVANCE = 60.0, 34.0


class ReportRenderError(RuntimeError):
    """The report could not be produced; nothing usable was written."""


def _s(style: dict, key: str, default):
    return style.get(key, default)


def _rgb(value, default: RGB) -> RGB:
    text = str(value or "").lstrip("#")
    if len(text) != 6:
        return default
    try:
        return (int(text[0:2], 16), int(text[2:4], 16), int(text[4:6], 16))
    except ValueError:
        return default


def _uk_datetime(value: Optional[datetime]) -> str:
    return value.strftime("%d/%m/%Y %H:%M") if value else ""


def _pair(first: str, second: str) -> str:
    return f"{first} / {second}".strip(" /")


@dataclass(frozen=True)
class LayoutEntry:
    kind: str
    page: int
    y: float
    height: float


class ReportBuilder:
    """Lays a tour out page by page on a DocumentBackend."""

    def __init__(
        self,
        backend: DocumentBackend,
        style: Optional[dict] = None,
        now: Optional[datetime] = None,
        logo: Optional[ImageRef] = None,
    ) -> None:
        self.backend = backend
        self.style = style if style is not None else load_style_preset()
        self.now = now or datetime.now(ZoneInfo(config.TIMEZONE))
        self.logo = logo
        self.font_name = str(_s(self.style, "font_name", "Helvetica"))
        self.text_color = _rgb(_s(self.style, "text_color", ""), (20, 20, 20))
        self.draw_color = _rgb(_s(self.style, "draw_color", ""), (180, 180, 180))
        self.header_fill = _rgb(_s(self.style, "header_fill", ""), (240, 243, 247))
        self.badge_text_color = _rgb(_s(self.style, "badge_text_color", ""), WHITE)

        self.state = PageState(
            page_width=backend.page_width,
            page_height=backend.page_height,
            left=PAGE_MARGIN,
            top=PAGE_MARGIN,
            right=PAGE_MARGIN,
            bottom=BOTTOM_MARGIN,
        )
        self.flow = PageFlowController(backend, self.state)
        self.wrapper = LineWrapper(TextMeasurer(backend))
        badge_font = FontState(self.font_name, float(_s(self.style, "badge_size", 10)), bold=True)
        self.badges = BadgeRenderer(backend, self.state, badge_font, self.text_color, self.badge_text_color)
        self.rows = RowComposer(backend, self.state, self.wrapper, self.badges)
        self.grids = ImageGridPlacer(backend, self.state, self.flow)
        self.layout: List[LayoutEntry] = []

    def _font(self, key: str, default: float, bold: bool = False) -> None:
        self.backend.set_font(self.font_name, float(_s(self.style, key, default)), bold=bold)

    def _mark(self, kind: str, top: float) -> None:
        self.layout.append(LayoutEntry(kind, self.state.page_number, top, self.state.y - top))

    def _row(self, kind: str, columns: List[ColumnSpec], line_height: float = LINE_HEIGHT) -> None:
        top = self.state.y
        self.rows.draw_row(columns, line_height)
        self._mark(kind, top)

    def build(self, tour: TourRecord) -> List[LayoutEntry]:
        self.flow.new_page()
        self.backend.set_draw_color(self.draw_color)
        self.backend.set_text_color(self.text_color)

        self._header(tour)
        self._details(tour)
        self._questions(tour.questions)
        self._other_photos(tour.photos)
        self._signature(tour.signature)

        self.backend.set_title(f"Safety Tour — {tour.site}")
        return self.layout

    def _section(self, title: str) -> None:
        self.flow.guard(18)
        self._font("section_size", 12, bold=True)
        self.backend.text_lines(self.state.x, self.state.y, self.state.content_width, [title], SECTION_LINE_HEIGHT)
        self.state.y += SECTION_LINE_HEIGHT
        self._font("body_size", 11)

    def _header(self, tour: TourRecord) -> None:
        if self.logo is not None and self.logo.usable():
            self.backend.image(self.logo.path, self.state.left, 10.0, 28.0)

        width = self.state.content_width
        self._font("title_size", 16, bold=True)
        self.backend.text_lines(self.state.x, self.state.y, width, [REPORT_TITLE], 10.0, align="R")
        self.state.y += 10.0

        generated = f"Generated {self.now:%d/%m/%Y %H:%M} (UK)"
        if tour.score is not None:
            generated += f" — Score {format_score(tour.score)}"
        self._font("meta_size", 10)
        self.backend.text_lines(self.state.x, self.state.y, width, [generated], 6.0, align="R")
        self.state.y += 6.0 + 3.0

    def _details(self, tour: TourRecord) -> None:
        self._section("Details")
        value_width = TABLE_WIDTH - DETAIL_LABEL_WIDTH
        for label, value in [
            ("Date", _uk_datetime(tour.tour_date)),
            ("Site / Area", _pair(tour.site, tour.area)),
            ("Lead / Participants", _pair(tour.lead_name, tour.participants)),
            ("Status", tour.status or "Open"),
        ]:
            self.flow.guard(10)
            self._row("detail", [ColumnSpec(DETAIL_LABEL_WIDTH, label), ColumnSpec(value_width, value)])
        self.state.y += 2.5

    def _question_columns(self, question: QuestionRecord) -> List[ColumnSpec]:
        w = QUESTION_WIDTHS
        return [
            ColumnSpec(w[0], question.code),
            ColumnSpec(w[1], question.question),
            ColumnSpec(w[2], badge=Badge(question.result_label, question.result)),
            ColumnSpec(w[3], badge=Badge(question.priority_label, question.priority)),
            ColumnSpec(w[4], question.note),
        ]

    def _questions(self, questions: List[QuestionRecord]) -> None:
        if not questions:
            return
        self._section("Questions")
        self._font("body_size", 11, bold=True)
        header = [ColumnSpec(w, label, fill=self.header_fill) for w, label in zip(QUESTION_WIDTHS, QUESTION_HEADERS)]
        self._row("table_header", header, HEADER_LINE_HEIGHT)
        self._font("body_size", 11)

        for question in questions:
            self.flow.guard(12)
            self._row("question", self._question_columns(question))
            if question.images:
                top = self.state.y
                grid = self.grids.place_grid(
                    question.images,
                    x=self.state.left + QUESTION_WIDTHS[0],
                    available_width=sum(QUESTION_WIDTHS[1:]),
                    thumb_width=THUMB_W,
                    thumb_height=THUMB_H,
                    gap=THUMB_GAP,
                )
                if grid.placements:
                    self._mark("question_photos", top)
        self.state.y += 2.5

    def _other_photos(self, photos: List[ImageRef]) -> None:
        present = [photo for photo in photos if photo.usable()]
        if not present:
            return
        self._section("Other Photos")
        top = self.state.y
        self.grids.place_grid(
            present,
            x=self.state.x,
            available_width=PHOTO_COLUMNS * PHOTO_W + (PHOTO_COLUMNS - 1) * PHOTO_GAP,
            thumb_width=PHOTO_W,
            thumb_height=PHOTO_H,
            gap=PHOTO_GAP,
            guard_padding=12.0,
            top_padding=0.0,
            bottom_padding=2.0,
        )
        self._mark("other_photos", top)

    def _signature(self, signature: Optional[ImageRef]) -> None:
        if signature is None or not signature.usable():
            return
        self._section("Signature")
        self.flow.guard(40)
        top = self.state.y
        self.backend.image(signature.path, self.state.left, top, SIGNATURE_W)
        self.state.y += SIGNATURE_ADVANCE
        self._mark("signature", top)


def _default_logo() -> Optional[ImageRef]:
    path = config.find_logo_path()
    return ImageRef(path) if path else None


def render_pdf(
    tour: TourRecord,
    output_path: Path,
    backend_factory: Callable[[], DocumentBackend] = ReportLabBackend,
    style: Optional[dict] = None,
    now: Optional[datetime] = None,
    logo: Optional[ImageRef] = None,
) -> Path:
    try:
        backend = backend_factory()
    except Exception as exc:
        raise ReportRenderError(f"Document backend unavailable: {exc}") from exc

    try:
        builder = ReportBuilder(backend, style=style, now=now, logo=logo or _default_logo())
        layout = builder.build(tour)
    except Exception as exc:
        raise ReportRenderError(f"Could not lay out report: {exc}") from exc
    logger.debug("Laid out %d blocks over %d pages", len(layout), builder.state.page_number)

    output_path = Path(output_path)
    try:
        backend.save(output_path)
    except OSError as exc:
        raise ReportRenderError(f"Could not write report to {output_path}: {exc}") from exc
    return output_path
