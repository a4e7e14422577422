from __future__ import annotations

import io
import os
import tempfile
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, List, Optional, Protocol, Sequence, Tuple

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfgen import canvas


RGB = Tuple[int, int, int]

BOLD_FACES: Dict[str, str] = {
    "Helvetica": "Helvetica-Bold",
    "Times-Roman": "Times-Bold",
    "Courier": "Courier-Bold",
}


@dataclass(frozen=True)
class FontState:
    family: str = "Helvetica"
    size: float = 11.0
    bold: bool = False

    @property
    def face(self) -> str:
        if not self.bold:
            return self.family
        return BOLD_FACES.get(self.family, f"{self.family}-Bold")


class DocumentBackend(Protocol):
    """
    Drawing surface used by the layout engine.

    Units are millimetres with the origin at the top-left corner of the page,
    y growing downwards.
    """

    page_width: float
    page_height: float

    @property
    def font(self) -> FontState: ...

    def set_font(self, family: Optional[str] = None, size: Optional[float] = None, bold: bool = False) -> None: ...

    def set_fill_color(self, rgb: RGB) -> None: ...

    def set_text_color(self, rgb: RGB) -> None: ...

    def set_draw_color(self, rgb: RGB) -> None: ...

    def string_width(self, text: str, font: Optional[FontState] = None) -> float: ...

    def rect(self, x: float, y: float, w: float, h: float, stroke: bool = True, fill: bool = False) -> None: ...

    def text_lines(
        self,
        x: float,
        y: float,
        w: float,
        lines: Sequence[str],
        line_height: float,
        align: str = "L",
        padding: float = 1.0,
    ) -> None: ...

    def image(self, path: Path, x: float, y: float, w: float, h: Optional[float] = None) -> float: ...

    def add_page(self) -> None: ...

    def set_title(self, title: str) -> None: ...

    def save(self, path: Path) -> Path: ...


def _unit(rgb: RGB) -> List[float]:
    return [max(0, min(255, int(c))) / 255.0 for c in rgb]


class ReportLabBackend:
    """DocumentBackend on top of a ReportLab canvas, flipped to a top-left origin."""

    def __init__(self, page_size: Tuple[float, float] = A4) -> None:
        self._page_size = page_size
        self.page_width = page_size[0] / mm
        self.page_height = page_size[1] / mm
        self._buffer = io.BytesIO()
        self._canvas = canvas.Canvas(self._buffer, pagesize=page_size)
        self._font = FontState()
        self._fill: RGB = (255, 255, 255)
        self._text: RGB = (0, 0, 0)
        self._draw: RGB = (0, 0, 0)
        self._started = False

    @property
    def font(self) -> FontState:
        return self._font

    def _y(self, y: float) -> float:
        return (self.page_height - y) * mm

    def _apply_state(self) -> None:
        # showPage() drops the graphics state
        self._canvas.setFont(self._font.face, self._font.size)
        self._canvas.setStrokeColorRGB(*_unit(self._draw))
        self._canvas.setLineWidth(0.2 * mm)

    def set_font(self, family: Optional[str] = None, size: Optional[float] = None, bold: bool = False) -> None:
        self._font = replace(
            self._font,
            family=family or self._font.family,
            size=float(size) if size is not None else self._font.size,
            bold=bold,
        )
        self._canvas.setFont(self._font.face, self._font.size)

    def set_fill_color(self, rgb: RGB) -> None:
        self._fill = rgb

    def set_text_color(self, rgb: RGB) -> None:
        self._text = rgb

    def set_draw_color(self, rgb: RGB) -> None:
        self._draw = rgb
        self._canvas.setStrokeColorRGB(*_unit(rgb))

    def string_width(self, text: str, font: Optional[FontState] = None) -> float:
        f = font or self._font
        return pdfmetrics.stringWidth(text, f.face, f.size) / mm

    def rect(self, x: float, y: float, w: float, h: float, stroke: bool = True, fill: bool = False) -> None:
        if fill:
            self._canvas.setFillColorRGB(*_unit(self._fill))
        self._canvas.rect(x * mm, self._y(y + h), w * mm, h * mm, stroke=int(stroke), fill=int(fill))

    def text_lines(
        self,
        x: float,
        y: float,
        w: float,
        lines: Sequence[str],
        line_height: float,
        align: str = "L",
        padding: float = 1.0,
    ) -> None:
        self._canvas.setFillColorRGB(*_unit(self._text))
        font_mm = self._font.size / mm
        for index, line in enumerate(lines):
            if not line:
                continue
            baseline = self._y(y + index * line_height + 0.5 * line_height + 0.3 * font_mm)
            if align == "R":
                self._canvas.drawRightString((x + w - padding) * mm, baseline, line)
            elif align == "C":
                self._canvas.drawCentredString((x + w / 2) * mm, baseline, line)
            else:
                self._canvas.drawString((x + padding) * mm, baseline, line)

    def image(self, path: Path, x: float, y: float, w: float, h: Optional[float] = None) -> float:
        reader = ImageReader(str(path))
        if h is None:
            iw, ih = reader.getSize()
            h = w * ih / iw if iw else w
        self._canvas.drawImage(reader, x * mm, self._y(y + h), w * mm, h * mm, mask="auto")
        return h

    def add_page(self) -> None:
        if self._started:
            self._canvas.showPage()
        self._started = True
        self._apply_state()

    def set_title(self, title: str) -> None:
        self._canvas.setTitle(title)

    def save(self, path: Path) -> Path:
        """Write the document next to ``path`` first, then move it into place."""
        data = self._canvas.getpdfdata()
        path.parent.mkdir(parents=True, exist_ok=True)
        handle, temp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
        try:
            with os.fdopen(handle, "wb") as out:
                out.write(data)
            os.replace(temp_name, path)
        except OSError:
            Path(temp_name).unlink(missing_ok=True)
            raise
        return path
