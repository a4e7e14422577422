from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import pytest
from PIL import Image

from safetytour.pipeline.backend import FontState


class FakeBackend:
    """Records drawing calls; every character is ``char_width`` mm wide."""

    def __init__(self, page_width: float = 210.0, page_height: float = 297.0, char_width: float = 2.0) -> None:
        self.page_width = page_width
        self.page_height = page_height
        self.char_width = char_width
        self._font = FontState()
        self.calls: List[Tuple] = []
        self.pages = 0
        self.title = ""
        self.saved: Optional[Path] = None

    @property
    def font(self) -> FontState:
        return self._font

    def set_font(self, family=None, size=None, bold=False) -> None:
        self._font = FontState(family or self._font.family, size if size is not None else self._font.size, bold)

    def set_fill_color(self, rgb) -> None:
        self.calls.append(("fill_color", tuple(rgb)))

    def set_text_color(self, rgb) -> None:
        self.calls.append(("text_color", tuple(rgb)))

    def set_draw_color(self, rgb) -> None:
        self.calls.append(("draw_color", tuple(rgb)))

    def string_width(self, text: str, font: Optional[FontState] = None) -> float:
        return len(text) * self.char_width

    def rect(self, x, y, w, h, stroke=True, fill=False) -> None:
        self.calls.append(("rect", self.pages, x, y, w, h, stroke, fill))

    def text_lines(self, x, y, w, lines: Sequence[str], line_height, align="L", padding=1.0) -> None:
        self.calls.append(("text", self.pages, x, y, w, tuple(lines), line_height, align))

    def image(self, path, x, y, w, h=None) -> float:
        h = h if h is not None else w / 2
        self.calls.append(("image", self.pages, Path(path), x, y, w, h))
        return h

    def add_page(self) -> None:
        self.pages += 1

    def set_title(self, title: str) -> None:
        self.title = title

    def save(self, path: Path) -> Path:
        path.write_bytes(b"%PDF-fake")
        self.saved = path
        return path

    def of_kind(self, kind: str) -> List[Tuple]:
        return [call for call in self.calls if call[0] == kind]


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def make_image(tmp_path):
    def _make(name: str = "photo.png", size: Tuple[int, int] = (200, 150), color=(90, 120, 200)) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        Image.new("RGB", size, color).save(path)
        return path

    return _make
