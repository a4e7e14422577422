from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterable, List

from .backend import DocumentBackend
from .page import PageFlowController, PageState
from .records import ImageRef


def columns_per_row(available_width: float, thumb_width: float, gap: float) -> int:
    return max(1, int(math.floor((available_width + gap) / (thumb_width + gap))))


@dataclass(frozen=True)
class Placement:
    image: ImageRef
    column: int
    row: int
    x: float
    y: float
    page: int


@dataclass
class GridPlacement:
    columns: int
    placements: List[Placement] = field(default_factory=list)

    @property
    def rows(self) -> int:
        return math.ceil(len(self.placements) / self.columns) if self.placements else 0


class ImageGridPlacer:
    def __init__(self, backend: DocumentBackend, state: PageState, flow: PageFlowController) -> None:
        self.backend = backend
        self.state = state
        self.flow = flow

    def place_grid(
        self,
        images: Iterable[ImageRef],
        x: float,
        available_width: float,
        thumb_width: float,
        thumb_height: float,
        gap: float,
        guard_padding: float = 8.0,
        top_padding: float = 2.0,
        bottom_padding: float = 3.0,
    ) -> GridPlacement:
        """
        Lay surviving images out left to right, wrapping into rows.

        Files that are missing or cannot be decoded are dropped silently. Every grid row is
        guarded against the bottom margin before it is drawn.
        """
        present = [image for image in images if image.usable()]
        grid = GridPlacement(columns=columns_per_row(available_width, thumb_width, gap))
        if not present:
            return grid

        self.flow.guard(thumb_height + guard_padding)
        row_top = self.state.y + top_padding
        for index, image in enumerate(present):
            column = index % grid.columns
            if column == 0 and index > 0:
                row_top += thumb_height + gap
                self.state.y = row_top
                if self.flow.guard(thumb_height + guard_padding):
                    row_top = self.state.y
            cell_x = x + column * (thumb_width + gap)
            self.backend.image(image.path, cell_x, row_top, thumb_width, thumb_height)
            self.backend.rect(cell_x, row_top, thumb_width, thumb_height)
            grid.placements.append(
                Placement(
                    image=image,
                    column=column,
                    row=index // grid.columns,
                    x=cell_x,
                    y=row_top,
                    page=self.state.page_number,
                )
            )
        self.state.y = row_top + thumb_height + bottom_padding
        return grid
