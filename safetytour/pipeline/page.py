from __future__ import annotations

from dataclasses import dataclass

from .backend import DocumentBackend


@dataclass
class PageState:
    page_width: float
    page_height: float
    left: float = 12.0
    top: float = 12.0
    right: float = 12.0
    bottom: float = 14.0
    x: float = 0.0
    y: float = 0.0
    page_number: int = 0

    @property
    def content_width(self) -> float:
        return self.page_width - self.left - self.right

    @property
    def bottom_limit(self) -> float:
        return self.page_height - self.bottom

    def reset(self) -> None:
        self.x = self.left
        self.y = self.top


class PageFlowController:
    """Starts a new page before a block of ``need`` mm would cross the bottom margin."""

    def __init__(self, backend: DocumentBackend, state: PageState) -> None:
        self.backend = backend
        self.state = state

    def new_page(self) -> None:
        self.backend.add_page()
        self.state.page_number += 1
        self.state.reset()

    def guard(self, need: float) -> bool:
        # pre-check only; a block taller than ``need`` is not split
        if self.state.y + need > self.state.bottom_limit:
            self.new_page()
            return True
        return False
