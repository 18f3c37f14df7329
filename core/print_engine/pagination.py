"""
Overflow / pagination controller.

Invoked before each row of a variable-length table. When the row would
cross the bottom margin a new page is started, a continuation header is
drawn and the cursor moves to the top of the new page.
"""

from typing import Callable, List, Tuple

from .formats import PageFormat
from .layout import LayoutContext
from .surface import Surface


def needs_break(current_y: float, needed_height: float, page_height: float, margin: float) -> bool:
    return current_y + needed_height > page_height - margin


def ensure_room(
    current_y: float,
    needed_height: float,
    page_height: float,
    margin: float,
) -> Tuple[float, bool]:
    """
    Pure form of the overflow check.

    Returns:
        (new_y, page_broke) - new_y is the top margin after a break,
        otherwise the unchanged cursor.
    """
    if needs_break(current_y, needed_height, page_height, margin):
        return margin, True
    return current_y, False


ContinuationHeader = Callable[[LayoutContext], LayoutContext]


class Paginator:
    """
    Page-break controller bound to one surface.

    Args:
        surface: Surface being drawn on
        page: Page geometry (margin)
        continuation: Draws the continuation header at the top of a new
            page and returns the advanced cursor
    """

    def __init__(self, surface: Surface, page: PageFormat, continuation: ContinuationHeader):
        self.surface = surface
        self.page = page
        self.continuation = continuation
        self.break_positions: List[float] = []

    def ensure_room(self, ctx: LayoutContext, needed_height: float) -> Tuple[LayoutContext, bool]:
        if self.page.is_thermal:
            # rolls grow to fit instead of breaking
            return ctx, False
        new_y, broke = ensure_room(ctx.y, needed_height, self.surface.page_height, self.page.margin)
        if not broke:
            return ctx, False

        self.break_positions.append(ctx.y)
        self.surface.new_page()
        ctx = LayoutContext(x=ctx.x, y=new_y, page_index=self.surface.page_index)
        return self.continuation(ctx), True
