"""
Layout primitives shared by all document renderers.

Every draw routine takes the render context and an explicit cursor
(``LayoutContext``) and returns the advanced cursor; nothing reads or
writes hidden cursor state. Sizes are given for A4 and multiplied by the
page format's scale on compact formats.
"""

from dataclasses import dataclass, replace
from pathlib import Path
from typing import TYPE_CHECKING, Callable, List, Optional, Sequence, Tuple

from reportlab.lib.colors import HexColor, black, white

from .currency import number_to_words
from .formats import PageFormat
from .models import Branch, Company
from .surface import RecordingSurface, Surface
from .typography import Typography

if TYPE_CHECKING:
    from .pagination import Paginator


# Colors
ACCENT_COLOR = HexColor('#1F4E79')
LIGHT_FILL = HexColor('#F2F2F2')
RULE_COLOR = HexColor('#BFBFBF')
MUTED_COLOR = HexColor('#666666')

# Geometry (A4 points, scaled on compact formats)
HEADER_HEIGHT = 72
OFFICE_STRIP_HEIGHT = 24
TITLE_BAR_HEIGHT = 26
ID_ROW_HEIGHT = 15
BADGE_HEIGHT = 22
SECTION_TITLE_HEIGHT = 18
TABLE_HEADER_HEIGHT = 22
ROW_HEIGHT = 20
TOTAL_LINE_HEIGHT = 15
SIGNATURE_HEIGHT = 50
CONTINUATION_HEIGHT = 30
CUT_LINE_HEIGHT = 20
PANEL_GAP = 10


@dataclass(frozen=True)
class LayoutContext:
    """Explicit vertical cursor"""
    x: float
    y: float
    page_index: int = 0

    def down(self, dy: float) -> "LayoutContext":
        return replace(self, y=self.y + dy)


@dataclass(frozen=True)
class Column:
    """Table column; width is a fraction of the content width"""
    title: str
    width: float
    align: str = "left"


@dataclass(frozen=True)
class TotalLine:
    label: str
    value: str
    emphasis: bool = False


@dataclass(frozen=True)
class RenderContext:
    """Everything a renderer needs for one render call"""
    surface: Surface
    page: PageFormat
    typography: Typography
    logo: Optional[Path]
    document_title: str
    document_number: str
    watermark: Optional[str] = None
    paginator: Optional["Paginator"] = None

    @classmethod
    def create(
        cls,
        surface: Surface,
        page: PageFormat,
        typography: Typography,
        logo: Optional[Path],
        document_title: str,
        document_number: str,
        watermark: Optional[str] = None,
    ) -> "RenderContext":
        from .pagination import Paginator

        rc = cls(surface, page, typography, logo, document_title, document_number, watermark)
        paginator = Paginator(surface, page, lambda ctx: draw_continuation_header(rc, ctx))
        return replace(rc, paginator=paginator)

    # ---- geometry helpers ----

    def s(self, value: float) -> float:
        return value * self.page.scale

    @property
    def left(self) -> float:
        return self.page.margin

    @property
    def content_width(self) -> float:
        return self.page.content_width

    @property
    def right(self) -> float:
        return self.page.width - self.page.margin

    @property
    def regular(self) -> str:
        return self.typography.regular

    @property
    def bold(self) -> str:
        return self.typography.bold

    def money(self, amount: Optional[float]) -> str:
        return self.typography.money(amount)

    def start(self) -> LayoutContext:
        return LayoutContext(x=self.left, y=self.page.margin, page_index=self.surface.page_index)

    def begin_page(self) -> LayoutContext:
        """Cursor for the first page, with the watermark already underneath."""
        draw_watermark(self)
        return self.start()

    def measure(self, draw: Callable[["RenderContext", LayoutContext], LayoutContext]) -> float:
        """Height a draw routine would consume, without drawing."""
        probe = RecordingSurface(self.page.width, float("inf"))
        probe_rc = replace(self, surface=probe, paginator=None)
        return draw(probe_rc, LayoutContext(x=self.left, y=0.0)).y

    def keep_together(self, ctx: LayoutContext, height: float) -> LayoutContext:
        """Start a new page unless *height* fits below the cursor."""
        if self.paginator is None or self.page.is_thermal:
            return ctx
        ctx, _ = self.paginator.ensure_room(ctx, height)
        return ctx


# ============ Page furniture ============

def draw_watermark(rc: RenderContext) -> None:
    """Drawn before any other content on a page so it sits beneath everything."""
    if rc.watermark:
        rc.surface.watermark(rc.watermark, rc.bold)


def draw_continuation_header(rc: RenderContext, ctx: LayoutContext) -> LayoutContext:
    s, surface = rc.s, rc.surface
    draw_watermark(rc)
    surface.text(ctx.x, ctx.y + s(12), f"{rc.document_title} {rc.document_number} - Continued", rc.bold, s(10))
    surface.text(rc.right, ctx.y + s(12), f"Page {ctx.page_index + 1}", rc.regular, s(8), align="right")
    surface.line(ctx.x, ctx.y + s(20), rc.right, ctx.y + s(20), color=RULE_COLOR)
    return ctx.down(s(CONTINUATION_HEIGHT))


def draw_company_header(
    rc: RenderContext,
    ctx: LayoutContext,
    company: Company,
    branch: Branch,
    show_logo: bool = True,
    show_contact: bool = True,
) -> LayoutContext:
    """Fixed-height company block: logo left, name and contact centred."""
    s, surface = rc.s, rc.surface
    top = ctx.y
    center = ctx.x + rc.content_width / 2
    text_width = rc.content_width - s(200)

    if show_logo and rc.logo is not None:
        surface.image(rc.logo, ctx.x, top + s(4), s(90), s(50))

    name = surface.fit_text(company.name, rc.bold, s(18), text_width)
    surface.text(center, top + s(22), name, rc.bold, s(18), align="center", color=ACCENT_COLOR)

    if show_contact:
        lines = [
            " - ".join(p for p in (branch.name, branch.address) if p),
            " | ".join(p for p in (
                f"Phone: {branch.phone}" if branch.phone else "",
                f"Email: {branch.email}" if branch.email else "",
            ) if p),
            f"GSTIN: {company.gst}" if company.gst else "",
        ]
        y = top + s(37)
        for line in lines:
            if line:
                surface.text(center, y, surface.fit_text(line, rc.regular, s(9), text_width),
                             rc.regular, s(9), align="center")
                y += s(11)

    surface.line(ctx.x, top + s(HEADER_HEIGHT - 4), rc.right, top + s(HEADER_HEIGHT - 4), width=1, color=ACCENT_COLOR)
    return ctx.down(s(HEADER_HEIGHT))


def draw_office_strip(rc: RenderContext, ctx: LayoutContext, branch: Branch) -> LayoutContext:
    """Office copies replace the company header with a one-line strip."""
    s, surface = rc.s, rc.surface
    surface.text(ctx.x, ctx.y + s(14), "OFFICE COPY", rc.bold, s(11), color=ACCENT_COLOR)
    surface.text(rc.right, ctx.y + s(14), surface.fit_text(branch.name, rc.regular, s(9), rc.content_width / 2),
                 rc.regular, s(9), align="right")
    surface.line(ctx.x, ctx.y + s(20), rc.right, ctx.y + s(20), color=RULE_COLOR)
    return ctx.down(s(OFFICE_STRIP_HEIGHT))


def draw_title_bar(rc: RenderContext, ctx: LayoutContext, title: str, copy_label: str = "") -> LayoutContext:
    s, surface = rc.s, rc.surface
    height = s(TITLE_BAR_HEIGHT)
    surface.rect(ctx.x, ctx.y + s(2), rc.content_width, height - s(4), fill=ACCENT_COLOR, stroke=False)
    surface.text(ctx.x + rc.content_width / 2, ctx.y + s(18), title, rc.bold, s(14), align="center", color=white)
    if copy_label:
        surface.text(rc.right - s(6), ctx.y + s(17), copy_label, rc.bold, s(7.5), align="right", color=white)
    return ctx.down(height)


def draw_identification_bar(
    rc: RenderContext,
    ctx: LayoutContext,
    pairs: Sequence[Tuple[str, str]],
) -> LayoutContext:
    """Label/value pairs in two columns, filled left column first."""
    s, surface = rc.s, rc.surface
    half = rc.content_width / 2
    rows = (len(pairs) + 1) // 2
    for i, (label, value) in enumerate(pairs):
        col, row = divmod(i, rows) if rows else (0, 0)
        x = ctx.x + col * half
        y = ctx.y + s(16) + row * s(ID_ROW_HEIGHT)
        surface.text(x, y, f"{label}:", rc.bold, s(9.5))
        surface.text(x + s(95), y, surface.fit_text(value, rc.regular, s(9.5), half - s(100)), rc.regular, s(9.5))
    height = rows * s(ID_ROW_HEIGHT) + s(14)
    surface.line(ctx.x, ctx.y + height - s(4), rc.right, ctx.y + height - s(4), color=RULE_COLOR)
    return ctx.down(height)


def draw_badge(rc: RenderContext, ctx: LayoutContext, text: str, detail: str = "") -> LayoutContext:
    s, surface = rc.s, rc.surface
    surface.rect(ctx.x, ctx.y + s(3), rc.content_width, s(BADGE_HEIGHT - 6), fill=LIGHT_FILL)
    label = f"{text}: {detail}" if detail else text
    surface.text(ctx.x + s(6), ctx.y + s(15), surface.fit_text(label, rc.bold, s(9), rc.content_width - s(12)),
                 rc.bold, s(9), color=ACCENT_COLOR)
    return ctx.down(s(BADGE_HEIGHT))


def draw_panels(
    rc: RenderContext,
    ctx: LayoutContext,
    left: Tuple[str, Sequence[Tuple[str, str]]],
    right: Tuple[str, Sequence[Tuple[str, str]]],
    height: float,
) -> LayoutContext:
    """Two boxed label/value panels of a fixed height; overflowing rows are dropped."""
    s, surface = rc.s, rc.surface
    box_height = s(height) - s(6)
    panel_width = (rc.content_width - s(PANEL_GAP)) / 2

    for index, (title, rows) in enumerate((left, right)):
        x = ctx.x + index * (panel_width + s(PANEL_GAP))
        surface.rect(x, ctx.y, panel_width, box_height)
        surface.text(x + s(6), ctx.y + s(13), title, rc.bold, s(9.5), color=ACCENT_COLOR)
        y = ctx.y + s(27)
        for label, value in rows:
            if not value or y > ctx.y + box_height - s(3):
                continue
            surface.text(x + s(6), y, f"{label}:", rc.bold, s(8.5))
            surface.text(x + s(72), y, surface.fit_text(value, rc.regular, s(8.5), panel_width - s(78)),
                         rc.regular, s(8.5))
            y += s(12)

    return ctx.down(s(height))


def draw_text_block(
    rc: RenderContext,
    ctx: LayoutContext,
    title: str,
    text: Optional[str],
    max_lines: int = 3,
) -> LayoutContext:
    """Titled paragraph, truncated to *max_lines*. Empty text draws nothing."""
    if not text:
        return ctx
    s, surface = rc.s, rc.surface
    lines = surface.wrap(text, rc.regular, s(8.5), rc.content_width - s(90))
    if len(lines) > max_lines:
        lines = lines[:max_lines]
        lines[-1] = surface.fit_text(lines[-1] + " ...", rc.regular, s(8.5), rc.content_width - s(90))

    surface.text(ctx.x, ctx.y + s(11), f"{title}:", rc.bold, s(8.5))
    for i, line in enumerate(lines):
        surface.text(ctx.x + s(90), ctx.y + s(11) + i * s(11), line, rc.regular, s(8.5))
    return ctx.down(s(6) + max(1, len(lines)) * s(11))


def draw_section_title(rc: RenderContext, ctx: LayoutContext, title: str) -> LayoutContext:
    rc.surface.text(ctx.x, ctx.y + rc.s(13), title, rc.bold, rc.s(10), color=ACCENT_COLOR)
    return ctx.down(rc.s(SECTION_TITLE_HEIGHT))


# ============ Tables ============

def _column_layout(rc: RenderContext, columns: Sequence[Column]) -> List[Tuple[float, float, str]]:
    """(anchor x, width, align) per column"""
    layout = []
    x = rc.left
    pad = rc.s(4)
    for column in columns:
        width = column.width * rc.content_width
        if column.align == "right":
            anchor = x + width - pad
        elif column.align == "center":
            anchor = x + width / 2
        else:
            anchor = x + pad
        layout.append((anchor, width - 2 * pad, column.align))
        x += width
    return layout


def draw_table_header(rc: RenderContext, ctx: LayoutContext, columns: Sequence[Column]) -> LayoutContext:
    s, surface = rc.s, rc.surface
    height = s(TABLE_HEADER_HEIGHT)
    surface.rect(ctx.x, ctx.y, rc.content_width, height, fill=LIGHT_FILL, stroke=False)
    for (anchor, _, align), column in zip(_column_layout(rc, columns), columns):
        surface.text(anchor, ctx.y + s(14), column.title, rc.bold, s(9), align=align)
    surface.line(ctx.x, ctx.y + height, rc.right, ctx.y + height, width=0.75)
    return ctx.down(height)


def draw_table_row(
    rc: RenderContext,
    ctx: LayoutContext,
    columns: Sequence[Column],
    values: Sequence[str],
) -> LayoutContext:
    s, surface = rc.s, rc.surface
    height = s(ROW_HEIGHT)
    for (anchor, width, align), value in zip(_column_layout(rc, columns), values):
        surface.text(anchor, ctx.y + s(13), surface.fit_text(value, rc.regular, s(9), width),
                     rc.regular, s(9), align=align)
    surface.line(ctx.x, ctx.y + height, rc.right, ctx.y + height, width=0.25, color=RULE_COLOR)
    return ctx.down(height)


def draw_item_table(
    rc: RenderContext,
    ctx: LayoutContext,
    columns: Sequence[Column],
    rows: Sequence[Sequence[str]],
    title: Optional[str] = None,
) -> LayoutContext:
    """
    Variable-length table. Each row is checked against the bottom margin;
    after a page break the column header is repeated below the
    continuation header. Empty tables draw nothing.
    """
    if not rows:
        return ctx
    s = rc.s

    lead = s(TABLE_HEADER_HEIGHT) + s(ROW_HEIGHT)
    if title:
        lead += s(SECTION_TITLE_HEIGHT)
    ctx = rc.keep_together(ctx, lead)

    if title:
        ctx = draw_section_title(rc, ctx, title)
    ctx = draw_table_header(rc, ctx, columns)

    for values in rows:
        if rc.paginator is not None:
            ctx, broke = rc.paginator.ensure_room(ctx, s(ROW_HEIGHT))
            if broke:
                ctx = draw_table_header(rc, ctx, columns)
        ctx = draw_table_row(rc, ctx, columns, values)
    return ctx


# ============ Totals & footer ============

def draw_totals(rc: RenderContext, ctx: LayoutContext, lines: Sequence[TotalLine]) -> LayoutContext:
    """Right-aligned totals box"""
    s, surface = rc.s, rc.surface
    box_width = rc.content_width * 0.45
    x = rc.right - box_width
    y = ctx.y + s(6)
    for line in lines:
        font = rc.bold if line.emphasis else rc.regular
        size = s(10) if line.emphasis else s(9)
        if line.emphasis:
            surface.line(x, y, rc.right, y, width=0.5)
        surface.text(x + s(4), y + s(11), line.label, font, size)
        surface.text(rc.right - s(4), y + s(11), line.value, font, size, align="right")
        y += s(TOTAL_LINE_HEIGHT)
    return ctx.down(s(8) + len(lines) * s(TOTAL_LINE_HEIGHT))


def draw_amount_in_words(rc: RenderContext, ctx: LayoutContext, amount: float) -> LayoutContext:
    s, surface = rc.s, rc.surface
    label = "Amount in words: "
    label_width = surface.string_width(label, rc.bold, s(8.5))
    lines = surface.wrap(number_to_words(amount), rc.regular, s(8.5), rc.content_width - label_width)[:2]
    surface.text(ctx.x, ctx.y + s(12), label, rc.bold, s(8.5))
    for i, line in enumerate(lines):
        surface.text(ctx.x + label_width, ctx.y + s(12) + i * s(11), line, rc.regular, s(8.5))
    return ctx.down(s(8) + max(1, len(lines)) * s(11))


def draw_terms(rc: RenderContext, ctx: LayoutContext, text: str, max_lines: int = 6) -> LayoutContext:
    if not text:
        return ctx
    s, surface = rc.s, rc.surface
    lines = surface.wrap(text, rc.regular, s(7.5), rc.content_width)[:max_lines]
    surface.text(ctx.x, ctx.y + s(12), "Terms & Conditions:", rc.bold, s(8.5))
    for i, line in enumerate(lines):
        surface.text(ctx.x, ctx.y + s(23) + i * s(9.5), line, rc.regular, s(7.5))
    return ctx.down(s(18) + len(lines) * s(9.5))


def draw_signatures(
    rc: RenderContext,
    ctx: LayoutContext,
    left_label: Optional[str],
    right_label: Optional[str],
) -> LayoutContext:
    """Signature lines; a None label leaves that side empty."""
    if not left_label and not right_label:
        return ctx
    s, surface = rc.s, rc.surface
    line_width = s(150)
    if left_label:
        surface.line(ctx.x, ctx.y + s(34), ctx.x + line_width, ctx.y + s(34))
        surface.text(ctx.x, ctx.y + s(45), left_label, rc.regular, s(8.5))
    if right_label:
        surface.line(rc.right - line_width, ctx.y + s(34), rc.right, ctx.y + s(34))
        surface.text(rc.right, ctx.y + s(45), right_label, rc.regular, s(8.5), align="right")
    return ctx.down(s(SIGNATURE_HEIGHT))


def draw_footer_note(rc: RenderContext, ctx: LayoutContext, text: str) -> LayoutContext:
    if not text:
        return ctx
    s, surface = rc.s, rc.surface
    line = surface.fit_text(text, rc.typography.italic, s(8), rc.content_width)
    surface.text(ctx.x + rc.content_width / 2, ctx.y + s(11), line, rc.typography.italic, s(8),
                 align="center", color=MUTED_COLOR)
    return ctx.down(s(16))


def draw_cut_line(rc: RenderContext, ctx: LayoutContext) -> LayoutContext:
    """Dashed separator between the two halves of a combined copy."""
    s, surface = rc.s, rc.surface
    y = ctx.y + s(CUT_LINE_HEIGHT) / 2
    surface.line(ctx.x, y, rc.right, y, dashed=True, color=MUTED_COLOR)
    surface.text(ctx.x + rc.content_width / 2, y - s(3), "cut here", rc.regular, s(6.5),
                 align="center", color=MUTED_COLOR)
    return ctx.down(s(CUT_LINE_HEIGHT))


# ============ Thermal receipts ============

def receipt_size(rc: RenderContext, size: float = 8) -> float:
    return rc.s(size)


def draw_receipt_header(
    rc: RenderContext,
    ctx: LayoutContext,
    company: Company,
    branch: Branch,
    show_logo: bool = True,
    show_contact: bool = True,
) -> LayoutContext:
    s, surface = rc.s, rc.surface
    center = ctx.x + rc.content_width / 2
    if show_logo and rc.logo is not None:
        logo_height = s(36)
        drawn = surface.image(rc.logo, center - s(30), ctx.y, s(60), logo_height)
        if drawn:
            ctx = ctx.down(logo_height + s(4))

    ctx = draw_receipt_text(rc, ctx, company.name, size=11, bold=True, align="center")
    if show_contact:
        for line in (branch.name, branch.address,
                     f"Ph: {branch.phone}" if branch.phone else "",
                     f"GSTIN: {company.gst}" if company.gst else ""):
            if line:
                ctx = draw_receipt_text(rc, ctx, line, size=7, align="center")
    return draw_receipt_rule(rc, ctx)


def draw_receipt_text(
    rc: RenderContext,
    ctx: LayoutContext,
    text: Optional[str],
    size: float = 7.5,
    bold: bool = False,
    align: str = "left",
) -> LayoutContext:
    """Wrapped text; thermal pages grow, so nothing is truncated."""
    if not text:
        return ctx
    s, surface = rc.s, rc.surface
    font = rc.bold if bold else rc.regular
    leading = s(size) * 1.3
    anchor = {
        "center": ctx.x + rc.content_width / 2,
        "right": rc.right,
    }.get(align, ctx.x)
    for line in surface.wrap(text, font, s(size), rc.content_width):
        ctx = ctx.down(leading)
        surface.text(anchor, ctx.y - s(size) * 0.25, line, font, s(size), align=align)
    return ctx.down(s(1.5))


def draw_receipt_line(
    rc: RenderContext,
    ctx: LayoutContext,
    label: str,
    value: str,
    bold: bool = False,
    size: float = 8,
) -> LayoutContext:
    """Label left, value right on one line."""
    s, surface = rc.s, rc.surface
    font = rc.bold if bold else rc.regular
    value_width = surface.string_width(value, font, s(size))
    label = surface.fit_text(label, font, s(size), rc.content_width - value_width - s(4))
    ctx = ctx.down(s(size) * 1.4)
    surface.text(ctx.x, ctx.y - s(size) * 0.25, label, font, s(size))
    surface.text(rc.right, ctx.y - s(size) * 0.25, value, font, s(size), align="right")
    return ctx


def draw_receipt_rule(rc: RenderContext, ctx: LayoutContext, dashed: bool = True) -> LayoutContext:
    y = ctx.y + rc.s(4)
    rc.surface.line(ctx.x, y, rc.right, y, dashed=dashed, color=black)
    return ctx.down(rc.s(8))


def draw_receipt_items(
    rc: RenderContext,
    ctx: LayoutContext,
    rows: Sequence[Tuple[str, float, float, float]],
    title: Optional[str] = None,
) -> LayoutContext:
    """Items as two lines each: name, then 'qty x rate' and amount."""
    if not rows:
        return ctx
    if title:
        ctx = draw_receipt_text(rc, ctx, title, size=8, bold=True)
    for name, quantity, rate, amount in rows:
        ctx = draw_receipt_text(rc, ctx, name, size=7.5)
        ctx = draw_receipt_line(rc, ctx, f"  {format_quantity(quantity)} x {rc.money(rate)}", rc.money(amount), size=7.5)
    return draw_receipt_rule(rc, ctx)


def format_quantity(quantity: float) -> str:
    """2 -> '2', 1.5 -> '1.5'"""
    value = float(quantity or 0)
    if value.is_integer():
        return str(int(value))
    return f"{value:g}"


def draw_receipt_signature(rc: RenderContext, ctx: LayoutContext, label: str) -> LayoutContext:
    s, surface = rc.s, rc.surface
    y = ctx.y + s(26)
    surface.line(ctx.x, y, ctx.x + rc.content_width * 0.6, y)
    surface.text(ctx.x, y + s(9), label, rc.regular, s(7))
    return ctx.down(s(36))


def draw_receipt_totals(rc: RenderContext, ctx: LayoutContext, lines: Sequence[TotalLine]) -> LayoutContext:
    for line in lines:
        ctx = draw_receipt_line(rc, ctx, line.label, line.value, bold=line.emphasis)
    return ctx
