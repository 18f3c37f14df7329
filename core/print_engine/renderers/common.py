"""
Texts and helpers shared by the document renderers.
"""

from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from ..layout import LayoutContext, RenderContext, TotalLine, draw_totals
from ..models import Customer, DocumentKind, NamedTag, PaperFormat

PAGE_FORMATS = (PaperFormat.A4, PaperFormat.A5)
THERMAL_FORMATS = (PaperFormat.THERMAL, PaperFormat.THERMAL_2)

DOCUMENT_TITLES = {
    DocumentKind.JOB_SHEET: "JOB SHEET",
    DocumentKind.INVOICE: "TAX INVOICE",
    DocumentKind.ESTIMATE: "ESTIMATE / QUOTATION",
}

REPEAT_WATERMARK = "REPEAT SERVICE"

DEFAULT_JOB_SHEET_TERMS = (
    "1. Advance payment is non-refundable.\n"
    "2. Device must be collected within 7 days of service completion.\n"
    "3. We are not responsible for data loss during repair.\n"
    "4. Warranty: 30 days on replaced parts only.\n"
    "5. Additional charges apply for extra parts required."
)
DEFAULT_JOB_SHEET_FOOTER = "This is a computer-generated job sheet. Please verify all details."

INVOICE_TERMS = (
    "Payment is due upon receipt. Warranty: 30 days for parts and service. "
    "This invoice is computer-generated and requires no signature."
)
INVOICE_THANKS = "Thank you for your business!"

ESTIMATE_TERMS = (
    "This is an estimate only. Actual costs may vary. "
    "Estimate is valid for the specified period. "
    "Final invoice will be generated upon service completion."
)
ESTIMATE_THANKS = "Thank you for considering our services!"

# GST is displayed as a flat 9% + 9% split of an 18% inclusive total
GST_INCLUSIVE_FACTOR = 1.18
GST_HALF_RATE = 0.09
GST_HALF_LABEL = "9%"

TrailingBlock = Callable[[RenderContext, LayoutContext], LayoutContext]


def join_names(tags: Iterable[NamedTag]) -> str:
    return ", ".join(tag.name for tag in tags if tag.name)


def customer_rows(customer: Customer) -> List[Tuple[str, str]]:
    return [
        ("Name", customer.name),
        ("Phone", customer.phone or ""),
        ("WhatsApp", (customer.whatsapp_number or "") if customer.whatsapp_number != customer.phone else ""),
        ("Email", customer.email or ""),
        ("Address", customer.address or ""),
        ("GSTIN", customer.gstin or ""),
    ]


def draw_trailing_block(rc: RenderContext, ctx: LayoutContext, block: TrailingBlock) -> LayoutContext:
    """
    Draw the closing totals/footer block as one unit.

    The block is measured first; if it does not fit below the cursor a page
    break is taken so the block is never split.
    """
    ctx = rc.keep_together(ctx, rc.measure(block))
    return block(rc, ctx)


def total_lines(rows: Sequence[Tuple[str, Optional[float], bool]], rc: RenderContext) -> List[TotalLine]:
    """(label, amount, emphasis) -> TotalLine; rows with a None amount are skipped."""
    return [
        TotalLine(label=label, value=rc.money(amount), emphasis=emphasis)
        for label, amount, emphasis in rows
        if amount is not None
    ]


def draw_money_totals(
    rc: RenderContext,
    ctx: LayoutContext,
    rows: Sequence[Tuple[str, Optional[float], bool]],
) -> LayoutContext:
    return draw_totals(rc, ctx, total_lines(rows, rc))


def discount_row(amount: float) -> Optional[float]:
    """Discounts print with a negating prefix; zero discounts are hidden."""
    return -abs(amount) if amount else None
