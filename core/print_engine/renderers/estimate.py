"""
Estimate / quotation renderers.
"""

from typing import List, Optional, Tuple

from ..currency import format_date, number_to_words
from ..layout import (
    Column,
    LayoutContext,
    RenderContext,
    draw_amount_in_words,
    draw_company_header,
    draw_footer_note,
    draw_identification_bar,
    draw_item_table,
    draw_office_strip,
    draw_panels,
    draw_receipt_header,
    draw_receipt_items,
    draw_receipt_line,
    draw_receipt_rule,
    draw_receipt_text,
    draw_receipt_totals,
    draw_terms,
    draw_text_block,
    draw_title_bar,
    format_quantity,
)
from ..models import DocumentKind, EstimateCopy, EstimateRecord
from .common import (
    DOCUMENT_TITLES,
    ESTIMATE_TERMS,
    ESTIMATE_THANKS,
    GST_HALF_LABEL,
    PAGE_FORMATS,
    THERMAL_FORMATS,
    customer_rows,
    draw_money_totals,
    draw_trailing_block,
    total_lines,
)
from .registry import register

TITLE = DOCUMENT_TITLES[DocumentKind.ESTIMATE]
PANEL_HEIGHT = 84

ITEM_COLUMNS = [
    Column("Description", 0.46),
    Column("Qty", 0.10, "center"),
    Column("Rate", 0.22, "right"),
    Column("Amount", 0.22, "right"),
]


def _total_rows(record: EstimateRecord) -> List[Tuple[str, Optional[float], bool]]:
    rows = [("Subtotal", record.subtotal, False)]
    if record.tax_amount > 0:
        half = record.tax_amount / 2
        rows += [
            (f"CGST ({GST_HALF_LABEL})", half, False),
            (f"SGST ({GST_HALF_LABEL})", half, False),
        ]
    rows.append(("Total Estimate", record.total_amount, True))
    return rows


def _identification(record: EstimateRecord) -> List[Tuple[str, str]]:
    pairs = [
        ("Estimate No", record.estimate_number),
        ("Date", format_date(record.estimate_date)),
    ]
    if record.valid_until:
        pairs.append(("Valid Until", format_date(record.valid_until)))
    if record.service:
        pairs.append(("Ticket No", record.service.ticket_number))
    return pairs


def _service_rows(record: EstimateRecord) -> List[Tuple[str, str]]:
    service = record.service
    if service is None:
        return []
    return [
        ("Ticket", service.ticket_number),
        ("Device", service.device_model),
        ("Issue", service.issue or ""),
    ]


def _item_rows(rc: RenderContext, record: EstimateRecord) -> List[List[str]]:
    return [
        [item.description, format_quantity(item.quantity), rc.money(item.unit_price), rc.money(item.amount)]
        for item in record.items
    ]


def _render_page(rc: RenderContext, record: EstimateRecord, copy: EstimateCopy) -> LayoutContext:
    office = copy == EstimateCopy.OFFICE

    ctx = rc.begin_page()
    if office:
        ctx = draw_office_strip(rc, ctx, record.branch)
    else:
        ctx = draw_company_header(rc, ctx, record.company, record.branch)
    ctx = draw_title_bar(rc, ctx, TITLE, "OFFICE COPY" if office else "")
    ctx = draw_identification_bar(rc, ctx, _identification(record))
    ctx = draw_panels(
        rc, ctx,
        ("Customer Details", customer_rows(record.customer)),
        ("Service Details", _service_rows(record)),
        PANEL_HEIGHT,
    )

    ctx = draw_item_table(rc, ctx, ITEM_COLUMNS, _item_rows(rc, record))

    def closing(rc: RenderContext, ctx: LayoutContext) -> LayoutContext:
        ctx = draw_money_totals(rc, ctx, _total_rows(record))
        ctx = draw_amount_in_words(rc, ctx, record.total_amount)
        ctx = draw_text_block(rc, ctx, "Notes", record.notes, max_lines=4)
        if office:
            return ctx
        ctx = draw_terms(rc, ctx, ESTIMATE_TERMS)
        return draw_footer_note(rc, ctx, ESTIMATE_THANKS)

    return draw_trailing_block(rc, ctx, closing)


def _render_receipt(rc: RenderContext, record: EstimateRecord, copy: EstimateCopy) -> LayoutContext:
    office = copy == EstimateCopy.OFFICE

    ctx = rc.begin_page()
    if not office:
        ctx = draw_receipt_header(rc, ctx, record.company, record.branch)
    ctx = draw_receipt_text(rc, ctx, TITLE, size=9, bold=True, align="center")
    if office:
        ctx = draw_receipt_text(rc, ctx, "OFFICE COPY", size=7, align="center")
    for label, value in _identification(record):
        ctx = draw_receipt_line(rc, ctx, label, value)
    ctx = draw_receipt_rule(rc, ctx)

    ctx = draw_receipt_text(rc, ctx, f"Customer: {record.customer.name}")
    ctx = draw_receipt_text(rc, ctx, f"Phone: {record.customer.phone}" if record.customer.phone else "")
    if record.service:
        ctx = draw_receipt_text(rc, ctx, f"Device: {record.service.device_model}")
    ctx = draw_receipt_rule(rc, ctx)

    ctx = draw_receipt_items(
        rc, ctx,
        [(item.description, item.quantity, item.unit_price, item.amount) for item in record.items],
    )
    ctx = draw_receipt_totals(rc, ctx, total_lines(_total_rows(record), rc))
    ctx = draw_receipt_text(rc, ctx, number_to_words(record.total_amount), size=6.5)
    ctx = draw_receipt_text(rc, ctx, f"Notes: {record.notes}" if record.notes else "", size=7)
    if office:
        return ctx

    ctx = draw_receipt_rule(rc, ctx)
    ctx = draw_receipt_text(rc, ctx, ESTIMATE_TERMS, size=6)
    return draw_receipt_text(rc, ctx, ESTIMATE_THANKS, size=7.5, bold=True, align="center")


@register(DocumentKind.ESTIMATE, PAGE_FORMATS, [EstimateCopy.CUSTOMER])
def render_customer_copy(rc: RenderContext, record: EstimateRecord) -> LayoutContext:
    return _render_page(rc, record, EstimateCopy.CUSTOMER)


@register(DocumentKind.ESTIMATE, PAGE_FORMATS, [EstimateCopy.OFFICE])
def render_office_copy(rc: RenderContext, record: EstimateRecord) -> LayoutContext:
    return _render_page(rc, record, EstimateCopy.OFFICE)


@register(DocumentKind.ESTIMATE, THERMAL_FORMATS, [EstimateCopy.CUSTOMER])
def render_customer_receipt(rc: RenderContext, record: EstimateRecord) -> LayoutContext:
    return _render_receipt(rc, record, EstimateCopy.CUSTOMER)


@register(DocumentKind.ESTIMATE, THERMAL_FORMATS, [EstimateCopy.OFFICE])
def render_office_receipt(rc: RenderContext, record: EstimateRecord) -> LayoutContext:
    return _render_receipt(rc, record, EstimateCopy.OFFICE)
