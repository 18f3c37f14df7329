"""
Invoice renderers.

All three copy types share the same layout; they differ only in the copy
label printed in the title bar. The parts list is unbounded and is the
table the pagination controller was built for.
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
    draw_panels,
    draw_receipt_header,
    draw_receipt_items,
    draw_receipt_line,
    draw_receipt_rule,
    draw_receipt_text,
    draw_receipt_totals,
    draw_terms,
    draw_title_bar,
    format_quantity,
)
from ..models import DocumentKind, InvoiceCopy, InvoiceRecord
from .common import (
    DOCUMENT_TITLES,
    GST_HALF_LABEL,
    GST_HALF_RATE,
    GST_INCLUSIVE_FACTOR,
    INVOICE_TERMS,
    INVOICE_THANKS,
    PAGE_FORMATS,
    THERMAL_FORMATS,
    customer_rows,
    draw_money_totals,
    draw_trailing_block,
    total_lines,
)
from .registry import register

TITLE = DOCUMENT_TITLES[DocumentKind.INVOICE]
PANEL_HEIGHT = 84
SERVICE_CHARGE_LABEL = "Service Charge"

COPY_LABELS = {
    InvoiceCopy.ORIGINAL: "ORIGINAL FOR RECIPIENT",
    InvoiceCopy.DUPLICATE: "DUPLICATE",
    InvoiceCopy.CUSTOMER: "CUSTOMER COPY",
}

PART_COLUMNS = [
    Column("Description", 0.46),
    Column("Qty", 0.10, "center"),
    Column("Rate", 0.22, "right"),
    Column("Amount", 0.22, "right"),
]

PAYMENT_COLUMNS = [
    Column("Date", 0.20),
    Column("Method", 0.25),
    Column("Reference", 0.33),
    Column("Amount", 0.22, "right"),
]


def service_charge(record: InvoiceRecord) -> float:
    service = record.service
    return service.actual_cost if service.actual_cost is not None else service.estimated_cost


def gst_breakdown(total: float) -> Tuple[float, float, float]:
    """
    (subtotal, cgst, sgst) for a tax-inclusive total.

    Always the flat 18% split, whatever rates the record carries.
    """
    subtotal = total / GST_INCLUSIVE_FACTOR
    return subtotal, subtotal * GST_HALF_RATE, subtotal * GST_HALF_RATE


def _total_rows(record: InvoiceRecord) -> List[Tuple[str, Optional[float], bool]]:
    # total_amount is already net of discount; the split is of that net figure
    subtotal, cgst, sgst = gst_breakdown(record.total_amount)
    return [
        ("Subtotal", subtotal, False),
        (f"CGST ({GST_HALF_LABEL})", cgst, False),
        (f"SGST ({GST_HALF_LABEL})", sgst, False),
        ("Total Amount", record.total_amount, True),
        ("Paid Amount", record.paid_amount, False),
        ("Balance Due", record.balance_amount, True),
    ]


def _identification(record: InvoiceRecord) -> List[Tuple[str, str]]:
    return [
        ("Invoice No", record.invoice_number),
        ("Invoice Date", format_date(record.invoice_date)),
        ("Ticket No", record.service.ticket_number),
        ("Status", record.payment_status),
    ]


def _service_rows(record: InvoiceRecord) -> List[Tuple[str, str]]:
    service = record.service
    return [
        ("Ticket", service.ticket_number),
        ("Device", service.device_model),
        ("Issue", service.issue or ""),
        ("Diagnosis", service.diagnosis or ""),
        ("Completed", format_date(service.completed_at)),
    ]


def _line_rows(rc: RenderContext, record: InvoiceRecord) -> List[List[str]]:
    charge = service_charge(record)
    rows = [[SERVICE_CHARGE_LABEL, "1", rc.money(charge), rc.money(charge)]]
    rows += [
        [part.part_name, format_quantity(part.quantity), rc.money(part.unit_price), rc.money(part.total_price)]
        for part in record.parts
    ]
    return rows


def _payment_rows(rc: RenderContext, record: InvoiceRecord) -> List[List[str]]:
    return [
        [format_date(p.created_at), p.payment_method, p.transaction_id or "", rc.money(p.amount)]
        for p in record.payments
    ]


def _closing(record: InvoiceRecord):
    def closing(rc: RenderContext, ctx: LayoutContext) -> LayoutContext:
        ctx = draw_money_totals(rc, ctx, _total_rows(record))
        ctx = draw_amount_in_words(rc, ctx, record.total_amount)
        ctx = draw_terms(rc, ctx, INVOICE_TERMS)
        return draw_footer_note(rc, ctx, INVOICE_THANKS)
    return closing


def _render_page(rc: RenderContext, record: InvoiceRecord, copy: InvoiceCopy) -> LayoutContext:
    ctx = rc.begin_page()
    ctx = draw_company_header(rc, ctx, record.company, record.branch)
    ctx = draw_title_bar(rc, ctx, TITLE, COPY_LABELS[copy])
    ctx = draw_identification_bar(rc, ctx, _identification(record))
    ctx = draw_panels(
        rc, ctx,
        ("Bill To", customer_rows(record.customer)),
        ("Service Details", _service_rows(record)),
        PANEL_HEIGHT,
    )

    ctx = draw_item_table(rc, ctx, PART_COLUMNS, _line_rows(rc, record))
    ctx = draw_item_table(rc, ctx, PAYMENT_COLUMNS, _payment_rows(rc, record), title="Payment History")
    return draw_trailing_block(rc, ctx, _closing(record))


def _render_receipt(rc: RenderContext, record: InvoiceRecord, copy: InvoiceCopy) -> LayoutContext:
    ctx = rc.begin_page()
    ctx = draw_receipt_header(rc, ctx, record.company, record.branch)
    ctx = draw_receipt_text(rc, ctx, TITLE, size=10, bold=True, align="center")
    ctx = draw_receipt_text(rc, ctx, COPY_LABELS[copy], size=7, align="center")
    for label, value in _identification(record):
        ctx = draw_receipt_line(rc, ctx, label, value)
    ctx = draw_receipt_rule(rc, ctx)

    ctx = draw_receipt_text(rc, ctx, f"Customer: {record.customer.name}")
    ctx = draw_receipt_text(rc, ctx, f"Phone: {record.customer.phone}" if record.customer.phone else "")
    ctx = draw_receipt_text(rc, ctx, f"Device: {record.service.device_model}")
    ctx = draw_receipt_rule(rc, ctx)

    charge = service_charge(record)
    items = [(SERVICE_CHARGE_LABEL, 1, charge, charge)]
    items += [(p.part_name, p.quantity, p.unit_price, p.total_price) for p in record.parts]
    ctx = draw_receipt_items(rc, ctx, items)

    ctx = draw_receipt_totals(rc, ctx, total_lines(_total_rows(record), rc))
    ctx = draw_receipt_text(rc, ctx, number_to_words(record.total_amount), size=6.5)

    if record.payments:
        ctx = draw_receipt_rule(rc, ctx)
        ctx = draw_receipt_text(rc, ctx, "Payment History", size=8, bold=True)
        for payment in record.payments:
            ctx = draw_receipt_line(
                rc, ctx,
                f"{format_date(payment.created_at)} {payment.payment_method}",
                rc.money(payment.amount),
                size=7,
            )

    ctx = draw_receipt_rule(rc, ctx)
    ctx = draw_receipt_text(rc, ctx, INVOICE_TERMS, size=6)
    return draw_receipt_text(rc, ctx, INVOICE_THANKS, size=7.5, bold=True, align="center")


@register(DocumentKind.INVOICE, PAGE_FORMATS, [InvoiceCopy.ORIGINAL])
def render_original(rc: RenderContext, record: InvoiceRecord) -> LayoutContext:
    return _render_page(rc, record, InvoiceCopy.ORIGINAL)


@register(DocumentKind.INVOICE, PAGE_FORMATS, [InvoiceCopy.DUPLICATE])
def render_duplicate(rc: RenderContext, record: InvoiceRecord) -> LayoutContext:
    return _render_page(rc, record, InvoiceCopy.DUPLICATE)


@register(DocumentKind.INVOICE, PAGE_FORMATS, [InvoiceCopy.CUSTOMER])
def render_customer_copy(rc: RenderContext, record: InvoiceRecord) -> LayoutContext:
    return _render_page(rc, record, InvoiceCopy.CUSTOMER)


@register(DocumentKind.INVOICE, THERMAL_FORMATS, [InvoiceCopy.ORIGINAL])
def render_original_receipt(rc: RenderContext, record: InvoiceRecord) -> LayoutContext:
    return _render_receipt(rc, record, InvoiceCopy.ORIGINAL)


@register(DocumentKind.INVOICE, THERMAL_FORMATS, [InvoiceCopy.DUPLICATE])
def render_duplicate_receipt(rc: RenderContext, record: InvoiceRecord) -> LayoutContext:
    return _render_receipt(rc, record, InvoiceCopy.DUPLICATE)


@register(DocumentKind.INVOICE, THERMAL_FORMATS, [InvoiceCopy.CUSTOMER])
def render_customer_receipt(rc: RenderContext, record: InvoiceRecord) -> LayoutContext:
    return _render_receipt(rc, record, InvoiceCopy.CUSTOMER)
