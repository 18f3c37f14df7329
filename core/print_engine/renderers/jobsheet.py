"""
Job sheet renderers.

Page formats (A4/A5) share one routine per copy type; thermal rolls get
receipt-style routines. The combined copy prints the customer slip and
the office slip separated by a cut line.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from ..currency import format_date, number_to_words
from ..layout import (
    Column,
    LayoutContext,
    RenderContext,
    draw_amount_in_words,
    draw_badge,
    draw_company_header,
    draw_cut_line,
    draw_footer_note,
    draw_identification_bar,
    draw_item_table,
    draw_office_strip,
    draw_panels,
    draw_receipt_header,
    draw_receipt_items,
    draw_receipt_line,
    draw_receipt_rule,
    draw_receipt_signature,
    draw_receipt_text,
    draw_receipt_totals,
    draw_signatures,
    draw_terms,
    draw_text_block,
    draw_title_bar,
    format_quantity,
)
from ..models import DocumentKind, ExtraSparePart, JobSheetCopy, JobSheetRecord
from .common import (
    DEFAULT_JOB_SHEET_FOOTER,
    DEFAULT_JOB_SHEET_TERMS,
    DOCUMENT_TITLES,
    PAGE_FORMATS,
    THERMAL_FORMATS,
    customer_rows,
    discount_row,
    draw_money_totals,
    draw_trailing_block,
    join_names,
    total_lines,
)
from .registry import register

TITLE = DOCUMENT_TITLES[DocumentKind.JOB_SHEET]
PANEL_HEIGHT = 84

TAGGED_PART_COLUMNS = [
    Column("Part", 0.32),
    Column("Part No.", 0.15),
    Column("Fault", 0.17),
    Column("Qty", 0.08, "center"),
    Column("Rate", 0.14, "right"),
    Column("Amount", 0.14, "right"),
]

EXTRA_PART_COLUMNS = [
    Column("Part", 0.36),
    Column("Qty", 0.08, "center"),
    Column("Amount", 0.16, "right"),
    Column("Approval", 0.40),
]


@dataclass(frozen=True)
class JobSheetTotals:
    estimated: float
    labour: float
    approved_extras: float
    pending_extras: float
    discount: float
    total: float
    advance: float
    balance: float


def compute_totals(record: JobSheetRecord) -> JobSheetTotals:
    """
    Money summary for a job sheet.

    Only approved extra spare parts are added to the total; pending ones are
    listed on the sheet but not charged. Without itemised extras the
    service's stored extra spare amount is used.
    """
    service = record.service
    extras = record.extra_spare_parts
    if extras:
        approved = sum(p.total_price for p in extras if p.is_approved)
    else:
        approved = service.extra_spare_amount
    pending = sum(p.total_price for p in extras if not p.is_approved)

    total = service.estimated_cost + service.labour_charge + approved - abs(service.discount)
    return JobSheetTotals(
        estimated=service.estimated_cost,
        labour=service.labour_charge,
        approved_extras=approved,
        pending_extras=pending,
        discount=service.discount,
        total=total,
        advance=service.advance_payment,
        balance=total - service.advance_payment,
    )


def approval_state(part: ExtraSparePart) -> str:
    if part.is_approved:
        state = f"Approved ({part.approval_method})" if part.approval_method else "Approved"
    else:
        state = "Pending approval"
    if part.approval_note:
        state = f"{state} - {part.approval_note}"
    return state


def _total_rows(totals: JobSheetTotals) -> List[Tuple[str, Optional[float], bool]]:
    return [
        ("Estimated Cost", totals.estimated, False),
        ("Labour Charge", totals.labour or None, False),
        ("Approved Extra Spares", totals.approved_extras or None, False),
        ("Discount", discount_row(totals.discount), False),
        ("Total", totals.total, True),
        ("Advance Paid", totals.advance, False),
        ("Balance Due", totals.balance, True),
    ]


def _identification(record: JobSheetRecord) -> List[Tuple[str, str]]:
    service = record.service
    return [
        ("Job Sheet No", record.job_sheet_number),
        ("Ticket No", service.ticket_number),
        ("Date", format_date(service.created_at)),
        ("Status", service.status or ""),
    ]


def _badges(record: JobSheetRecord) -> List[Tuple[str, str]]:
    service = record.service
    badges = []
    if service.is_warranty_repair:
        badges.append(("WARRANTY REPAIR", service.warranty_reason or ""))
    if service.is_repeated_service:
        previous = f"Previous ticket {service.previous_service_ticket}" if service.previous_service_ticket else ""
        badges.append(("REPEAT SERVICE", previous))
    return badges


def _device_rows(record: JobSheetRecord, office: bool) -> List[Tuple[str, str]]:
    service = record.service
    device = record.customer_device
    brand = ""
    if device is not None:
        brand = " ".join(p for p in (device.brand_name, device.model_name) if p)
    rows = [
        ("Model", service.device_model),
        ("Brand", brand),
        ("Colour", device.color if device and device.color else ""),
        ("IMEI", service.device_imei or (device.imei if device and device.imei else "")),
    ]
    if office:
        rows += [
            ("Password", service.device_password or ""),
            ("Pattern", service.device_pattern or ""),
        ]
    return rows


def _condition_text(record: JobSheetRecord) -> str:
    parts = [join_names(record.damage_conditions), record.service.device_condition or ""]
    return ", ".join(p for p in parts if p)


def _tagged_part_rows(rc: RenderContext, record: JobSheetRecord) -> List[List[str]]:
    return [
        [
            part.part_name,
            part.part_number or "",
            part.fault_tag or "",
            format_quantity(part.quantity),
            rc.money(part.unit_price),
            rc.money(part.total_price),
        ]
        for part in record.tagged_parts
    ]


def _extra_part_rows(rc: RenderContext, record: JobSheetRecord) -> List[List[str]]:
    return [
        [part.part_name, format_quantity(part.quantity), rc.money(part.total_price), approval_state(part)]
        for part in record.extra_spare_parts
    ]


# ============ Page formats ============

def _head(rc: RenderContext, ctx: LayoutContext, record: JobSheetRecord, office: bool) -> LayoutContext:
    """Header through condition blocks; everything above the item sections."""
    template = record.template
    service = record.service

    if office:
        ctx = draw_office_strip(rc, ctx, record.branch)
        ctx = draw_title_bar(rc, ctx, TITLE, "OFFICE COPY")
    else:
        ctx = draw_company_header(
            rc, ctx, record.company, record.branch,
            show_logo=template.show_company_logo,
            show_contact=template.show_contact_details,
        )
        ctx = draw_title_bar(rc, ctx, TITLE, "CUSTOMER COPY")

    ctx = draw_identification_bar(rc, ctx, _identification(record))
    for text, detail in _badges(record):
        ctx = draw_badge(rc, ctx, text, detail)

    ctx = draw_panels(
        rc, ctx,
        ("Customer Details", customer_rows(record.customer)),
        ("Device Details", _device_rows(record, office)),
        PANEL_HEIGHT,
    )

    ctx = draw_text_block(rc, ctx, "Issue", service.issue)
    ctx = draw_text_block(rc, ctx, "Faults", join_names(record.faults), max_lines=2)
    ctx = draw_text_block(rc, ctx, "Accessories", join_names(record.accessories), max_lines=2)
    ctx = draw_text_block(rc, ctx, "Condition", _condition_text(record), max_lines=2)
    ctx = draw_text_block(rc, ctx, "Diagnosis", service.diagnosis)
    if office:
        ctx = draw_text_block(rc, ctx, "Intake Notes", service.intake_notes)
        ctx = draw_text_block(rc, ctx, "Data Warranty",
                              "Accepted by customer" if service.data_warranty_accepted else "Not accepted",
                              max_lines=1)
        staff = [
            f"Technician: {record.technician.name}" if record.technician else "",
            f"Created by: {record.created_by.name}" if record.created_by else "",
        ]
        ctx = draw_text_block(rc, ctx, "Staff", "   ".join(p for p in staff if p), max_lines=1)
    return ctx


def _item_sections(rc: RenderContext, ctx: LayoutContext, record: JobSheetRecord) -> LayoutContext:
    ctx = draw_item_table(rc, ctx, TAGGED_PART_COLUMNS, _tagged_part_rows(rc, record),
                          title="Parts Included in Estimate")
    ctx = draw_item_table(rc, ctx, EXTRA_PART_COLUMNS, _extra_part_rows(rc, record),
                          title="Extra Spare Parts (Approval Required)")
    return ctx


def _customer_section(rc: RenderContext, ctx: LayoutContext, record: JobSheetRecord,
                      with_items: bool = True) -> LayoutContext:
    template = record.template
    totals = compute_totals(record)

    ctx = _head(rc, ctx, record, office=False)
    if with_items:
        ctx = _item_sections(rc, ctx, record)

    def closing(rc: RenderContext, ctx: LayoutContext) -> LayoutContext:
        ctx = draw_money_totals(rc, ctx, _total_rows(totals))
        ctx = draw_amount_in_words(rc, ctx, totals.total)
        ctx = draw_terms(rc, ctx, template.terms_and_conditions or DEFAULT_JOB_SHEET_TERMS)
        ctx = draw_signatures(
            rc, ctx,
            "Customer Signature" if template.show_customer_signature else None,
            "Authorized Signatory" if template.show_authorized_signature else None,
        )
        return draw_footer_note(rc, ctx, template.footer_text or DEFAULT_JOB_SHEET_FOOTER)

    return draw_trailing_block(rc, ctx, closing)


def _office_section(rc: RenderContext, ctx: LayoutContext, record: JobSheetRecord) -> LayoutContext:
    totals = compute_totals(record)

    ctx = _head(rc, ctx, record, office=True)
    ctx = _item_sections(rc, ctx, record)

    def closing(rc: RenderContext, ctx: LayoutContext) -> LayoutContext:
        ctx = draw_money_totals(rc, ctx, _total_rows(totals))
        # office copies always carry both signatures
        return draw_signatures(rc, ctx, "Customer Signature", "Received By")

    return draw_trailing_block(rc, ctx, closing)


@register(DocumentKind.JOB_SHEET, PAGE_FORMATS, [JobSheetCopy.CUSTOMER])
def render_customer_copy(rc: RenderContext, record: JobSheetRecord) -> LayoutContext:
    return _customer_section(rc, rc.begin_page(), record)


@register(DocumentKind.JOB_SHEET, PAGE_FORMATS, [JobSheetCopy.OFFICE])
def render_office_copy(rc: RenderContext, record: JobSheetRecord) -> LayoutContext:
    return _office_section(rc, rc.begin_page(), record)


@register(DocumentKind.JOB_SHEET, PAGE_FORMATS, [JobSheetCopy.BOTH])
def render_combined_copy(rc: RenderContext, record: JobSheetRecord) -> LayoutContext:
    """Customer slip (without item tables), cut line, then the full office slip."""
    ctx = _customer_section(rc, rc.begin_page(), record, with_items=False)
    ctx = draw_cut_line(rc, ctx)
    ctx = rc.keep_together(ctx, rc.measure(lambda r, c: _head(r, c, record, office=True)))
    return _office_section(rc, ctx, record)


# ============ Thermal ============

def _receipt_head(rc: RenderContext, ctx: LayoutContext, record: JobSheetRecord, office: bool) -> LayoutContext:
    template = record.template
    service = record.service

    if not office:
        ctx = draw_receipt_header(
            rc, ctx, record.company, record.branch,
            show_logo=template.show_company_logo,
            show_contact=template.show_contact_details,
        )
    ctx = draw_receipt_text(rc, ctx, TITLE, size=10, bold=True, align="center")
    ctx = draw_receipt_text(rc, ctx, "OFFICE COPY" if office else "CUSTOMER COPY", size=7, align="center")

    for label, value in _identification(record):
        if value:
            ctx = draw_receipt_line(rc, ctx, label, value)
    for text, detail in _badges(record):
        ctx = draw_receipt_text(rc, ctx, f"{text}: {detail}" if detail else text, size=7.5, bold=True)
    ctx = draw_receipt_rule(rc, ctx)

    for label, value in customer_rows(record.customer)[:3] + _device_rows(record, office):
        if value:
            ctx = draw_receipt_text(rc, ctx, f"{label}: {value}")
    for label, value in (
        ("Issue", service.issue),
        ("Faults", join_names(record.faults)),
        ("Accessories", join_names(record.accessories)),
        ("Condition", _condition_text(record)),
        ("Diagnosis", service.diagnosis),
    ):
        if value:
            ctx = draw_receipt_text(rc, ctx, f"{label}: {value}")
    if office:
        ctx = draw_receipt_text(rc, ctx, f"Intake notes: {service.intake_notes}" if service.intake_notes else "")
        if record.technician:
            ctx = draw_receipt_text(rc, ctx, f"Technician: {record.technician.name}")
    return draw_receipt_rule(rc, ctx)


def _receipt_items(rc: RenderContext, ctx: LayoutContext, record: JobSheetRecord) -> LayoutContext:
    ctx = draw_receipt_items(
        rc, ctx,
        [(p.part_name, p.quantity, p.unit_price, p.total_price) for p in record.tagged_parts],
        title="Parts",
    )
    if record.extra_spare_parts:
        ctx = draw_receipt_text(rc, ctx, "Extra Spare Parts", size=8, bold=True)
        for part in record.extra_spare_parts:
            ctx = draw_receipt_line(rc, ctx, part.part_name, rc.money(part.total_price), size=7.5)
            ctx = draw_receipt_text(rc, ctx, f"  {approval_state(part)}", size=6.5)
        ctx = draw_receipt_rule(rc, ctx)
    return ctx


def _customer_receipt(rc: RenderContext, ctx: LayoutContext, record: JobSheetRecord,
                      with_items: bool = True) -> LayoutContext:
    template = record.template
    totals = compute_totals(record)

    ctx = _receipt_head(rc, ctx, record, office=False)
    if with_items:
        ctx = _receipt_items(rc, ctx, record)
    ctx = draw_receipt_totals(rc, ctx, total_lines(_total_rows(totals), rc))
    ctx = draw_receipt_text(rc, ctx, number_to_words(totals.total), size=6.5)
    ctx = draw_receipt_rule(rc, ctx)
    ctx = draw_receipt_text(rc, ctx, template.terms_and_conditions or DEFAULT_JOB_SHEET_TERMS, size=6)
    if template.show_customer_signature:
        ctx = draw_receipt_signature(rc, ctx, "Customer Signature")
    return draw_receipt_text(rc, ctx, template.footer_text or DEFAULT_JOB_SHEET_FOOTER, size=6, align="center")


def _office_receipt(rc: RenderContext, ctx: LayoutContext, record: JobSheetRecord) -> LayoutContext:
    totals = compute_totals(record)
    ctx = _receipt_head(rc, ctx, record, office=True)
    ctx = _receipt_items(rc, ctx, record)
    ctx = draw_receipt_totals(rc, ctx, total_lines(_total_rows(totals), rc))
    ctx = draw_receipt_signature(rc, ctx, "Customer Signature")
    return draw_receipt_signature(rc, ctx, "Received By")


@register(DocumentKind.JOB_SHEET, THERMAL_FORMATS, [JobSheetCopy.CUSTOMER])
def render_customer_receipt(rc: RenderContext, record: JobSheetRecord) -> LayoutContext:
    return _customer_receipt(rc, rc.begin_page(), record)


@register(DocumentKind.JOB_SHEET, THERMAL_FORMATS, [JobSheetCopy.OFFICE])
def render_office_receipt(rc: RenderContext, record: JobSheetRecord) -> LayoutContext:
    return _office_receipt(rc, rc.begin_page(), record)


@register(DocumentKind.JOB_SHEET, THERMAL_FORMATS, [JobSheetCopy.BOTH])
def render_combined_receipt(rc: RenderContext, record: JobSheetRecord) -> LayoutContext:
    ctx = _customer_receipt(rc, rc.begin_page(), record, with_items=False)
    ctx = draw_cut_line(rc, ctx)
    return _office_receipt(rc, ctx, record)
