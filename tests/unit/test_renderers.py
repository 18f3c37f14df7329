"""
Unit tests for the document renderers, drawn onto a RecordingSurface.
"""
import pytest

from core.print_engine.engine import parse_copy
from core.print_engine.exceptions import UnsupportedVariantError
from core.print_engine.models import (
    COPY_TYPES,
    DocumentKind,
    EstimateCopy,
    InvoiceCopy,
    InvoiceRecord,
    JobSheetCopy,
    PaperFormat,
)
from core.print_engine.renderers import RENDERERS, get_renderer, missing_variants
from core.print_engine.renderers.invoice import _total_rows as invoice_total_rows
from core.print_engine.renderers.invoice import gst_breakdown, service_charge
from core.print_engine.renderers.jobsheet import approval_state, compute_totals

ALL_VARIANTS = sorted(RENDERERS, key=lambda k: (k[0].value, k[1].value, k[2].value))


def text_ops(surface, page=None):
    return [op for op in surface.ops if op.kind == "text" and (page is None or op.page == page)]


# ---------------------------------------------------------------------------
# Dispatch table
# ---------------------------------------------------------------------------

class TestDispatch:
    def test_table_is_exhaustive(self):
        assert missing_variants() == []

    def test_variant_count(self):
        expected = sum(len(PaperFormat) * len(copy_type) for copy_type in COPY_TYPES.values())
        assert len(RENDERERS) == expected == 32

    def test_copy_type_of_other_kind_rejected(self):
        with pytest.raises(UnsupportedVariantError):
            get_renderer(DocumentKind.INVOICE, PaperFormat.A4, JobSheetCopy.CUSTOMER)

    def test_unknown_copy_key_rejected(self):
        with pytest.raises(UnsupportedVariantError):
            parse_copy(DocumentKind.INVOICE, "triplicate")

    def test_copy_key_parsing(self):
        assert parse_copy(DocumentKind.JOB_SHEET, " BOTH ") == JobSheetCopy.BOTH
        assert parse_copy(DocumentKind.INVOICE, None) == InvoiceCopy.ORIGINAL
        assert parse_copy(DocumentKind.ESTIMATE, EstimateCopy.OFFICE) == EstimateCopy.OFFICE

    def test_enum_of_wrong_kind_rejected(self):
        with pytest.raises(UnsupportedVariantError):
            parse_copy(DocumentKind.ESTIMATE, JobSheetCopy.BOTH)

    def test_page_formats_share_a_routine(self):
        a4 = get_renderer(DocumentKind.INVOICE, PaperFormat.A4, InvoiceCopy.ORIGINAL)
        a5 = get_renderer(DocumentKind.INVOICE, PaperFormat.A5, InvoiceCopy.ORIGINAL)
        thermal = get_renderer(DocumentKind.INVOICE, PaperFormat.THERMAL, InvoiceCopy.ORIGINAL)
        assert a4 is a5
        assert a4 is not thermal


# ---------------------------------------------------------------------------
# Every variant
# ---------------------------------------------------------------------------

class TestAllVariants:
    @pytest.mark.parametrize("kind,paper,copy", ALL_VARIANTS)
    def test_renders_with_title_and_number(self, render_recording, records, kind, paper, copy):
        record = records[kind]
        surface = render_recording(kind, record, paper.value, copy)

        texts = surface.texts()
        assert record.number in " ".join(texts)
        assert any(t in texts for t in ("JOB SHEET", "TAX INVOICE", "ESTIMATE / QUOTATION"))

    @pytest.mark.parametrize("kind,paper,copy", [v for v in ALL_VARIANTS if not v[1].is_thermal])
    def test_text_stays_on_page(self, render_recording, records, kind, paper, copy):
        surface = render_recording(kind, records[kind], paper.value, copy)
        for op in text_ops(surface):
            assert 0 < op.args["y"] <= surface.page_height

    @pytest.mark.parametrize("kind,paper,copy", ALL_VARIANTS)
    def test_no_watermark_without_repeat_flag(self, render_recording, records, kind, paper, copy):
        surface = render_recording(kind, records[kind], paper.value, copy)
        assert not [op for op in surface.ops if op.kind == "watermark"]


# ---------------------------------------------------------------------------
# Watermark
# ---------------------------------------------------------------------------

class TestWatermark:
    @pytest.mark.parametrize("paper", ["a4", "a5", "thermal", "thermal-2"])
    def test_job_sheet_watermark_drawn_first(self, render_recording, make_job_sheet, paper):
        surface = render_recording(DocumentKind.JOB_SHEET, make_job_sheet(repeat=True), paper, "customer")
        kind, args = surface.first_op(0)
        assert kind == "watermark"
        assert args["text"] == "REPEAT SERVICE"

    def test_watermark_on_every_page(self, render_recording, make_invoice):
        surface = render_recording(DocumentKind.INVOICE, make_invoice(parts=40, repeat=True), "a4", "original")
        assert surface.page_count == 2
        for page in range(surface.page_count):
            assert surface.first_op(page)[0] == "watermark"

    def test_repeat_badge(self, render_recording, make_job_sheet):
        surface = render_recording(DocumentKind.JOB_SHEET, make_job_sheet(repeat=True), "a4", "customer")
        assert "REPEAT SERVICE: Previous ticket TKT-0950" in surface.texts()


# ---------------------------------------------------------------------------
# Pagination of the invoice parts table
# ---------------------------------------------------------------------------

class TestInvoiceOverflow:
    def test_forty_parts_break_at_item_24(self, render_recording, make_invoice):
        surface = render_recording(DocumentKind.INVOICE, make_invoice(parts=40, payments=0), "a4", "original")

        assert surface.page_count == 2
        first, second = surface.texts(0), surface.texts(1)
        assert "Part 23" in first
        assert "Part 24" not in first
        assert "Part 24" in second
        assert "Part 40" in second

    def test_continuation_header_on_second_page(self, render_recording, make_invoice):
        surface = render_recording(DocumentKind.INVOICE, make_invoice(parts=40, payments=0), "a4", "original")
        kind, args = surface.first_op(1)
        assert kind == "text"
        assert args["text"] == "TAX INVOICE INV-0042 - Continued"

    def test_table_header_repeated_after_break(self, render_recording, make_invoice):
        surface = render_recording(DocumentKind.INVOICE, make_invoice(parts=40, payments=0), "a4", "original")
        assert surface.texts(0).count("Description") == 1
        assert surface.texts(1).count("Description") == 1

    def test_totals_once_on_final_page(self, render_recording, make_invoice):
        surface = render_recording(DocumentKind.INVOICE, make_invoice(parts=40, payments=0), "a4", "original")
        assert surface.texts().count("Balance Due") == 1
        assert "Balance Due" in surface.texts(surface.page_count - 1)

    def test_short_invoice_single_page(self, render_recording, invoice):
        surface = render_recording(DocumentKind.INVOICE, invoice, "a4", "original")
        assert surface.page_count == 1
        assert "Continued" not in " ".join(surface.texts())

    def test_totals_kept_together(self, render_recording, make_invoice):
        # the last part row fits on page one but the totals block does not
        surface = render_recording(DocumentKind.INVOICE, make_invoice(parts=22, payments=0), "a4", "original")

        assert surface.page_count == 2
        assert "Part 22" in surface.texts(0)
        assert "Subtotal" in surface.texts(1)
        assert "Balance Due" in surface.texts(1)

    def test_payment_history_section(self, render_recording, make_invoice):
        surface = render_recording(DocumentKind.INVOICE, make_invoice(payments=2), "a4", "original")
        texts = surface.texts()
        assert "Payment History" in texts
        assert "UPI000001" in texts

    def test_a5_breaks_earlier_than_a4(self, render_recording, make_invoice):
        record = make_invoice(parts=40, payments=0)
        a4 = render_recording(DocumentKind.INVOICE, record, "a4", "original")
        a5 = render_recording(DocumentKind.INVOICE, record, "a5", "original")
        assert a5.page_count >= a4.page_count
        assert "Part 24" not in a5.texts(0)

    def test_thermal_never_paginates(self, render_recording, make_invoice):
        surface = render_recording(DocumentKind.INVOICE, make_invoice(parts=40), "thermal", "original")
        assert surface.page_count == 1


# ---------------------------------------------------------------------------
# Invoice content
# ---------------------------------------------------------------------------

class TestInvoiceContent:
    def test_service_charge_uses_actual_cost(self, make_invoice):
        assert service_charge(make_invoice(actual_cost=1500.0)) == 1500.0

    def test_service_charge_falls_back_to_estimate(self, make_invoice):
        assert service_charge(make_invoice(actual_cost=None)) == 800.0

    def test_flat_gst_split(self):
        subtotal, cgst, sgst = gst_breakdown(1180)
        assert subtotal == pytest.approx(1000)
        assert cgst == pytest.approx(90)
        assert sgst == pytest.approx(90)

    def test_printed_totals_add_up_with_discount(self, render_recording, record_data):
        data = record_data[DocumentKind.INVOICE]()
        data.update(discount=100.0, totalAmount=1100.0, paidAmount=0.0, balanceAmount=1100.0)
        record = InvoiceRecord.model_validate(data)

        rows = {label: amount for label, amount, _ in invoice_total_rows(record) if amount is not None}
        assert "Discount" not in rows
        assert rows["Subtotal"] + rows["CGST (9%)"] + rows["SGST (9%)"] == pytest.approx(rows["Total Amount"])

        texts = render_recording(DocumentKind.INVOICE, record, "a4", "original").texts()
        assert "Rs.932.20" in texts
        assert texts.count("Rs.83.90") == 2
        assert "Rs.1,100.00" in texts
        assert not [t for t in texts if t.startswith("Discount")]

    def test_gst_labels(self, render_recording, invoice):
        texts = render_recording(DocumentKind.INVOICE, invoice, "a4", "original").texts()
        assert "CGST (9%)" in texts
        assert "SGST (9%)" in texts
        assert "Service Charge" in texts

    @pytest.mark.parametrize("copy,label", [
        ("original", "ORIGINAL FOR RECIPIENT"),
        ("duplicate", "DUPLICATE"),
        ("customer", "CUSTOMER COPY"),
    ])
    def test_copy_labels(self, render_recording, invoice, copy, label):
        for paper in ("a4", "thermal"):
            assert label in render_recording(DocumentKind.INVOICE, invoice, paper, copy).texts()

    def test_amount_in_words(self, render_recording, make_invoice):
        # 1200 service + 3 x 100 parts
        texts = render_recording(DocumentKind.INVOICE, make_invoice(), "a4", "original").texts()
        assert "One Thousand Five Hundred Rupees Only" in texts

    def test_fallback_currency_prefix(self, render_recording, invoice):
        texts = render_recording(DocumentKind.INVOICE, invoice, "a4", "original").texts()
        assert "Rs.1,500.00" in texts


# ---------------------------------------------------------------------------
# Job sheet content
# ---------------------------------------------------------------------------

class TestJobSheet:
    def test_totals_only_count_approved_extras(self, job_sheet):
        totals = compute_totals(job_sheet)
        # 1000 estimate + 200 labour + 300 approved extra - 100 discount
        assert totals.total == 1400
        assert totals.approved_extras == 300
        assert totals.pending_extras == 500
        assert totals.balance == 1000

    def test_stored_extra_amount_without_itemised_extras(self, make_job_sheet, record_data):
        data = record_data[DocumentKind.JOB_SHEET](extras=[])
        data["service"]["extraSpareAmount"] = 250
        from core.print_engine.models import JobSheetRecord
        totals = compute_totals(JobSheetRecord.model_validate(data))
        assert totals.approved_extras == 250

    def test_approval_state(self, job_sheet):
        approved, pending = job_sheet.extra_spare_parts
        assert approval_state(approved) == "Approved (WhatsApp)"
        assert approval_state(pending) == "Pending approval"

    def test_customer_copy_has_company_header_and_terms(self, render_recording, job_sheet):
        texts = render_recording(DocumentKind.JOB_SHEET, job_sheet, "a4", "customer").texts()
        assert "FixIt Mobile Care" in texts
        assert "Terms & Conditions:" in texts
        assert "1. Advance payment is non-refundable." in texts
        assert "Customer Signature" in texts
        assert "Authorized Signatory" in texts

    def test_customer_copy_hides_password(self, render_recording, job_sheet):
        texts = render_recording(DocumentKind.JOB_SHEET, job_sheet, "a4", "customer").texts()
        assert "Password:" not in texts

    def test_signature_toggles(self, render_recording, make_job_sheet):
        record = make_job_sheet(template={"showCustomerSignature": False, "showAuthorizedSignature": False})
        texts = render_recording(DocumentKind.JOB_SHEET, record, "a4", "customer").texts()
        assert "Customer Signature" not in texts
        assert "Authorized Signatory" not in texts

    def test_logo_and_contact_toggles(self, render_recording, make_job_sheet, tmp_path, png_file):
        logo = png_file(tmp_path / "logo.png")
        record = make_job_sheet(template={"showCompanyLogo": False, "showContactDetails": False})
        surface = render_recording(DocumentKind.JOB_SHEET, record, "a4", "customer", logo=logo)
        assert not [op for op in surface.ops if op.kind == "image"]
        assert not any("Indiranagar" in t for t in surface.texts())

    def test_logo_drawn_when_enabled(self, render_recording, job_sheet, tmp_path, png_file):
        logo = png_file(tmp_path / "logo.png")
        surface = render_recording(DocumentKind.JOB_SHEET, job_sheet, "a4", "customer", logo=logo)
        images = [op for op in surface.ops if op.kind == "image"]
        assert len(images) == 1
        assert images[0].args["path"] == str(logo)

    def test_custom_terms_and_footer(self, render_recording, make_job_sheet):
        record = make_job_sheet(template={"termsAndConditions": "No refunds.", "footerText": "See you soon"})
        texts = render_recording(DocumentKind.JOB_SHEET, record, "a4", "customer").texts()
        assert "No refunds." in texts
        assert "See you soon" in texts

    def test_office_copy_ignores_toggles(self, render_recording, make_job_sheet):
        record = make_job_sheet(template={"showCustomerSignature": False, "showAuthorizedSignature": False})
        texts = render_recording(DocumentKind.JOB_SHEET, record, "a4", "office").texts()
        assert "FixIt Mobile Care" not in texts
        assert "OFFICE COPY" in texts
        assert "Customer Signature" in texts
        assert "Received By" in texts
        assert "Password:" in texts

    def test_combined_copy_has_both_halves(self, render_recording, job_sheet):
        surface = render_recording(DocumentKind.JOB_SHEET, job_sheet, "a4", "both")
        texts = surface.texts()
        assert "CUSTOMER COPY" in texts
        assert "OFFICE COPY" in texts
        assert "cut here" in texts
        dashed = [op for op in surface.ops if op.kind == "line" and op.args["dashed"]]
        assert dashed

    def test_combined_thermal(self, render_recording, job_sheet):
        texts = render_recording(DocumentKind.JOB_SHEET, job_sheet, "thermal", "both").texts()
        assert texts.index("CUSTOMER COPY") < texts.index("cut here") < texts.index("OFFICE COPY")

    def test_warranty_badge(self, render_recording, make_job_sheet):
        texts = render_recording(DocumentKind.JOB_SHEET, make_job_sheet(warranty=True), "a4", "customer").texts()
        assert "WARRANTY REPAIR: Same fault within 30 days" in texts

    def test_parts_tables(self, render_recording, job_sheet):
        texts = render_recording(DocumentKind.JOB_SHEET, job_sheet, "a4", "customer").texts()
        assert "Parts Included in Estimate" in texts
        assert "Tagged Part 1" in texts
        assert "Extra Spare Parts (Approval Required)" in texts
        assert "Pending approval" in texts

    def test_many_tagged_parts_paginate(self, render_recording, make_job_sheet):
        surface = render_recording(DocumentKind.JOB_SHEET, make_job_sheet(tagged=45), "a4", "customer")
        assert surface.page_count >= 2
        assert surface.texts().count("Balance Due") == 1

    def test_a5_uses_smaller_type(self, render_recording, job_sheet):
        a4 = render_recording(DocumentKind.JOB_SHEET, job_sheet, "a4", "customer")
        a5 = render_recording(DocumentKind.JOB_SHEET, job_sheet, "a5", "customer")
        title_size = lambda s: next(op.args["size"] for op in text_ops(s) if op.args["text"] == "JOB SHEET")
        assert title_size(a5) < title_size(a4)


# ---------------------------------------------------------------------------
# Estimate content
# ---------------------------------------------------------------------------

class TestEstimate:
    def test_tax_split_and_notes(self, render_recording, estimate):
        texts = render_recording(DocumentKind.ESTIMATE, estimate, "a4", "customer").texts()
        assert "CGST (9%)" in texts
        assert "Total Estimate" in texts
        assert "Valid Until:" in texts
        assert "Notes:" in texts
        assert "Thank you for considering our services!" in texts

    def test_no_tax_rows_without_tax(self, render_recording, make_estimate):
        texts = render_recording(DocumentKind.ESTIMATE, make_estimate(tax=0), "a4", "customer").texts()
        assert "CGST (9%)" not in texts

    def test_office_copy_omits_header_and_terms(self, render_recording, estimate):
        texts = render_recording(DocumentKind.ESTIMATE, estimate, "a4", "office").texts()
        assert "FixIt Mobile Care" not in texts
        assert "Terms & Conditions:" not in texts
        assert "OFFICE COPY" in texts

    def test_without_service(self, render_recording, record_data):
        data = record_data[DocumentKind.ESTIMATE]()
        data["service"] = None
        from core.print_engine.models import EstimateRecord
        surface = render_recording(DocumentKind.ESTIMATE, EstimateRecord.model_validate(data), "a4", "customer")
        assert "Ticket No:" not in surface.texts()
