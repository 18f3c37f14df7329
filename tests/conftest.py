"""
Shared fixtures for print engine tests.
"""

import struct
import zlib
from pathlib import Path

import pytest
from PIL import Image

from config.settings import Settings
from core.print_engine.engine import DocumentEngine, parse_copy
from core.print_engine.formats import get_page_format
from core.print_engine.layout import RenderContext
from core.print_engine.models import (
    DocumentKind,
    EstimateRecord,
    InvoiceRecord,
    JobSheetRecord,
)
from core.print_engine.renderers import get_renderer
from core.print_engine.renderers.common import DOCUMENT_TITLES, REPEAT_WATERMARK
from core.print_engine.surface import RecordingSurface
from core.print_engine.typography import STANDARD_TYPOGRAPHY
from core.print_engine.writer import MemoryStorage

FIXED_TIMESTAMP = 1718000000000
CREATED_AT = "2024-06-10T11:30:00"


def write_png(path: Path, size=(120, 60), color=(31, 78, 121)) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGB", size, color).save(path, format="PNG")
    return path


def write_jpeg(path: Path, size=(80, 80), color=(200, 40, 40)) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGB", size, color).save(path, format="JPEG")
    return path


def _png_chunk(tag: bytes, data: bytes) -> bytes:
    return struct.pack(">I", len(data)) + tag + data + struct.pack(">I", zlib.crc32(tag + data))


def write_broken_png(path: Path, size=(40, 20)) -> Path:
    """PNG signature and a valid header, but pixel data that will not inflate."""
    path.parent.mkdir(parents=True, exist_ok=True)
    header = struct.pack(">IIBBBBB", size[0], size[1], 8, 2, 0, 0, 0)
    path.write_bytes(
        b"\x89PNG\r\n\x1a\n"
        + _png_chunk(b"IHDR", header)
        + _png_chunk(b"IDAT", b"this is not deflate data" * 8)
        + _png_chunk(b"IEND", b"")
    )
    return path


# ---------------------------------------------------------------------------
# Record data (camelCase, as the API layer sends it)
# ---------------------------------------------------------------------------

def company_data(logo=None):
    return {
        "name": "FixIt Mobile Care",
        "address": "12 MG Road, Bengaluru",
        "phone": "080-4000-1234",
        "email": "care@fixit.example",
        "gst": "29ABCDE1234F1Z5",
        "logo": logo,
    }


def branch_data():
    return {
        "name": "Indiranagar",
        "address": "100 Feet Road, Indiranagar",
        "phone": "080-4000-5678",
        "email": "indiranagar@fixit.example",
    }


def customer_data():
    return {
        "name": "Asha Rao",
        "phone": "9876543210",
        "whatsappNumber": "9876543210",
        "email": "asha@example.com",
        "address": "4th Cross, Jayanagar",
    }


def job_sheet_data(repeat=False, warranty=False, tagged=2, extras=None, template=None, logo=None):
    if extras is None:
        extras = [
            {"partName": "Back Glass", "quantity": 1, "unitPrice": 300, "totalPrice": 300,
             "isApproved": True, "approvalMethod": "WhatsApp"},
            {"partName": "Charging Port", "quantity": 1, "unitPrice": 500, "totalPrice": 500,
             "isApproved": False},
        ]
    return {
        "jobSheetNumber": "JS-2024-0007",
        "service": {
            "ticketNumber": "TKT-1001",
            "createdAt": CREATED_AT,
            "deviceModel": "Galaxy S21",
            "deviceIMEI": "356789012345678",
            "devicePassword": "1234",
            "devicePattern": "L-shape",
            "deviceCondition": "Minor scratches",
            "intakeNotes": "Customer dropped phone in water",
            "issue": "Display flickering and not charging",
            "diagnosis": "Display connector loose",
            "estimatedCost": 1000,
            "labourCharge": 200,
            "discount": 100,
            "advancePayment": 400,
            "isWarrantyRepair": warranty,
            "warrantyReason": "Same fault within 30 days" if warranty else None,
            "isRepeatedService": repeat,
            "previousServiceTicket": "TKT-0950" if repeat else None,
            "dataWarrantyAccepted": True,
            "status": "RECEIVED",
        },
        "customer": customer_data(),
        "customerDevice": {"brandName": "Samsung", "modelName": "S21", "color": "Black", "imei": "356789012345678"},
        "accessories": [{"name": "Back cover"}, {"name": "SIM tray"}],
        "damageConditions": [{"name": "Cracked corner"}],
        "faults": [{"name": "Display"}, {"name": "Charging"}],
        "taggedParts": [
            {"partName": f"Tagged Part {i}", "partNumber": f"P-{i:03d}", "quantity": 1,
             "unitPrice": 150, "totalPrice": 150, "faultTag": "Display"}
            for i in range(1, tagged + 1)
        ],
        "extraSpareParts": extras,
        "branch": branch_data(),
        "company": company_data(logo),
        "technician": {"name": "Ravi"},
        "createdBy": {"name": "Meena"},
        "template": template or {},
    }


def invoice_data(parts=3, payments=1, repeat=False, actual_cost=1200.0, logo=None):
    part_rows = [
        {"partName": f"Part {i}", "quantity": 1, "unitPrice": 100, "totalPrice": 100}
        for i in range(1, parts + 1)
    ]
    total = (actual_cost or 800.0) + 100 * parts
    paid = 500.0 * payments
    return {
        "invoiceNumber": "INV-0042",
        "invoiceDate": CREATED_AT,
        "service": {
            "ticketNumber": "TKT-1001",
            "createdAt": CREATED_AT,
            "deviceModel": "iPhone 12",
            "issue": "Battery drains fast",
            "diagnosis": "Battery worn out",
            "actualCost": actual_cost,
            "estimatedCost": 800.0,
            "completedAt": CREATED_AT,
            "isRepeatedService": repeat,
        },
        "customer": customer_data(),
        "branch": branch_data(),
        "company": company_data(logo),
        "parts": part_rows,
        "payments": [
            {"amount": 500.0, "paymentMethod": "UPI", "transactionId": f"UPI{i:06d}", "createdAt": CREATED_AT}
            for i in range(payments)
        ],
        "totalAmount": total,
        "paidAmount": paid,
        "balanceAmount": total - paid,
        "paymentStatus": "PARTIAL" if payments else "PENDING",
    }


def estimate_data(items=3, tax=180.0, notes="Screen replacement requires 2 working days.", logo=None):
    rows = [
        {"description": f"Item {i}", "quantity": 2, "unitPrice": 250, "amount": 500}
        for i in range(1, items + 1)
    ]
    subtotal = 500.0 * items
    return {
        "estimateNumber": "EST-0100",
        "estimateDate": CREATED_AT,
        "validUntil": "2024-06-24T00:00:00",
        "customer": customer_data(),
        "service": {"ticketNumber": "TKT-1001", "deviceModel": "Pixel 7", "issue": "Cracked screen"},
        "items": rows,
        "subtotal": subtotal,
        "taxAmount": tax,
        "totalAmount": subtotal + tax,
        "notes": notes,
        "branch": branch_data(),
        "company": company_data(logo),
    }


# ---------------------------------------------------------------------------
# Record fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def job_sheet():
    return JobSheetRecord.model_validate(job_sheet_data())


@pytest.fixture
def invoice():
    return InvoiceRecord.model_validate(invoice_data())


@pytest.fixture
def estimate():
    return EstimateRecord.model_validate(estimate_data())


@pytest.fixture
def records(job_sheet, invoice, estimate):
    return {
        DocumentKind.JOB_SHEET: job_sheet,
        DocumentKind.INVOICE: invoice,
        DocumentKind.ESTIMATE: estimate,
    }


# ---------------------------------------------------------------------------
# Engine fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def test_settings(tmp_path):
    """Settings rooted in tmp_path; no fonts, no logos."""
    return Settings(
        storage_root=tmp_path / "uploads",
        is_ephemeral_environment=False,
        base_url="http://localhost:5000/",
        fonts_directory=tmp_path / "fonts",
        logos_directory=tmp_path / "public" / "uploads" / "logos",
        web_root=tmp_path / "public",
    )


@pytest.fixture
def memory_storage():
    return MemoryStorage()


@pytest.fixture
def memory_engine(test_settings, memory_storage):
    return DocumentEngine(settings=test_settings, storage=memory_storage, clock=lambda: FIXED_TIMESTAMP)


@pytest.fixture
def render_recording():
    """
    Render a record onto a RecordingSurface with standard fonts and no logo.

    Returns a function (kind, record, format_key="a4", copy=None) -> surface.
    """
    def _render(kind, record, format_key="a4", copy=None, logo=None):
        page = get_page_format(format_key, kind)
        copy = parse_copy(kind, copy)
        renderer = get_renderer(kind, page.key, copy)
        surface = RecordingSurface(page.width, page.height)
        rc = RenderContext.create(
            surface, page, STANDARD_TYPOGRAPHY, logo,
            DOCUMENT_TITLES[kind], record.number,
            REPEAT_WATERMARK if record.is_repeat else None,
        )
        renderer(rc, record)
        return surface

    return _render


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------

@pytest.fixture
def make_job_sheet():
    return lambda **kwargs: JobSheetRecord.model_validate(job_sheet_data(**kwargs))


@pytest.fixture
def make_invoice():
    return lambda **kwargs: InvoiceRecord.model_validate(invoice_data(**kwargs))


@pytest.fixture
def make_estimate():
    return lambda **kwargs: EstimateRecord.model_validate(estimate_data(**kwargs))


@pytest.fixture
def record_data():
    """Raw camelCase dicts, as loaded from JSON"""
    return {
        DocumentKind.JOB_SHEET: job_sheet_data,
        DocumentKind.INVOICE: invoice_data,
        DocumentKind.ESTIMATE: estimate_data,
    }


@pytest.fixture
def png_file():
    return write_png


@pytest.fixture
def jpeg_file():
    return write_jpeg


@pytest.fixture
def broken_png_file():
    return write_broken_png
