"""
Print Engine - job sheets, invoices and estimates as print-ready PDFs.

This module provides:
- Page geometry for A4, A5 and 3"/2" thermal rolls
- Logo resolution with signature validation
- Currency font selection with a Helvetica fallback
- Indian-format currency and amount-in-words
- Per-variant renderers with automatic page breaks
- Atomic file output and retrieval locators

Usage:
    from core.print_engine import DocumentEngine

    engine = DocumentEngine()
    result = engine.render_invoice(invoice_record, format_key="a4", copy_key="original")
    print(result.locator)
    # http://localhost:5000/uploads/invoices/invoice_INV-0042_A4_ORIGINAL_1718000000000.pdf

    # Bytes only, nothing stored
    built = engine.build(DocumentKind.JOB_SHEET, job_sheet, "thermal", "both")

Key components:
- DocumentEngine: Render + store facade
- AssetResolver: Logo lookup
- FontManager / Typography: Font selection
- Paginator: Page-break controller
- LocalStorage / MemoryStorage: Output ports
"""

from .assets import AssetResolver, ResolutionEvent
from .currency import format_currency, number_to_words
from .engine import BuiltDocument, DocumentEngine, RenderedDocument
from .exceptions import OutputWriteError, PrintEngineError, UnsupportedVariantError
from .formats import PageFormat, get_page_format
from .layout import LayoutContext, RenderContext
from .models import (
    DocumentKind,
    EstimateCopy,
    EstimateRecord,
    InvoiceCopy,
    InvoiceRecord,
    JobSheetCopy,
    JobSheetRecord,
    PaperFormat,
)
from .pagination import Paginator, ensure_room
from .surface import PdfSurface, RecordingSurface
from .typography import FontManager, Typography
from .writer import LocalStorage, MemoryStorage, StoragePort


__all__ = [
    # Engine
    'DocumentEngine',
    'BuiltDocument',
    'RenderedDocument',

    # Records
    'DocumentKind',
    'PaperFormat',
    'JobSheetCopy',
    'InvoiceCopy',
    'EstimateCopy',
    'JobSheetRecord',
    'InvoiceRecord',
    'EstimateRecord',

    # Components
    'AssetResolver',
    'ResolutionEvent',
    'FontManager',
    'Typography',
    'PageFormat',
    'get_page_format',
    'format_currency',
    'number_to_words',
    'LayoutContext',
    'RenderContext',
    'Paginator',
    'ensure_room',
    'PdfSurface',
    'RecordingSurface',

    # Storage
    'StoragePort',
    'LocalStorage',
    'MemoryStorage',

    # Errors
    'PrintEngineError',
    'UnsupportedVariantError',
    'OutputWriteError',
]


__version__ = '1.0.0'
