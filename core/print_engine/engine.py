"""
Document Engine - public entry point of the print engine.

Turns a fully populated record into a finished PDF, stores it and returns
a retrieval locator:

    record -> format catalog + typography -> asset resolver -> renderer
           -> storage port -> locator
"""

import asyncio
import time
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Type, Union

from config.logging_config import get_logger
from config.settings import Settings
from config.settings import settings as default_settings

from .assets import AssetResolver, ResolutionObserver
from .exceptions import UnsupportedVariantError
from .formats import PageFormat, get_page_format
from .layout import RenderContext
from .models import (
    COPY_TYPES,
    DocumentKind,
    EstimateCopy,
    EstimateRecord,
    InvoiceCopy,
    InvoiceRecord,
    JobSheetCopy,
    JobSheetRecord,
    PaperFormat,
    Record,
)
from .renderers import get_renderer
from .renderers.common import DOCUMENT_TITLES, REPEAT_WATERMARK
from .surface import PdfSurface, RecordingSurface
from .typography import FontManager
from .writer import LocalStorage, StoragePort, build_file_name, build_locator

logger = get_logger(__name__)

RECORD_TYPES: Dict[DocumentKind, Type[Record]] = {
    DocumentKind.JOB_SHEET: JobSheetRecord,
    DocumentKind.INVOICE: InvoiceRecord,
    DocumentKind.ESTIMATE: EstimateRecord,
}

DEFAULT_COPIES: Dict[DocumentKind, Enum] = {
    DocumentKind.JOB_SHEET: JobSheetCopy.CUSTOMER,
    DocumentKind.INVOICE: InvoiceCopy.ORIGINAL,
    DocumentKind.ESTIMATE: EstimateCopy.CUSTOMER,
}

FormatKey = Union[str, PaperFormat, None]
CopyKey = Union[str, Enum, None]


@dataclass(frozen=True)
class BuiltDocument:
    """PDF bytes of one render, before storage"""
    data: bytes
    page_count: int
    page_format: PageFormat
    copy: Enum


@dataclass(frozen=True)
class RenderedDocument:
    """Result of a stored render"""
    locator: str
    path: Path
    file_name: str
    page_count: int
    kind: DocumentKind
    paper_format: PaperFormat
    copy: Enum


def current_millis() -> int:
    return int(time.time() * 1000)


def parse_copy(kind: DocumentKind, copy_key: CopyKey) -> Enum:
    """
    Parse a copy-type key for a document kind.

    Raises:
        UnsupportedVariantError: key is not one of the kind's copy types
    """
    copy_type = COPY_TYPES[kind]
    if copy_key is None:
        return DEFAULT_COPIES[kind]
    if isinstance(copy_key, copy_type):
        return copy_key
    if isinstance(copy_key, Enum):
        raise UnsupportedVariantError(kind.value, "-", str(copy_key.value))
    try:
        return copy_type(str(copy_key).strip().lower())
    except ValueError:
        raise UnsupportedVariantError(kind.value, "-", str(copy_key)) from None


class DocumentEngine:
    """
    Renders job sheets, invoices and estimates.

    The engine holds configuration and collaborators only; every render
    call allocates its own surface and shares no layout state with other
    calls, so one engine can serve concurrent renders.

    Args:
        settings: Configuration (defaults to the process-wide settings)
        storage: Where documents are written (defaults to local files
            under the configured storage root)
        clock: Millisecond timestamp source used in file names
        observer: Receives logo resolution events
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        storage: Optional[StoragePort] = None,
        clock: Optional[Callable[[], int]] = None,
        observer: Optional[ResolutionObserver] = None,
    ):
        self.settings = settings or default_settings
        self.storage = storage or LocalStorage(self.settings.get_storage_root())
        self.clock = clock or current_millis
        self.assets = AssetResolver.from_settings(self.settings, observer)
        self.fonts = FontManager(self.settings.fonts_directory)

        self.storage.ensure_directories(kind.category for kind in DocumentKind)

    # ============ Building (no I/O besides asset reads) ============

    def build(
        self,
        kind: DocumentKind,
        record: Union[Record, Mapping[str, Any]],
        format_key: FormatKey = PaperFormat.A4,
        copy_key: CopyKey = None,
    ) -> BuiltDocument:
        """
        Render a record to PDF bytes.

        Args:
            kind: Document kind
            record: Record model, or a mapping validated into one
            format_key: 'a4', 'a5', 'thermal', 'thermal-2' (unknown -> A4)
            copy_key: Copy type of *kind* (None -> the kind's default)

        Raises:
            UnsupportedVariantError: copy type not valid for *kind*
        """
        record = self._coerce(kind, record)
        page = get_page_format(format_key, kind)
        copy = parse_copy(kind, copy_key)
        renderer = get_renderer(kind, page.key, copy)

        typography = self.fonts.resolve()
        logo = self.assets.resolve(record.company.logo)
        title = DOCUMENT_TITLES[kind]
        watermark = REPEAT_WATERMARK if record.is_repeat else None

        if page.is_thermal:
            # measuring pass on an unbounded roll
            probe = RecordingSurface(page.width, float("inf"))
            rc = RenderContext.create(probe, page, typography, logo, title, record.number, watermark)
            end = renderer(rc, record)
            page = page.with_height(max(end.y, probe.extent) + page.margin)

        surface = PdfSurface(
            page.width, page.height,
            title=f"{title} {record.number}",
            author=record.company.name,
        )
        rc = RenderContext.create(surface, page, typography, logo, title, record.number, watermark)
        renderer(rc, record)
        data = surface.finish()

        logger.debug(
            f"Rendered {kind.value} {record.number} ({page.label}/{copy.value}): "
            f"{surface.page_count} page(s), {len(data)} bytes"
        )
        return BuiltDocument(data=data, page_count=surface.page_count, page_format=page, copy=copy)

    # ============ Rendering + storage ============

    def render(
        self,
        kind: DocumentKind,
        record: Union[Record, Mapping[str, Any]],
        format_key: FormatKey = PaperFormat.A4,
        copy_key: CopyKey = None,
    ) -> RenderedDocument:
        """
        Render, store and return the locator.

        Raises:
            UnsupportedVariantError: copy type not valid for *kind*
            OutputWriteError: the document could not be stored
        """
        record = self._coerce(kind, record)
        built = self.build(kind, record, format_key, copy_key)

        file_name = build_file_name(kind, record.number, built.page_format, built.copy, self.clock())
        path = self.storage.write(kind.category, file_name, built.data)
        locator = build_locator(self.settings.get_base_url(), kind.category, file_name)

        logger.info(f"{kind.value} {record.number} -> {locator}")
        return RenderedDocument(
            locator=locator,
            path=path,
            file_name=file_name,
            page_count=built.page_count,
            kind=kind,
            paper_format=built.page_format.key,
            copy=built.copy,
        )

    def render_job_sheet(self, record, format_key: FormatKey = PaperFormat.A4,
                         copy_key: CopyKey = JobSheetCopy.CUSTOMER) -> RenderedDocument:
        return self.render(DocumentKind.JOB_SHEET, record, format_key, copy_key)

    def render_invoice(self, record, format_key: FormatKey = PaperFormat.A4,
                       copy_key: CopyKey = InvoiceCopy.ORIGINAL) -> RenderedDocument:
        return self.render(DocumentKind.INVOICE, record, format_key, copy_key)

    def render_estimate(self, record, format_key: FormatKey = PaperFormat.A4,
                        copy_key: CopyKey = EstimateCopy.CUSTOMER) -> RenderedDocument:
        return self.render(DocumentKind.ESTIMATE, record, format_key, copy_key)

    async def render_async(
        self,
        kind: DocumentKind,
        record: Union[Record, Mapping[str, Any]],
        format_key: FormatKey = PaperFormat.A4,
        copy_key: CopyKey = None,
        timeout: Optional[float] = None,
    ) -> RenderedDocument:
        """
        Run a render in a worker thread.

        With *timeout* set, ``asyncio.TimeoutError`` is raised when the
        deadline passes; the worker thread still runs to completion.
        """
        call = asyncio.to_thread(self.render, kind, record, format_key, copy_key)
        if timeout is None:
            return await call
        return await asyncio.wait_for(call, timeout)

    @staticmethod
    def _coerce(kind: DocumentKind, record: Union[Record, Mapping[str, Any]]) -> Record:
        record_type = RECORD_TYPES[kind]
        if isinstance(record, record_type):
            return record
        if isinstance(record, Record):
            raise TypeError(f"Expected {record_type.__name__}, got {type(record).__name__}")
        return record_type.model_validate(record)
