"""
Renderer dispatch table.

Each (DocumentKind, PaperFormat, copy type) triple maps to exactly one
draw function. Renderer modules register themselves with ``@register``;
``check_exhaustive`` runs once all of them are imported.
"""

from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Tuple

from ..exceptions import UnsupportedVariantError
from ..layout import LayoutContext, RenderContext
from ..models import COPY_TYPES, DocumentKind, PaperFormat

RendererFn = Callable[[RenderContext, Any], LayoutContext]
VariantKey = Tuple[DocumentKind, PaperFormat, Enum]

RENDERERS: Dict[VariantKey, RendererFn] = {}


def register(kind: DocumentKind, formats: Iterable[PaperFormat], copies: Iterable[Enum]):
    """
    Register a draw function for every (format, copy) pair given.

    Usage:
        @register(DocumentKind.INVOICE, PAGE_FORMATS, InvoiceCopy)
        def render_invoice_page(rc, record): ...
    """
    formats = list(formats)
    copies = list(copies)

    def decorator(fn: RendererFn) -> RendererFn:
        for paper in formats:
            for copy in copies:
                if not isinstance(copy, COPY_TYPES[kind]):
                    raise TypeError(f"{copy!r} is not a {kind.value} copy type")
                key = (kind, paper, copy)
                if key in RENDERERS:
                    raise ValueError(f"Duplicate renderer for {kind.value} / {paper.value} / {copy.value}")
                RENDERERS[key] = fn
        return fn

    return decorator


def missing_variants() -> List[VariantKey]:
    return [
        (kind, paper, copy)
        for kind, copy_type in COPY_TYPES.items()
        for paper in PaperFormat
        for copy in copy_type
        if (kind, paper, copy) not in RENDERERS
    ]


def check_exhaustive() -> None:
    """Fail at import time when a variant has no renderer."""
    missing = missing_variants()
    if missing:
        names = ", ".join(f"{k.value}/{p.value}/{c.value}" for k, p, c in missing)
        raise RuntimeError(f"Renderer table is incomplete: {names}")


def get_renderer(kind: DocumentKind, paper: PaperFormat, copy: Enum) -> RendererFn:
    """
    Look up the draw function for a variant.

    Raises:
        UnsupportedVariantError: copy type does not belong to *kind*, or no
            renderer is registered
    """
    copy_type = COPY_TYPES.get(kind)
    if copy_type is None or not isinstance(paper, PaperFormat) or not isinstance(copy, copy_type):
        raise UnsupportedVariantError(kind, paper, copy)
    try:
        return RENDERERS[(kind, paper, copy)]
    except KeyError:
        raise UnsupportedVariantError(kind, paper, copy) from None
