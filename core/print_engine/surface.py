"""
Drawing surfaces.

Renderers draw through a small port that uses top-down coordinates
(``y`` grows from the top edge of the page, like a text cursor). Two
implementations:

- PdfSurface: ReportLab canvas writing into an in-memory buffer
- RecordingSurface: keeps a list of draw operations; used to measure
  open-ended (thermal) pages and to inspect layouts in tests
"""

import io
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from reportlab.lib.colors import Color, HexColor, black
from reportlab.lib.utils import ImageReader, simpleSplit
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas as pdf_canvas

from config.logging_config import get_logger

logger = get_logger(__name__)

WATERMARK_OPACITY = 0.12
WATERMARK_COLOR = HexColor('#C00000')


class Surface(ABC):
    """Drawing port used by every renderer."""

    def __init__(self, page_width: float, page_height: float):
        self.page_width = page_width
        self.page_height = page_height
        self.page_index = 0

    @property
    def page_count(self) -> int:
        return self.page_index + 1

    # ---- measurement (shared, pure) ----

    def string_width(self, text: str, font: str, size: float) -> float:
        return stringWidth(text or "", font, size)

    def wrap(self, text: str, font: str, size: float, width: float) -> List[str]:
        """Split text into lines that fit *width*."""
        if not text:
            return []
        lines: List[str] = []
        for paragraph in str(text).splitlines() or [""]:
            lines.extend(simpleSplit(paragraph, font, size, width) or [""])
        return lines

    def fit_text(self, text: str, font: str, size: float, width: float) -> str:
        """Truncate a single line with an ellipsis so it fits *width*."""
        text = text or ""
        if self.string_width(text, font, size) <= width:
            return text
        while text and self.string_width(text + "...", font, size) > width:
            text = text[:-1]
        return text + "..."

    # ---- primitives ----

    @abstractmethod
    def text(self, x: float, y: float, text: str, font: str, size: float,
             align: str = "left", color: Color = black) -> None:
        """Draw one line; *y* is the baseline measured from the top edge."""

    @abstractmethod
    def line(self, x1: float, y1: float, x2: float, y2: float,
             width: float = 0.5, dashed: bool = False, color: Color = black) -> None:
        pass

    @abstractmethod
    def rect(self, x: float, y: float, w: float, h: float,
             fill: Optional[Color] = None, stroke: bool = True) -> None:
        """Rectangle whose top-left corner is (x, y)."""

    @abstractmethod
    def image(self, path: Path, x: float, y: float, max_w: float, max_h: float) -> float:
        """
        Draw an image scaled into the box at (x, y).

        Returns:
            Drawn width, or 0 when the image could not be drawn.
        """

    @abstractmethod
    def watermark(self, text: str, font: str) -> None:
        """Diagonal low-opacity label centred on the current page."""

    @abstractmethod
    def new_page(self) -> None:
        pass

    def watermark_size(self, text: str, font: str) -> float:
        diagonal = (self.page_width ** 2 + self.page_height ** 2) ** 0.5
        unit_width = self.string_width(text, font, 1) or 1
        return min(96.0, diagonal * 0.7 / unit_width)


class PdfSurface(Surface):
    """ReportLab canvas with top-down coordinates."""

    def __init__(self, page_width: float, page_height: float,
                 title: str = "", author: str = ""):
        super().__init__(page_width, page_height)
        self._buffer = io.BytesIO()
        # invariant: no timestamps or random IDs, identical input -> identical bytes
        self._canvas = pdf_canvas.Canvas(
            self._buffer,
            pagesize=(page_width, page_height),
            invariant=1,
        )
        self._canvas.setTitle(title)
        self._canvas.setAuthor(author)
        self._canvas.setCreator("print-engine")

    def _y(self, y: float) -> float:
        return self.page_height - y

    def text(self, x, y, text, font, size, align="left", color=black):
        c = self._canvas
        c.setFillColor(color)
        c.setFont(font, size)
        if align == "center":
            c.drawCentredString(x, self._y(y), text or "")
        elif align == "right":
            c.drawRightString(x, self._y(y), text or "")
        else:
            c.drawString(x, self._y(y), text or "")
        c.setFillColor(black)

    def line(self, x1, y1, x2, y2, width=0.5, dashed=False, color=black):
        c = self._canvas
        c.setStrokeColor(color)
        c.setLineWidth(width)
        if dashed:
            c.setDash(4, 3)
        c.line(x1, self._y(y1), x2, self._y(y2))
        if dashed:
            c.setDash()
        c.setStrokeColor(black)

    def rect(self, x, y, w, h, fill=None, stroke=True):
        c = self._canvas
        if fill is not None:
            c.setFillColor(fill)
        c.rect(x, self._y(y) - h, w, h, stroke=1 if stroke else 0, fill=1 if fill is not None else 0)
        c.setFillColor(black)

    def image(self, path, x, y, max_w, max_h):
        try:
            reader = ImageReader(str(path))
            iw, ih = reader.getSize()
            scale = min(max_w / float(iw), max_h / float(ih))
            w, h = iw * scale, ih * scale
            self._canvas.drawImage(reader, x, self._y(y) - h, width=w, height=h, mask="auto")
            return w
        except Exception as e:
            logger.warning(f"Skipping image {path}: {e}")
            return 0.0

    def watermark(self, text, font):
        c = self._canvas
        size = self.watermark_size(text, font)
        c.saveState()
        c.setFillColor(WATERMARK_COLOR)
        c.setFillAlpha(WATERMARK_OPACITY)
        c.translate(self.page_width / 2, self.page_height / 2)
        c.rotate(45)
        c.setFont(font, size)
        c.drawCentredString(0, -size / 3, text)
        c.restoreState()
        c.setFillAlpha(1)

    def new_page(self):
        self._canvas.showPage()
        self.page_index += 1

    def finish(self) -> bytes:
        """Close the last page and return the PDF bytes."""
        self._canvas.showPage()
        self._canvas.save()
        return self._buffer.getvalue()


@dataclass
class DrawOp:
    """One recorded draw call"""
    page: int
    kind: str
    args: Dict[str, Any] = field(default_factory=dict)


class RecordingSurface(Surface):
    """
    Surface that records operations instead of drawing.

    ``extent`` is the lowest point (from the top) touched on the last page,
    used to size open-ended thermal pages.
    """

    def __init__(self, page_width: float, page_height: float):
        super().__init__(page_width, page_height)
        self.ops: List[DrawOp] = []
        self.extent = 0.0

    def _record(self, kind: str, bottom: float, **args) -> None:
        self.ops.append(DrawOp(page=self.page_index, kind=kind, args=args))
        self.extent = max(self.extent, bottom)

    def text(self, x, y, text, font, size, align="left", color=black):
        self._record("text", y + size * 0.3, x=x, y=y, text=text, font=font, size=size, align=align)

    def line(self, x1, y1, x2, y2, width=0.5, dashed=False, color=black):
        self._record("line", max(y1, y2), x1=x1, y1=y1, x2=x2, y2=y2, dashed=dashed)

    def rect(self, x, y, w, h, fill=None, stroke=True):
        self._record("rect", y + h, x=x, y=y, w=w, h=h)

    def image(self, path, x, y, max_w, max_h):
        # same decode PdfSurface does; an undrawable image takes no space
        try:
            ImageReader(str(path)).getRGBData()
        except Exception as e:
            logger.debug(f"Image {path} will not draw: {e}")
            return 0.0
        self._record("image", y + max_h, path=str(path), x=x, y=y, w=max_w, h=max_h)
        return max_w

    def watermark(self, text, font):
        self._record("watermark", 0, text=text, font=font, size=self.watermark_size(text, font))

    def new_page(self):
        self.page_index += 1
        self.extent = 0.0
        self.ops.append(DrawOp(page=self.page_index, kind="page"))

    # ---- inspection helpers ----

    def texts(self, page: Optional[int] = None) -> List[str]:
        return [
            op.args["text"] for op in self.ops
            if op.kind == "text" and (page is None or op.page == page)
        ]

    def ops_on_page(self, page: int) -> List[DrawOp]:
        return [op for op in self.ops if op.page == page and op.kind != "page"]

    def first_op(self, page: int) -> Optional[Tuple[str, Dict[str, Any]]]:
        ops = self.ops_on_page(page)
        return (ops[0].kind, ops[0].args) if ops else None
