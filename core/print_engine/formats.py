"""
Format Catalog - physical page geometry per paper format.

Page sheets (A4, A5) have a fixed size. Thermal rolls have a fixed width
and an open-ended height: ``height`` is only the nominal minimum, the
renderer grows the page to the measured content.
"""

from dataclasses import dataclass
from typing import Dict, Tuple, Union

from reportlab.lib.pagesizes import A4, A5

from .models import DocumentKind, PaperFormat


THERMAL_3IN_WIDTH = 216.0   # 3 inch roll
THERMAL_2IN_WIDTH = 144.0   # 2 inch roll
THERMAL_NOMINAL_HEIGHT = 720.0


@dataclass(frozen=True)
class PageFormat:
    """Page layout specification (points)"""
    key: PaperFormat
    width: float
    height: float
    margin: float
    is_thermal: bool = False
    scale: float = 1.0   # font / row-height multiplier

    @property
    def size(self) -> Tuple[float, float]:
        return (self.width, self.height)

    @property
    def content_width(self) -> float:
        return self.width - 2 * self.margin

    @property
    def is_compact(self) -> bool:
        return self.key != PaperFormat.A4

    @property
    def label(self) -> str:
        """Upper-case label used in file names (A4, A5, THERMAL, THERMAL-2)"""
        return self.key.value.upper()

    def with_height(self, height: float) -> "PageFormat":
        return PageFormat(
            key=self.key, width=self.width, height=height,
            margin=self.margin, is_thermal=self.is_thermal, scale=self.scale,
        )


# (width, height, scale)
_SIZES: Dict[PaperFormat, Tuple[float, float, float]] = {
    PaperFormat.A4: (A4[0], A4[1], 1.0),
    PaperFormat.A5: (A5[0], A5[1], 0.72),
    PaperFormat.THERMAL: (THERMAL_3IN_WIDTH, THERMAL_NOMINAL_HEIGHT, 1.0),
    PaperFormat.THERMAL_2: (THERMAL_2IN_WIDTH, THERMAL_NOMINAL_HEIGHT, 0.8),
}

# Job sheets were laid out with tighter margins than invoices/estimates
_MARGINS: Dict[DocumentKind, Dict[PaperFormat, float]] = {
    DocumentKind.JOB_SHEET: {
        PaperFormat.A4: 40, PaperFormat.A5: 25,
        PaperFormat.THERMAL: 10, PaperFormat.THERMAL_2: 5,
    },
    DocumentKind.INVOICE: {
        PaperFormat.A4: 50, PaperFormat.A5: 30,
        PaperFormat.THERMAL: 10, PaperFormat.THERMAL_2: 5,
    },
    DocumentKind.ESTIMATE: {
        PaperFormat.A4: 50, PaperFormat.A5: 30,
        PaperFormat.THERMAL: 10, PaperFormat.THERMAL_2: 5,
    },
}


def get_page_format(
    key: Union[str, PaperFormat, None],
    kind: DocumentKind = DocumentKind.INVOICE,
) -> PageFormat:
    """
    Look up page geometry for a format key.

    Unknown keys resolve to A4 so a document can always be produced.

    Args:
        key: Format key ('a4', 'a5', 'thermal', 'thermal-2') or PaperFormat
        kind: Document kind (margins differ slightly by kind)

    Returns:
        PageFormat
    """
    paper = PaperFormat.from_key(key)
    width, height, scale = _SIZES[paper]
    return PageFormat(
        key=paper,
        width=width,
        height=height,
        margin=float(_MARGINS[kind][paper]),
        is_thermal=paper.is_thermal,
        scale=scale,
    )
