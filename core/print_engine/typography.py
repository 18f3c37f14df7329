"""
Typography Resolver - pick the font family used for a render.

If the currency-capable TrueType pair (regular + bold) is present in the
fonts directory it is registered with ReportLab and used for every text
call; otherwise the built-in Helvetica faces are used and amounts carry a
"Rs." prefix, since Helvetica has no rupee glyph. The decision is made
once per render and threaded through all drawing calls.
"""

import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont

from config.logging_config import get_logger

from .currency import RUPEE_SYMBOL, format_currency

logger = get_logger(__name__)

FALLBACK_CURRENCY_PREFIX = "Rs."

# ReportLab's font registry is process-global
_registry_lock = threading.Lock()


@dataclass(frozen=True)
class Typography:
    """Font names and currency prefix for one render"""
    regular: str
    bold: str
    italic: str
    currency_capable: bool

    def font(self, bold: bool = False) -> str:
        return self.bold if bold else self.regular

    @property
    def currency_symbol(self) -> str:
        return RUPEE_SYMBOL if self.currency_capable else FALLBACK_CURRENCY_PREFIX

    def money(self, amount: Optional[float], use_fractions: bool = True) -> str:
        return format_currency(amount, use_fractions, self.currency_symbol)


STANDARD_TYPOGRAPHY = Typography(
    regular="Helvetica",
    bold="Helvetica-Bold",
    italic="Helvetica-Oblique",
    currency_capable=False,
)


class FontManager:
    """
    Manages currency font discovery and registration for ReportLab.
    """

    # Registered name -> font file
    CURRENCY_FONTS = {
        'CurrencySans': 'NotoSans-Regular.ttf',
        'CurrencySans-Bold': 'NotoSans-Bold.ttf',
    }

    def __init__(self, fonts_directory: Path):
        """
        Initialize FontManager.

        Args:
            fonts_directory: Directory probed for the currency font files
        """
        self.fonts_directory = Path(fonts_directory)
        self._registered_fonts: Dict[str, str] = {}

    def find_font_file(self, filename: str) -> Optional[Path]:
        """
        Find a font file in the fonts directory.

        Returns:
            Full path to font file, or None if not found
        """
        path = self.fonts_directory / filename
        if path.is_file():
            return path
        return None

    def register_font(self, font_name: str, font_path: Path) -> bool:
        """
        Register a single font with ReportLab.

        Returns:
            True if registration successful
        """
        with _registry_lock:
            if font_name in pdfmetrics.getRegisteredFontNames():
                self._registered_fonts[font_name] = str(font_path)
                return True
            try:
                pdfmetrics.registerFont(TTFont(font_name, str(font_path)))
            except Exception as e:
                logger.warning(f"Failed to register font {font_name}: {e}")
                return False

        self._registered_fonts[font_name] = str(font_path)
        logger.debug(f"Registered font: {font_name} from {font_path}")
        return True

    def resolve(self) -> Typography:
        """
        Decide the typography for a render.

        Returns:
            Currency-capable typography when both font files exist and
            register, STANDARD_TYPOGRAPHY otherwise.
        """
        paths = {name: self.find_font_file(filename) for name, filename in self.CURRENCY_FONTS.items()}
        missing = [self.CURRENCY_FONTS[name] for name, path in paths.items() if path is None]
        if missing:
            logger.info(f"Currency fonts not found in {self.fonts_directory} ({', '.join(missing)}); using Helvetica")
            return STANDARD_TYPOGRAPHY

        for name, path in paths.items():
            if not self.register_font(name, path):
                return STANDARD_TYPOGRAPHY

        return Typography(
            regular='CurrencySans',
            bold='CurrencySans-Bold',
            italic='CurrencySans',
            currency_capable=True,
        )

    def get_registered_fonts(self) -> Dict[str, str]:
        """Get dict of registered font names to paths."""
        return dict(self._registered_fonts)
