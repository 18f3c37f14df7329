"""
Document renderers, one draw function per (kind, format, copy) variant.

Importing this package registers every renderer and verifies that the
dispatch table covers all combinations.
"""

from .registry import RENDERERS, check_exhaustive, get_renderer, missing_variants, register
from . import estimate, invoice, jobsheet  # noqa: F401  (registration side effect)

check_exhaustive()

__all__ = [
    "RENDERERS",
    "get_renderer",
    "missing_variants",
    "register",
]
