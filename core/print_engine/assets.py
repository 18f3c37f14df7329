"""
Asset Resolver - locate a usable local logo image.

A logo reference may be missing, an HTTP(S) URL, a drive-letter path from
another machine, or a web path such as ``/uploads/logos/acme.png``. Each
reference expands into an ordered list of local candidates; the first
candidate that passes validation wins. Remote files are never fetched.
"""

import os
import re
from dataclasses import dataclass
from pathlib import Path, PurePosixPath, PureWindowsPath
from typing import Callable, List, Optional
from urllib.parse import unquote, urlparse

from config.logging_config import get_logger

logger = get_logger(__name__)

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
JPEG_SIGNATURE = b"\xff\xd8\xff"
MAX_ASSET_BYTES = 10 * 1024 * 1024

_DRIVE_PATH_RE = re.compile(r"^[A-Za-z]:[\\/]")
_URL_RE = re.compile(r"^https?://", re.IGNORECASE)


@dataclass(frozen=True)
class ResolutionEvent:
    """One candidate examined during resolution"""
    candidate: Path
    accepted: bool
    reason: str


ResolutionObserver = Callable[[ResolutionEvent], None]


def sniff_image_type(header: bytes) -> Optional[str]:
    """Return 'png' / 'jpeg' from leading bytes, None if neither."""
    if header.startswith(PNG_SIGNATURE):
        return "png"
    if header.startswith(JPEG_SIGNATURE):
        return "jpeg"
    return None


def validate_image_file(path: Path, max_bytes: int = MAX_ASSET_BYTES) -> Optional[str]:
    """
    Check that *path* is a plausible PNG/JPEG file.

    Returns:
        None when valid, otherwise a short rejection reason.
    """
    try:
        if not path.is_file():
            return "not a file"
        size = path.stat().st_size
        if size <= 0:
            return "empty file"
        if size > max_bytes:
            return f"too large ({size} bytes)"
        with open(path, "rb") as f:
            header = f.read(len(PNG_SIGNATURE))
    except OSError as e:
        return f"unreadable: {e}"

    if sniff_image_type(header) is None:
        return "unrecognized signature"
    return None


class AssetResolver:
    """
    Resolve logo references to validated local image paths.

    Usage:
        resolver = AssetResolver(logos_directory=..., web_root=..., ...)
        path = resolver.resolve(company.logo)   # Path or None
    """

    def __init__(
        self,
        logos_directory: Path,
        web_root: Path,
        uploads_root: Path,
        default_logo: Optional[Path] = None,
        max_bytes: int = MAX_ASSET_BYTES,
        observer: Optional[ResolutionObserver] = None,
    ):
        self.logos_directory = Path(logos_directory)
        self.web_root = Path(web_root)
        self.uploads_root = Path(uploads_root)
        self.default_logo = Path(default_logo) if default_logo else self.logos_directory / "default-logo.png"
        self.max_bytes = max_bytes
        self.observer = observer

    @classmethod
    def from_settings(cls, settings, observer: Optional[ResolutionObserver] = None) -> "AssetResolver":
        return cls(
            logos_directory=settings.logos_directory,
            web_root=settings.web_root,
            uploads_root=settings.get_storage_root(),
            default_logo=settings.get_default_logo(),
            max_bytes=settings.max_logo_bytes,
            observer=observer,
        )

    def candidates(self, logo_ref: Optional[str]) -> List[Path]:
        """Ordered, de-duplicated candidate paths for a logo reference."""
        ref = (logo_ref or "").strip()

        if not ref:
            ordered = [self.default_logo]
        elif _URL_RE.match(ref):
            ordered = []
            filename = PurePosixPath(unquote(urlparse(ref).path)).name
            if filename:
                ordered.append(self.logos_directory / filename)
            ordered.append(self.default_logo)
        elif _DRIVE_PATH_RE.match(ref):
            ordered = [
                Path(ref),
                self.logos_directory / PureWindowsPath(ref).name,
                self.default_logo,
            ]
        else:
            ordered = self._local_candidates(ref)

        seen = set()
        unique = []
        for path in ordered:
            if path not in seen:
                seen.add(path)
                unique.append(path)
        return unique

    def _local_candidates(self, ref: str) -> List[Path]:
        ordered = []
        cleaned = ref.replace("\\", "/").lstrip("/")
        filename = PurePosixPath(cleaned).name
        if filename:
            ordered.append(self.logos_directory / filename)

        ordered.append(self.web_root / cleaned)

        uploads_relative = cleaned
        if uploads_relative.startswith("uploads/"):
            uploads_relative = uploads_relative[len("uploads/"):]
        ordered.append(self.uploads_root / uploads_relative)

        # refs stored with the web root prefix ("public/uploads/...")
        ordered.append(self.web_root.parent / cleaned)
        if os.path.isabs(ref):
            ordered.append(Path(ref))
        ordered.append(self.default_logo)
        return ordered

    def resolve(self, logo_ref: Optional[str]) -> Optional[Path]:
        """
        Resolve a logo reference.

        Returns:
            First candidate that passes validation, or None (logo omitted).
        """
        for candidate in self.candidates(logo_ref):
            reason = validate_image_file(candidate, self.max_bytes)
            accepted = reason is None
            self._notify(candidate, accepted, reason or "ok")
            if accepted:
                logger.debug(f"Logo resolved: {candidate}")
                return candidate

        logger.info(f"No usable logo for reference {logo_ref!r}; logo omitted")
        return None

    def _notify(self, candidate: Path, accepted: bool, reason: str) -> None:
        if not accepted:
            logger.debug(f"Logo candidate rejected: {candidate} ({reason})")
        if self.observer:
            self.observer(ResolutionEvent(candidate=candidate, accepted=accepted, reason=reason))
