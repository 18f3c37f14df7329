"""
Output Writer - persist finished documents and build retrieval locators.

All filesystem side effects of a render live behind ``StoragePort`` so the
layout code can be exercised against ``MemoryStorage`` in tests.
"""

import os
import re
import tempfile
from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, Optional

from config.logging_config import get_logger

from .exceptions import OutputWriteError
from .formats import PageFormat
from .models import DocumentKind

logger = get_logger(__name__)

_UNSAFE_RE = re.compile(r'[<>:"/\\|?*\x00-\x1f\s]')


def safe_segment(value: str, fallback: str = "document") -> str:
    """Make a document number usable inside a file name."""
    segment = _UNSAFE_RE.sub("_", value or "")
    # Collapse runs of underscores
    segment = re.sub(r"_+", "_", segment).strip("_")
    return segment or fallback


def build_file_name(
    kind: DocumentKind,
    number: str,
    page_format: PageFormat,
    copy: Enum,
    timestamp_ms: int,
) -> str:
    """
    Deterministic file name for a rendered document.

    Returns:
        ``{type}_{number}_{FORMAT}_{COPYTYPE}_{timestampMillis}.pdf``,
        e.g. ``invoice_INV-0042_A4_ORIGINAL_1718000000000.pdf``
    """
    return (
        f"{kind.file_prefix}_{safe_segment(number)}_{page_format.label}_"
        f"{copy.value.upper()}_{int(timestamp_ms)}.pdf"
    )


def build_locator(base_url: str, category: str, file_name: str) -> str:
    return f"{base_url.rstrip('/')}/uploads/{category}/{file_name}"


class StoragePort(ABC):
    """Where finished documents go."""

    @abstractmethod
    def write(self, category: str, file_name: str, data: bytes) -> Path:
        """
        Persist *data* and return its path.

        Raises:
            OutputWriteError: nothing usable was written
        """

    def ensure_directories(self, categories: Iterable[str]) -> None:
        pass


class LocalStorage(StoragePort):
    """
    Documents stored as files under ``root/{category}/``.

    Writes go to a temporary sibling that is renamed into place, so a file
    with the final name is always complete.
    """

    def __init__(self, root: Path):
        self.root = Path(root)

    def category_dir(self, category: str) -> Path:
        return self.root / category

    def ensure_directories(self, categories: Iterable[str]) -> None:
        """
        Create the storage tree if possible.

        Failures are logged and ignored: some deployments ship a pre-seeded,
        read-only tree.
        """
        for category in categories:
            directory = self.category_dir(category)
            try:
                directory.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                logger.warning(f"Could not create {directory}: {e}")

    def write(self, category: str, file_name: str, data: bytes) -> Path:
        directory = self.category_dir(category)
        target = directory / file_name
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.warning(f"Could not create {directory}: {e}")

        tmp_path: Optional[str] = None
        try:
            fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".", suffix=".part")
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, target)
        except OSError as e:
            if tmp_path and os.path.exists(tmp_path):
                try:
                    os.remove(tmp_path)
                except OSError:
                    logger.warning(f"Could not remove partial file {tmp_path}")
            logger.error(f"Write failed for {target}: {e}")
            raise OutputWriteError(str(target), str(e)) from e

        logger.info(f"Document written: {target} ({len(data)} bytes)")
        return target


class MemoryStorage(StoragePort):
    """In-memory storage; keyed by ``category/file_name``."""

    def __init__(self, root: Path = Path("/memory")):
        self.root = Path(root)
        self.files: Dict[str, bytes] = {}

    def write(self, category: str, file_name: str, data: bytes) -> Path:
        self.files[f"{category}/{file_name}"] = data
        return self.root / category / file_name
