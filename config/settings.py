#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Settings - Centralized configuration management
"""

import os
import tempfile
from pathlib import Path
from typing import Optional
from pydantic_settings import BaseSettings


# Base directory
BASE_DIR = Path(__file__).resolve().parent.parent

# Environment markers set by serverless platforms
EPHEMERAL_ENV_MARKERS = ("VERCEL", "AWS_LAMBDA_FUNCTION_NAME")


def detect_ephemeral_environment() -> bool:
    """True when running on a platform whose project directory is read-only."""
    return any(os.environ.get(marker) for marker in EPHEMERAL_ENV_MARKERS)


class Settings(BaseSettings):
    """Application settings"""

    # ========== Storage ==========
    storage_root: Path = BASE_DIR / "public" / "uploads"
    # None = auto-detect from the environment (see EPHEMERAL_ENV_MARKERS)
    is_ephemeral_environment: Optional[bool] = None
    base_url: str = "http://localhost:5000"

    # ========== Assets ==========
    fonts_directory: Path = BASE_DIR / "assets" / "fonts"
    logos_directory: Path = BASE_DIR / "public" / "uploads" / "logos"
    web_root: Path = BASE_DIR / "public"
    default_logo: Optional[Path] = None  # defaults to <logos_directory>/default-logo.png
    max_logo_bytes: int = 10 * 1024 * 1024

    # ========== Logging ==========
    log_level: str = "INFO"

    class Config:
        env_file = str(BASE_DIR / ".env")
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"  # Allow extra fields from .env that aren't defined in model

    @property
    def ephemeral(self) -> bool:
        """Resolved ephemeral flag (explicit value wins over detection)."""
        if self.is_ephemeral_environment is None:
            return detect_ephemeral_environment()
        return self.is_ephemeral_environment

    def get_storage_root(self) -> Path:
        """Storage root selected once at process start."""
        if self.ephemeral:
            return Path(tempfile.gettempdir()) / "uploads"
        return Path(self.storage_root)

    def get_base_url(self) -> str:
        return self.base_url.rstrip("/")

    def get_default_logo(self) -> Path:
        if self.default_logo is not None:
            return Path(self.default_logo)
        return Path(self.logos_directory) / "default-logo.png"

    def print_config(self):
        """Print configuration summary"""
        print("\n" + "="*70)
        print("CONFIGURATION")
        print("="*70)
        print(f"Storage Root:    {self.get_storage_root()}")
        print(f"Ephemeral:       {self.ephemeral}")
        print(f"Base URL:        {self.get_base_url()}")
        print(f"Fonts:           {self.fonts_directory}")
        print(f"Logos:           {self.logos_directory}")
        print("="*70 + "\n")


# Global settings instance
settings = Settings()
