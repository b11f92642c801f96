"""Central configuration for the OH Plus quotation billing service.

Environment variables override defaults so deployments can adapt without
editing code.
"""
from __future__ import annotations
import os
from pathlib import Path

# Base directory (project root)
BASE_DIR = Path(__file__).resolve().parent

# Network host/port
APP_HOST = os.getenv("OHPLUS_HOST", "0.0.0.0")
APP_PORT = int(os.getenv("OHPLUS_PORT", "8050"))

# Enable/disable Dash debug (should be False for shared use)
DASH_DEBUG = os.getenv("OHPLUS_DEBUG", "0").lower() in {"1", "true", "yes"}

# Currency label printed before amounts on quotation documents
CURRENCY = os.getenv("OHPLUS_CURRENCY", "PHP")

# Optional default logo used when a request does not post one
DEFAULT_LOGO_PATH = os.getenv("OHPLUS_LOGO_PATH") or None

# Cached logo thumbnails
LOGO_CACHE_DIR = Path(os.getenv("OHPLUS_LOGO_CACHE_DIR", str(BASE_DIR / ".cache" / "logos")))

# Write every generated PDF here as well (empty disables)
PDF_DEBUG_DIR = os.getenv("OHPLUS_PDF_DEBUG_DIR", "")
