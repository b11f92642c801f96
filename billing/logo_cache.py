"""Company logo caching utilities.

get_or_build_logo(source, max_w, max_h) -> Path | None

``source`` may be a file path, raw image bytes or a ``data:image/...;base64,``
URL (the shape the quotation UI posts). A PNG thumbnail is cached under
LOGO_CACHE_DIR/<sha1>_<w>x<h>.png, keyed by sha1(image bytes + size spec).

Safe for concurrent calls (best-effort). If decoding fails returns None.
"""
from __future__ import annotations
from pathlib import Path
from typing import Optional, Union
import base64
import binascii
import hashlib
import io
import re

from config import LOGO_CACHE_DIR

LogoSource = Union[str, Path, bytes, bytearray]

_DATA_URL_RE = re.compile(r'^data:image/[\w.+-]+;base64,(?P<payload>[A-Za-z0-9+/=\s]+)$')


def _hash_bytes(data: bytes) -> str:
    return hashlib.sha1(data).hexdigest()


def decode_data_url(data_url: str) -> Optional[bytes]:
    """Return the decoded payload of a base64 image data URL, else None."""
    if not isinstance(data_url, str):
        return None
    m = _DATA_URL_RE.match(data_url.strip())
    if not m:
        return None
    try:
        return base64.b64decode(m.group('payload'), validate=False)
    except (binascii.Error, ValueError):
        return None


def _read_source(source: LogoSource) -> Optional[bytes]:
    if isinstance(source, (bytes, bytearray)):
        return bytes(source)
    if isinstance(source, str) and source.startswith('data:'):
        return decode_data_url(source)
    p = Path(source)
    if not p.exists() or p.is_dir():
        return None
    try:
        return p.read_bytes()
    except OSError:
        return None


def get_or_build_logo(source: Optional[LogoSource], max_w: int, max_h: int,
                      cache_dir: Optional[Path] = None) -> Optional[Path]:
    if not source:
        return None
    raw = _read_source(source)
    if not raw:
        return None
    root = Path(cache_dir) if cache_dir else LOGO_CACHE_DIR
    key = _hash_bytes(raw + f"{max_w}x{max_h}".encode())
    out_path = root / f"{key}_{max_w}x{max_h}.png"
    if out_path.exists():
        return out_path
    try:
        from PIL import Image as PILImage, UnidentifiedImageError
        root.mkdir(parents=True, exist_ok=True)
        with PILImage.open(io.BytesIO(raw)) as im:
            im = im.convert('RGBA')
            im.thumbnail((max_w, max_h))
            im.save(out_path, format='PNG')
    except (UnidentifiedImageError, OSError, ValueError) as e:
        print(f"[logo][cache][warn] {e}")
        return None
    return out_path if out_path.exists() else None
