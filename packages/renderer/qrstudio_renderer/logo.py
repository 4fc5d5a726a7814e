"""Logo image loading and fitting."""

from __future__ import annotations

import base64
import binascii
from io import BytesIO
from pathlib import Path

from PIL import Image


def load_logo(source: str | bytes) -> Image.Image:
    """Open a logo from raw bytes, a ``data:`` URL, or a file path.

    Raises ValueError when the source cannot be decoded as an image.
    """
    if isinstance(source, bytes):
        raw = source
    elif source.startswith("data:"):
        _, _, payload = source.partition(",")
        try:
            raw = base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ValueError("logo data URL is not valid base64") from exc
    else:
        try:
            raw = Path(source).expanduser().read_bytes()
        except OSError as exc:
            raise ValueError(f"logo file not readable: {source}") from exc

    try:
        image = Image.open(BytesIO(raw))
        image.load()
    except Image.DecompressionBombError as exc:
        raise ValueError("logo image is too large") from exc
    except (OSError, SyntaxError) as exc:
        raise ValueError("logo is not a supported image") from exc
    return image.convert("RGBA")


def fit_logo(image: Image.Image, side: int) -> Image.Image:
    """Scale ``image`` to fit a ``side`` x ``side`` square, keeping its aspect ratio."""
    side = max(1, side)
    w, h = image.size
    scale = min(side / max(w, 1), side / max(h, 1))
    new_size = (max(1, int(w * scale)), max(1, int(h * scale)))
    return image.resize(new_size, Image.Resampling.LANCZOS)
