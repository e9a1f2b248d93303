"""Utility helpers for data URI encoding and decoding."""

from __future__ import annotations

import base64
import io
import re
from typing import Any

from PIL import Image

DATA_URI_PREFIX = re.compile(r"^data:image/(png|jpeg|jpg|webp);base64,")


def strip_data_uri(value: str) -> str:
    """Remove a leading image data URI declaration, returning raw base64."""
    return DATA_URI_PREFIX.sub("", value or "", count=1)


def to_data_uri(data: bytes | str, mime_type: str = "image/png") -> str:
    """Encode image bytes (or pre-encoded base64 text) as a data URI."""
    if isinstance(data, bytes):
        encoded = base64.b64encode(data).decode("ascii")
    else:
        encoded = data
    return f"data:{mime_type};base64,{encoded}"


def image_to_data_uri(image: Any) -> str:
    """Convert an uploaded image into a PNG data URI.

    Accepts a PIL image, raw bytes, a filesystem path or an existing data URI.
    """
    if isinstance(image, str) and image.startswith("data:"):
        return image
    if isinstance(image, bytes):
        image = Image.open(io.BytesIO(image))
    elif isinstance(image, str):
        image = Image.open(image)

    if image.mode not in ("RGB", "RGBA"):
        image = image.convert("RGBA")
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return to_data_uri(buffer.getvalue())


def data_uri_to_image(uri: str) -> Image.Image:
    """Decode a data URI into a PIL image for display."""
    _, _, payload = uri.partition(",")
    raw = base64.b64decode(payload or uri)
    image = Image.open(io.BytesIO(raw))
    image.load()
    return image
