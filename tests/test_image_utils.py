"""Image conversion helpers used by the UI."""

from __future__ import annotations

import base64
import io

import pytest
from PIL import Image

from modules.pipelines.options import AppMode
from modules.services.gallery import Gallery
from modules.ui.layout import _render_gallery
from modules.utils.image_utils import (
    data_uri_to_image,
    image_to_data_uri,
    strip_data_uri,
    to_data_uri,
)


def _png_bytes(image: Image.Image) -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.mark.parametrize(
    "mode, color, expected_mode",
    [
        ("RGB", (200, 30, 30), "RGB"),
        ("P", 3, "RGBA"),
        ("LA", (120, 255), "RGBA"),
    ],
)
def test_image_to_data_uri_encodes_png(mode, color, expected_mode):
    source = Image.new(mode, (4, 3), color)

    uri = image_to_data_uri(source)

    assert uri.startswith("data:image/png;base64,")
    decoded = data_uri_to_image(uri)
    assert decoded.format == "PNG"
    assert decoded.size == (4, 3)
    assert decoded.mode == expected_mode


def test_image_to_data_uri_accepts_bytes_and_existing_uri():
    raw = _png_bytes(Image.new("RGB", (2, 2), (0, 0, 255)))

    uri = image_to_data_uri(raw)

    assert uri.startswith("data:image/png;base64,")
    assert data_uri_to_image(uri).getpixel((0, 0)) == (0, 0, 255)
    assert image_to_data_uri(uri) == uri


def test_to_data_uri_and_strip_are_inverse():
    raw = b"\x89PNG\r\n\x1a\n"

    uri = to_data_uri(raw)

    assert uri == "data:image/png;base64," + base64.b64encode(raw).decode("ascii")
    assert base64.b64decode(strip_data_uri(uri)) == raw
    assert strip_data_uri("") == ""


def test_render_gallery_decodes_items():
    gallery = Gallery()
    uri = to_data_uri(_png_bytes(Image.new("RGB", (5, 5), (10, 20, 30))))
    gallery.add(uri, "a banana in space", AppMode.TEXT_TO_IMAGE, timestamp=1)

    items, count = _render_gallery(gallery)

    assert count == "1 creations"
    assert len(items) == 1
    image, caption = items[0]
    assert isinstance(image, Image.Image)
    assert image.size == (5, 5)
    assert caption == "a banana in space"


def test_render_gallery_without_images():
    items, count = _render_gallery(None)

    assert items == []
    assert count.startswith("No images yet")
    assert _render_gallery(Gallery()) == ([], count)
