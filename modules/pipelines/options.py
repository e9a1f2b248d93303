"""Generation modes and aspect ratio options."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class AppMode(str, Enum):
    """Supported generation modes."""

    TEXT_TO_IMAGE = "TEXT_TO_IMAGE"
    IMAGE_TO_IMAGE = "IMAGE_TO_IMAGE"
    IMAGE_EDIT = "IMAGE_EDIT"

    @property
    def requires_image(self) -> bool:
        return self is not AppMode.TEXT_TO_IMAGE


class AspectRatio(str, Enum):
    """Aspect ratios accepted by the image model."""

    SQUARE = "1:1"
    PORTRAIT = "3:4"
    LANDSCAPE = "4:3"
    WIDE = "16:9"
    TALL = "9:16"


@dataclass(slots=True)
class GenerationConfig:
    """Ephemeral generation settings selected in the UI."""

    aspect_ratio: AspectRatio = AspectRatio.SQUARE


def parse_mode(value: str | AppMode | None) -> AppMode:
    """Return the AppMode for a value, defaulting to text-to-image."""
    if isinstance(value, AppMode):
        return value
    if not value:
        return AppMode.TEXT_TO_IMAGE
    try:
        return AppMode(value)
    except ValueError:
        return AppMode.TEXT_TO_IMAGE


def parse_aspect_ratio(value: str | AspectRatio | None) -> AspectRatio:
    """Return the AspectRatio for a value; raise ValueError if unknown."""
    if isinstance(value, AspectRatio):
        return value
    if not value:
        return AspectRatio.SQUARE
    try:
        return AspectRatio(value)
    except ValueError as exc:
        choices = ", ".join(ratio.value for ratio in AspectRatio)
        raise ValueError(f"Unsupported aspect ratio '{value}' (expected one of {choices})") from exc
