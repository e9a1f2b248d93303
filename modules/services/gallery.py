"""Session gallery of generated images."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Iterator, List, Optional

from modules.pipelines.options import AppMode


@dataclass(frozen=True, slots=True)
class GeneratedImage:
    """A generation result kept for the current session only."""

    id: str
    url: str  # data URI
    prompt: str
    mode: AppMode
    timestamp: int  # milliseconds since epoch


class Gallery:
    """In-memory, most-recent-first list of generated images."""

    def __init__(self, images: Optional[List[GeneratedImage]] = None) -> None:
        self._images: List[GeneratedImage] = list(images or [])

    def __len__(self) -> int:
        return len(self._images)

    def __iter__(self) -> Iterator[GeneratedImage]:
        return iter(self._images)

    def items(self) -> List[GeneratedImage]:
        """Return a copy of the images, newest first."""
        return list(self._images)

    def _next_id(self, timestamp: int) -> str:
        taken = {image.id for image in self._images}
        candidate = str(timestamp)
        suffix = 1
        while candidate in taken:
            candidate = f"{timestamp}-{suffix}"
            suffix += 1
        return candidate

    def add(self, url: str, prompt: str, mode: AppMode, timestamp: Optional[int] = None) -> GeneratedImage:
        """Create a GeneratedImage and prepend it to the gallery."""
        stamp = timestamp if timestamp is not None else int(time.time() * 1000)
        image = GeneratedImage(
            id=self._next_id(stamp),
            url=url,
            prompt=prompt,
            mode=mode,
            timestamp=stamp,
        )
        self._images.insert(0, image)
        return image
