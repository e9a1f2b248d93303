"""Prompt library management."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List


@dataclass(slots=True)
class PromptCategory:
    """A named group of ready-made prompts."""

    name: str
    prompts: List[str] = field(default_factory=list)


DEFAULT_CATEGORIES: tuple[PromptCategory, ...] = (
    PromptCategory(
        name="Photography",
        prompts=[
            "A cinematic shot of a rainy street in Tokyo at night, neon lights reflecting on puddles, "
            "shot on 35mm lens, f/1.8, high contrast, realistic texture, 8k resolution.",
            "Portrait of an elderly fisherman with a weathered face, natural lighting, intricate details, "
            "depth of field, National Geographic style.",
            "Macro photography of a dew drop on a spider web, morning light, bokeh background, "
            "sharp focus, vibrant colors.",
        ],
    ),
    PromptCategory(
        name="Digital Art & Fantasy",
        prompts=[
            "A cyberpunk samurai standing on a rooftop, futuristic city background, vibrant neon colors, "
            "glitch effect, detailed armor, digital painting style.",
            "A whimsical forest house inside a giant mushroom, fairy lights, magical atmosphere, "
            "soft pastel colors, ghibli studio style.",
            "An isometric view of a futuristic space station, low poly style, soft lighting, "
            "pastel color palette, highly detailed.",
        ],
    ),
    PromptCategory(
        name="3D & Texture",
        prompts=[
            "A fluffy cute monster made of wool felt, stop motion style, studio lighting, soft shadows, "
            "3d render, blender cycles.",
            "A futuristic car made of translucent glass and gold, studio lighting, subsurface scattering, "
            "octane render, 4k.",
            "Delicious looking gourmet burger with melting cheese, steam rising, professional food "
            "photography, 8k, highly detailed texture.",
        ],
    ),
)


class PromptLibrary:
    """In-memory registry of prompt categories."""

    def __init__(self) -> None:
        self._categories: Dict[str, PromptCategory] = {}

    @classmethod
    def default(cls) -> "PromptLibrary":
        """Return a library populated with the built-in prompts."""
        library = cls()
        for category in DEFAULT_CATEGORIES:
            library.add(PromptCategory(name=category.name, prompts=list(category.prompts)))
        return library

    def load_from_file(self, path: Path) -> None:
        """Load categories from a JSON file of ``{"category", "items"}`` entries."""
        if not path.exists():
            return
        with path.open("r", encoding="utf-8") as fp:
            data = json.load(fp)
        for entry in data:
            self.add(
                PromptCategory(
                    name=entry["category"],
                    prompts=[str(item) for item in entry.get("items", [])],
                )
            )

    def add(self, category: PromptCategory) -> None:
        """Register a category, replacing any with the same name."""
        self._categories[category.name] = category

    def list_categories(self) -> List[PromptCategory]:
        """Return all registered categories."""
        return list(self._categories.values())

    def get(self, name: str) -> PromptCategory:
        """Retrieve a category by name."""
        try:
            return self._categories[name]
        except KeyError as exc:
            raise KeyError(f"Prompt category '{name}' not found") from exc

    def all_prompts(self) -> List[str]:
        """Return every prompt in category order."""
        return [prompt for category in self._categories.values() for prompt in category.prompts]


def load_prompt_library(path: Path) -> PromptLibrary:
    """Load the library from ``path``, falling back to the built-in prompts."""
    library = PromptLibrary()
    library.load_from_file(path)
    if not library.list_categories():
        return PromptLibrary.default()
    return library
