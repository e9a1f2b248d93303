"""Callback implementations for the Gradio interface."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from modules.optimization.prompt_library import PromptLibrary
from modules.pipelines.image_generation import GenerationRequest
from modules.pipelines.options import AppMode, GenerationConfig, parse_aspect_ratio, parse_mode
from modules.services.gallery import Gallery
from modules.services.relay_client import RelayClient
from modules.utils.image_utils import image_to_data_uri

logger = logging.getLogger(__name__)

MISSING_PROMPT = "Please enter a description or instruction."
MISSING_IMAGE = "Please upload a reference image."
GENERATION_FAILED = "Something went wrong while generating the image."
OPTIMIZATION_FAILED = "Failed to optimize prompt. Please try again."


@dataclass(frozen=True, slots=True)
class ModeView:
    """Copy and controls shown for a generation mode."""

    mode: AppMode
    label: str
    title: str
    prompt_label: str
    placeholder: str
    tip: str

    @property
    def requires_image(self) -> bool:
        return self.mode.requires_image


MODE_VIEWS: dict[AppMode, ModeView] = {
    AppMode.TEXT_TO_IMAGE: ModeView(
        mode=AppMode.TEXT_TO_IMAGE,
        label="Text to Image",
        title="Create from Text",
        prompt_label="Prompt",
        placeholder="E.g., A futuristic banana spaceship orbiting Saturn, cinematic lighting...",
        tip="Use the 'Optimize' button to turn simple ideas into detailed, artistic prompts.",
    ),
    AppMode.IMAGE_TO_IMAGE: ModeView(
        mode=AppMode.IMAGE_TO_IMAGE,
        label="Image to Image",
        title="Reimagine Image",
        prompt_label="Prompt",
        placeholder="E.g., A futuristic banana spaceship orbiting Saturn, cinematic lighting...",
        tip="The model will use your image as a structural reference. Strong prompts work best.",
    ),
    AppMode.IMAGE_EDIT: ModeView(
        mode=AppMode.IMAGE_EDIT,
        label="Image Edit",
        title="Edit with Instructions",
        prompt_label="Instructions",
        placeholder="E.g., Make it a cyberpunk city, Add a cat in the foreground...",
        tip="Describe exactly what you want to change or add to the scene.",
    ),
}


def build_callbacks(
    client: Optional[RelayClient] = None,
    library: Optional[PromptLibrary] = None,
) -> dict[str, Any]:
    """Return a dictionary of Gradio callback functions."""

    prompt_library = library or PromptLibrary.default()

    def on_change_mode(mode: str) -> ModeView:
        return MODE_VIEWS[parse_mode(mode)]

    def on_generate(
        mode: str,
        prompt: str,
        image: Any,
        aspect_ratio: str,
        gallery: Optional[Gallery],
    ) -> tuple[Gallery, str]:
        current = gallery if gallery is not None else Gallery()
        app_mode = parse_mode(mode)

        if not (prompt or "").strip():
            return current, MISSING_PROMPT
        if app_mode.requires_image and image is None:
            return current, MISSING_IMAGE
        if client is None:
            return current, "Generation service is not configured."

        try:
            generation_config = GenerationConfig(aspect_ratio=parse_aspect_ratio(aspect_ratio))
            image_base64 = image_to_data_uri(image) if app_mode.requires_image else None
            url = client.generate_image(
                GenerationRequest(prompt=prompt, image_base64=image_base64, aspect_ratio=generation_config.aspect_ratio)
            )
        except Exception as exc:  # noqa: BLE001
            return current, str(exc) or GENERATION_FAILED

        current.add(url=url, prompt=prompt, mode=app_mode)
        return current, ""

    def on_optimize_prompt(prompt: str) -> tuple[str, str]:
        if not (prompt or "").strip():
            return prompt, ""
        if client is None:
            return prompt, "Prompt optimization is not configured."

        try:
            enhanced = client.optimize_prompt(prompt)
        except Exception:  # noqa: BLE001
            logger.exception("Prompt optimization failed")
            return prompt, OPTIMIZATION_FAILED
        return enhanced or prompt, ""

    def on_select_library_prompt(selection: Optional[str], current_prompt: str) -> str:
        if not selection or selection not in prompt_library.all_prompts():
            return current_prompt
        return selection

    return {
        "on_change_mode": on_change_mode,
        "on_generate": on_generate,
        "on_optimize_prompt": on_optimize_prompt,
        "on_select_library_prompt": on_select_library_prompt,
    }
