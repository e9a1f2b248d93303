"""Image generation service backed by the Gemini image model."""

from __future__ import annotations

import base64
import binascii
import logging
from dataclasses import dataclass
from typing import Any, Optional

from google import genai
from google.genai import types

from config.settings import AppConfig
from modules.pipelines.options import AspectRatio, parse_aspect_ratio
from modules.utils.image_utils import strip_data_uri, to_data_uri

logger = logging.getLogger(__name__)

NO_IMAGE_MESSAGE = "No image data found in response"


class GenerationError(RuntimeError):
    """Raised when the provider fails or returns no image payload."""


@dataclass(slots=True)
class GenerationRequest:
    """Request data for text-to-image and image-to-image generation."""

    prompt: str
    image_base64: Optional[str] = None
    aspect_ratio: Optional[AspectRatio] = None

    def to_payload(self) -> dict[str, Any]:
        """Return the relay wire body."""
        payload: dict[str, Any] = {"prompt": self.prompt}
        if self.image_base64:
            payload["imageBase64"] = self.image_base64
        if self.aspect_ratio is not None:
            payload["aspectRatio"] = self.aspect_ratio.value
        return payload


@dataclass(slots=True)
class ImageResult:
    """Result payload produced by the image model."""

    data_uri: str
    prompt: str
    aspect_ratio: Optional[AspectRatio]


def extract_inline_image(response: Any) -> Optional[str]:
    """Return the first inline image of the first candidate as base64 text."""
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return None
    content = getattr(candidates[0], "content", None)
    for part in getattr(content, "parts", None) or []:
        inline = getattr(part, "inline_data", None)
        if inline is None:
            continue
        # Only the first inline part counts, even when it is empty
        data = getattr(inline, "data", None)
        if not data:
            return None
        if isinstance(data, bytes):
            return base64.b64encode(data).decode("ascii")
        return str(data)
    return None


class ImageGenerationService:
    """Facade around the provider's content generation API."""

    def __init__(self, config: AppConfig, api_key: Optional[str] = None, client: Any = None) -> None:
        self.config = config
        self._api_key = api_key if api_key is not None else config.api_key
        self._client = client

    def _ensure_client(self) -> Any:
        """Lazily create the provider client."""
        if self._client is None:
            kwargs = {"api_key": self._api_key} if self._api_key else {}
            self._client = genai.Client(**kwargs)
        return self._client

    def _build_contents(self, request: GenerationRequest) -> types.Content:
        parts: list[types.Part] = []
        if request.image_base64:
            raw = strip_data_uri(request.image_base64)
            try:
                image_bytes = base64.b64decode(raw, validate=True)
            except (binascii.Error, ValueError) as exc:
                raise ValueError("imageBase64 is not valid base64 data") from exc
            parts.append(types.Part.from_bytes(data=image_bytes, mime_type="image/png"))
        parts.append(types.Part(text=request.prompt))
        return types.Content(role="user", parts=parts)

    def _build_config(self, request: GenerationRequest) -> Optional[types.GenerateContentConfig]:
        if request.aspect_ratio is None:
            return None
        ratio = parse_aspect_ratio(request.aspect_ratio)
        return types.GenerateContentConfig(
            image_config=types.ImageConfig(aspect_ratio=ratio.value),
        )

    def generate(self, request: GenerationRequest) -> ImageResult:
        """Generate an image and return it as a PNG data URI."""
        if not (request.prompt or "").strip():
            raise ValueError("Prompt is required")

        contents = self._build_contents(request)
        try:
            client = self._ensure_client()
        except Exception as exc:  # noqa: BLE001
            raise GenerationError(f"Provider client unavailable: {exc}") from exc
        kwargs: dict[str, Any] = {"model": self.config.image_model, "contents": contents}
        generation_config = self._build_config(request)
        if generation_config is not None:
            kwargs["config"] = generation_config

        logger.info(
            "Requesting image from %s (reference image: %s, aspect ratio: %s)",
            self.config.image_model,
            bool(request.image_base64),
            request.aspect_ratio.value if request.aspect_ratio else "default",
        )
        try:
            response = client.models.generate_content(**kwargs)
        except Exception as exc:  # noqa: BLE001
            raise GenerationError(str(exc) or "Internal Server Error") from exc

        payload = extract_inline_image(response)
        if not payload:
            raise GenerationError(NO_IMAGE_MESSAGE)

        return ImageResult(
            data_uri=to_data_uri(payload),
            prompt=request.prompt,
            aspect_ratio=request.aspect_ratio,
        )
