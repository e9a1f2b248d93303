"""Relay client with a single in-process fallback to the provider."""

from __future__ import annotations

import logging
from typing import Any, Optional

import requests

from config.settings import AppConfig
from modules.optimization.prompt_optimizer import PromptOptimizer
from modules.pipelines.image_generation import (
    GenerationRequest,
    ImageGenerationService,
)
from modules.pipelines.options import AspectRatio

logger = logging.getLogger(__name__)


class RelayError(RuntimeError):
    """Raised when the relay is unreachable or answers with an error."""


class RelayClient:
    """Call the relay first; call the provider directly if the relay fails.

    The fallback is attempted exactly once per request, with no retry.
    """

    def __init__(
        self,
        config: AppConfig,
        session: Optional[requests.Session] = None,
        generator: Optional[ImageGenerationService] = None,
        optimizer: Optional[PromptOptimizer] = None,
    ) -> None:
        self.config = config
        self._session = session or requests.Session()
        self._generator = generator or ImageGenerationService(config, api_key=config.client_api_key)
        self._optimizer = optimizer or PromptOptimizer(config, api_key=config.client_api_key)

    def _post(self, endpoint: str, payload: dict[str, Any], field: str) -> str:
        url = f"{self.config.relay_url}/{endpoint}"
        try:
            response = self._session.post(url, json=payload, timeout=self.config.relay_timeout)
        except requests.RequestException as exc:
            raise RelayError(f"Relay unreachable: {exc}") from exc

        if not response.ok:
            raise RelayError(f"Server returned {response.status_code}: {response.reason}")
        try:
            data = response.json()
        except ValueError as exc:
            raise RelayError("Relay returned a non-JSON body") from exc

        value = data.get(field) if isinstance(data, dict) else None
        if not isinstance(value, str):
            raise RelayError(f"Relay response is missing '{field}'")
        return value

    def generate_image(self, request: GenerationRequest) -> str:
        """Return a data URI for the request; raise if the direct call fails too."""
        try:
            return self._post("generate-image", request.to_payload(), "image")
        except RelayError as exc:
            logger.warning("Backend server unavailable or failed, falling back to direct generation: %s", exc)

        direct_request = GenerationRequest(
            prompt=request.prompt,
            image_base64=request.image_base64,
            aspect_ratio=request.aspect_ratio or AspectRatio.SQUARE,
        )
        try:
            return self._generator.generate(direct_request).data_uri
        except Exception:
            logger.exception("Direct generation error")
            raise

    def optimize_prompt(self, prompt: str) -> str:
        """Return the optimized prompt; blank input is a no-op."""
        if not (prompt or "").strip():
            return ""

        try:
            return self._post("optimize-prompt", {"prompt": prompt}, "optimizedPrompt")
        except RelayError as exc:
            logger.warning("Backend server unavailable or failed, falling back to direct optimization: %s", exc)

        try:
            return self._optimizer.optimize(prompt).optimized
        except Exception:  # noqa: BLE001
            logger.exception("Direct optimization error")
            return prompt
