"""Prompt optimization via third-party LLM APIs."""

from __future__ import annotations

import importlib
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from config.settings import AppConfig

logger = logging.getLogger(__name__)

INSTRUCTION_TEMPLATE = (
    "You are an expert prompt engineer for AI image generation.\n"
    "Rewrite the following prompt to be more descriptive, detailed, and artistic, "
    "suitable for a high-quality image generation model.\n"
    "Enhance lighting, texture, and style descriptors.\n"
    "Keep the original intent.\n"
    "Return ONLY the improved prompt text, no explanations.\n"
    "\n"
    'Original Prompt: "{prompt}"'
)


def build_instruction(prompt: str) -> str:
    """Concatenate the fixed rewriting instruction with the user prompt."""
    return INSTRUCTION_TEMPLATE.format(prompt=prompt)


@dataclass(slots=True)
class PromptBundle:
    """Container for optimized prompt data."""

    original: str
    optimized: str
    backend: Optional[str] = None


@dataclass(slots=True)
class BackendRequest:
    """Information passed to backend optimizers."""

    instruction: str
    original_prompt: str
    metadata: Dict[str, Any]


BackendCallable = Callable[[BackendRequest], Optional[str]]


class PromptOptimizer:
    """Interface to Gemini/GPT/Claude prompt enhancement."""

    def __init__(self, config: AppConfig, api_key: Optional[str] = None) -> None:
        self.config = config
        self._gemini_key = api_key if api_key is not None else config.api_key
        self._backends: Dict[str, BackendCallable] = {}
        self.warnings: list[str] = []
        self._auto_register_backends()

    def register_backend(self, name: str, backend: BackendCallable) -> None:
        """Register a prompt optimization backend."""
        self._backends[name.lower()] = backend

    def clear_backends(self) -> None:
        """Remove all backends (mainly for tests)."""
        self._backends.clear()

    def has_backend(self, name: str) -> bool:
        """Return True when backend exists."""
        return name.lower() in self._backends

    def available_backends(self) -> list[str]:
        """Return the list of registered backends ordered by preference."""
        priority = {"gemini": 0, "gpt": 1, "claude": 2}
        return sorted(
            (backend for backend in self._backends.keys()),
            key=lambda item: (priority.get(item, 99), item),
        )

    def default_backend(self) -> str:
        """Return the configured backend when registered, else the preferred one."""
        configured = (self.config.optimizer_backend or "").lower()
        if configured and configured in self._backends:
            return configured
        choices = self.available_backends()
        if choices:
            return choices[0]
        return configured or "gemini"

    def optimize(self, prompt: str, model: Optional[str] = None) -> PromptBundle:
        """Return the optimized prompt, or the original when no text comes back."""
        if not (prompt or "").strip():
            raise ValueError("Prompt is required")

        name = (model or self.default_backend()).lower()
        backend = self._backends.get(name)
        if backend is None:
            self._raise_if_misconfigured(name)
            raise RuntimeError(f"Optimizer backend '{name}' is not configured")

        request = BackendRequest(
            instruction=build_instruction(prompt),
            original_prompt=prompt,
            metadata=self.config.metadata,
        )
        logger.info("Optimizing prompt with the '%s' backend", name)
        reply = backend(request)
        optimized = (reply or "").strip() or prompt
        return PromptBundle(original=prompt, optimized=optimized, backend=name)

    # Internal helpers ---------------------------------------------------------
    def _raise_if_misconfigured(self, name: str) -> None:
        """Explain a missing backend whose API key is set."""
        keys = {
            "gemini": self._gemini_key,
            "gpt": self.config.openai_key,
            "claude": self.config.anthropic_key,
        }
        if not keys.get(name):
            return
        if self.warnings:
            raise RuntimeError(f"Optimizer backend '{name}' failed to initialize: " + "; ".join(self.warnings))
        raise RuntimeError(f"Optimizer backend '{name}' is unavailable, check its dependencies.")

    def _auto_register_backends(self) -> None:
        """Register backends automatically when dependencies are available."""
        self._register_gemini_backend()
        self._register_claude_backend()
        self._register_openai_backend()

    def _register_gemini_backend(self) -> None:
        if not self._gemini_key:
            return
        try:
            genai_module = importlib.import_module("google.genai")
        except ImportError as exc:  # pragma: no cover - optional dependency
            self.warnings.append(f"cannot import google.genai: {exc}")
            return

        client = genai_module.Client(api_key=self._gemini_key)

        def _gemini_backend(request: BackendRequest) -> Optional[str]:
            response = client.models.generate_content(
                model=self.config.text_model,
                contents=request.instruction,
            )
            return getattr(response, "text", None)

        self.register_backend("gemini", _gemini_backend)

    def _register_claude_backend(self) -> None:
        if not self.config.anthropic_key:
            return
        try:
            anthropic_module = importlib.import_module("anthropic")
        except ImportError as exc:  # pragma: no cover - optional dependency
            self.warnings.append(f"cannot import anthropic: {exc}")
            return

        client = anthropic_module.Anthropic(api_key=self.config.anthropic_key)

        def _claude_backend(request: BackendRequest) -> Optional[str]:
            message = client.messages.create(
                model=request.metadata.get("claude_model", "claude-3-5-haiku-latest"),
                max_tokens=512,
                messages=[{"role": "user", "content": request.instruction}],
            )
            if not message.content:
                return None
            return getattr(message.content[0], "text", None)

        self.register_backend("claude", _claude_backend)

    def _extract_openai_text(self, completion: Any) -> Optional[str]:
        if hasattr(completion, "output_text") and completion.output_text:
            return str(completion.output_text)

        choices = getattr(completion, "choices", None)
        if choices:
            text = choices[0].message.content
            if isinstance(text, str) and text.strip():
                return text

        return None

    def _register_openai_backend(self) -> None:
        if not self.config.openai_key:
            return
        try:
            openai_module = importlib.import_module("openai")
        except ImportError as exc:
            self.warnings.append(f"cannot import openai: {exc}")
            return

        base_url = self.config.metadata.get("openai_base_url")
        client_kwargs = {"api_key": self.config.openai_key}
        if base_url:
            client_kwargs["base_url"] = base_url
        client = openai_module.OpenAI(**client_kwargs)

        def _gpt_backend(request: BackendRequest) -> Optional[str]:
            model_name = request.metadata.get("openai_model", "gpt-4o-mini")

            # OpenAI-compatible gateways only expose chat completions
            if base_url:
                completion = client.chat.completions.create(
                    model=model_name,
                    messages=[{"role": "user", "content": request.instruction}],
                    max_tokens=512,
                )
            else:
                completion = client.responses.create(
                    model=model_name,
                    input=request.instruction,
                    max_output_tokens=512,
                )
            return self._extract_openai_text(completion)

        self.register_backend("gpt", _gpt_backend)
