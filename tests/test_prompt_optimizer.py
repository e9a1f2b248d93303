"""PromptOptimizer unit tests."""

from __future__ import annotations

import os
import types

import pytest

from config.settings import AppConfig, load_config
from modules.optimization import prompt_optimizer as prompt_optimizer_module
from modules.optimization.prompt_optimizer import PromptOptimizer, build_instruction


def build_optimizer() -> PromptOptimizer:
    config = AppConfig()
    optimizer = PromptOptimizer(config)
    optimizer.clear_backends()
    return optimizer


def test_instruction_wraps_prompt():
    instruction = build_instruction("a red fox")

    assert instruction.startswith("You are an expert prompt engineer for AI image generation.")
    assert "Return ONLY the improved prompt text, no explanations." in instruction
    assert instruction.endswith('Original Prompt: "a red fox"')


def test_optimize_with_registered_backend_trims_reply():
    optimizer = build_optimizer()

    def fake_backend(request):
        assert request.original_prompt == "A sunset city skyline"
        assert 'Original Prompt: "A sunset city skyline"' in request.instruction
        return "  LLM optimized prompt \n"

    optimizer.register_backend("gemini", fake_backend)
    bundle = optimizer.optimize("A sunset city skyline")

    assert bundle.optimized == "LLM optimized prompt"
    assert bundle.original == "A sunset city skyline"
    assert bundle.backend == "gemini"


def test_optimize_returns_original_when_backend_is_silent():
    optimizer = build_optimizer()
    optimizer.register_backend("gemini", lambda request: None)

    assert optimizer.optimize("A playful cat").optimized == "A playful cat"

    optimizer.register_backend("gemini", lambda request: "   ")
    assert optimizer.optimize("A playful cat").optimized == "A playful cat"


def test_optimize_without_backend_raises():
    optimizer = build_optimizer()

    with pytest.raises(RuntimeError, match="not configured"):
        optimizer.optimize("A playful cat")


def test_optimizer_without_api_key_has_no_backend():
    optimizer = PromptOptimizer(AppConfig(api_key=None))

    assert optimizer.available_backends() == []
    with pytest.raises(RuntimeError, match="'gemini' is not configured"):
        optimizer.optimize("A playful cat")


def test_optimize_rejects_blank_prompt():
    optimizer = build_optimizer()

    with pytest.raises(ValueError):
        optimizer.optimize("  ")


def test_backend_errors_propagate():
    optimizer = build_optimizer()

    def broken(request):
        raise RuntimeError("upstream down")

    optimizer.register_backend("gemini", broken)
    with pytest.raises(RuntimeError, match="upstream down"):
        optimizer.optimize("prompt")


def test_default_backend_prefers_configured_choice():
    optimizer = build_optimizer()
    optimizer.register_backend("gemini", lambda request: "g")
    optimizer.register_backend("claude", lambda request: "c")

    assert optimizer.available_backends() == ["gemini", "claude"]
    assert optimizer.default_backend() == "gemini"

    optimizer.config.optimizer_backend = "claude"
    assert optimizer.default_backend() == "claude"
    assert optimizer.optimize("prompt").optimized == "c"


def test_gemini_backend_registered(monkeypatch):
    """Ensure the Gemini backend sends the instruction to the text model."""

    class DummyModels:
        def __init__(self) -> None:
            self.calls = []

        def generate_content(self, **kwargs):
            self.calls.append(kwargs)
            return types.SimpleNamespace(text="  A richly lit neon alley with a cat  ")

    class DummyGenaiClient:
        instances: list["DummyGenaiClient"] = []

        def __init__(self, api_key: str) -> None:
            self.api_key = api_key
            self.models = DummyModels()
            DummyGenaiClient.instances.append(self)

    original_import = prompt_optimizer_module.importlib.import_module

    def fake_import_module(name: str):
        if name == "google.genai":
            return types.SimpleNamespace(Client=DummyGenaiClient)
        return original_import(name)

    monkeypatch.setattr(prompt_optimizer_module.importlib, "import_module", fake_import_module)

    config = AppConfig(api_key="gemini-key")
    optimizer = PromptOptimizer(config)
    bundle = optimizer.optimize("cat in alley")

    assert bundle.optimized == "A richly lit neon alley with a cat"
    client = DummyGenaiClient.instances[-1]
    assert client.api_key == "gemini-key"
    call = client.models.calls[0]
    assert call["model"] == config.text_model
    assert call["contents"] == build_instruction("cat in alley")
    assert optimizer.warnings == []


def test_openai_backend_registered(monkeypatch):
    """Ensure GPT backend registers and transforms prompt when OpenAI SDK is available."""

    class DummyCompletion:
        def __init__(self, text: str) -> None:
            self.output_text = text

    class DummyResponses:
        def __init__(self) -> None:
            self.calls = []

        def create(self, **kwargs):
            self.calls.append(kwargs)
            return DummyCompletion("Optimized prompt: cat in neon-lit alley")

    class DummyOpenAI:
        def __init__(self, api_key: str) -> None:
            self.api_key = api_key
            self.responses = DummyResponses()

    original_import = prompt_optimizer_module.importlib.import_module

    def fake_import_module(name: str):
        if name == "openai":
            return types.SimpleNamespace(OpenAI=DummyOpenAI)
        return original_import(name)

    monkeypatch.setattr(prompt_optimizer_module.importlib, "import_module", fake_import_module)

    config = AppConfig()
    config.openai_key = "test-key"
    config.metadata = {}

    optimizer = PromptOptimizer(config)
    bundle = optimizer.optimize("A white cat stretches on a warm rooftop", model="gpt")

    assert "Optimized prompt" in bundle.optimized
    assert optimizer.warnings == []


def test_missing_sdk_with_key_raises(monkeypatch):
    original_import = prompt_optimizer_module.importlib.import_module

    def fake_import_module(name: str):
        if name == "openai":
            raise ImportError("No module named 'openai'")
        return original_import(name)

    monkeypatch.setattr(prompt_optimizer_module.importlib, "import_module", fake_import_module)

    config = AppConfig(openai_key="test-key")
    optimizer = PromptOptimizer(config)

    assert optimizer.warnings
    with pytest.raises(RuntimeError, match="gpt"):
        optimizer.optimize("prompt", model="gpt")


@pytest.mark.integration
def test_gemini_backend_real_call():
    """Invoke the real Gemini text model to ensure prompts are enhanced."""

    config = load_config()
    if not (config.api_key or os.getenv("API_KEY")):
        pytest.skip("API_KEY is not set, skipping the real optimizer call.")

    optimizer = PromptOptimizer(config)
    assert optimizer.has_backend("gemini"), f"Gemini backend not registered: {optimizer.warnings}"

    original_prompt = "a small white cat on a windowsill"
    optimized = optimizer.optimize(original_prompt, model="gemini").optimized.strip()
    print("Optimized prompt:", optimized)
    assert optimized
    assert optimized != original_prompt
