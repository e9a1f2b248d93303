"""Configuration helpers for the Banana Studio project."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

DEFAULT_IMAGE_MODEL = "gemini-2.5-flash-image"
DEFAULT_TEXT_MODEL = "gemini-2.5-flash"


@dataclass(slots=True)
class AppConfig:
    """Centralized application configuration."""

    assets_dir: Path = Path("assets")
    api_key: Optional[str] = None
    client_api_key: Optional[str] = None
    image_model: str = DEFAULT_IMAGE_MODEL
    text_model: str = DEFAULT_TEXT_MODEL
    relay_host: str = "0.0.0.0"
    relay_port: int = 3000
    relay_url: str = "http://localhost:3000/api"
    relay_timeout: float = 120.0
    max_body_bytes: int = 50 * 1024 * 1024
    cors_origins: list[str] = field(default_factory=lambda: ["*"])
    ui_port: int = 7860
    optimizer_backend: str = "gemini"
    anthropic_key: Optional[str] = None
    openai_key: Optional[str] = None
    log_dir: Path = Path("logs")
    metadata: dict[str, Any] = field(default_factory=dict)


def _load_env_file(path: Path) -> None:
    """Populate environment variables from a simple KEY=VALUE .env file."""
    if not path.exists():
        return

    for line in path.read_text(encoding="utf-8").splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#") or "=" not in stripped:
            continue
        key, value = stripped.split("=", 1)
        os.environ.setdefault(key.strip(), value.strip().strip('"').strip("'"))


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _parse_origins(raw: Optional[str]) -> list[str]:
    if not raw:
        return ["*"]
    origins = [item.strip() for item in raw.split(",") if item.strip()]
    return origins or ["*"]


def load_config(config_path: Optional[str] = None) -> AppConfig:
    """Return an AppConfig instance with environment-aware settings."""
    env_path = Path(config_path) if config_path else Path(".env")
    _load_env_file(env_path)

    api_key = os.getenv("API_KEY")
    client_api_key = os.getenv("GEMINI_API_KEY") or api_key
    relay_port = _env_int("PORT", 3000)
    relay_url = os.getenv("RELAY_URL") or f"http://localhost:{relay_port}/api"

    metadata: dict[str, Any] = {}
    openai_key = os.getenv("OPENAI_API_KEY")
    openai_base_url = os.getenv("OPENAI_BASE_URL")
    openai_model = os.getenv("OPENAI_MODEL")
    claude_model = os.getenv("CLAUDE_MODEL")

    if openai_base_url:
        metadata["openai_base_url"] = openai_base_url
    if openai_model:
        metadata["openai_model"] = openai_model
    if claude_model:
        metadata["claude_model"] = claude_model

    return AppConfig(
        assets_dir=Path(os.getenv("ASSETS_DIR", "assets")),
        api_key=api_key,
        client_api_key=client_api_key,
        image_model=os.getenv("IMAGE_MODEL") or DEFAULT_IMAGE_MODEL,
        text_model=os.getenv("TEXT_MODEL") or DEFAULT_TEXT_MODEL,
        relay_host=os.getenv("HOST", "0.0.0.0"),
        relay_port=relay_port,
        relay_url=relay_url.rstrip("/"),
        relay_timeout=_env_float("RELAY_TIMEOUT", 120.0),
        max_body_bytes=int(_env_float("MAX_BODY_MB", 50.0) * 1024 * 1024),
        cors_origins=_parse_origins(os.getenv("CORS_ORIGINS")),
        ui_port=_env_int("UI_PORT", 7860),
        optimizer_backend=(os.getenv("OPTIMIZER_BACKEND") or "gemini").lower(),
        anthropic_key=os.getenv("ANTHROPIC_API_KEY"),
        openai_key=openai_key,
        log_dir=Path(os.getenv("LOG_DIR", "logs")),
        metadata=metadata,
    )
