"""HTTP relay forwarding generation requests to the model provider.

Endpoints:
- ``POST /api/generate-image``: ``{prompt, imageBase64?, aspectRatio?}`` -> ``{image}``
- ``POST /api/optimize-prompt``: ``{prompt}`` -> ``{optimizedPrompt}``

Every failure is answered with ``{"error": <message>}`` and a non-2xx status.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field
from starlette.exceptions import HTTPException as StarletteHTTPException

from config.settings import AppConfig
from modules.optimization.prompt_optimizer import PromptOptimizer
from modules.pipelines.image_generation import (
    GenerationError,
    GenerationRequest,
    ImageGenerationService,
)
from modules.pipelines.options import AspectRatio

logger = logging.getLogger(__name__)

PROMPT_REQUIRED = "Prompt is required"


class GenerateImageBody(BaseModel):
    """Wire body of the generate endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    prompt: Optional[str] = None
    image_base64: Optional[str] = Field(default=None, alias="imageBase64")
    aspect_ratio: Optional[AspectRatio] = Field(default=None, alias="aspectRatio")


class OptimizePromptBody(BaseModel):
    """Wire body of the optimize endpoint."""

    prompt: Optional[str] = None


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _describe_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request body"
    first = errors[0]
    location = ".".join(str(item) for item in first.get("loc", ()) if item != "body")
    message = first.get("msg", "Invalid value")
    return f"{location}: {message}" if location else message


def create_relay_app(
    config: AppConfig,
    generator: Optional[ImageGenerationService] = None,
    optimizer: Optional[PromptOptimizer] = None,
) -> FastAPI:
    """Compose and return the relay application."""
    image_service = generator or ImageGenerationService(config)
    prompt_optimizer = optimizer or PromptOptimizer(config)

    app = FastAPI(title="Banana Studio Relay")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def limit_body_size(request: Request, call_next):
        length = request.headers.get("content-length")
        if length and length.isdigit() and int(length) > config.max_body_bytes:
            return _error(413, "Request body too large")
        return await call_next(request)

    async def enforce_body_limit(request: Request) -> None:
        # Chunked uploads carry no content-length header
        body = await request.body()
        if len(body) > config.max_body_bytes:
            raise HTTPException(status_code=413, detail="Request body too large")

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return _error(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return _error(400, _describe_validation_error(exc))

    @app.post("/api/generate-image", dependencies=[Depends(enforce_body_limit)])
    def generate_image(body: GenerateImageBody):
        if not (body.prompt or "").strip():
            return _error(400, PROMPT_REQUIRED)

        request = GenerationRequest(
            prompt=body.prompt,
            image_base64=body.image_base64,
            aspect_ratio=body.aspect_ratio,
        )
        try:
            result = image_service.generate(request)
        except ValueError as exc:
            return _error(400, str(exc))
        except GenerationError as exc:
            logger.error("Relay generation error: %s", exc)
            return _error(500, str(exc) or "Internal Server Error")
        return {"image": result.data_uri}

    @app.post("/api/optimize-prompt", dependencies=[Depends(enforce_body_limit)])
    def optimize_prompt(body: OptimizePromptBody):
        if not (body.prompt or "").strip():
            return _error(400, PROMPT_REQUIRED)

        try:
            bundle = prompt_optimizer.optimize(body.prompt)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Relay optimization error")
            return _error(500, str(exc) or "Internal Server Error")
        return {"optimizedPrompt": bundle.optimized}

    return app
