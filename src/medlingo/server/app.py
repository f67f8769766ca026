"""HTTP translation service.

Exposes the Translator over three JSON endpoints. Model failures are
reported in-band (``error: "AI_UNAVAILABLE"``) so that clients never have
to distinguish a slow model from a broken network for translations.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from ..config import AI_UNAVAILABLE, SUMMARY_SERVICE_FALLBACK
from ..translation import (
    SummarizationError,
    SummarizeRequest,
    SummarizeResponse,
    TranslateBatchRequest,
    TranslateBatchResponse,
    TranslateRequest,
    TranslateResponse,
    Translator,
)

logger = logging.getLogger(__name__)


def create_app(translator: Translator, allowed_origins: list[str] | None = None) -> FastAPI:
    """Build the FastAPI application.

    Args:
        translator: Translator serving every endpoint
        allowed_origins: CORS origins (default: any)

    Returns:
        Configured FastAPI app
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "Translation service starting (model %s)",
            "available" if translator.available else "not configured, fallback only",
        )
        yield
        await translator.close()

    app = FastAPI(
        title="medlingo translation service",
        description="Translation and summarization for doctor/patient consultations",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.translator = translator

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/", response_class=PlainTextResponse)
    async def root() -> str:
        return "Healthcare Translation API is running"

    @app.get("/health")
    async def health_check() -> dict:
        return {
            "status": "healthy",
            "model": "available" if translator.available else "fallback",
        }

    @app.post(
        "/api/translate",
        response_model=TranslateResponse,
        response_model_exclude_none=True,
    )
    async def translate(request: TranslateRequest) -> TranslateResponse:
        return await translator.translate(request.text, request.target_language, request.role)

    @app.post(
        "/api/translate-batch",
        response_model=TranslateBatchResponse,
        response_model_exclude_none=True,
    )
    async def translate_batch(request: TranslateBatchRequest) -> TranslateBatchResponse:
        return await translator.translate_batch(request.inputs, request.target_language)

    @app.post(
        "/api/summarize",
        response_model=SummarizeResponse,
        response_model_exclude_none=True,
        responses={502: {"model": SummarizeResponse}},
    )
    async def summarize(request: SummarizeRequest):
        try:
            return await translator.summarize(request.conversation)
        except SummarizationError as e:
            logger.error("Summarization failed: %s", e)
            fallback = SummarizeResponse(summary=SUMMARY_SERVICE_FALLBACK, error=AI_UNAVAILABLE)
            return JSONResponse(status_code=502, content=fallback.to_wire())

    return app
