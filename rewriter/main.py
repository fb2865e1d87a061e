"""FastAPI application factory and global exception handling."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional, Type

import httpx
import uvicorn
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.requests import Request
from starlette.responses import JSONResponse

from rewriter import __version__ as app_version
from rewriter.api.routes import router
from rewriter.config import Settings, get_settings
from rewriter.errors import (
    BackendProtocolError,
    BackendTransportError,
    EmptyResponseError,
    ProfileNotFoundError,
    ProfileValidationError,
    RegistryLockError,
    RewriterError,
    SettingsValidationError,
)
from rewriter.settings_store import SettingsStore
from rewriter.summarizer.manager import SummarizationManager

logger = logging.getLogger(__name__)

ERROR_STATUS: Dict[Type[RewriterError], int] = {
    ProfileValidationError: 400,
    SettingsValidationError: 400,
    ProfileNotFoundError: 404,
    BackendTransportError: 502,
    BackendProtocolError: 502,
    EmptyResponseError: 502,
    RegistryLockError: 500,
}


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _error_payload(request: Request, exc: RewriterError) -> Dict[str, Any]:
    payload: Dict[str, Any] = {"error": exc.error_code, "details": str(exc)}
    if isinstance(exc, ProfileNotFoundError):
        manager: SummarizationManager = request.app.state.summarization_manager
        payload["available"] = sorted(manager.registry.get_available_ids())
    elif isinstance(exc, BackendProtocolError) and exc.status_code is not None:
        payload["backend_status"] = exc.status_code
    return payload


def create_application(
    settings: Optional[Settings] = None,
    store: Optional[SettingsStore] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application instance.

    Args:
        settings: Service settings (default from get_settings)
        store: Settings store (default file store at ``settings.settings_path``)
        transport: Optional httpx transport for outbound LLM calls
    """
    settings = settings or get_settings()
    store = store or SettingsStore(settings.settings_path)
    manager = SummarizationManager(store, settings=settings, transport=transport)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info(f"{settings.app_name} {app_version} ready")
        yield
        await manager.aclose()
        logger.info("Shutdown complete")

    app = FastAPI(
        title=settings.app_name,
        description="Profile-driven rewriting of transcriptions through LLM backends.",
        version=app_version,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.store = store
    app.state.summarization_manager = manager

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={"error": "validation_error", "details": exc.errors()},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        detail = exc.detail
        if isinstance(detail, dict) and "error" in detail:
            payload = detail
        elif detail == "There was an error parsing the body":
            payload = {"error": "invalid_json", "details": detail}
        else:
            payload = {"error": "http_error", "details": detail}
        return JSONResponse(status_code=exc.status_code, content=payload)

    @app.exception_handler(RewriterError)
    async def rewriter_exception_handler(
        request: Request, exc: RewriterError
    ) -> JSONResponse:
        status_code = ERROR_STATUS.get(type(exc), 500)
        if status_code >= 500:
            logger.error(f"Request to {request.url.path} failed: {exc}")
        return JSONResponse(status_code=status_code, content=_error_payload(request, exc))

    @app.get("/healthz", tags=["health"])
    async def healthz() -> dict[str, Any]:
        return {
            "status": "ok",
            "version": app_version,
            "max_payload_bytes": settings.max_payload_bytes,
        }

    app.include_router(router)
    return app


def run() -> None:
    """Run the service with uvicorn."""
    settings = get_settings()
    configure_logging(settings.log_level)
    uvicorn.run(
        create_application(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
