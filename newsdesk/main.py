from __future__ import annotations

from typing import Optional

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from newsdesk.api.articles import router as articles_router
from newsdesk.api.auth import router as auth_router
from newsdesk.api.categories import router as categories_router
from newsdesk.api.comments import router as comments_router
from newsdesk.api.misc import router as misc_router
from newsdesk.api.notifications import router as notifications_router
from newsdesk.api.share import router as share_router
from newsdesk.api.users import router as users_router
from newsdesk.core.config import Settings, get_settings
from newsdesk.core.errors import AppError
from newsdesk.core.logging import setup_logging
from newsdesk.store import DocumentStore, build_store

logger = structlog.get_logger()


def _validation_message(errors: list[dict]) -> str:
    if not errors:
        return "Invalid request"
    first = errors[0]
    loc = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    return f"{loc}: {first.get('msg')}" if loc else str(first.get("msg"))


def create_app(settings: Optional[Settings] = None, store: Optional[DocumentStore] = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings.log_level, json_logs=settings.is_production)

    app = FastAPI(title="Newsdesk API", version="1.0.0")
    app.state.settings = settings
    app.state.store = store or build_store(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(auth_router)
    app.include_router(articles_router)
    app.include_router(comments_router)
    app.include_router(categories_router)
    app.include_router(users_router)
    app.include_router(notifications_router)
    app.include_router(misc_router)
    app.include_router(share_router)

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error("request_failed", method=request.method, path=request.url.path, error=exc.message, **exc.context)
            return JSONResponse(status_code=exc.status_code, content={"message": "Internal server error"})
        logger.info(
            "request_rejected", method=request.method, path=request.url.path, status=exc.status_code, error=exc.message
        )
        return JSONResponse(status_code=exc.status_code, content={"message": exc.message})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = jsonable_encoder(exc.errors())
        return JSONResponse(status_code=400, content={"message": _validation_message(errors), "errors": errors})

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={"message": str(exc.detail)}, headers=exc.headers)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("unhandled_error", method=request.method, path=request.url.path)
        return JSONResponse(status_code=500, content={"message": "Internal server error"})

    @app.on_event("startup")
    async def on_startup():
        await app.state.store.create_schema()
        logger.info("app_started", env=settings.app_env, store=type(app.state.store).__name__)

    @app.on_event("shutdown")
    async def on_shutdown():
        await app.state.store.close()

    @app.get("/health")
    async def health():
        return {"ok": True}

    return app


def run() -> None:
    """Serve the API with uvicorn; the app is built on startup, not at import."""
    settings = get_settings()
    uvicorn.run("newsdesk.main:create_app", factory=True, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
