# app/main.py
import asyncio
import logging
from contextlib import asynccontextmanager, suppress

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import settings
from app.core.db import Base, engine
from app.core.log import configure_logging
from app.core.ratelimit import RateLimiter, sweep_forever
from app.core.security import SECURITY_HEADERS, sanitize_error

# create_all 전에 모델 등록
from app.models.user import User  # noqa: F401
from app.models.board import Board, Column  # noqa: F401
from app.models.card import Card, CardTag, Comment  # noqa: F401
from app.models.tag import Tag  # noqa: F401
from app.models.template import Template  # noqa: F401
from app.models.tokens import EmailVerificationToken, MagicLinkToken, PasswordResetToken  # noqa: F401

from app.routers.auth import router as auth_router
from app.routers.board import router as board_router
from app.routers.cards import router as cards_router
from app.routers.columns import router as columns_router
from app.routers.health import router as health_router
from app.routers.mfa import router as mfa_router
from app.routers.prompt import router as prompt_router
from app.routers.tags import router as tags_router
from app.routers.templates import router as templates_router

logger = logging.getLogger("app")


@asynccontextmanager
async def lifespan(app: FastAPI):
    Base.metadata.create_all(bind=engine)
    logger.info("database ready (%s)", engine.url.get_backend_name())

    sweeper = asyncio.create_task(
        sweep_forever(app.state.rate_limiter, settings.RATE_LIMIT_SWEEP_SECONDS)
    )
    try:
        yield
    finally:
        sweeper.cancel()
        with suppress(asyncio.CancelledError):
            await sweeper


def _error(status_code: int, message: str, headers=None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


def create_app() -> FastAPI:
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(title="Kanban API", version="1.0.0", lifespan=lifespan)
    app.state.rate_limiter = RateLimiter.from_settings(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        return _error(exc.status_code, str(exc.detail), getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        if errors:
            first = errors[0]
            field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
            message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
        else:
            message = "Invalid request"
        return _error(400, message)

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception):
        logger.exception("unhandled error on %s %s", request.method, request.url.path)
        return _error(500, sanitize_error(exc))

    for r in [
        health_router,
        auth_router,
        mfa_router,
        board_router,
        columns_router,
        cards_router,
        tags_router,
        templates_router,
        prompt_router,
    ]:
        app.include_router(r)

    return app


app = create_app()
