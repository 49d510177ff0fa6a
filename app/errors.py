"""
app/errors.py

Tradução centralizada de exceções para o envelope `{message, details}`.

Handlers:
- AppError               → status da própria exceção, details = "uri=<path>"
- RequestValidationError → 400, details = {campo: mensagem}
- Exception              → 500, logado com traceback
"""

import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.exceptions import AppError, RateLimitExceededError

log = logging.getLogger(__name__)


def error_body(message: str, details) -> dict:
    return {"message": message, "details": details}


def rate_limit_body(exc: RateLimitExceededError) -> dict:
    return error_body(
        exc.message,
        {
            "status": exc.status_code,
            "code": "RATE_LIMIT_EXCEEDED",
            "limit": exc.limit,
            "retryAfter": exc.retry_after,
        },
    )


def _field_name(loc: tuple) -> str:
    # descarta o prefixo "body"/"query"/"path" do FastAPI
    parts = [str(p) for p in loc[1:]] or [str(p) for p in loc]
    return ".".join(parts)


def register_exception_handlers(app) -> None:
    """Chamado em create_app() logo após instanciar o FastAPI."""

    @app.exception_handler(AppError)
    async def on_app_error(request: Request, exc: AppError):
        if exc.status_code >= 500:
            log.error(f"Erro em {request.url.path}: {exc.message}")
        return JSONResponse(
            error_body(exc.message, f"uri={request.url.path}"),
            status_code=exc.status_code,
        )

    @app.exception_handler(RequestValidationError)
    async def on_validation_error(request: Request, exc: RequestValidationError):
        errors = {_field_name(tuple(err["loc"])): err["msg"] for err in exc.errors()}
        return JSONResponse(error_body("Validation failed", errors), status_code=400)

    @app.exception_handler(Exception)
    async def on_unhandled(request: Request, exc: Exception):
        log.error(f"Erro não tratado em {request.url.path}: {exc}", exc_info=True)
        return JSONResponse(
            error_body(str(exc) or exc.__class__.__name__, f"uri={request.url.path}"),
            status_code=500,
        )
