"""
app/middleware.py

Middlewares HTTP registrados em create_app().

- rate_limit_middleware  — aplica o token bucket às rotas /api/** (exceto
  /api/health/**) e devolve os headers X-RateLimit-* em toda resposta
- api_version_middleware — valida o header X-API-Version e expõe as versões
  suportadas

Rodam fora dos exception handlers do FastAPI, por isso montam a resposta de
erro diretamente.
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from app.config import settings
from app.errors import error_body, rate_limit_body
from app.exceptions import RateLimitExceededError
from app.security import decode_access_token, extract_bearer_token

log = logging.getLogger(__name__)

VERSION_HEADER = "X-API-Version"


def _is_rate_limited_path(path: str) -> bool:
    return path.startswith("/api/") and not path.startswith("/api/health")


def _client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


async def rate_limit_middleware(request: Request, call_next):
    if not _is_rate_limited_path(request.url.path):
        return await call_next(request)

    # Só classifica pela assinatura do token; não consulta o banco
    token = extract_bearer_token(request.headers.get("authorization"))
    authenticated = token is not None and decode_access_token(token) is not None

    decision = request.app.state.rate_limiter.check(authenticated)

    if decision.allowed:
        response = await call_next(request)
    else:
        log.warning(
            f"Rate limit excedido para requisição "
            f"{'autenticada' if authenticated else 'anônima'} de {_client_ip(request)}"
        )
        exc = RateLimitExceededError(
            "Rate limit exceeded. Please try again later.",
            retry_after=decision.retry_after,
            limit=decision.limit,
        )
        response = JSONResponse(
            rate_limit_body(exc),
            status_code=exc.status_code,
            headers={"Retry-After": str(exc.retry_after)},
        )

    response.headers["X-RateLimit-Limit"] = str(decision.limit)
    response.headers["X-RateLimit-Remaining"] = str(decision.remaining)
    response.headers["X-RateLimit-Reset"] = str(decision.reset_seconds)
    return response


async def api_version_middleware(request: Request, call_next):
    current = settings.app_version
    supported = list(settings.api_supported_versions)
    requested = request.headers.get(VERSION_HEADER)

    if requested and requested not in supported:
        log.warning(f"Versão de API não suportada: {requested}")
        response = JSONResponse(
            error_body(
                f"Unsupported API version. Supported versions: {', '.join(supported)}",
                f"uri={request.url.path}",
            ),
            status_code=400,
        )
    else:
        response = await call_next(request)

    response.headers[VERSION_HEADER] = requested or current
    response.headers["X-API-Current-Version"] = current
    response.headers["X-API-Supported-Versions"] = ", ".join(supported)
    return response
