"""
app/routers/health.py

Health checks, fora do rate limit.

- GET /api/health      — status geral; 500 quando o banco não responde
- GET /api/health/ping — só confirma que o processo está de pé
- GET /api/health/info — versão, ambiente, uptime, contagens e stats do cache
"""

import logging
import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_session, ping_db
from app.repositories.posts import PostRepository
from app.repositories.users import UserRepository

log = logging.getLogger(__name__)

router = APIRouter()


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("")
async def health():
    try:
        database_up = await ping_db()
    except (SQLAlchemyError, OSError) as exc:
        log.error(f"Health check falhou ao consultar o banco: {exc}")
        database_up = False

    body = {
        "status": "UP" if database_up else "DOWN",
        "database": "UP" if database_up else "DOWN",
        "timestamp": _now(),
    }
    return JSONResponse(body, status_code=200 if database_up else 500)


@router.get("/ping")
async def ping():
    return {"status": "UP", "timestamp": _now()}


@router.get("/info")
async def info(request: Request, session: AsyncSession = Depends(get_session)):
    started_at = getattr(request.app.state, "started_at", None)
    uptime = round(time.monotonic() - started_at, 3) if started_at is not None else 0.0

    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "environment": settings.current_env,
        "uptimeSeconds": uptime,
        "users": await UserRepository(session).count(),
        "posts": await PostRepository(session).count(),
        "apiVersioning": {
            "current": settings.app_version,
            "supported": list(settings.api_supported_versions),
        },
        "cache": request.app.state.cache.stats(),
    }
