import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.config import settings
from app.errors import register_exception_handlers
from app.middleware import api_version_middleware, rate_limit_middleware
from app.routers import auth, comments, feed, follow, health, likes, posts, users
from app.services.cache import CacheManager
from app.services.rate_limit import RateLimiter

logging.basicConfig(level=settings.log_level)

log = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(application: FastAPI):
    import app.database
    await app.database.init_db()
    log.info(f"{settings.app_name} {settings.app_version} iniciado ({settings.current_env})")
    yield
    application.state.cache.clear()
    await app.database.engine.dispose()


def create_app() -> FastAPI:
    application = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        lifespan=lifespan,
    )

    application.state.cache = CacheManager()
    application.state.rate_limiter = RateLimiter(
        settings.rate_limit_authenticated,
        settings.rate_limit_unauthenticated,
        period_seconds=settings.rate_limit_period_seconds,
    )
    application.state.started_at = time.monotonic()

    register_exception_handlers(application)

    # o último registrado é o mais externo: a versão é checada antes do limite
    application.middleware("http")(rate_limit_middleware)
    application.middleware("http")(api_version_middleware)

    application.include_router(auth.router, prefix="/api/auth", tags=["auth"])
    application.include_router(users.router, prefix="/api/users", tags=["users"])
    application.include_router(follow.router, prefix="/api/follow", tags=["follow"])
    application.include_router(posts.router, prefix="/api/posts", tags=["posts"])
    application.include_router(likes.router, prefix="/api/likes", tags=["likes"])
    application.include_router(comments.router, prefix="/api/comments", tags=["comments"])
    application.include_router(feed.router, prefix="/api/feed", tags=["feed"])
    application.include_router(health.router, prefix="/api/health", tags=["health"])

    return application


api = create_app()
