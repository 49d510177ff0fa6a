"""
app/dependencies.py

Dependências FastAPI compartilhadas pelos routers.

O cache e o rate limiter não são singletons de módulo: são criados em
`create_app()`, guardados em `app.state` e entregues aos serviços por aqui.
Dentro de um mesmo request, `get_session` é resolvida uma única vez, então
todos os serviços compartilham a mesma sessão (e a mesma transação).
"""

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_session
from app.exceptions import AuthenticationFailedError, NotFoundError
from app.schemas import UserRead
from app.security import decode_access_token
from app.services.cache import CacheManager
from app.services.feed import FeedService
from app.services.posts import PostService
from app.services.users import UserService

bearer_scheme = HTTPBearer(auto_error=False)


def get_cache(request: Request) -> CacheManager:
    return request.app.state.cache


def get_user_service(
    session: AsyncSession = Depends(get_session),
    cache: CacheManager = Depends(get_cache),
) -> UserService:
    return UserService(session, cache)


def get_post_service(
    session: AsyncSession = Depends(get_session),
    cache: CacheManager = Depends(get_cache),
    users: UserService = Depends(get_user_service),
) -> PostService:
    return PostService(session, cache, users)


def get_feed_service(
    session: AsyncSession = Depends(get_session),
    cache: CacheManager = Depends(get_cache),
    users: UserService = Depends(get_user_service),
) -> FeedService:
    return FeedService(session, cache, users)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    users: UserService = Depends(get_user_service),
) -> UserRead:
    """
    Resolve o principal a partir do header `Authorization: Bearer <token>`.
    Token ausente, inválido, expirado, de usuário inexistente ou inativo → 401.
    """
    if credentials is None:
        raise AuthenticationFailedError("Authentication required")

    username = decode_access_token(credentials.credentials)
    if not username:
        raise AuthenticationFailedError("Invalid or expired token")

    try:
        user = await users.get_user_by_username(username)
    except NotFoundError:
        raise AuthenticationFailedError("Invalid or expired token") from None

    if not user.active:
        raise AuthenticationFailedError("Account is disabled")
    return user
