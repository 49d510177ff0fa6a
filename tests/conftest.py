"""
Fixtures compartilhadas entre todos os testes.
"""

import os

# Precisa estar definido antes do primeiro acesso às settings do Dynaconf
os.environ.setdefault("ENV_FOR_DYNACONF", "testing")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool


# ---------------------------------------------------------------------------
# Configuração Dynaconf isolada para testes
# Usa monkeypatch para sobrescrever os atributos sem tocar em arquivos .toml
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def patch_settings(monkeypatch):
    """
    Sobrescreve as settings do Dynaconf com valores de teste.
    `autouse=True` garante que nenhum teste dependa de segredos reais e que
    o bcrypt rode com o custo mínimo.
    """
    from app import config

    monkeypatch.setattr(config.settings, "jwt_secret", "testing-secret-key-with-at-least-32-bytes")
    monkeypatch.setattr(config.settings, "jwt_expiration_seconds", 864000)
    monkeypatch.setattr(config.settings, "bcrypt_rounds", 4)


# ---------------------------------------------------------------------------
# Banco em memória isolado por teste
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def test_engine():
    """
    Engine SQLite em memória. StaticPool mantém uma única conexão, então
    todas as sessões (inclusive as dos requests) enxergam o mesmo banco.
    """
    from app.database import Base
    from app.models import post, user  # noqa: F401

    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        bind=test_engine,
        expire_on_commit=False,
        class_=AsyncSession,
    )


@pytest_asyncio.fixture
async def session(test_session_factory):
    async with test_session_factory() as s:
        yield s


# ---------------------------------------------------------------------------
# Serviços sobre a sessão de teste
# ---------------------------------------------------------------------------


@pytest.fixture
def cache():
    from app.services.cache import CacheManager

    return CacheManager()


@pytest.fixture
def user_service(session, cache):
    from app.services.users import UserService

    return UserService(session, cache)


@pytest.fixture
def post_service(session, cache, user_service):
    from app.services.posts import PostService

    return PostService(session, cache, user_service)


@pytest.fixture
def feed_service(session, cache, user_service):
    from app.services.feed import FeedService

    return FeedService(session, cache, user_service)


@pytest.fixture
def make_user(user_service):
    """Factory que registra usuários pelo serviço, com valores padrão."""
    from app.schemas import RegisterRequest

    async def _make(username: str = "alice", password: str = "password123", **extra):
        return await user_service.create_user(
            RegisterRequest(
                username=username,
                email=extra.pop("email", f"{username}@example.com"),
                password=password,
                **extra,
            )
        )

    return _make


# ---------------------------------------------------------------------------
# Aplicação HTTP
# ---------------------------------------------------------------------------


@pytest.fixture
def application(test_session_factory):
    """
    App nova por teste (cache e rate limiter zerados), com `get_session`
    apontando para o banco em memória. O lifespan não roda aqui.
    """
    from app.database import get_session
    from app.main import create_app

    app = create_app()

    async def _get_test_session():
        async with test_session_factory() as s:
            async with s.begin():
                yield s

    app.dependency_overrides[get_session] = _get_test_session
    return app


@pytest_asyncio.fixture
async def client(application):
    async with AsyncClient(
            transport=ASGITransport(app=application),
            base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
def register(client):
    """Registra e loga um usuário via API; devolve (user_id, headers)."""

    async def _register(username: str = "alice", password: str = "password123"):
        response = await client.post(
            "/api/auth/register",
            json={"username": username, "email": f"{username}@example.com", "password": password},
        )
        assert response.status_code == 200, response.text
        user_id = response.json()["userId"]

        response = await client.post(
            "/api/auth/login",
            json={"username": username, "password": password},
        )
        assert response.status_code == 200, response.text
        token = response.json()["token"]
        return user_id, {"Authorization": f"Bearer {token}"}

    return _register
