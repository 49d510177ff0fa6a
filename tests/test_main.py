"""
Testes para app/main.py, app/middleware.py, app/errors.py e app/routers/health.py

Testa a aplicação montada por create_app() via httpx.AsyncClient +
ASGITransport, com o banco em memória do conftest.

Cobre:
- GET /api/health, /api/health/ping, /api/health/info
- Headers de versão em toda resposta; versão não suportada → 400
- Rate limit: headers X-RateLimit-*, 429 com envelope, health fora do limite
- Rate limit separa requisições com token válido das anônimas
- Envelope de erro para 404 de domínio, 400 de validação e 500 inesperado
- Lifespan: init_db no startup, cache limpo no shutdown
"""

from unittest.mock import AsyncMock, patch

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient


def _frozen_limiter(authenticated: int, anonymous: int):
    from app.services.rate_limit import RateLimiter

    # relógio parado: nenhum token é reposto durante o teste
    return RateLimiter(authenticated, anonymous, period_seconds=60, clock=lambda: 0.0)


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_health_ping(client):
    response = await client.get("/api/health/ping")

    assert response.status_code == 200
    assert response.json()["status"] == "UP"


@pytest.mark.asyncio
async def test_health_reports_database_up(client):
    response = await client.get("/api/health")

    assert response.status_code == 200
    assert response.json()["database"] == "UP"


@pytest.mark.asyncio
async def test_health_returns_500_when_database_down(client):
    with patch("app.routers.health.ping_db", AsyncMock(side_effect=OSError("banco fora do ar"))):
        response = await client.get("/api/health")

    assert response.status_code == 500
    assert response.json()["status"] == "DOWN"


@pytest.mark.asyncio
async def test_health_info(client, register):
    await register("alice")

    response = await client.get("/api/health/info")

    assert response.status_code == 200
    body = response.json()
    assert body["name"] == "socialfeed-api"
    assert body["users"] == 1
    assert body["posts"] == 0
    assert body["apiVersioning"]["current"] == "1.0.0"
    assert "userProfile" in body["cache"]["buckets"]


# ---------------------------------------------------------------------------
# Versionamento
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_version_headers_on_every_response(client):
    response = await client.get("/api/health/ping")

    assert response.headers["X-API-Version"] == "1.0.0"
    assert response.headers["X-API-Current-Version"] == "1.0.0"
    assert "1.0.0" in response.headers["X-API-Supported-Versions"]


@pytest.mark.asyncio
async def test_requested_supported_version_is_echoed(client):
    response = await client.get("/api/health/ping", headers={"X-API-Version": "1.0.0"})

    assert response.status_code == 200
    assert response.headers["X-API-Version"] == "1.0.0"


@pytest.mark.asyncio
async def test_unsupported_version_is_rejected(client):
    response = await client.get("/api/health/ping", headers={"X-API-Version": "9.9.9"})

    assert response.status_code == 400
    assert "Unsupported API version" in response.json()["message"]


# ---------------------------------------------------------------------------
# Rate limit
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_rate_limit_headers(application, client):
    application.state.rate_limiter = _frozen_limiter(10, 5)

    response = await client.get("/api/users/ninguem")

    assert response.headers["X-RateLimit-Limit"] == "5"
    assert response.headers["X-RateLimit-Remaining"] == "4"
    assert response.headers["X-RateLimit-Reset"] == "60"


@pytest.mark.asyncio
async def test_rate_limit_rejects_when_bucket_is_empty(application, client):
    application.state.rate_limiter = _frozen_limiter(10, 2)

    statuses = [(await client.get("/api/users/ninguem")).status_code for _ in range(3)]
    response = await client.get("/api/users/ninguem")

    assert statuses == [404, 404, 429]
    assert response.status_code == 429
    assert response.headers["X-RateLimit-Remaining"] == "0"
    assert int(response.headers["Retry-After"]) > 0
    details = response.json()["details"]
    assert details["code"] == "RATE_LIMIT_EXCEEDED"
    assert details["limit"] == 2
    assert details["status"] == 429


@pytest.mark.asyncio
async def test_health_is_not_rate_limited(application, client):
    application.state.rate_limiter = _frozen_limiter(1, 1)

    for _ in range(5):
        response = await client.get("/api/health/ping")
        assert response.status_code == 200
        assert "X-RateLimit-Limit" not in response.headers


@pytest.mark.asyncio
async def test_signed_token_uses_authenticated_bucket(application, client):
    from app.security import create_access_token

    application.state.rate_limiter = _frozen_limiter(3, 1)
    headers = {"Authorization": f"Bearer {create_access_token('qualquer')}"}

    response = await client.get("/api/users/ninguem", headers=headers)

    assert response.headers["X-RateLimit-Limit"] == "3"


@pytest.mark.asyncio
async def test_forged_token_counts_as_anonymous(application, client):
    application.state.rate_limiter = _frozen_limiter(3, 1)

    response = await client.get(
        "/api/users/ninguem",
        headers={"Authorization": "Bearer nao.e.valido"},
    )

    assert response.headers["X-RateLimit-Limit"] == "1"


# ---------------------------------------------------------------------------
# Envelope de erro
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_not_found_envelope(client):
    response = await client.get("/api/users/ninguem")

    assert response.status_code == 404
    assert response.json() == {
        "message": "User not found with username: ninguem",
        "details": "uri=/api/users/ninguem",
    }


@pytest.mark.asyncio
async def test_validation_error_envelope(client):
    response = await client.post(
        "/api/auth/register",
        json={"username": "al", "email": "nao-e-email", "password": "123"},
    )

    assert response.status_code == 400
    body = response.json()
    assert body["message"] == "Validation failed"
    assert {"username", "email", "password"} <= set(body["details"])


@pytest_asyncio.fixture
async def lenient_client(application):
    """Cliente que devolve a resposta 500 em vez de propagar a exceção."""

    @application.get("/api/boom")
    async def boom():
        raise RuntimeError("falhou")

    async with AsyncClient(
            transport=ASGITransport(app=application, raise_app_exceptions=False),
            base_url="http://test",
    ) as ac:
        yield ac


@pytest.mark.asyncio
async def test_unexpected_error_envelope(lenient_client):
    response = await lenient_client.get("/api/boom")

    assert response.status_code == 500
    assert response.json()["message"] == "falhou"
    assert response.json()["details"] == "uri=/api/boom"


# ---------------------------------------------------------------------------
# Lifespan: inicialização e shutdown
# ---------------------------------------------------------------------------

from asgi_lifespan import LifespanManager


@pytest.mark.asyncio
async def test_lifespan_calls_init_db():
    from app.main import create_app

    mock_init_db = AsyncMock()
    app = create_app()

    with patch("app.database.init_db", mock_init_db):
        async with LifespanManager(app):
            pass

    mock_init_db.assert_called_once()


@pytest.mark.asyncio
async def test_lifespan_clears_cache_on_shutdown():
    from app.main import create_app
    from app.services.cache import USER_BY_ID

    app = create_app()

    with patch("app.database.init_db", AsyncMock()):
        async with LifespanManager(app):
            app.state.cache.put(USER_BY_ID, "u1", "alice")

    assert app.state.cache.get(USER_BY_ID, "u1") is None
