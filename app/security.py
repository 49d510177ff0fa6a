"""
app/security.py

Hash de senhas (bcrypt) e tokens de acesso (JWT HS256).

O token carrega o username em `sub` e expira após `jwt_expiration_seconds`
(padrão: 10 dias). A resolução do token para um usuário fica em
app/dependencies.py.
"""

from datetime import datetime, timedelta, timezone

import bcrypt
import jwt

from app.config import settings

ALGORITHM = "HS256"

# bcrypt só considera os primeiros 72 bytes da senha
_BCRYPT_MAX_BYTES = 72


def _password_bytes(raw: str) -> bytes:
    return raw.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(raw: str) -> str:
    hashed = bcrypt.hashpw(_password_bytes(raw), bcrypt.gensalt(rounds=settings.bcrypt_rounds))
    return hashed.decode("utf-8")


def verify_password(raw: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(_password_bytes(raw), hashed.encode("utf-8"))
    except ValueError:
        # hash armazenado em formato inválido
        return False


def create_access_token(username: str, expires_in: int | None = None) -> str:
    now = datetime.now(timezone.utc)
    ttl = expires_in if expires_in is not None else settings.jwt_expiration_seconds
    payload = {
        "sub": username,
        "iat": now,
        "exp": now + timedelta(seconds=ttl),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=ALGORITHM)


def decode_access_token(token: str) -> str | None:
    """Devolve o username do token, ou None se a assinatura/expiração falhar."""
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[ALGORITHM])
    except jwt.InvalidTokenError:
        return None
    return payload.get("sub")


def extract_bearer_token(authorization: str | None) -> str | None:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()
