"""
app/models/user.py

Modelo ORM para persistência de usuários.

As arestas de follow ficam gravadas de forma redundante nos dois registros:
`following` do seguidor e `followers` do seguido. Quem mantém a simetria é o
serviço (follow/unfollow), não o banco.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, Boolean, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


def new_id() -> str:
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)

    # Unicidade garantida também por índice (corrida no cadastro)
    username: Mapped[str] = mapped_column(String(30), unique=True, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)

    # Hash bcrypt, nunca serializado
    password: Mapped[str] = mapped_column(String(255))

    display_name: Mapped[str | None] = mapped_column(String(100))
    bio: Mapped[str | None] = mapped_column(Text)

    # Conjuntos de ids guardados como listas JSON sem repetição.
    # Sempre reatribuídos (nunca mutados in-place) para o SQLAlchemy detectar a mudança.
    following: Mapped[list[str]] = mapped_column(JSON, default=list)
    followers: Mapped[list[str]] = mapped_column(JSON, default=list)

    # Soft delete: o registro nunca é removido pelo serviço
    active: Mapped[bool] = mapped_column(Boolean, default=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        insert_default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        insert_default=utcnow,
    )

    def is_following(self, user_id: str) -> bool:
        return user_id in (self.following or [])

    @property
    def following_count(self) -> int:
        return len(self.following or [])

    @property
    def followers_count(self) -> int:
        return len(self.followers or [])

    def add_following(self, user_id: str) -> None:
        if not self.is_following(user_id):
            self.following = [*(self.following or []), user_id]

    def remove_following(self, user_id: str) -> None:
        self.following = [uid for uid in (self.following or []) if uid != user_id]

    def add_follower(self, user_id: str) -> None:
        if user_id not in (self.followers or []):
            self.followers = [*(self.followers or []), user_id]

    def remove_follower(self, user_id: str) -> None:
        self.followers = [uid for uid in (self.followers or []) if uid != user_id]

    def __repr__(self) -> str:
        return f"<User id={self.id!r} username={self.username!r}>"
