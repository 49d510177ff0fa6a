"""
app/models/post.py

Modelos ORM de posts e comentários.

O comentário pertence ao post: não tem rota de consulta própria, é carregado
junto com o post (selectin) e apagado em cascata com ele. A ordem de inserção
é preservada pela coluna `position`.
"""

from datetime import datetime

from sqlalchemy import JSON, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.ext.orderinglist import ordering_list
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base
from app.models.user import new_id, utcnow

CONTENT_MAX_LENGTH = 280


class Post(Base):
    __tablename__ = "posts"
    __table_args__ = (
        # Feed: filtro por autor + ordenação por data decrescente
        Index("ix_posts_author_created", "author_id", "created_at"),
    )

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    content: Mapped[str] = mapped_column(String(CONTENT_MAX_LENGTH))

    author_id: Mapped[str] = mapped_column(ForeignKey("users.id"), index=True)

    # Cópia do username no momento da criação; não acompanha renomeações
    author_username: Mapped[str] = mapped_column(String(30))

    likes: Mapped[list[str]] = mapped_column(JSON, default=list)

    # Redundante com len(likes); existe para o feed de descoberta filtrar no banco
    like_count: Mapped[int] = mapped_column(Integer, default=0, index=True)

    comments: Mapped[list["Comment"]] = relationship(
        back_populates="post",
        cascade="all, delete-orphan",
        order_by="Comment.position",
        collection_class=ordering_list("position"),
        lazy="selectin",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        insert_default=utcnow,
        index=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        insert_default=utcnow,
    )

    def is_liked_by(self, user_id: str) -> bool:
        return user_id in (self.likes or [])

    @property
    def comment_count(self) -> int:
        return len(self.comments)

    def add_like(self, user_id: str) -> None:
        if not self.is_liked_by(user_id):
            self.likes = [*(self.likes or []), user_id]
        self.like_count = len(self.likes)

    def remove_like(self, user_id: str) -> None:
        self.likes = [uid for uid in (self.likes or []) if uid != user_id]
        self.like_count = len(self.likes)

    def __repr__(self) -> str:
        return f"<Post id={self.id!r} author_id={self.author_id!r}>"


class Comment(Base):
    __tablename__ = "comments"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    post_id: Mapped[str] = mapped_column(
        ForeignKey("posts.id", ondelete="CASCADE"),
        index=True,
    )
    position: Mapped[int] = mapped_column(Integer)

    content: Mapped[str] = mapped_column(String(CONTENT_MAX_LENGTH))
    author_id: Mapped[str] = mapped_column(String(32))
    author_username: Mapped[str] = mapped_column(String(30))

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        insert_default=utcnow,
    )

    post: Mapped[Post] = relationship(back_populates="comments")

    def __repr__(self) -> str:
        return f"<Comment id={self.id!r} post_id={self.post_id!r}>"
