"""
app/schemas.py

Schemas Pydantic de entrada e saída da API.

Toda saída usa chaves camelCase (alias_generator); a entrada aceita tanto
camelCase quanto snake_case. Os schemas de leitura (`UserRead`, `PostRead`,
`CommentRead`) são os objetos guardados no cache, nunca instâncias ORM.
"""

from datetime import datetime
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

from app.models.post import CONTENT_MAX_LENGTH


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def _not_blank(value: str) -> str:
    if not value.strip():
        raise ValueError("Content cannot be empty")
    return value


Content = Annotated[str, Field(max_length=CONTENT_MAX_LENGTH), AfterValidator(_not_blank)]

# Vai direto no path de /api/users/{username}; "me" fica de fora pelo tamanho mínimo
Username = Annotated[str, Field(min_length=3, max_length=30, pattern=r"^[A-Za-z0-9_.-]+$")]


# ---------------------------------------------------------------------------
# Usuários
# ---------------------------------------------------------------------------

class RegisterRequest(CamelModel):
    username: Username
    email: EmailStr
    password: str = Field(min_length=8)
    display_name: str | None = Field(default=None, max_length=100)


class LoginRequest(CamelModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class UserUpdate(CamelModel):
    """Atualização parcial: campos vazios ou ausentes são ignorados."""

    display_name: str | None = Field(default=None, max_length=100)
    bio: str | None = None
    email: EmailStr | None = None
    password: str | None = Field(default=None, min_length=8)

    @field_validator("email", "password", mode="before")
    @classmethod
    def _empty_as_none(cls, value):
        return value or None


class UserRead(CamelModel):
    id: str
    username: str
    email: str
    display_name: str | None = None
    bio: str | None = None
    following: list[str] = []
    followers: list[str] = []
    following_count: int = 0
    followers_count: int = 0
    active: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None


class RegisterResponse(CamelModel):
    success: bool = True
    user_id: str
    username: str


class LoginResponse(CamelModel):
    success: bool = True
    username: str
    token: str


class FollowResponse(CamelModel):
    success: bool = True
    following: int
    is_following: bool


class FollowStatus(CamelModel):
    is_following: bool
    is_follower: bool
    followers_count: int
    following_count: int


class PostCountResponse(CamelModel):
    user_id: str
    username: str
    post_count: int


# ---------------------------------------------------------------------------
# Posts e comentários
# ---------------------------------------------------------------------------

class PostCreate(CamelModel):
    content: Content


class PostUpdate(PostCreate):
    pass


class CommentCreate(CamelModel):
    content: Content


class CommentRead(CamelModel):
    id: str
    content: str
    author_id: str
    author_username: str
    created_at: datetime | None = None


class PostRead(CamelModel):
    id: str
    content: str
    author_id: str
    author_username: str
    likes: list[str] = []
    like_count: int = 0
    comments: list[CommentRead] = []
    comment_count: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None


class LikeResponse(CamelModel):
    success: bool = True
    like_count: int
    is_liked: bool


class LikeStatus(CamelModel):
    like_count: int
    is_liked: bool


# ---------------------------------------------------------------------------
# Genéricos
# ---------------------------------------------------------------------------

class MessageResponse(CamelModel):
    success: bool = True
    message: str

