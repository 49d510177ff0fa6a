"""
app/repositories/users.py

Acesso a dados de usuários sobre a AsyncSession do request.

O repositório nunca faz commit: `save()` apenas dá flush, e o commit (ou
rollback) acontece ao fim do request em `get_session()`.
"""

from typing import Collection

from sqlalchemy import exists, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User
from app.pagination import PageRequest, SortOrder

USER_SORT_FIELDS = {
    "username": User.username,
    "createdAt": User.created_at,
    "displayName": User.display_name,
}
DEFAULT_USER_SORT = SortOrder("username", descending=False)


class UserRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, user_id: str) -> User | None:
        return await self.session.get(User, user_id)

    async def find_by_username(self, username: str) -> User | None:
        return await self.session.scalar(select(User).where(User.username == username))

    async def find_by_email(self, email: str) -> User | None:
        return await self.session.scalar(select(User).where(User.email == email))

    async def exists_by_username(self, username: str) -> bool:
        return bool(await self.session.scalar(select(exists().where(User.username == username))))

    async def exists_by_email(self, email: str) -> bool:
        return bool(await self.session.scalar(select(exists().where(User.email == email))))

    async def find_by_ids(self, ids: Collection[str]) -> list[User]:
        """Ids que não existem mais simplesmente não aparecem no resultado."""
        if not ids:
            return []
        result = await self.session.scalars(
            select(User).where(User.id.in_(list(ids))).order_by(User.username)
        )
        return list(result.all())

    async def find_page_by_ids(
        self,
        ids: Collection[str],
        request: PageRequest,
    ) -> tuple[list[User], int]:
        """
        Página de usuários cujo id está em `ids`. O total conta só os ids
        que resolvem para um registro, não o tamanho do conjunto recebido.
        """
        if not ids:
            return [], 0
        column, descending = request.resolve_sort(USER_SORT_FIELDS, DEFAULT_USER_SORT)
        criteria = User.id.in_(list(ids))

        total = await self.session.scalar(select(func.count()).select_from(User).where(criteria))
        result = await self.session.scalars(
            select(User)
            .where(criteria)
            .order_by(column.desc() if descending else column.asc(), User.id)
            .offset(request.offset)
            .limit(request.size)
        )
        return list(result.all()), total or 0

    async def save(self, user: User) -> User:
        self.session.add(user)
        await self.session.flush()
        return user

    async def count(self) -> int:
        return await self.session.scalar(select(func.count()).select_from(User)) or 0
