"""
app/services/feed.py

Montagem dos feeds.

- pessoal:    posts do próprio usuário e de quem ele segue hoje
- do usuário: só os posts de um autor
- descoberta: posts com pelo menos uma curtida, sem personalização

Os três ordenam do mais novo para o mais antigo (a menos que `sort` diga
outra coisa) e são cacheados com a chave (argumentos, página). Qualquer
escrita em post ou em follow limpa o bucket inteiro.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from app.pagination import Page, PageRequest
from app.repositories.posts import PostRepository
from app.schemas import PostRead
from app.services.cache import DISCOVERY_FEED, PERSONAL_FEED, USER_FEED, CacheManager
from app.services.users import UserService


class FeedService:
    def __init__(self, session: AsyncSession, cache: CacheManager, user_service: UserService):
        self.posts = PostRepository(session)
        self.user_service = user_service
        self.cache = cache

    @staticmethod
    def _page(items, request: PageRequest, total: int) -> Page[PostRead]:
        return Page[PostRead].of([PostRead.model_validate(p) for p in items], request, total)

    async def get_personal_feed(self, user_id: str, request: PageRequest) -> Page[PostRead]:
        async def load() -> Page[PostRead]:
            user = await self.user_service.get_user_by_id(user_id)
            # autorId particiona os posts, então a união não gera duplicatas
            author_ids = {user_id, *user.following}
            items, total = await self.posts.find_page_by_author_ids(author_ids, request)
            return self._page(items, request, total)

        return await self.cache.get_or_load(PERSONAL_FEED, (user_id, request), load)

    async def get_user_feed(self, target_user_id: str, request: PageRequest) -> Page[PostRead]:
        async def load() -> Page[PostRead]:
            await self.user_service.get_user_by_id(target_user_id)
            items, total = await self.posts.find_page_by_author(target_user_id, request)
            return self._page(items, request, total)

        return await self.cache.get_or_load(USER_FEED, (target_user_id, request), load)

    async def get_discovery_feed(self, request: PageRequest) -> Page[PostRead]:
        async def load() -> Page[PostRead]:
            items, total = await self.posts.find_popular_page(request)
            return self._page(items, request, total)

        return await self.cache.get_or_load(DISCOVERY_FEED, request, load)
