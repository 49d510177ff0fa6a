"""
app/services/users.py

Regras de negócio de usuários: cadastro, perfil, soft delete e o grafo de
follows.

As leituras por id e por username passam pelo cache (buckets `userById` e
`userProfile`). Qualquer escrita em usuário invalida esses buckets inteiros.
"""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import (
    AlreadyExistsError,
    AuthenticationFailedError,
    InvalidArgumentError,
    NotFoundError,
)
from app.models.user import User, new_id, utcnow
from app.pagination import Page, PageRequest
from app.repositories.posts import PostRepository
from app.repositories.users import UserRepository
from app.schemas import FollowStatus, RegisterRequest, UserRead, UserUpdate
from app.security import hash_password, verify_password
from app.services.cache import (
    PERSONAL_FEED,
    POST_COUNT,
    USER_BUCKETS,
    USER_BY_ID,
    USER_PROFILE,
    CacheManager,
)

log = logging.getLogger(__name__)


class UserService:
    def __init__(self, session: AsyncSession, cache: CacheManager):
        self.session = session
        self.users = UserRepository(session)
        self.posts = PostRepository(session)
        self.cache = cache

    # -----------------------------------------------------------------------
    # Helpers
    # -----------------------------------------------------------------------

    async def _load(self, user_id: str) -> User:
        user = await self.users.get(user_id)
        if user is None:
            raise NotFoundError(f"User not found with id: {user_id}")
        return user

    async def _save(self, user: User) -> User:
        try:
            return await self.users.save(user)
        except IntegrityError as exc:
            # Corrida entre a checagem de existência e o insert
            raise AlreadyExistsError("Username or email already in use") from exc

    def _evict_users(self) -> None:
        self.cache.invalidate_on_commit(self.session, *USER_BUCKETS)

    # -----------------------------------------------------------------------
    # CRUD
    # -----------------------------------------------------------------------

    async def create_user(self, candidate: RegisterRequest) -> UserRead:
        if await self.users.exists_by_username(candidate.username):
            raise AlreadyExistsError("Username already taken")

        if await self.users.exists_by_email(candidate.email):
            raise AlreadyExistsError("Email already in use")

        now = utcnow()
        user = User(
            id=new_id(),
            username=candidate.username,
            email=candidate.email,
            password=hash_password(candidate.password),
            display_name=candidate.display_name or candidate.username,
            following=[],
            followers=[],
            active=True,
            created_at=now,
            updated_at=now,
        )
        await self._save(user)
        log.info(f"Usuário registrado: {user.username} ({user.id})")
        return UserRead.model_validate(user)

    async def get_user_by_id(self, user_id: str) -> UserRead:
        async def load() -> UserRead:
            return UserRead.model_validate(await self._load(user_id))

        return await self.cache.get_or_load(USER_BY_ID, user_id, load)

    async def get_user_by_username(self, username: str) -> UserRead:
        async def load() -> UserRead:
            user = await self.users.find_by_username(username)
            if user is None:
                raise NotFoundError(f"User not found with username: {username}")
            return UserRead.model_validate(user)

        return await self.cache.get_or_load(USER_PROFILE, username, load)

    async def update_user(self, user_id: str, patch: UserUpdate) -> UserRead:
        """Atualização parcial: só campos não vazios do patch são aplicados."""
        user = await self._load(user_id)

        if patch.display_name:
            user.display_name = patch.display_name

        if patch.bio:
            user.bio = patch.bio

        if patch.email and patch.email != user.email:
            if await self.users.exists_by_email(patch.email):
                raise AlreadyExistsError("Email already in use")
            user.email = patch.email

        if patch.password:
            user.password = hash_password(patch.password)

        user.updated_at = utcnow()
        await self._save(user)
        self._evict_users()
        return UserRead.model_validate(user)

    async def delete_user(self, user_id: str) -> None:
        """
        Soft delete: só desliga a flag `active`. Posts, arestas de follow e
        curtidas do usuário continuam onde estão.
        """
        user = await self._load(user_id)
        user.active = False
        user.updated_at = utcnow()
        await self._save(user)
        self._evict_users()
        log.info(f"Usuário desativado: {user.username} ({user.id})")

    async def authenticate(self, username: str, password: str) -> UserRead:
        user = await self.users.find_by_username(username)
        if user is None or not user.active or not verify_password(password, user.password):
            raise AuthenticationFailedError("Invalid username or password")
        return UserRead.model_validate(user)

    # -----------------------------------------------------------------------
    # Follow graph
    # -----------------------------------------------------------------------

    async def follow_user(self, follower_id: str, target_id: str) -> UserRead:
        """
        Grava a aresta nos dois registros: primeiro no seguido, depois no
        seguidor. São duas escritas independentes e não há compensação se a
        segunda falhar; hoje elas só ficam atômicas porque compartilham a
        transação do request.
        """
        if follower_id == target_id:
            raise InvalidArgumentError("You cannot follow yourself")

        follower = await self._load(follower_id)
        target = await self._load(target_id)

        follower.add_following(target_id)
        target.add_follower(follower_id)

        await self.users.save(target)
        await self.users.save(follower)

        self.cache.invalidate_on_commit(self.session, *USER_BUCKETS, PERSONAL_FEED)
        log.info(f"{follower.username} passou a seguir {target.username}")
        return UserRead.model_validate(follower)

    async def unfollow_user(self, follower_id: str, target_id: str) -> UserRead:
        follower = await self._load(follower_id)
        target = await self._load(target_id)

        follower.remove_following(target_id)
        target.remove_follower(follower_id)

        await self.users.save(target)
        await self.users.save(follower)

        self.cache.invalidate_on_commit(self.session, *USER_BUCKETS, PERSONAL_FEED)
        log.info(f"{follower.username} deixou de seguir {target.username}")
        return UserRead.model_validate(follower)

    async def get_followers(self, user_id: str) -> list[UserRead]:
        user = await self._load(user_id)
        return [UserRead.model_validate(u) for u in await self.users.find_by_ids(user.followers)]

    async def get_following(self, user_id: str) -> list[UserRead]:
        user = await self._load(user_id)
        return [UserRead.model_validate(u) for u in await self.users.find_by_ids(user.following)]

    async def _page_of(self, ids: list[str], request: PageRequest) -> Page[UserRead]:
        items, total = await self.users.find_page_by_ids(ids, request)
        return Page[UserRead].of([UserRead.model_validate(u) for u in items], request, total)

    async def get_followers_page(self, user_id: str, request: PageRequest) -> Page[UserRead]:
        user = await self._load(user_id)
        return await self._page_of(user.followers, request)

    async def get_following_page(self, user_id: str, request: PageRequest) -> Page[UserRead]:
        user = await self._load(user_id)
        return await self._page_of(user.following, request)

    async def get_follow_status(self, principal_id: str, target_id: str) -> FollowStatus:
        principal = await self._load(principal_id)
        target = await self._load(target_id)
        return FollowStatus(
            is_following=principal.is_following(target_id),
            is_follower=target.is_following(principal_id),
            followers_count=target.followers_count,
            following_count=target.following_count,
        )

    # -----------------------------------------------------------------------
    # Estatísticas
    # -----------------------------------------------------------------------

    async def get_user_post_count(self, user_id: str) -> int:
        async def load() -> int:
            await self._load(user_id)
            return await self.posts.count_by_author(user_id)

        return await self.cache.get_or_load(POST_COUNT, user_id, load)
