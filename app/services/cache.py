"""
app/services/cache.py

Cache em processo, organizado em buckets nomeados pela operação
(`userById`, `personalFeed`, ...). Dentro do bucket a chave é formada pelos
argumentos da chamada.

Não há TTL: entradas só saem por invalidação. Os serviços invalidam o bucket
inteiro em qualquer escrita (`invalidate_on_commit`); `invalidate` existe para
quem quiser trocar por uma política por chave sem mudar os chamadores.

A escrita só fica visível para outras sessões no commit, então a invalidação
roda duas vezes: na hora e de novo quando a transação da sessão termina. Uma
leitura concorrente que recarregou o valor antigo nesse intervalo é descartada.

A instância é criada em `create_app()` e guardada em `app.state.cache`.
"""

import logging
import threading
from typing import Any, Awaitable, Callable, Hashable, Iterable, TypeVar

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession

log = logging.getLogger(__name__)

T = TypeVar("T")

USER_BY_ID = "userById"
USER_PROFILE = "userProfile"
POST_COUNT = "postCount"
PERSONAL_FEED = "personalFeed"
USER_FEED = "userFeed"
DISCOVERY_FEED = "discoveryFeed"

DEFAULT_BUCKETS = (
    USER_PROFILE,
    USER_BY_ID,
    POST_COUNT,
    PERSONAL_FEED,
    USER_FEED,
    DISCOVERY_FEED,
)

USER_BUCKETS = (USER_PROFILE, USER_BY_ID)
FEED_BUCKETS = (PERSONAL_FEED, USER_FEED, DISCOVERY_FEED)

_PENDING_KEY = "cache_pending_buckets"
_MISSING = object()


class CacheManager:
    def __init__(self, buckets: Iterable[str] = DEFAULT_BUCKETS, enabled: bool = True):
        self.enabled = enabled
        self._lock = threading.Lock()
        self._buckets: dict[str, dict[Hashable, Any]] = {name: {} for name in buckets}
        self.hits = 0
        self.misses = 0

    def _bucket(self, name: str) -> dict[Hashable, Any]:
        try:
            return self._buckets[name]
        except KeyError:
            raise KeyError(f"Unknown cache bucket: {name}") from None

    def get(self, bucket: str, key: Hashable, default: Any = None) -> Any:
        if not self.enabled:
            return default
        with self._lock:
            return self._bucket(bucket).get(key, default)

    def put(self, bucket: str, key: Hashable, value: Any) -> None:
        if not self.enabled:
            return
        with self._lock:
            self._bucket(bucket)[key] = value

    def invalidate(self, bucket: str, key: Hashable) -> None:
        with self._lock:
            self._bucket(bucket).pop(key, None)

    def invalidate_all(self, *buckets: str) -> None:
        with self._lock:
            for name in buckets:
                self._bucket(name).clear()
        log.debug(f"Cache invalidado: {', '.join(buckets)}")

    def invalidate_on_commit(self, session: AsyncSession, *buckets: str) -> None:
        """
        Invalida `buckets` agora e registra a mesma invalidação para o fim da
        transação da sessão (commit ou rollback).
        """
        self.invalidate_all(*buckets)

        info = session.sync_session.info
        if _PENDING_KEY not in info:
            info[_PENDING_KEY] = set()
            event.listen(session.sync_session, "after_commit", self._flush_pending)
            event.listen(session.sync_session, "after_rollback", self._flush_pending)
        info[_PENDING_KEY].update(buckets)

    def _flush_pending(self, sync_session) -> None:
        pending = sync_session.info.get(_PENDING_KEY)
        if pending:
            self.invalidate_all(*pending)
            pending.clear()

    def clear(self) -> None:
        with self._lock:
            for entries in self._buckets.values():
                entries.clear()

    async def get_or_load(
        self,
        bucket: str,
        key: Hashable,
        loader: Callable[[], Awaitable[T]],
    ) -> T:
        """
        Read-through: devolve a entrada do bucket ou executa `loader`,
        guarda e devolve o resultado. Exceções do loader não são cacheadas.
        """
        cached = self.get(bucket, key, _MISSING)
        if cached is not _MISSING:
            self.hits += 1
            return cached
        self.misses += 1
        value = await loader()
        self.put(bucket, key, value)
        return value

    def stats(self) -> dict:
        with self._lock:
            sizes = {name: len(entries) for name, entries in self._buckets.items()}
        return {"hits": self.hits, "misses": self.misses, "buckets": sizes}
