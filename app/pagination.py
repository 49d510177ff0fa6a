"""
app/pagination.py

Paginação por offset no formato `page`/`size`/`sort`.

- `PageRequest` — página pedida (0-based), tamanho e ordenação
- `Page[T]`     — envelope de resposta com os metadados da página
- `page_params` — dependência FastAPI que lê os query params
"""

import math
from dataclasses import dataclass
from typing import Generic, Sequence, TypeVar

from fastapi import Query
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from app.exceptions import InvalidArgumentError

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


@dataclass(frozen=True)
class SortOrder:
    prop: str
    descending: bool = True


@dataclass(frozen=True)
class PageRequest:
    page: int = 0
    size: int = DEFAULT_PAGE_SIZE
    sort: SortOrder | None = None

    @property
    def offset(self) -> int:
        return self.page * self.size

    def resolve_sort(self, allowed: dict, default: SortOrder):
        """
        Traduz a ordenação pedida para (coluna, descendente).
        `allowed` mapeia o nome público (camelCase) para a coluna ORM.
        """
        order = self.sort or default
        if order.prop not in allowed:
            raise InvalidArgumentError(
                f"Cannot sort by '{order.prop}'. Allowed: {', '.join(sorted(allowed))}"
            )
        return allowed[order.prop], order.descending


def parse_sort(raw: str | None) -> SortOrder | None:
    """Aceita `createdAt`, `createdAt,desc` ou `createdAt,asc`."""
    if not raw:
        return None
    prop, _, direction = raw.partition(",")
    direction = direction.strip().lower() or "asc"
    if direction not in ("asc", "desc"):
        raise InvalidArgumentError(f"Invalid sort direction: {direction}")
    return SortOrder(prop=prop.strip(), descending=direction == "desc")


def page_params(
    page: int = Query(0, ge=0),
    size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    sort: str | None = Query(None),
) -> PageRequest:
    return PageRequest(page=page, size=size, sort=parse_sort(sort))


class Page(BaseModel, Generic[T]):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    content: list[T]
    total_elements: int
    total_pages: int
    number: int
    size: int
    number_of_elements: int
    first: bool
    last: bool
    empty: bool

    @classmethod
    def of(cls, content: Sequence[T], request: PageRequest, total: int) -> "Page[T]":
        total_pages = math.ceil(total / request.size) if total else 0
        return cls(
            content=list(content),
            total_elements=total,
            total_pages=total_pages,
            number=request.page,
            size=request.size,
            number_of_elements=len(content),
            first=request.page == 0,
            last=request.page + 1 >= total_pages,
            empty=len(content) == 0,
        )

